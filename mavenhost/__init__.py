"""mavenhost: package repository upload endpoint with asynchronous directory indexing."""
