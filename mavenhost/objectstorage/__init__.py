from mavenhost.objectstorage.contentstore import ContentStore, Listing, ListObject, StoredObject

__all__ = ["ContentStore", "Listing", "ListObject", "StoredObject"]
