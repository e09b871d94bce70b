#!/usr/bin/env python

from setuptools import setup

setup(
    name="mavenhost",
    version="1.0.0",
    description="Maven repository upload endpoint with asynchronous directory indexing and CDN purging",
    packages=["mavenhost", "mavenhost.api", "mavenhost.objectstorage", "mavenhost.systemdata"],
    package_data={"mavenhost": ["templates/*.html"]},
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.11",
    keywords=["API", "maven", "repository"],
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Topic :: Software Development :: Build Tools",
    ],
    install_requires=[
        "fastapi",
        "uvicorn",
        "jinja2",
        "elasticsearch[async]~=8.6",
        "aiobotocore",
        "types-aiobotocore-s3",
        "httpx",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
        "typing_extensions",
    ],
    extras_require={
        'dev': [
            'pytest',
            'anyio',
            'pytest-httpx>=0.32',
            'mypy',
            'flake8',
            'pre-commit',
        ]
    },
    entry_points={
        'console_scripts': [
            'mavenhost = mavenhost.__main__:main'
        ]
    },
)
