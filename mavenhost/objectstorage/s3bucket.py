"""
Content store on S3-compatible object storage (e.g., AWS S3, MinIO, Backblaze B2, Cloudflare R2).
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError
from types_aiobotocore_s3.client import S3Client
from types_aiobotocore_s3.type_defs import ListObjectsV2RequestTypeDef

from mavenhost.errors import StorageUnavailable
from mavenhost.objectstorage.contentstore import Listing, ListObject, StoredObject

logger = logging.getLogger("mavenhost.objectstorage")


class S3ContentStore:
    def __init__(self, client: S3Client, bucket: str, page_size: int = 1000):
        self.client = client
        self.bucket = bucket
        self.page_size = page_size

    async def ensure_bucket(self) -> None:
        try:
            await self.client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            error = e.response.get("Error", {})
            if error.get("Code") in ("404", "NoSuchBucket"):
                logger.info(f"Creating bucket {self.bucket}")
                await self.client.create_bucket(Bucket=self.bucket)
            else:
                raise StorageUnavailable(f"Cannot access bucket {self.bucket}: {e}") from e

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        try:
            await self.client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailable(f"Could not write {key}: {e}") from e

    async def get(self, key: str) -> StoredObject:
        try:
            res = await self.client.get_object(Bucket=self.bucket, Key=key)
            async with res["Body"] as stream:
                body = await stream.read()
        except ClientError as e:
            error = e.response.get("Error", {})
            if error.get("Code") in ("404", "NoSuchKey"):
                raise FileNotFoundError(f"Object {key} not found in bucket")
            raise StorageUnavailable(f"Could not read {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageUnavailable(f"Could not read {key}: {e}") from e
        return StoredObject(key=key, body=body, content_type=res.get("ContentType", ""))

    async def list(self, prefix: str, delimiter: str = "/") -> Listing:
        """List the immediate children of prefix, following continuation tokens until the last page"""
        params: ListObjectsV2RequestTypeDef = {
            "Bucket": self.bucket,
            "Prefix": prefix,
            "Delimiter": delimiter,
            "MaxKeys": self.page_size,
        }
        common_prefixes: list[str] = []
        objects: list[ListObject] = []
        try:
            while True:
                res = await self.client.list_objects_v2(**params)
                for common_prefix in res.get("CommonPrefixes", []):
                    if "Prefix" in common_prefix:
                        common_prefixes.append(common_prefix["Prefix"])
                for content in res.get("Contents", []):
                    if "Key" in content:
                        objects.append(ListObject(key=content["Key"]))
                if not res.get("IsTruncated") or not res.get("NextContinuationToken"):
                    break
                params["ContinuationToken"] = res["NextContinuationToken"]
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailable(f"Could not list {prefix}: {e}") from e
        return Listing(common_prefixes=common_prefixes, objects=objects)
