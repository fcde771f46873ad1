import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.schemas.storage import (
    DeleteResult,
    ListObjectsResult,
    StoredObject,
    UploadGrantResult,
)
from app.services.naming import make_key, parse_key

logger = logging.getLogger(__name__)

_STORE_ERRORS = (BotoCoreError, ClientError)


class StorageError(Exception):
    message = "Storage operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class GrantGenerationError(StorageError):
    message = "Failed to generate upload URL"


class ListingError(StorageError):
    message = "Failed to list files"


class DeleteError(StorageError):
    message = "Failed to delete file"


@dataclass(frozen=True)
class StoreConfig:
    """Connection details for the bucket; fixed for the lifetime of a gateway."""

    bucket: str | None
    region: str | None = None
    endpoint_url: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    upload_url_ttl: int = 3600
    read_url_ttl: int = 900
    list_page_size: int = 1000


def build_s3_client(config: StoreConfig) -> Any:
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=config.endpoint_url,
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
        region_name=config.region,
        config=Config(signature_version="s3v4"),
    )


class ObjectStoreGateway:
    """Hands out pre-signed URLs and lists/deletes objects in one bucket.

    Public coroutines never raise storage failures; they return a result
    model with ``success=False`` and a user-facing ``error`` instead.
    """

    def __init__(self, config: StoreConfig, client: Any | None = None) -> None:
        self.config = config
        self.client = client if client is not None else build_s3_client(config)

    def _require_bucket(self, error: type[StorageError]) -> str:
        if not self.config.bucket:
            logger.error("Object store bucket is not configured")
            raise error()
        return self.config.bucket

    # Upload

    def _sign_upload(self, original_name: str, content_type: str) -> tuple[str, str]:
        bucket = self._require_bucket(GrantGenerationError)
        key = make_key(original_name, content_type)
        try:
            url = self.client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": bucket,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=self.config.upload_url_ttl,
            )
        except _STORE_ERRORS as exc:
            logger.exception("Error generating pre-signed upload URL for %s", key)
            raise GrantGenerationError() from exc
        return key, url

    async def generate_upload_grant(self, original_name: str, content_type: str) -> UploadGrantResult:
        try:
            key, url = await asyncio.to_thread(self._sign_upload, original_name, content_type)
        except GrantGenerationError as exc:
            return UploadGrantResult(success=False, error=str(exc))
        logger.info("Issued upload grant for %s", key)
        return UploadGrantResult(success=True, key=key, upload_url=url)

    # Listing

    def _list_entries(self) -> list[dict[str, Any]]:
        bucket = self._require_bucket(ListingError)
        params: dict[str, Any] = {"Bucket": bucket, "MaxKeys": self.config.list_page_size}
        entries: list[dict[str, Any]] = []
        try:
            while True:
                response = self.client.list_objects_v2(**params)
                entries.extend(response.get("Contents", []))
                if not response.get("IsTruncated"):
                    break
                token = response.get("NextContinuationToken")
                if not token:
                    logger.error("Truncated listing of %s carried no continuation token", bucket)
                    raise ListingError()
                params["ContinuationToken"] = token
        except _STORE_ERRORS as exc:
            logger.exception("Error listing objects in %s", bucket)
            raise ListingError() from exc
        return entries

    def _sign_read(self, key: str) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.config.bucket, "Key": key},
                ExpiresIn=self.config.read_url_ttl,
            )
        except _STORE_ERRORS as exc:
            logger.exception("Error generating pre-signed read URL for %s", key)
            raise ListingError() from exc

    async def _describe(self, entry: dict[str, Any]) -> StoredObject:
        key = entry.get("Key")
        if not key:
            logger.error("Listing entry without a key: %r", entry)
            raise ListingError()
        url = await asyncio.to_thread(self._sign_read, key)
        parts = parse_key(key)
        return StoredObject(
            key=key,
            file_name=parts.file_name,
            category=parts.category,
            last_modified=entry.get("LastModified"),
            size=entry.get("Size", 0),
            url=url,
        )

    async def list_objects(self) -> ListObjectsResult:
        try:
            entries = await asyncio.to_thread(self._list_entries)
            # gather keeps the store's listing order
            results = await asyncio.gather(
                *(self._describe(entry) for entry in entries),
                return_exceptions=True,
            )
            failures = [r for r in results if isinstance(r, BaseException)]
            if failures:
                failure = failures[0]
                if isinstance(failure, StorageError) or not isinstance(failure, Exception):
                    raise failure
                logger.error("Error describing listed object", exc_info=failure)
                raise ListingError() from failure
            files = results
        except StorageError as exc:
            return ListObjectsResult(success=False, error=str(exc), files=[])
        logger.debug("Listed %d objects", len(files))
        return ListObjectsResult(success=True, files=list(files))

    # Delete

    def _delete(self, key: str) -> None:
        bucket = self._require_bucket(DeleteError)
        try:
            self.client.delete_object(Bucket=bucket, Key=key)
        except _STORE_ERRORS as exc:
            logger.exception("Error deleting %s", key)
            raise DeleteError() from exc

    async def delete_object(self, key: str) -> DeleteResult:
        try:
            await asyncio.to_thread(self._delete, key)
        except DeleteError as exc:
            return DeleteResult(success=False, error=str(exc))
        logger.info("Deleted %s", key)
        return DeleteResult(success=True)
