"""S3-compatible storage facade for folder-organised documents.

This module provides S3Storage, a thin async layer over a boto3 S3 client.
It works with any S3-compatible service including AWS S3 and MinIO.

Key features:
- Pre-signed upload and download URLs (optionally pinned to a version)
- Version ID lookup through a metadata-only HEAD request
- Folders modelled as zero-byte marker objects ending in "/"
- Folder deletion that follows listing pagination and waits for every delete
- Uniform error translation into StorageError
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from s3docs.core.config import MAX_PRESIGN_EXPIRES_IN, Settings
from s3docs.core.errors import ErrorKind, StorageError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 60
SEPARATOR = "/"

BACKEND_ERRORS = (ClientError, BotoCoreError)


def folder_prefix(folder: str) -> str:
    """Return the key prefix of a folder, always ending in a single "/"."""
    return folder.rstrip(SEPARATOR) + SEPARATOR


def join_key(folder: str, key: str) -> str:
    """Return the full object key of ``key`` inside ``folder``.

    Example:
        >>> join_key("reports/", "/2024.pdf")
        'reports/2024.pdf'
    """
    return folder_prefix(folder) + key.lstrip(SEPARATOR)


def _require(**values: Optional[str]) -> None:
    for name, value in values.items():
        if not value:
            raise ValueError(f"{name} must be a non-empty string")


def _require_folder(folder: str) -> None:
    if not folder or not folder.strip(SEPARATOR):
        raise ValueError("folder must contain at least one non-separator character")


def _require_key(key: str) -> None:
    if not key or not key.strip(SEPARATOR):
        raise ValueError("key must contain at least one non-separator character")


def _check_expiry(expires_in: Any) -> int:
    if isinstance(expires_in, bool) or not isinstance(expires_in, int):
        raise ValueError("expires_in must be an integer number of seconds")
    if not 1 <= expires_in <= MAX_PRESIGN_EXPIRES_IN:
        raise ValueError(f"expires_in must be between 1 and {MAX_PRESIGN_EXPIRES_IN} seconds")
    return expires_in


class S3Storage:
    """Async facade over a boto3 S3 client.

    The client handle is created once and shared by every call. Blocking
    boto3 calls run on the default thread pool so operations can be awaited
    concurrently. Backend errors never reach the caller: they are reported
    to the diagnostics logger (if any) and replaced by a StorageError with a
    fixed message.

    Attributes:
        client: Underlying boto3 S3 client
    """

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        dev: bool = False,
        *,
        diagnostics: Optional[logging.Logger] = None,
        client: Any = None,
        max_concurrent_deletes: int = 10,
        default_expires_in: int = DEFAULT_EXPIRES_IN,
    ) -> None:
        """Initialize the facade.

        Args:
            config: Keyword arguments for ``boto3.client("s3", ...)``
            dev: Log backend error detail to this module's logger
            diagnostics: Diagnostics logger; takes precedence over ``dev``
            client: Pre-built S3 client, used instead of ``config``
            max_concurrent_deletes: Max in-flight deletes in delete_folder
            default_expires_in: URL lifetime used when none is given

        Raises:
            ValueError: If a limit is out of range
        """
        if max_concurrent_deletes < 1:
            raise ValueError("max_concurrent_deletes must be greater than 0")
        self._default_expires_in = _check_expiry(default_expires_in)
        self._max_concurrent_deletes = max_concurrent_deletes

        if diagnostics is None and dev:
            diagnostics = logger
        self._diagnostics = diagnostics

        if client is None:
            client = boto3.client("s3", **dict(config or {}))
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "S3Storage":
        """Create a facade configured from application settings.

        Args:
            settings: Application settings
            **kwargs: Overrides for the constructor arguments

        Returns:
            Configured S3Storage
        """
        kwargs.setdefault("dev", settings.dev)
        kwargs.setdefault("max_concurrent_deletes", settings.max_concurrent_deletes)
        kwargs.setdefault("default_expires_in", settings.presign_expires_in)
        return cls(settings.client_config(), **kwargs)

    @property
    def client(self) -> Any:
        return self._client

    def _report(self, message: str, error: BaseException) -> None:
        if self._diagnostics is not None:
            self._diagnostics.error("%s: %s", message, error, exc_info=error)

    async def generate_upload_url(
        self,
        bucket: str,
        key: str,
        expires_in: Optional[int] = None,
    ) -> str:
        """Generate a pre-signed URL for uploading an object.

        The bucket and key are not checked for existence; authorization is
        enforced by the backend when the URL is used.

        Args:
            bucket: Bucket to upload the object to
            key: Key the uploaded object will have
            expires_in: URL lifetime in seconds (default from constructor)

        Returns:
            Pre-signed PUT URL

        Raises:
            ValueError: If an argument is invalid
            StorageError: PRESIGN if the URL could not be generated
        """
        _require(bucket=bucket, key=key)
        expires_in = _check_expiry(self._default_expires_in if expires_in is None else expires_in)

        params = {"Bucket": bucket, "Key": key}
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "put_object",
                Params=params,
                ExpiresIn=expires_in,
            )
        except BACKEND_ERRORS as error:
            self._report("Error generating pre-signed upload URL", error)
            raise StorageError(ErrorKind.PRESIGN, "Failed to generate pre-signed upload URL") from None

    async def generate_download_url(
        self,
        bucket: str,
        key: str,
        expires_in: Optional[int] = None,
        version_id: Optional[str] = None,
    ) -> str:
        """Generate a pre-signed URL for downloading an object.

        Without ``version_id`` the URL resolves to whatever version is
        current when it is used.

        Args:
            bucket: Bucket holding the object
            key: Key of the object
            expires_in: URL lifetime in seconds (default from constructor)
            version_id: Pin the URL to this version

        Returns:
            Pre-signed GET URL

        Raises:
            ValueError: If an argument is invalid
            StorageError: PRESIGN if the URL could not be generated
        """
        _require(bucket=bucket, key=key)
        expires_in = _check_expiry(self._default_expires_in if expires_in is None else expires_in)

        params = {"Bucket": bucket, "Key": key}
        if version_id:
            params["VersionId"] = version_id
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "get_object",
                Params=params,
                ExpiresIn=expires_in,
            )
        except BACKEND_ERRORS as error:
            self._report("Error generating pre-signed download URL", error)
            raise StorageError(ErrorKind.PRESIGN, "Failed to generate pre-signed download URL") from None

    async def get_version_id(self, bucket: str, key: str) -> Optional[str]:
        """Get the current version ID of an object.

        Uses a HEAD request, so no object content is transferred.

        Args:
            bucket: Bucket holding the object
            key: Key of the object

        Returns:
            Version ID, or None if the bucket is not versioned

        Raises:
            StorageError: METADATA if the object is missing or the lookup fails
        """
        _require(bucket=bucket, key=key)
        try:
            response = await asyncio.to_thread(self._client.head_object, Bucket=bucket, Key=key)
        except BACKEND_ERRORS as error:
            self._report("Error retrieving version ID", error)
            raise StorageError(ErrorKind.METADATA, "Failed to retrieve version ID") from None
        return response.get("VersionId")

    async def create_folder(self, bucket: str, folder: str) -> Dict[str, Any]:
        """Create a folder marker object.

        Writing the marker again simply overwrites it, so the call is
        idempotent.

        Args:
            bucket: Bucket to create the folder in
            folder: Folder name, with or without a trailing "/"

        Returns:
            Response from the S3 client

        Raises:
            StorageError: WRITE if the folder could not be created
        """
        _require(bucket=bucket)
        _require_folder(folder)
        try:
            return await asyncio.to_thread(
                self._client.put_object,
                Bucket=bucket,
                Key=folder_prefix(folder),
                Body=b"",
            )
        except BACKEND_ERRORS as error:
            self._report("Error creating folder", error)
            raise StorageError(ErrorKind.WRITE, "Failed to create folder") from None

    def _list_keys(self, bucket: str, prefix: str) -> List[str]:
        paginator = self._client.get_paginator("list_objects_v2")
        keys: List[str] = []
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    async def delete_folder(self, bucket: str, folder: str) -> None:
        """Delete a folder and everything under it.

        Every listing page is read before deletion starts. Deletes are then
        issued concurrently and all of them are awaited before returning.

        Args:
            bucket: Bucket holding the folder
            folder: Folder name, with or without a trailing "/"

        Raises:
            StorageError: NOT_FOUND if nothing exists under the folder,
                WRITE if listing fails or any object could not be deleted
                (``failed_keys`` names them)
        """
        _require(bucket=bucket)
        _require_folder(folder)
        prefix = folder_prefix(folder)

        try:
            keys = await asyncio.to_thread(self._list_keys, bucket, prefix)
        except BACKEND_ERRORS as error:
            self._report("Error listing folder", error)
            raise StorageError(ErrorKind.WRITE, "Failed to delete folder") from None

        if not keys:
            if self._diagnostics is not None:
                self._diagnostics.info("%s does not exist", folder)
            raise StorageError.not_found("Folder does not exist")

        semaphore = asyncio.Semaphore(self._max_concurrent_deletes)

        async def delete(key: str) -> None:
            async with semaphore:
                await asyncio.to_thread(self._client.delete_object, Bucket=bucket, Key=key)

        results = await asyncio.gather(*(delete(key) for key in keys), return_exceptions=True)

        failed_keys = []
        for key, result in zip(keys, results):
            if result is None:
                continue
            if not isinstance(result, BACKEND_ERRORS):
                raise result
            self._report(f"Error deleting {key}", result)
            failed_keys.append(key)

        if failed_keys:
            raise StorageError(ErrorKind.WRITE, "Failed to delete folder", failed_keys=failed_keys)

        logger.info(f"Deleted folder {prefix} ({len(keys)} objects) from {bucket}")

    async def delete_document(self, bucket: str, folder: str, key: str) -> Dict[str, Any]:
        """Delete the current version of a document.

        Existence is not checked; deleting a missing object is left to the
        backend, which normally treats it as a no-op.

        Args:
            bucket: Bucket holding the document
            folder: Folder containing the document
            key: Document name inside the folder

        Returns:
            Response from the S3 client

        Raises:
            StorageError: WRITE if the document could not be deleted
        """
        _require(bucket=bucket)
        _require_folder(folder)
        _require_key(key)
        try:
            response = await asyncio.to_thread(
                self._client.delete_object,
                Bucket=bucket,
                Key=join_key(folder, key),
            )
        except BACKEND_ERRORS as error:
            self._report("Error deleting document", error)
            raise StorageError(ErrorKind.WRITE, "Failed to delete document") from None
        logger.debug(f"Deleted {join_key(folder, key)} from {bucket}")
        return response

    async def delete_document_version(
        self,
        bucket: str,
        folder: str,
        key: str,
        version_id: str,
    ) -> Dict[str, Any]:
        """Delete one specific version of a document.

        Args:
            bucket: Bucket holding the document
            folder: Folder containing the document
            key: Document name inside the folder
            version_id: Version to delete

        Returns:
            Response from the S3 client

        Raises:
            StorageError: WRITE if the version could not be deleted
        """
        _require(bucket=bucket, version_id=version_id)
        _require_folder(folder)
        _require_key(key)
        try:
            response = await asyncio.to_thread(
                self._client.delete_object,
                Bucket=bucket,
                Key=join_key(folder, key),
                VersionId=version_id,
            )
        except BACKEND_ERRORS as error:
            self._report("Error deleting document version", error)
            raise StorageError(ErrorKind.WRITE, "Failed to delete document version") from None
        logger.debug(f"Deleted version {version_id} of {join_key(folder, key)} from {bucket}")
        return response
