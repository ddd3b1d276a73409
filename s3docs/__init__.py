"""s3docs - folder and document helpers for S3-compatible object storage."""

from s3docs.core.errors import ErrorKind, StorageError
from s3docs.storage.s3_client import S3Storage

__version__ = "0.1.0"

__all__ = ["ErrorKind", "S3Storage", "StorageError", "__version__"]
