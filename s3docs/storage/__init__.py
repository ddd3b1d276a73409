"""Storage package for S3-compatible object storage.

This package provides the S3Storage facade for pre-signed URLs, version
lookups and folder-style organisation of documents.
"""

from s3docs.storage.s3_client import S3Storage, folder_prefix, join_key

__all__ = ["S3Storage", "folder_prefix", "join_key"]
