"""Error taxonomy for storage operations.

Every backend failure is translated into a single StorageError whose
``kind`` tells callers which operation family failed. The backend
exception itself never reaches the caller.
"""

from enum import Enum
from typing import Iterable, Optional, Tuple


class ErrorKind(str, Enum):
    """Category of a failed storage operation."""

    PRESIGN = "presign"
    METADATA = "metadata"
    WRITE = "write"
    NOT_FOUND = "not_found"


class StorageError(RuntimeError):
    """Raised when a storage operation fails.

    Attributes:
        kind: Category of the failure
        status_code: HTTP-equivalent status code, set for NOT_FOUND
        failed_keys: Object keys that could not be deleted (folder deletion)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        failed_keys: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.failed_keys: Tuple[str, ...] = tuple(failed_keys)

    @classmethod
    def not_found(cls, message: str) -> "StorageError":
        return cls(ErrorKind.NOT_FOUND, message, status_code=404)

    def __repr__(self) -> str:
        return f"StorageError(kind={self.kind.value!r}, message={self.message!r})"
