"""Exception types raised by the admin console."""

from __future__ import annotations


class PosError(Exception):
    """Base class for console errors."""


class ValidationError(PosError, ValueError):
    """A form value is missing or malformed."""


class UnknownTableError(PosError, LookupError):
    """An order operation named a table outside the configured set."""

    def __init__(self, table_id: str) -> None:
        super().__init__(f"Unknown table: {table_id}")
        self.table_id = table_id


class CategoryInUseError(PosError):
    """A category cannot be deleted while products still reference it."""

    def __init__(self, category_id: str, product_ids: list[str]) -> None:
        super().__init__(f"Category {category_id} is used by {len(product_ids)} product(s)")
        self.category_id = category_id
        self.product_ids = product_ids


class StorageError(PosError):
    """Persisting a change failed; in-memory state was left untouched."""


class ApiError(StorageError):
    """The REST backend rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
