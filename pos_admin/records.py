"""Helpers for id-keyed record tuples."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Protocol, TypeVar

from pos_admin.errors import ValidationError


class _HasId(Protocol):
    id: str


R = TypeVar("R", bound=_HasId)


def find_by_id(records: tuple[R, ...], record_id: str) -> R | None:
    for record in records:
        if record.id == record_id:
            return record
    return None


def replace_by_id(records: tuple[R, ...], record_id: str, **changes: Any) -> tuple[tuple[R, ...], bool]:
    """Apply ``changes`` to the record with ``record_id``; report whether it existed."""
    found = False
    updated = []
    for record in records:
        if record.id == record_id:
            found = True
            record = replace(record, **changes)
        updated.append(record)
    return tuple(updated), found


def remove_by_id(records: tuple[R, ...], record_id: str) -> tuple[tuple[R, ...], bool]:
    kept = tuple(record for record in records if record.id != record_id)
    return kept, len(kept) != len(records)


def require_text(value: Any, label: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    return text


def parse_number(value: Any, label: str, minimum: float = 0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number") from None
    if number < minimum:
        raise ValidationError(f"{label} must be at least {minimum:g}")
    return number
