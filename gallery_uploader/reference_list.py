"""
Operations on reference lists.

A reference list is an ordered tuple; position 0 is the primary image.
Every function returns a new tuple and leaves its input untouched.
"""
from typing import Iterable, List, Optional, Sequence

from .errors import IndexOutOfRange
from .models import (
    EPHEMERAL_SCHEME,
    EphemeralReference,
    PersistentReference,
    Reference,
    ReferenceList,
)


def _check_index(index: int, length: int) -> None:
    # Negative indices are not positions here, even though Python accepts them.
    if index < 0 or index >= length:
        raise IndexOutOfRange(index, length)


def parse_reference(locator: str) -> Reference:
    """Classify a stored locator. Blob handles are ephemeral."""
    if locator.startswith(EPHEMERAL_SCHEME):
        return EphemeralReference(locator)
    return PersistentReference(locator)


def from_locators(locators: Iterable[str]) -> ReferenceList:
    return tuple(parse_reference(locator) for locator in locators)


def to_locators(references: Sequence[Reference]) -> List[str]:
    """Plain ordered strings, as the persistence API expects them."""
    return [ref.locator for ref in references]


def append_batch(references: ReferenceList, batch: Sequence[Reference]) -> ReferenceList:
    return tuple(references) + tuple(batch)


def remove_at(references: ReferenceList, index: int) -> ReferenceList:
    """Drop the element at index; remaining elements keep their order."""
    _check_index(index, len(references))
    return tuple(references[:index]) + tuple(references[index + 1:])


def move_to(references: ReferenceList, from_index: int, to_index: int) -> ReferenceList:
    """Take the element at from_index out and reinsert it at to_index."""
    length = len(references)
    _check_index(from_index, length)
    _check_index(to_index, length)
    if from_index == to_index:
        return tuple(references)
    items = list(references)
    moved = items.pop(from_index)
    items.insert(to_index, moved)
    return tuple(items)


def ephemeral_entries(references: Sequence[Reference]) -> List[EphemeralReference]:
    return [ref for ref in references if isinstance(ref, EphemeralReference)]


def is_durable(references: Sequence[Reference]) -> bool:
    """True when every entry survives a save."""
    return not ephemeral_entries(references)


def primary(references: Sequence[Reference]) -> Optional[Reference]:
    return references[0] if references else None
