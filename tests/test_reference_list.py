"""Tests for reference list operations."""
import pytest

from gallery_uploader.errors import IndexOutOfRange
from gallery_uploader.models import EphemeralReference, PersistentReference
from gallery_uploader.reference_list import (
    append_batch,
    ephemeral_entries,
    from_locators,
    is_durable,
    move_to,
    parse_reference,
    primary,
    remove_at,
    to_locators,
)

A, B, C, D = (PersistentReference(f"https://cdn/{name}") for name in "abcd")


def test_move_to_forward():
    assert move_to((A, B, C, D), 0, 2) == (B, C, A, D)


def test_move_to_backward():
    assert move_to((A, B, C, D), 3, 1) == (A, D, B, C)


def test_move_to_same_index_is_noop():
    refs = (A, B, C)
    assert move_to(refs, 1, 1) == refs


@pytest.mark.parametrize("from_index,to_index", [(-1, 0), (0, -1), (4, 0), (0, 4)])
def test_move_to_out_of_range(from_index, to_index):
    with pytest.raises(IndexOutOfRange):
        move_to((A, B, C, D), from_index, to_index)


def test_remove_at_keeps_order():
    assert remove_at((A, B, C, D), 1) == (A, C, D)


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_remove_at_out_of_range(index):
    with pytest.raises(IndexOutOfRange) as exc_info:
        remove_at((A, B, C), index)
    assert exc_info.value.length == 3


def test_remove_at_empty_list():
    with pytest.raises(IndexError):
        remove_at((), 0)


def test_operations_do_not_mutate_input():
    refs = (A, B, C)
    remove_at(refs, 0)
    move_to(refs, 0, 2)
    assert refs == (A, B, C)


def test_append_batch_keeps_batch_order():
    assert append_batch((A,), [C, B]) == (A, C, B)


def test_parse_and_serialise():
    refs = from_locators(["https://cdn/a", "blob:gallery-uploader/1"])
    assert isinstance(refs[0], PersistentReference)
    assert isinstance(refs[1], EphemeralReference)
    assert to_locators(refs) == ["https://cdn/a", "blob:gallery-uploader/1"]
    assert isinstance(parse_reference("/objects/uploads/x"), PersistentReference)


def test_durability_helpers():
    preview = EphemeralReference("blob:x")
    assert is_durable((A, B)) is True
    assert is_durable((A, preview)) is False
    assert ephemeral_entries((A, preview, B)) == [preview]


def test_primary():
    assert primary((B, A)) is B
    assert primary(()) is None
