"""Tests for the gallery session."""
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from gallery_uploader.errors import BatchInProgress, IndexOutOfRange
from gallery_uploader.models import (
    BatchReport,
    Candidate,
    EphemeralReference,
    PersistentReference,
    UploadConfig,
)
from gallery_uploader.orchestrator.batch_upload import BatchUploadHandler
from gallery_uploader.orchestrator.gallery import Gallery
from gallery_uploader.services.ephemeral import EphemeralStore

A, B, C = (PersistentReference(f"https://store.test/{n}") for n in "abc")


def _handler(max_images: int = 10):
    handler = Mock()
    handler.config = UploadConfig(max_images=max_images)
    handler.ephemeral_store = EphemeralStore()
    handler.submit_batch = AsyncMock()
    return handler


@pytest.mark.asyncio
async def test_upload_replaces_owned_list():
    handler = _handler()
    handler.submit_batch.return_value = ((A, B), BatchReport(accepted_count=1))
    gallery = Gallery(handler, references=(A,))

    report = await gallery.upload([Candidate("b.jpg", "image/jpeg", b"b")])

    assert report.accepted_count == 1
    assert gallery.references == (A, B)
    handler.submit_batch.assert_awaited_once()
    _, current, max_allowed = handler.submit_batch.await_args.args
    assert current == (A,)
    assert max_allowed == 10


@pytest.mark.asyncio
async def test_overlapping_upload_is_refused():
    handler = _handler()
    release = asyncio.Event()

    async def slow_submit(candidates, current, max_allowed):
        await release.wait()
        return current, BatchReport()

    handler.submit_batch.side_effect = slow_submit
    gallery = Gallery(handler)

    first = asyncio.create_task(gallery.upload([]))
    await asyncio.sleep(0)
    assert gallery.busy is True

    with pytest.raises(BatchInProgress):
        await gallery.upload([])
    with pytest.raises(BatchInProgress):
        gallery.move_to(0, 0)

    release.set()
    await first
    assert gallery.busy is False


@pytest.mark.asyncio
async def test_busy_flag_cleared_after_failure():
    handler = _handler()
    handler.submit_batch.side_effect = RuntimeError("boom")
    gallery = Gallery(handler)

    with pytest.raises(RuntimeError):
        await gallery.upload([])
    assert gallery.busy is False


def test_reorder_and_remove():
    gallery = Gallery(_handler(), references=(A, B, C))

    gallery.move_to(0, 2)
    assert gallery.references == (B, C, A)
    gallery.move_left(2)
    assert gallery.references == (B, A, C)
    gallery.move_right(0)
    assert gallery.references == (A, B, C)
    gallery.remove_at(1)
    assert gallery.references == (A, C)
    assert gallery.primary == A


def test_move_left_of_primary_is_out_of_range():
    gallery = Gallery(_handler(), references=(A, B))
    with pytest.raises(IndexOutOfRange):
        gallery.move_left(0)
    with pytest.raises(IndexOutOfRange):
        gallery.move_right(1)


def test_remove_preview_releases_blob():
    handler = _handler()
    preview = handler.ephemeral_store.store(Candidate("a.jpg", "image/jpeg", b"a"))
    gallery = Gallery(handler, references=(A, preview))

    assert gallery.is_durable is False
    assert gallery.pending_resave == [preview]

    gallery.remove_at(1)

    assert gallery.is_durable is True
    assert preview not in handler.ephemeral_store


def test_slots_and_locators():
    gallery = Gallery(_handler(max_images=3), references=(A, EphemeralReference("blob:x")))
    assert gallery.max_allowed == 3
    assert gallery.remaining_slots == 1
    assert len(gallery) == 2
    assert gallery.locators() == ["https://store.test/a", "blob:x"]


def test_explicit_max_allowed_wins():
    gallery = Gallery(_handler(max_images=10), max_allowed=2, references=(A, B, C))
    assert gallery.remaining_slots == 0


@pytest.mark.asyncio
async def test_gallery_with_real_handler():
    authority = Mock()
    authority.request_destination = AsyncMock(side_effect=RuntimeError("should not be called"))
    handler = BatchUploadHandler(authority, Mock(), config=UploadConfig(max_images=2))
    gallery = Gallery(handler, references=(A, B))

    report = await gallery.upload([Candidate("c.jpg", "image/jpeg", b"c")])

    assert report.remaining_slots == 0
    assert gallery.references == (A, B)
