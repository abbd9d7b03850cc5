"""Tests for the event emitter and console progress display."""
import asyncio
from io import StringIO

import pytest
from rich.console import Console

from gallery_uploader.cli_progress import (
    BatchProgressDisplay,
    RichNotificationSink,
    render_batch_report,
)
from gallery_uploader.models import (
    BatchReport,
    CandidateOutcome,
    EphemeralReference,
    Notification,
    Severity,
)
from gallery_uploader.utils.events import CandidateProgress, EventEmitter


@pytest.mark.asyncio
async def test_emit_sync_and_async_listeners():
    emitter = EventEmitter()
    seen = []

    async def async_listener(value):
        seen.append(("async", value))

    emitter.on("tick", lambda value: seen.append(("sync", value)))
    emitter.on("tick", async_listener)

    await emitter.emit("tick", 1)

    assert seen == [("sync", 1), ("async", 1)]


@pytest.mark.asyncio
async def test_listener_errors_are_isolated():
    emitter = EventEmitter()
    seen = []

    def broken(_):
        raise ValueError("listener bug")

    emitter.on("tick", broken)
    emitter.on("tick", seen.append)

    await emitter.emit("tick", 2)

    assert seen == [2]


@pytest.mark.asyncio
async def test_off_unsubscribes():
    emitter = EventEmitter()
    seen = []
    emitter.on("tick", seen.append)
    emitter.off("tick", seen.append)

    await emitter.emit("tick", 3)

    assert seen == []


@pytest.mark.asyncio
async def test_concurrent_emits_do_not_wait_on_each_other():
    emitter = EventEmitter()
    released = asyncio.Event()

    async def wait_for_second(value):
        if value == "first":
            await asyncio.wait_for(released.wait(), timeout=1)

    emitter.on("tick", wait_for_second)
    emitter.on("tick", lambda value: released.set() if value == "second" else None)

    await asyncio.gather(emitter.emit("tick", "first"), emitter.emit("tick", "second"))

    assert released.is_set()


@pytest.mark.asyncio
async def test_progress_display_counts():
    out = StringIO()
    display = BatchProgressDisplay(Console(file=out, width=120))
    emitter = EventEmitter()
    display.attach(emitter)

    progress = CandidateProgress("a.jpg", 1, 2, total_bytes=2048)
    await emitter.emit("file_start", progress)
    progress.locator = "https://store.test/a"
    await emitter.emit("file_complete", progress)
    await emitter.emit("file_fallback", CandidateProgress("b.jpg", 2, 2, error="Upload failed: 500"))

    assert display.stats == {"persisted": 1, "fallback": 1, "rejected": 0}
    text = out.getvalue()
    assert "a.jpg" in text
    assert "cause=Upload failed: 500" in text


def test_rich_sink_prints_title_and_message():
    out = StringIO()
    RichNotificationSink(Console(file=out, width=120)).notify(
        Notification(Severity.WARNING, "Upload warning", "a.jpg uploaded as preview only.")
    )
    assert "Upload warning a.jpg uploaded as preview only." in out.getvalue()


def test_render_batch_report_lists_warnings():
    out = StringIO()
    report = BatchReport.from_outcomes(
        (CandidateOutcome.fallback("b.jpg", EphemeralReference("blob:b"), "down"),)
    )
    render_batch_report(report, Console(file=out, width=120))
    text = out.getvalue()
    assert "1 preview only" in text
    assert "b.jpg" in text
