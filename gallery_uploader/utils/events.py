from dataclasses import dataclass
from typing import Dict, List, Callable, Optional
import inspect
import logging
logger = logging.getLogger(__name__)


@dataclass
class CandidateProgress:
    """Progress information for a single candidate."""
    filename: str
    index: int
    total: int
    total_bytes: int = 0
    status: str = "pending"  # pending, transferring, persisted, fallback, rejected
    locator: Optional[str] = None
    error: Optional[str] = None


class EventEmitter:
    """
    Named-event fan-out for batch progress.

    Listeners may be plain callables or coroutine functions. Concurrent
    pipelines emit independently; each emit runs its listeners in
    subscription order.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable):
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)

    def off(self, event_name: str, callback: Callable):
        listeners = self._listeners.get(event_name, [])
        if callback in listeners:
            listeners.remove(callback)

    async def emit(self, event_name: str, *args, **kwargs):
        """Call every listener for event_name. Listener errors are logged, not raised."""
        for callback in list(self._listeners.get(event_name, ())):
            try:
                result = callback(*args, **kwargs)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Error in %s listener", event_name)
