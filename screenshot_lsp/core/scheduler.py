"""Debounced revalidation of edited documents.

Rapid edit notifications for one document are coalesced into a single
revalidation that runs once the document has been quiet for a fixed delay.
Timers are plain single-shot ``asyncio`` handles keyed by document URI, so
the re-arm/cancel behaviour can be exercised without any editor I/O.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_DELAY = 0.1


class Debouncer:
    """Cancellable single-shot timers, at most one per key."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    def arm(self, key: str, delay: float, fn: Callable[[], None]) -> None:
        """Schedule ``fn`` after ``delay`` seconds, replacing any pending timer for ``key``."""
        self.cancel(key)
        loop = self._loop or asyncio.get_running_loop()
        self._timers[key] = loop.call_later(delay, self._fire, key, fn)

    def cancel(self, key: str) -> bool:
        """Cancel the pending timer for ``key``. Returns True if one was pending."""
        handle = self._timers.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    def pending(self, key: str) -> bool:
        return key in self._timers

    def __len__(self) -> int:
        return len(self._timers)

    def _fire(self, key: str, fn: Callable[[], None]) -> None:
        self._timers.pop(key, None)
        try:
            fn()
        except Exception:
            logger.exception(f"Debounced callback for {key} failed")


class RevalidationScheduler:
    """
    Decides when a document gets revalidated.

    Edits are debounced; opening validates immediately; closing cancels any
    pending work and evicts cached state. The ``revalidate`` callback is
    given only the document URI and must read the document's current
    snapshot itself, so a fired timer always sees the latest text.
    """

    def __init__(
        self,
        revalidate: Callable[[str], None],
        on_evict: Optional[Callable[[str], None]] = None,
        delay: float = DEFAULT_DEBOUNCE_DELAY,
        debouncer: Optional[Debouncer] = None,
    ):
        self.revalidate = revalidate
        self.on_evict = on_evict
        self.delay = delay
        self.debouncer = debouncer if debouncer is not None else Debouncer()

    def on_edit(self, doc_id: str) -> None:
        """Arm (or re-arm) the quiet-period timer for a document."""
        self.debouncer.arm(doc_id, self.delay, lambda: self.revalidate(doc_id))

    def on_open(self, doc_id: str) -> None:
        """Validate immediately, dropping any stale pending timer."""
        self.debouncer.cancel(doc_id)
        self.revalidate(doc_id)

    def on_close(self, doc_id: str) -> None:
        """Cancel pending work and evict cached state for a document."""
        self.debouncer.cancel(doc_id)
        if self.on_evict is not None:
            self.on_evict(doc_id)

    def close(self) -> None:
        self.debouncer.cancel_all()
