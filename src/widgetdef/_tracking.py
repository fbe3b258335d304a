"""Redraw scheduling — the queue behind action and transaction.

A redraw-flagged setter calls schedule_redraw(). With no batch open the
element redraws at once, inside the setter call. While a batch is open the
request is queued; a widget asked several times is queued once, and the
queue drains when the outermost batch closes.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from widgetdef.element import Element

logger = logging.getLogger("widgetdef.tracking")


class _RedrawQueue:
    """Redraw requests held back by open batches."""

    def __init__(self) -> None:
        self.open_batches = 0
        # Ordered set: first request decides the redraw order.
        self.pending: dict[Element, None] = {}

    def request(self, element: Element) -> None:
        if self.open_batches:
            self.pending.setdefault(element, None)
        else:
            element.redraw()

    @contextmanager
    def deferred(self) -> Iterator[None]:
        self.open_batches += 1
        try:
            yield
        finally:
            self.open_batches -= 1
            if not self.open_batches:
                self.drain()

    def drain(self) -> None:
        # A render may request more redraws; keep going until quiet.
        while self.pending:
            elements = list(self.pending)
            self.pending.clear()
            documents = {id(getattr(e, "document", None)) for e in elements}
            logger.debug(
                "Redrawing %d deferred element(s) in %d document(s)",
                len(elements), len(documents),
            )
            for element in elements:
                element.redraw()


_queue = _RedrawQueue()


def schedule_redraw(element: Element) -> None:
    """Redraw element now, or when the open batch closes."""
    _queue.request(element)


def deferred_redraws():
    """Context manager holding back redraws until the outermost one exits."""
    return _queue.deferred()


def get_pending_count() -> int:
    """Number of redraws waiting for the batch to close. Useful for testing."""
    return len(_queue.pending)
