"""Widgets — positioned, observable elements rendered into a document.

A widget renders itself to a string and inserts it into a Document tagged
with its ElementID. It remembers where it went, so it can later find and
remove exactly that text. Redraw is delete-then-insert at the same position,
not an in-place patch: markers inside the old text collapse to its start.

A widget whose render is empty holds no text, so nothing orders it against a
neighbour that starts at the same offset. When that neighbour is inserted or
redrawn there, the empty widget ends up after it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from widgetdef.element import Element
from widgetdef.observable import Observable

if TYPE_CHECKING:
    from widgetdef.document import Document, Marker

logger = logging.getLogger("widgetdef.widget")


class Widget(Element, Observable):
    """Base class of every widget type.

    Subclasses provide render(); types built with define_widget() bind the
    declared render function.
    """

    def __init__(self) -> None:
        Element.__init__(self)
        Observable.__init__(self)
        self._document: Document | None = None
        self._position = 0
        self._start: Marker | None = None
        self._rendered_length = 0

    @property
    def position(self) -> int:
        """Offset of the rendered text. Only meaningful while visible.

        Follows edits made elsewhere in the document while the widget is shown.
        """
        if self._start is not None:
            return self._start.position
        return self._position

    @property
    def document(self) -> Document | None:
        return self._document

    @property
    def rendered_length(self) -> int:
        """Length of the last render; 0 once deleted."""
        return self._rendered_length

    def render(self) -> str:
        raise NotImplementedError(f"{type(self).__name__} does not define render()")

    def _insert(self, document: Document, position: int | None) -> None:
        if position is not None:
            document.goto(position)
        self._release_start()
        self._document = document
        self._position = document.point
        text = str(self.render())
        with document.silently():
            document.insert(text, tag=self._id)
        self._rendered_length = len(text)
        # Advancing: text inserted right at our start belongs in front of us.
        self._start = document.marker(self._position, advances=True)

    def _delete(self) -> None:
        document = self._document
        if document is None:
            return
        start = self.position
        removed = 0
        with document.silently():
            # Bounded by the last render: a neighbour carrying the same tag
            # is never eaten.
            while removed < self._rendered_length and document.tag_at(start) is self._id:
                document.delete(start)
                removed += 1
        if removed < self._rendered_length:
            logger.warning(
                "Deleted %d of %d cells for %r; tagged span was short",
                removed, self._rendered_length, self,
            )
        self._release_start()
        self._position = start
        self._rendered_length = 0

    def _redraw(self) -> None:
        document = self._document
        with document.save_excursion():
            self.delete()
            self.insert(document, self._position)
        logger.debug("Redrew %r", self)
        self.notify()

    def _release_start(self) -> None:
        if self._start is not None and self._document is not None:
            self._document.release(self._start)
        self._start = None

    def __repr__(self) -> str:
        state = f"at {self.position}" if self._visible else "hidden"
        return f"{type(self).__name__}({self._id!r}, {state})"
