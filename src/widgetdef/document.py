"""In-memory document — the linear buffer that elements render into.

A Document is a sequence of cells, each holding one character and an optional
identity tag. It has a point (the current position), markers that follow
edits, and after-change hooks. Elements receive the document explicitly, so
the widget layer can be exercised without a live editor.

Usage:
    doc = Document("ab")
    doc.goto(1)
    doc.insert("XY", tag="t")
    # doc.text == "aXYb", doc.point == 3, doc.span_of("t") == (1, 3)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Hashable, Iterator

ChangeHook = Callable[[int, int, int], None]


class Marker:
    """A position that moves with insertions and deletions.

    advances: whether text inserted exactly at the marker lands before it
    (the marker moves forward) or after it (the marker stays put).
    """

    __slots__ = ("position", "advances")

    def __init__(self, position: int, advances: bool = False) -> None:
        self.position = position
        self.advances = advances

    def __repr__(self) -> str:
        return f"Marker({self.position}, advances={self.advances})"


class Document:
    """Mutable text with per-character identity tags."""

    def __init__(self, text: str = "") -> None:
        self._chars: list[str] = list(text)
        self._tags: list[Hashable | None] = [None] * len(text)
        self._point = 0
        self._markers: list[Marker] = []
        self._silent_depth = 0
        self.modified = False
        self.after_change: list[ChangeHook] = []

    # --- Reads ---

    @property
    def text(self) -> str:
        return "".join(self._chars)

    @property
    def point(self) -> int:
        return self._point

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return self.text

    def tag_at(self, position: int | None = None) -> Hashable | None:
        """Tag of the cell at position (default: point). None past the end."""
        pos = self._point if position is None else position
        if 0 <= pos < len(self._tags):
            return self._tags[pos]
        return None

    def span_of(self, tag: Hashable) -> tuple[int, int] | None:
        """(start, end) of the first contiguous run tagged with tag."""
        start = None
        for i, t in enumerate(self._tags):
            if t == tag:
                if start is None:
                    start = i
            elif start is not None:
                return (start, i)
        if start is not None:
            return (start, len(self._tags))
        return None

    # --- Motion ---

    def goto(self, position: int) -> None:
        self._check_position(position)
        self._point = position

    def marker(self, position: int | None = None, advances: bool = False) -> Marker:
        """Create a marker that tracks edits until released."""
        pos = self._point if position is None else position
        self._check_position(pos)
        m = Marker(pos, advances)
        self._markers.append(m)
        return m

    def release(self, marker: Marker) -> None:
        try:
            self._markers.remove(marker)
        except ValueError:
            pass  # already released

    @contextmanager
    def save_excursion(self) -> Iterator[None]:
        """Restore point afterwards, adjusted for edits made meanwhile."""
        saved = self.marker(self._point)
        try:
            yield
        finally:
            self.release(saved)
            self._point = min(saved.position, len(self._chars))

    # --- Edits ---

    def insert(self, text: str, tag: Hashable | None = None, at: int | None = None) -> None:
        """Insert text carrying tag.

        Inserting at point (at=None) leaves point after the new text.
        """
        if not text:
            return
        at_point = at is None
        pos = self._point if at_point else at
        self._check_position(pos)
        n = len(text)
        self._chars[pos:pos] = list(text)
        self._tags[pos:pos] = [tag] * n

        for m in self._markers:
            if m.position > pos or (m.position == pos and m.advances):
                m.position += n
        if at_point:
            self._point = pos + n
        elif self._point > pos:
            self._point += n

        self._changed(pos, pos + n, 0)

    def delete(self, start: int, count: int = 1) -> str:
        """Remove count cells starting at start. Returns the removed text."""
        end = start + count
        if count < 0 or start < 0 or end > len(self._chars):
            raise IndexError(f"delete range [{start}, {end}) outside document of length {len(self)}")
        if count == 0:
            return ""
        removed = "".join(self._chars[start:end])
        del self._chars[start:end]
        del self._tags[start:end]

        for m in self._markers:
            if m.position > start:
                m.position = max(start, m.position - count)
        if self._point > start:
            self._point = max(start, self._point - count)

        self._changed(start, start, count)
        return removed

    @contextmanager
    def silently(self) -> Iterator[None]:
        """Edits inside don't run after-change hooks or set the modified flag."""
        was_modified = self.modified
        self._silent_depth += 1
        try:
            yield
        finally:
            self._silent_depth -= 1
            self.modified = was_modified

    # --- Internals ---

    def _changed(self, start: int, end: int, removed: int) -> None:
        if self._silent_depth > 0:
            return
        self.modified = True
        for hook in list(self.after_change):
            hook(start, end, removed)

    def _check_position(self, position: int) -> None:
        if not 0 <= position <= len(self._chars):
            raise IndexError(f"position {position} outside document of length {len(self)}")

    def __repr__(self) -> str:
        return f"Document({self.text!r}, point={self._point})"
