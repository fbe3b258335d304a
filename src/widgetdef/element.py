"""Elements — renderable units with identity and visibility.

Element owns the lifecycle bookkeeping so concrete types don't have to:
insert() marks the element visible, delete() marks it invisible, and redraw()
does nothing at all while the element is invisible. Subclasses implement
_insert, _delete and _redraw.

The module-level functions dispatch on the argument type, so a bare str can
stand in wherever an element is inserted: it goes into the document as-is,
untagged.
"""

from __future__ import annotations

import functools
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Hashable, Iterable

from widgetdef import _anchor

if TYPE_CHECKING:
    from widgetdef.document import Document

logger = logging.getLogger("widgetdef.element")


class Element(ABC):
    """Abstract renderable unit."""

    def __init__(self) -> None:
        self._id = _anchor.new_element_id()
        self._visible = False

    @property
    def id(self) -> _anchor.ElementID:
        return self._id

    @property
    def visible(self) -> bool:
        return self._visible

    def element_ids(self) -> frozenset[Hashable]:
        """Ids this element tags its rendered text with."""
        return frozenset((self._id,))

    def insert(self, document: Document, position: int | None = None) -> None:
        self._visible = True
        self._insert(document, position)

    def delete(self) -> None:
        self._visible = False
        self._delete()

    def redraw(self) -> None:
        if not self._visible:
            logger.debug("Skipping redraw of invisible %r", self)
            return
        self._redraw()

    def point_at(self, document: Document, position: int | None = None) -> bool:
        """Is the cell at position (default: point) tagged with one of our ids?"""
        return document.tag_at(position) in self.element_ids()

    @abstractmethod
    def _insert(self, document: Document, position: int | None) -> None: ...

    @abstractmethod
    def _delete(self) -> None: ...

    @abstractmethod
    def _redraw(self) -> None: ...


class Group(Element):
    """Composite element: children rendered one after another.

    Deleting removes the children in reverse order; redrawing redraws each
    child in place.
    """

    def __init__(self, children: Iterable[Element] = ()) -> None:
        super().__init__()
        self.children: list[Element] = list(children)
        for child in self.children:
            if not isinstance(child, Element):
                raise TypeError(
                    f"Group children must be elements, got {type(child).__name__}; "
                    "wrap static text in a widget"
                )

    def element_ids(self) -> frozenset[Hashable]:
        ids = set()
        for child in self.children:
            ids |= child.element_ids()
        return frozenset(ids)

    def _insert(self, document: Document, position: int | None) -> None:
        if position is not None:
            document.goto(position)
        for child in self.children:
            child.insert(document)

    def _delete(self) -> None:
        for child in reversed(self.children):
            child.delete()

    def _redraw(self) -> None:
        for child in self.children:
            child.redraw()

    def __repr__(self) -> str:
        return f"Group({len(self.children)} children)"


# ─── Dispatch ────────────────────────────────────────────────────────────────


@functools.singledispatch
def element_ids(element) -> frozenset[Hashable]:
    raise TypeError(f"{type(element).__name__} is not an element")


@element_ids.register(Element)
def _(element: Element) -> frozenset[Hashable]:
    return element.element_ids()


@element_ids.register(str)
def _(element: str) -> frozenset[Hashable]:
    return frozenset()


@functools.singledispatch
def insert_element(element, document: Document, position: int | None = None) -> None:
    """Insert element into document at position (default: point)."""
    raise TypeError(f"{type(element).__name__} is not an element")


@insert_element.register(Element)
def _(element: Element, document: Document, position: int | None = None) -> None:
    element.insert(document, position)


@insert_element.register(str)
def _(element: str, document: Document, position: int | None = None) -> None:
    if position is not None:
        document.goto(position)
    document.insert(element)


@functools.singledispatch
def delete_element(element) -> None:
    raise TypeError(f"{type(element).__name__} is not an element")


@delete_element.register(Element)
def _(element: Element) -> None:
    element.delete()


@functools.singledispatch
def redraw_element(element) -> None:
    raise TypeError(f"{type(element).__name__} is not an element")


@redraw_element.register(Element)
def _(element: Element) -> None:
    element.redraw()


@functools.singledispatch
def point_at_element(element, document: Document, position: int | None = None) -> bool:
    raise TypeError(f"{type(element).__name__} is not an element")


@point_at_element.register(Element)
def _(element: Element, document: Document, position: int | None = None) -> bool:
    return element.point_at(document, position)


@point_at_element.register(str)
def _(element: str, document: Document, position: int | None = None) -> bool:
    return False
