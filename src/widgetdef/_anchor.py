"""Data anchor — plain Python structures shared by the whole package.

Holds the ElementID counter and the registry of generated widget types.
Keeping this data apart from behavior lets the other modules stay stateless.
"""

import itertools

# Widget-type registry: type name -> generated class
widget_types: dict[str, type] = {}

# ID generation — itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


class ElementID:
    """Opaque identity tag for one element. Compares by identity."""

    __slots__ = ("_serial",)

    def __init__(self, serial: int) -> None:
        self._serial = serial

    def __repr__(self) -> str:
        return f"ElementID({self._serial})"


def new_element_id() -> ElementID:
    return ElementID(next(_id_counter))
