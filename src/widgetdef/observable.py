"""Observable — a subject holding an ordered list of listeners.

Listeners are plain callables taking the subject. The subject holds them by
weak reference only: it never keeps a listener alive, and a listener that has
been garbage collected is skipped on notify. Bound methods are held with
WeakMethod so the reference dies with the instance, not with the temporary
bound-method object.

Usage:
    class Status:
        def on_change(self, subject):
            print("changed:", subject)

    status = Status()
    subject = Observable()
    subject.add_listener(status.on_change)
    subject.notify()  # prints "changed: ..."
"""

from __future__ import annotations

import inspect
import weakref
from typing import Callable

Listener = Callable[["Observable"], None]


class _WeakBuiltinMethod:
    """WeakMethod for methods implemented in C (bag.append, etc.).

    Holds the owner weakly and rebinds by name on each call.
    """

    __slots__ = ("_owner", "_name")

    def __init__(self, method: Listener) -> None:
        self._owner = weakref.ref(method.__self__)
        self._name = method.__name__

    def __call__(self) -> Listener | None:
        owner = self._owner()
        if owner is None:
            return None
        return getattr(owner, self._name)


def _weak(listener: Listener) -> Callable[[], Listener | None]:
    if inspect.ismethod(listener):
        return weakref.WeakMethod(listener)
    try:
        owner = getattr(listener, "__self__", None)
        if owner is not None and not inspect.ismodule(owner):
            return _WeakBuiltinMethod(listener)
        return weakref.ref(listener)
    except TypeError:
        raise TypeError(
            f"listener {listener!r} cannot be weakly referenced; "
            "pass a function or a bound method of a live object"
        ) from None


class Observable:
    """Subject side of the observer protocol."""

    def __init__(self) -> None:
        self._listener_refs: list[Callable[[], Listener | None]] = []

    def add_listener(self, listener: Listener) -> None:
        """Append a non-owning reference. Addition order is notification order."""
        self._listener_refs.append(_weak(listener))

    def remove_listener(self, listener: Listener) -> None:
        """Remove the first reference to listener. Unknown listeners are ignored."""
        for i, ref in enumerate(self._listener_refs):
            if ref() == listener:
                del self._listener_refs[i]
                return

    @property
    def listeners(self) -> list[Listener]:
        """Live listeners, in addition order."""
        return [fn for fn in (ref() for ref in self._listener_refs) if fn is not None]

    def notify(self) -> None:
        """Call every live listener with this subject.

        Iterates a snapshot, so listeners may add or remove listeners without
        affecting the current round. Listener exceptions propagate.
        """
        for ref in list(self._listener_refs):
            fn = ref()
            if fn is not None:
                fn(self)


def add_listener(subject: Observable, listener: Listener) -> None:
    subject.add_listener(listener)


def notify(subject: Observable) -> None:
    subject.notify()
