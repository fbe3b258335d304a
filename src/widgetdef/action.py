"""Actions and transactions — batched widget mutations.

Wrapping mutations in an @action or `with transaction()` defers every redraw
requested by redraw-flagged fields until the outermost scope exits. Each
widget is then redrawn once, showing all of the changes together.
"""

from __future__ import annotations

import functools
from typing import TypeVar, Callable, ParamSpec
from widgetdef._tracking import deferred_redraws

P = ParamSpec("P")
R = TypeVar("R")


def transaction():
    """Context manager for batching mutations.

    Pending redraws run on exit even if the body raised.

    Usage:
        with transaction():
            counter.count = 1
            counter.label = "one"
            # counter redraws here, once
    """
    return deferred_redraws()


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: run fn inside a transaction.

    Usage:
        @action
        def reset(counter):
            counter.count = 0
            counter.label = "reset"
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with transaction():
            return fn(*args, **kwargs)

    return wrapper
