from __future__ import annotations

import queue
from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from .container import Container

ObserverFunc = Callable[["Container", "queue.Queue[BaseException]"], None]


class Observable(Protocol):
    """Anything that wants to hear about config reloads."""

    def run(self, container: "Container", errors: "queue.Queue[BaseException]") -> None: ...


class FuncObserver:
    """Lifts a plain function into an Observable."""

    def __init__(self, handler: ObserverFunc) -> None:
        self._handler = handler

    def run(self, container: "Container", errors: "queue.Queue[BaseException]") -> None:
        self._handler(container, errors)

    def __repr__(self) -> str:
        name = getattr(self._handler, "__qualname__", repr(self._handler))
        return f"FuncObserver({name})"


__all__ = ["Observable", "FuncObserver", "ObserverFunc"]
