"""
Notification round: one thread per observer, joined before returning.

The error queue handed to observers is never read here. It is returned to
the caller, who may drain it for stricter failure handling.
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import TYPE_CHECKING, List, Optional, Sequence

from .observer import Observable

if TYPE_CHECKING:  # pragma: no cover
    from .container import Container

logger = logging.getLogger("layercfg.notify")


def run_round(
    container: "Container",
    observers: Sequence[Observable],
    log: Optional[logging.Logger] = None,
) -> "queue.Queue[BaseException]":
    log = log or logger
    errors: "queue.Queue[BaseException]" = queue.Queue()

    def _invoke(o: Observable) -> None:
        try:
            o.run(container, errors)
        except Exception:
            log.exception("Observer failed: %r", o)

    threads: List[threading.Thread] = []
    for i, o in enumerate(observers):
        t = threading.Thread(target=_invoke, args=(o,), name=f"observer-{i}", daemon=True)
        threads.append(t)
        t.start()

    for t in threads:
        t.join()

    log.debug("Notified %d observer(s) for %s", len(threads), container.id)
    return errors


__all__ = ["run_round"]
