"""
Hot-reload primitive for layercfg.

Provides:
- FileWatcher: mtime-polling watcher that triggers a callback on change

The callback runs synchronously on the watcher thread, so a slow callback
delays the next poll. Changes are not debounced: two writes observed by two
separate polls fire twice.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from .filesystem import FileSystem, OsFileSystem

logger = logging.getLogger("layercfg.hotreload")

DEFAULT_POLL_INTERVAL = 1.0

# -------------------- File watcher --------------------

class FileWatcher:
    """
    Simple mtime-based file watcher.

    on_change callback signature:  (path: Path, mtime: float) -> None
    """

    def __init__(
        self,
        path: Union[str, Path],
        on_change: Callable[[Path, float], None],
        *,
        fs: Optional[FileSystem] = None,
        poll_interval_sec: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._path = Path(path)
        self._on_change = on_change
        self._fs = fs or OsFileSystem()
        self._poll = float(poll_interval_sec)
        self._mtime: Optional[float] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_evt = threading.Event()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._mtime = self._stat()
        self._stop_evt.clear()
        self._thread = threading.Thread(target=self._loop, name=f"FileWatcher[{self._path.name}]", daemon=True)
        self._thread.start()
        logger.debug("Watching %s every %.2fs", self._path, self._poll)

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop_evt.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=3.0)
        self._thread = None

    def poll(self) -> bool:
        """Check once; fire the callback and return True if the mtime moved."""
        mtime = self._stat()
        if mtime is None:
            return False
        if self._mtime is None:
            self._mtime = mtime
            return False
        if mtime == self._mtime:
            return False
        self._mtime = mtime
        self._on_change(self._path, mtime)
        return True

    # ----- internals -----

    def _stat(self) -> Optional[float]:
        try:
            return self._fs.mtime(self._path)
        except FileNotFoundError:
            return None

    def _loop(self) -> None:  # pragma: no cover (threading path)
        while not self._stop_evt.wait(self._poll):
            try:
                self.poll()
            except Exception:
                logger.exception("FileWatcher callback failed for %s", self._path)


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "FileWatcher",
]
