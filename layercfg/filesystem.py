"""
Filesystem and embedded-asset capabilities.

The settings store never touches ``pathlib`` directly; it goes through a
``FileSystem`` so tests can swap in ``MemoryFileSystem``.
"""
from __future__ import annotations

import threading
import time
from importlib import resources
from pathlib import Path
from typing import Dict, Protocol, Union

PathLike = Union[str, Path]


class FileSystem(Protocol):
    def exists(self, path: PathLike) -> bool: ...

    def read_bytes(self, path: PathLike) -> bytes: ...

    def mtime(self, path: PathLike) -> float: ...


class EmbeddedFileReader(Protocol):
    def read_file(self, name: str) -> bytes: ...


# -------------------- Implementations --------------------

class OsFileSystem:
    """The real filesystem."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def read_bytes(self, path: PathLike) -> bytes:
        return Path(path).read_bytes()

    def mtime(self, path: PathLike) -> float:
        return Path(path).stat().st_mtime


class MemoryFileSystem:
    """
    In-memory filesystem keyed by normalised path string.

    Every write bumps a logical clock which is reported as the file's mtime,
    so watchers see each write as a change even within the same second.
    """

    def __init__(self) -> None:
        self._files: Dict[str, bytes] = {}
        self._mtimes: Dict[str, float] = {}
        self._clock = time.time()
        self._lock = threading.Lock()

    @staticmethod
    def _key(path: PathLike) -> str:
        return Path(path).as_posix()

    def write_file(self, path: PathLike, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._lock:
            self._clock += 1.0
            key = self._key(path)
            self._files[key] = data
            self._mtimes[key] = self._clock

    def remove(self, path: PathLike) -> None:
        with self._lock:
            key = self._key(path)
            if key not in self._files:
                raise FileNotFoundError(str(path))
            del self._files[key]
            del self._mtimes[key]

    def exists(self, path: PathLike) -> bool:
        with self._lock:
            return self._key(path) in self._files

    def read_bytes(self, path: PathLike) -> bytes:
        with self._lock:
            try:
                return self._files[self._key(path)]
            except KeyError:
                raise FileNotFoundError(str(path)) from None

    def mtime(self, path: PathLike) -> float:
        with self._lock:
            try:
                return self._mtimes[self._key(path)]
            except KeyError:
                raise FileNotFoundError(str(path)) from None


class ReadOnlyFileSystem:
    """Wraps another filesystem and exposes only the read side of it."""

    def __init__(self, inner: FileSystem) -> None:
        self._inner = inner

    def exists(self, path: PathLike) -> bool:
        return self._inner.exists(path)

    def read_bytes(self, path: PathLike) -> bytes:
        return self._inner.read_bytes(path)

    def mtime(self, path: PathLike) -> float:
        return self._inner.mtime(path)

    def write_file(self, path: PathLike, data: Union[bytes, str]) -> None:
        raise PermissionError(f"read-only filesystem: {path}")


class PackageResourceReader:
    """Reads config files shipped as package data (``importlib.resources``)."""

    def __init__(self, package: str) -> None:
        self._package = package

    def read_file(self, name: str) -> bytes:
        return resources.files(self._package).joinpath(name).read_bytes()


__all__ = [
    "FileSystem",
    "EmbeddedFileReader",
    "OsFileSystem",
    "MemoryFileSystem",
    "ReadOnlyFileSystem",
    "PackageResourceReader",
]
