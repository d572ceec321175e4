"""
Layered settings store.

Three layers are consulted on every lookup, highest first:
  1. environment variables (when automatic env is on)
  2. config sources (files / readers merged in load order)
  3. defaults registered with set_default()

Keys are dot paths ("server.http.port") and are case-insensitive: every
mapping key is lower-cased when a source is parsed.
"""
from __future__ import annotations

import copy
import io
import json
import logging
import os
import threading
import tomllib
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple, Union

import yaml

from . import casting
from .errors import ConfigError, SourceReadError
from .filesystem import FileSystem, OsFileSystem
from .hotreload import DEFAULT_POLL_INTERVAL, FileWatcher

SUPPORTED_TYPES = ("yaml", "yml", "json", "toml")

Source = Union[bytes, str, io.IOBase]

_MISSING = object()


@dataclass(frozen=True)
class ChangeEvent:
    path: Path
    mtime: float

    def __str__(self) -> str:
        return f"{self.path} (mtime={self.mtime:.3f})"


# -------------------- Helpers --------------------

def _deep_merge(base: MutableMapping[str, Any], override: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            _deep_merge(base[k], v)  # type: ignore
        else:
            base[k] = v  # type: ignore
    return base


def _lower_keys(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {str(k).lower(): _lower_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_lower_keys(v) for v in data]
    return data


def _flatten_keys(d: Mapping[str, Any], prefix: str = "") -> List[str]:
    out: List[str] = []
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else k
        if isinstance(v, Mapping) and v:
            out.extend(_flatten_keys(v, key))
        else:
            out.append(key)
    return out


def _search(tree: Mapping[str, Any], path: Sequence[str]) -> Any:
    cur: Any = tree
    for part in path:
        if not isinstance(cur, Mapping) or part not in cur:
            return _MISSING
        cur = cur[part]
    return cur


def _set_path(tree: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    cur = tree
    for part in path[:-1]:
        nxt = cur.get(part)
        if not isinstance(nxt, MutableMapping):
            nxt = {}
            cur[part] = nxt
        cur = nxt
    cur[path[-1]] = value


def parse_source(data: Union[bytes, str], config_type: str, source: str) -> Dict[str, Any]:
    """Decode one source into a lower-cased nested dict; raises SourceReadError."""
    fmt = config_type.lower().lstrip(".")
    try:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        if fmt in ("yaml", "yml"):
            tree = yaml.safe_load(data)
        elif fmt == "json":
            tree = json.loads(data) if data.strip() else None
        elif fmt == "toml":
            tree = tomllib.loads(data)
        else:
            raise SourceReadError(source, f'unsupported config type "{config_type}"')
    except (yaml.YAMLError, ValueError) as e:
        # json/toml decode errors and UnicodeDecodeError are ValueErrors
        raise SourceReadError(source, f"parse error: {e}") from e
    if tree is None:
        return {}
    if not isinstance(tree, Mapping):
        raise SourceReadError(source, f"top-level value must be a mapping, got {type(tree).__name__}")
    return _lower_keys(tree)


def _read_stream(stream: Source) -> Union[bytes, str]:
    if isinstance(stream, (bytes, bytearray, str)):
        return stream
    return stream.read()


# -------------------- Store --------------------

class Settings:
    def __init__(
        self,
        fs: Optional[FileSystem] = None,
        logger: Optional[logging.Logger] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._fs: FileSystem = fs or OsFileSystem()
        self._logger = logger or logging.getLogger("layercfg.settings")
        self._environ = environ
        self._lock = threading.RLock()
        self._config: Dict[str, Any] = {}
        self._defaults: Dict[str, Any] = {}
        self._config_file: Optional[str] = None
        self._config_type: Optional[str] = None
        self._files: List[str] = []
        self._automatic_env = False
        self._env_prefix = ""
        self._env_replacer: Tuple[Tuple[str, str], ...] = ()
        self._type_by_default = False
        self._callbacks: List[Callable[[ChangeEvent], None]] = []
        self._watcher: Optional[FileWatcher] = None

    # ---------- setup ----------

    @property
    def fs(self) -> FileSystem:
        return self._fs

    @property
    def config_files(self) -> List[str]:
        return list(self._files)

    def set_fs(self, fs: FileSystem) -> None:
        self._fs = fs

    def set_config_file(self, path: Union[str, Path]) -> None:
        self._config_file = str(path)

    def set_config_type(self, config_type: str) -> None:
        self._config_type = config_type

    def automatic_env(self) -> None:
        self._automatic_env = True

    def set_env_prefix(self, prefix: str) -> None:
        self._env_prefix = prefix.upper()

    def set_env_key_replacer(self, *pairs: Tuple[str, str]) -> None:
        self._env_replacer = tuple(pairs)

    def set_type_by_default_value(self, enabled: bool) -> None:
        self._type_by_default = enabled

    def set_default(self, key: str, value: Any) -> None:
        with self._lock:
            _set_path(self._defaults, key.lower().split("."), _lower_keys(value))

    # ---------- loading ----------

    def read_in_config(self) -> None:
        """Replace the config layer with the current config file."""
        path = self._require_config_file()
        self._files = [path]
        tree = self._read_file(path)
        with self._lock:
            self._config = tree

    def merge_in_config(self) -> None:
        """Merge the current config file on top of the config layer."""
        path = self._require_config_file()
        if path not in self._files:
            self._files.append(path)
        tree = self._read_file(path)
        with self._lock:
            self._config = _deep_merge(copy.deepcopy(self._config), tree)  # type: ignore[assignment]

    def read_config(self, stream: Source) -> None:
        tree = parse_source(_read_stream(stream), self._require_config_type(), "<reader>")
        with self._lock:
            self._config = tree

    def merge_config(self, stream: Source) -> None:
        tree = parse_source(_read_stream(stream), self._require_config_type(), "<reader>")
        with self._lock:
            self._config = _deep_merge(copy.deepcopy(self._config), tree)  # type: ignore[assignment]

    def merge_config_map(self, data: Mapping[str, Any]) -> None:
        with self._lock:
            self._config = _deep_merge(copy.deepcopy(self._config), _lower_keys(data))  # type: ignore[assignment]

    def reload(self) -> None:
        """Rebuild the config layer from every registered file, in order, then swap it in."""
        tree: Dict[str, Any] = {}
        for path in self._files:
            try:
                _deep_merge(tree, self._read_file(path))
            except SourceReadError:
                self._logger.warning("could not reload config file %s, skipping", path, exc_info=True)
        with self._lock:
            self._config = tree

    def _require_config_file(self) -> str:
        if self._config_file is None:
            raise ConfigError("no config file set")
        return self._config_file

    def _require_config_type(self) -> str:
        if not self._config_type:
            raise ConfigError("no config type set for reader source")
        return self._config_type

    def _read_file(self, path: str) -> Dict[str, Any]:
        config_type = self._config_type or Path(path).suffix.lstrip(".")
        if config_type.lower() not in SUPPORTED_TYPES:
            raise SourceReadError(path, f'unsupported config type "{config_type}"')
        try:
            raw = self._fs.read_bytes(path)
        except OSError as e:
            raise SourceReadError(path, f"could not read file: {e}") from e
        return parse_source(raw, config_type, path)

    # ---------- watching ----------

    def on_config_change(self, fn: Callable[[ChangeEvent], None]) -> None:
        self._callbacks.append(fn)

    def watch_config(self, poll_interval_sec: float = DEFAULT_POLL_INTERVAL) -> FileWatcher:
        if not self._files:
            raise ConfigError("no config file to watch")
        with self._lock:
            if self._watcher is None:
                self._watcher = FileWatcher(
                    self._files[0],
                    self._on_file_change,
                    fs=self._fs,
                    poll_interval_sec=poll_interval_sec,
                )
                self._watcher.start()
            return self._watcher

    def stop_watching(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

    @property
    def watcher(self) -> Optional[FileWatcher]:
        return self._watcher

    def _on_file_change(self, path: Path, mtime: float) -> None:
        self.reload()
        event = ChangeEvent(path=path, mtime=mtime)
        for cb in list(self._callbacks):
            cb(event)

    # ---------- lookup ----------

    def _env_name(self, key: str) -> str:
        name = key
        for old, new in self._env_replacer:
            name = name.replace(old, new)
        name = name.upper()
        return f"{self._env_prefix}_{name}" if self._env_prefix else name

    def _find(self, key: str) -> Any:
        lkey = key.lower()
        path = lkey.split(".")
        with self._lock:
            if self._automatic_env:
                environ = os.environ if self._environ is None else self._environ
                raw = environ.get(self._env_name(lkey))
                if raw:
                    if self._type_by_default:
                        default = _search(self._defaults, path)
                        if default is not _MISSING and default is not None:
                            try:
                                return casting.cast_like(raw, default)
                            except (TypeError, ValueError, OverflowError):
                                return raw
                    return raw
            val = _search(self._config, path)
            if val is not _MISSING:
                return val
            return _search(self._defaults, path)

    def get(self, key: str) -> Any:
        val = self._find(key)
        if val is _MISSING:
            return None
        if isinstance(val, (Mapping, list)):
            return copy.deepcopy(val)
        return val

    def _cast(self, key: str, fn: Callable[[Any], Any], zero: Any) -> Any:
        val = self.get(key)
        if val is None:
            return zero
        try:
            return fn(val)
        except (TypeError, ValueError, OverflowError, OSError):
            return zero

    def get_bool(self, key: str) -> bool:
        return self._cast(key, casting.to_bool, False)

    def get_int(self, key: str) -> int:
        return self._cast(key, casting.to_int, 0)

    def get_float(self, key: str) -> float:
        return self._cast(key, casting.to_float, 0.0)

    def get_string(self, key: str) -> str:
        return self._cast(key, casting.to_string, "")

    def get_time(self, key: str) -> datetime:
        return self._cast(key, casting.to_time, datetime.min)

    def get_duration(self, key: str) -> timedelta:
        return self._cast(key, casting.to_duration, timedelta(0))

    def in_config(self, key: str) -> bool:
        with self._lock:
            return _search(self._config, key.lower().split(".")) is not _MISSING

    def is_set(self, key: str) -> bool:
        return self._find(key) is not _MISSING

    def sub(self, key: str) -> "Settings":
        """Independent store rooted at ``key``; empty when the key is missing or not a mapping."""
        sub = Settings(fs=self._fs, logger=self._logger)
        val = self.get(key)
        if isinstance(val, Mapping):
            sub._config = dict(val)
        return sub

    def all_keys(self) -> List[str]:
        with self._lock:
            keys = set(_flatten_keys(self._defaults)) | set(_flatten_keys(self._config))
        return sorted(keys)

    def all_settings(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key in self.all_keys():
            _set_path(out, key.split("."), self.get(key))
        return out


__all__ = [
    "ChangeEvent",
    "Settings",
    "parse_source",
    "SUPPORTED_TYPES",
]
