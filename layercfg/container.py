"""
Container: the public face of layercfg.

A Container owns one Settings store and a list of observers. Containers built
from two or more files watch the first one; every change re-merges all the
files and then runs one notification round over the registered observers.
"""
from __future__ import annotations

import json
import logging
import queue
import threading
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, List, Optional, Union

from . import casting
from .errors import SourceReadError
from .filesystem import FileSystem, OsFileSystem
from .hotreload import DEFAULT_POLL_INTERVAL
from .notify import run_round
from .observer import FuncObserver, Observable, ObserverFunc
from .settings import ChangeEvent, Settings, Source

logger = logging.getLogger("layercfg.config")


def _json_default(o: Any) -> Any:
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    if isinstance(o, timedelta):
        return casting.format_duration(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


class Container:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
        id: str = "",
    ) -> None:
        self.id = id
        self._logger = logger or logging.getLogger("layercfg.config")
        self._settings = settings if settings is not None else Settings(logger=self._logger)
        self._observers: List[Observable] = []
        self._observers_lock = threading.Lock()
        self._hooked = False

    # ---------- accessors ----------

    def get(self, key: str) -> Any:
        return self._settings.get(key)

    def get_bool(self, key: str) -> bool:
        return self._settings.get_bool(key)

    def get_int(self, key: str) -> int:
        return self._settings.get_int(key)

    def get_float(self, key: str) -> float:
        return self._settings.get_float(key)

    def get_string(self, key: str) -> str:
        return self._settings.get_string(key)

    def get_time(self, key: str) -> datetime:
        return self._settings.get_time(key)

    def get_duration(self, key: str) -> timedelta:
        return self._settings.get_duration(key)

    def get_settings(self) -> Settings:
        return self._settings

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def has(self, key: str) -> bool:
        """True when a loaded source defines ``key``; defaults and env do not count."""
        return self._settings.in_config(key)

    def sub(self, key: str) -> "Container":
        """Subtree container; never shares observers with the parent."""
        return Container(
            settings=self._settings.sub(key),
            logger=self._logger,
            id=f"{self.id}#{key}",
        )

    # ---------- observers ----------

    def add_observer(self, observer: Observable) -> None:
        with self._observers_lock:
            self._observers.append(observer)

    def add_observer_func(self, fn: ObserverFunc) -> None:
        self.add_observer(FuncObserver(fn))

    def get_observers(self) -> List[Observable]:
        with self._observers_lock:
            return list(self._observers)

    def notify_observers(self) -> "queue.Queue[BaseException]":
        """Run one notification round over a snapshot of the observers; blocks until all finish."""
        return run_round(self, self.get_observers(), self._logger)

    # ---------- loading / watching ----------

    def handle_read_error(self, err: SourceReadError) -> None:
        # a missing file just means defaults are used
        if isinstance(err.__cause__, OSError):
            self._logger.warning("could not load config file. Using default values", exc_info=err)
        else:
            self._logger.warning("Could not read the config file (%s)", err, exc_info=err)

    def watch_config(self, poll_interval_sec: float = DEFAULT_POLL_INTERVAL) -> None:
        with self._observers_lock:
            if not self._hooked:
                self._settings.on_config_change(self._on_config_change)
                self._hooked = True
        self._settings.watch_config(poll_interval_sec)

    def stop_watching(self) -> None:
        self._settings.stop_watching()

    def _on_config_change(self, event: ChangeEvent) -> None:
        self._logger.info("Config updated %s", event)
        self.notify_observers()

    # ---------- output ----------

    def to_json(self) -> str:
        try:
            return json.dumps(self._settings.all_settings(), sort_keys=True, default=_json_default)
        except (TypeError, ValueError):
            self._logger.error("unable to marshal config to JSON", exc_info=True)
            return ""

    def dump(self) -> None:
        print(self.to_json())

    def __repr__(self) -> str:
        return f"Container(id={self.id!r})"


# -------------------- Constructors --------------------

def _init_container(log: Optional[logging.Logger], fs: FileSystem) -> Container:
    log = log or logger
    settings = Settings(fs=fs, logger=log)
    settings.automatic_env()
    settings.set_env_key_replacer((".", "_"))
    settings.set_type_by_default_value(True)
    return Container(settings=settings, logger=log)


def new_files_container(
    log: Optional[logging.Logger],
    fs: Optional[FileSystem],
    *config_files: Union[str, Path],
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL,
) -> Container:
    """Container over files read from ``fs``; later files override earlier ones."""
    c = _init_container(log, fs or OsFileSystem())
    settings = c.get_settings()

    if config_files:
        first = str(config_files[0])
        c.id = first
        settings.set_config_file(first)
        try:
            settings.read_in_config()
        except SourceReadError as e:
            c.handle_read_error(e)

    if len(config_files) > 1:
        for f in config_files[1:]:
            c.id = f"{c.id};{f}"
            settings.set_config_file(f)
            try:
                settings.merge_in_config()
            except SourceReadError as e:
                c.handle_read_error(e)

        c.logger.info("Loaded Config")
        c.watch_config(poll_interval_sec)

    return c


def new_reader_container(log: Optional[logging.Logger], config_type: str, *readers: Source) -> Container:
    """Container over in-memory sources (bytes, str or file objects) of one format."""
    c = _init_container(log, OsFileSystem())
    settings = c.get_settings()
    settings.set_config_type(config_type)

    if readers:
        c.id = "0"
        try:
            settings.read_config(readers[0])
        except SourceReadError as e:
            c.handle_read_error(e)

    if len(readers) > 1:
        for i, r in enumerate(readers[1:], start=1):
            c.id = f"{c.id};{i}"
            try:
                settings.merge_config(r)
            except SourceReadError as e:
                c.handle_read_error(e)

        c.logger.info("Loaded Config")

    return c


__all__ = [
    "Container",
    "new_files_container",
    "new_reader_container",
]
