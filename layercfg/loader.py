"""
Entry points for building a Container.

``load`` tolerates missing and broken files (they are skipped with a warning)
but refuses to start with nothing unless ``allow_empty`` is set.
``load_embed`` reads packaged resources and fails on the first one that
cannot be read, since a missing embedded file is a packaging bug.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .container import Container, new_files_container, new_reader_container
from .errors import EmbeddedReadError, NoSourcesFound
from .filesystem import EmbeddedFileReader, FileSystem, OsFileSystem
from .hotreload import DEFAULT_POLL_INTERVAL

logger = logging.getLogger("layercfg.loader")


def load(
    paths: Sequence[Union[str, Path]],
    fs: Optional[FileSystem] = None,
    log: Optional[logging.Logger] = None,
    allow_empty: bool = False,
    *,
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL,
) -> Container:
    log = log or logger
    fs = fs or OsFileSystem()
    log.debug("Loading configuration")

    loadable: List[str] = []
    for path in paths:
        try:
            present = fs.exists(path)
        except Exception:
            log.debug("could not stat %s, treating as absent", path, exc_info=True)
            present = False
        if present:
            loadable.append(str(path))

    if not allow_empty and not loadable:
        raise NoSourcesFound()

    return new_files_container(log, fs, *loadable, poll_interval_sec=poll_interval_sec)


def load_embed(
    paths: Sequence[str],
    reader: EmbeddedFileReader,
    log: Optional[logging.Logger] = None,
) -> Container:
    log = log or logger
    log.debug("Loading embedded configuration")

    payloads: List[bytes] = []
    for path in paths:
        try:
            payloads.append(reader.read_file(path))
        except Exception as e:
            raise EmbeddedReadError(path) from e

    return new_reader_container(log, "yaml", *payloads)


__all__ = ["load", "load_embed"]
