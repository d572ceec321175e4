"""
layercfg
--------

Layered configuration container with:
- YAML / JSON / TOML sources merged key-by-key, later sources winning
- ENV overrides (a.b.c <- A_B_C)
- typed accessors and subtree extraction
- hot-reload of watched files with concurrent observer notification
"""

from .container import Container, new_files_container, new_reader_container
from .errors import ConfigError, EmbeddedReadError, NoSourcesFound, SourceReadError
from .filesystem import (
    EmbeddedFileReader,
    FileSystem,
    MemoryFileSystem,
    OsFileSystem,
    PackageResourceReader,
    ReadOnlyFileSystem,
)
from .hotreload import FileWatcher
from .loader import load, load_embed
from .notify import run_round
from .observer import FuncObserver, Observable
from .settings import ChangeEvent, Settings

__all__ = [
    "Container",
    "new_files_container",
    "new_reader_container",
    "load",
    "load_embed",
    "Settings",
    "ChangeEvent",
    "Observable",
    "FuncObserver",
    "run_round",
    "FileWatcher",
    "FileSystem",
    "EmbeddedFileReader",
    "OsFileSystem",
    "MemoryFileSystem",
    "ReadOnlyFileSystem",
    "PackageResourceReader",
    "ConfigError",
    "NoSourcesFound",
    "SourceReadError",
    "EmbeddedReadError",
]
