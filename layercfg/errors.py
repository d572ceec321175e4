from __future__ import annotations

from typing import Optional

# -------------------- Exceptions --------------------

class ConfigError(Exception):
    """Generic configuration error."""


class NoSourcesFound(ConfigError):
    """Raised when none of the requested sources exist and empty config is not allowed."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "no configuration files found please run init, "
            "or provide a config file using the --config flag"
        )


class SourceReadError(ConfigError):
    """A single source could not be read or parsed."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class EmbeddedReadError(ConfigError):
    """An embedded resource could not be read; always fatal for load_embed()."""

    def __init__(self, name: str) -> None:
        super().__init__(f"failed to read embedded config file {name}")
        self.name = name


__all__ = [
    "ConfigError",
    "NoSourcesFound",
    "SourceReadError",
    "EmbeddedReadError",
]
