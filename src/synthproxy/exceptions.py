"""synthproxy exceptions."""

from pathlib import Path
from typing import Any


class SynthProxyError(Exception):
    """Base exception for synthproxy errors."""


class ConfigError(SynthProxyError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportExplicitAny]
        expected: str,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected


class ServiceModeError(ConfigError):
    """Raised when a watcher asks for a proxy mode the generator does not know.

    Attributes:
        mode: The unrecognized mode value.
        watcher_name: The watcher whose configuration carried the mode.
    """

    def __init__(self, mode: str, *, watcher_name: str | None = None) -> None:
        """Initialize with the offending mode and watcher context.

        Args:
            mode: The unrecognized mode value.
            watcher_name: Name of the watcher, if known.
        """
        message = f"synthproxy does not understand {mode!r} as a service mode"
        if watcher_name is not None:
            message = f"{message} (watcher {watcher_name!r})"
        super().__init__(message)
        self.mode: str = mode
        self.watcher_name: str | None = watcher_name
