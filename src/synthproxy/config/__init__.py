"""Configuration for the proxy generator.

This module provides typed access to generator options loaded from TOML
files or plain dictionaries handed over by the service-discovery framework.

Example:
    >>> from synthproxy.config import load_config
    >>> config = load_config(Path("synthproxy.toml"), section="nginx")
    >>> config.restart_interval
    2
"""

from pathlib import Path
from typing import Any

from synthproxy.config._defaults import DEFAULT_CONFIG, DEFAULT_LISTEN_ADDRESS
from synthproxy.config._load import copy_value, deep_merge, read_toml_file
from synthproxy.config._models import (
    GeneratorConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ServiceMode,
    UpstreamOrder,
    WatcherProxyConfig,
)
from synthproxy.exceptions import ConfigLoadError

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_LISTEN_ADDRESS",
    "GeneratorConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ServiceMode",
    "UpstreamOrder",
    "WatcherProxyConfig",
    "copy_value",
    "deep_merge",
    "load_config",
    "read_toml_file",
]


def load_config(path: Path, *, section: str | None = None) -> GeneratorConfig:
    """Load generator configuration from a TOML file.

    Args:
        path: Path to the TOML file.
        section: Optional top-level table holding the generator options,
            e.g. ``"nginx"`` for a ``[nginx]`` table.

    Returns:
        The validated generator configuration.

    Raises:
        ConfigLoadError: If the file cannot be read or parsed, or the
            section is missing.
        ConfigValidationError: If the options are invalid.
    """
    data: dict[str, Any] = read_toml_file(path)  # pyright: ignore[reportExplicitAny]
    if section is not None:
        selected = data.get(section)
        if not isinstance(selected, dict):
            msg = f"Configuration file has no [{section}] table"
            raise ConfigLoadError(msg, path=path)
        data = selected  # pyright: ignore[reportUnknownVariableType]
    return GeneratorConfig.from_dict(data)
