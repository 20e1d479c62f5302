# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models for the proxy generator.

This module defines the Pydantic models for the generator-wide options
(GeneratorConfig), the logging section (LoggingConfig), and the
per-watcher options a service watcher provides to the generator
(WatcherProxyConfig).
"""

from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, NoReturn, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from synthproxy.config._defaults import (
    CONDITIONAL_REQUIREMENTS,
    DEFAULT_CONFIG,
    REQUIRED_CONTEXTS,
    WATCHER_DEFAULTS,
)
from synthproxy.config._load import deep_merge
from synthproxy.exceptions import ConfigValidationError


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ServiceMode(StrEnum):
    """Proxy modes a watcher can request.

    - HTTP: proxied inside the ``http`` block via ``location /``
    - TCP: proxied inside the ``stream`` block with a bare ``proxy_pass``
    """

    HTTP = "http"
    TCP = "tcp"


class UpstreamOrder(StrEnum):
    """Orderings for the backend lines of an upstream block."""

    ASC = "asc"
    DESC = "desc"
    SHUFFLE = "shuffle"
    NO_SHUFFLE = "no_shuffle"


def _raise_from_validation_error(
    error: ValidationError,
    data: Mapping[str, Any],
    prefix: str = "",
) -> NoReturn:
    """Re-raise the first pydantic error as a ConfigValidationError."""
    first = error.errors()[0]
    key = ".".join(str(part) for part in first["loc"])
    value: Any = first.get("input", data.get(key))
    msg = f"invalid value for `{prefix}{key}`: {first['msg']}"
    raise ConfigValidationError(msg, key=f"{prefix}{key}", value=value, expected=first["type"]) from error


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold (unset defers to SYNTHPROXY_LOG_LEVEL).
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel | None = None
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class GeneratorConfig(BaseModel):
    """Generator-wide options, resolved once at construction.

    Use ``from_dict()`` (or ``load_config()``) rather than the constructor:
    the factory applies defaults and enforces the required sections and the
    options each side-effect flag depends on.

    Attributes:
        contexts: Named nginx contexts, each an ordered list of directives.
            ``main`` and ``events`` are required.
        do_writes: Whether generated configuration is written to disk.
        do_reloads: Whether nginx is started and reloaded.
        config_file_path: Destination of the generated configuration.
        check_command: Shell command validating the written file.
        reload_command: Shell command applying new configuration.
        start_command: Shell command starting nginx.
        restart_interval: Minimum ticks between two reloads.
        restart_jitter: Fraction of the interval added as random delay.
        listen_address: Default bind address for server blocks.
        logging: Logging section.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    contexts: dict[str, tuple[str, ...]]
    do_writes: bool = True
    do_reloads: bool = True
    config_file_path: Path | None = None
    check_command: str | None = None
    reload_command: str | None = None
    start_command: str | None = None
    restart_interval: int = Field(default=2, ge=0)
    restart_jitter: float = Field(default=0.0, ge=0.0)
    listen_address: str | None = None
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create generator configuration from a dictionary of options.

        Args:
            data: Raw generator options.

        Returns:
            The validated configuration.

        Raises:
            ConfigValidationError: If a required section or option is missing
                or a value has the wrong type.
        """
        contexts = data.get("contexts", {})
        if not isinstance(contexts, Mapping):
            msg = "the `contexts` option must be a table of directive lists"
            raise ConfigValidationError(msg, key="contexts", value=contexts, expected="table")
        for required in REQUIRED_CONTEXTS:
            if required not in contexts:
                msg = f"nginx requires a contexts.{required} section"
                raise ConfigValidationError(
                    msg,
                    key=f"contexts.{required}",
                    value=None,
                    expected="list of directives",
                )

        merged = deep_merge(DEFAULT_CONFIG, dict(data))

        for flag, requirements in CONDITIONAL_REQUIREMENTS.items():
            if not merged[flag]:
                continue
            missing = [req for req in requirements if not merged.get(req)]
            if missing:
                msg = f"the {missing} option(s) are required when `{flag}` is true"
                raise ConfigValidationError(
                    msg,
                    key=missing[0],
                    value=None,
                    expected=f"set when {flag} is true",
                )

        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            _raise_from_validation_error(e, merged)

    def context(self, name: str) -> tuple[str, ...]:
        """Return the directives of a context, or an empty tuple."""
        return self.contexts.get(name, ())


class WatcherProxyConfig(BaseModel):
    """Options a service watcher provides to the nginx generator.

    ``mode`` and ``upstream_order`` are kept as plain strings: an unknown
    mode is reported when configuration is generated, and an unknown order
    falls back to ascending.

    Attributes:
        mode: ``http`` or ``tcp``.
        port: Port of the generated server block; none means upstream only.
        listen_address: Per-watcher bind address override.
        listen_options: Extra tokens appended to the listen directive.
        upstream_name: Upstream block name (defaults to the watcher name).
        server: Directives added to the server block.
        upstream: Directives added to the upstream block.
        server_options: Tokens appended to every backend line.
        upstream_order: Ordering of backend lines.
        disabled: Skip this watcher entirely.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    mode: str = ServiceMode.HTTP.value
    port: int | None = None
    listen_address: str | None = None
    listen_options: str | None = None
    upstream_name: str | None = None
    server: tuple[str, ...] = ()
    upstream: tuple[str, ...] = ()
    server_options: str | None = None
    upstream_order: str = UpstreamOrder.ASC.value
    disabled: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, watcher_name: str) -> Self:
        """Normalize a watcher-provided mapping, filling in defaults.

        Args:
            data: The watcher's options for this generator.
            watcher_name: Name of the watcher, used in error messages.

        Returns:
            The normalized watcher configuration.

        Raises:
            ConfigValidationError: If a value has the wrong type.
        """
        merged = {**WATCHER_DEFAULTS, **data}
        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            _raise_from_validation_error(e, merged, prefix=f"{watcher_name}.")

    def upstream_name_for(self, watcher_name: str) -> str:
        """Return the upstream block name for the owning watcher."""
        return self.upstream_name or watcher_name
