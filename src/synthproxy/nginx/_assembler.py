"""Assembly of the full nginx configuration document.

The document is the header line, the ``main`` directives at top level,
every other declared context as its own block, and finally the ``http``
and ``stream`` blocks aggregating the stanzas of all enabled watchers.
"""

import random
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, final

from pydantic import TypeAdapter, ValidationError

from synthproxy.config import GeneratorConfig, ServiceMode, WatcherProxyConfig
from synthproxy.exceptions import ServiceModeError
from synthproxy.watchers import WatcherView

from ._cache import RevisionCache
from ._stanzas import Stanza, generate_server, generate_upstream

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

# Contexts that are not emitted as plain blocks by the base config
SPECIAL_CONTEXTS = frozenset({"main", "http", "stream"})

HEADER_PREFIX = "# auto-generated by synthproxy at"

_DISABLED_FLAG: TypeAdapter[bool] = TypeAdapter(bool)


def _get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    import pendulum  # noqa: PLC0415

    return pendulum.now("UTC").to_iso8601_string()


@dataclass(frozen=True, slots=True)
class WatcherStanzas:
    """The server and upstream stanzas generated for one watcher."""

    server: Stanza
    upstream: Stanza


def is_disabled(raw: Mapping[str, Any]) -> bool:  # pyright: ignore[reportExplicitAny]
    """Read the ``disabled`` flag from unvalidated watcher options.

    A value that is not a boolean counts as enabled, so full normalization
    still reports it.
    """
    try:
        return _DISABLED_FLAG.validate_python(raw.get("disabled", False))
    except ValidationError:
        return False


def resolve_watcher_config(watcher: WatcherView, generator_name: str) -> WatcherProxyConfig:
    """Return a watcher's normalized options for a generator.

    Raises:
        ConfigValidationError: If the options have invalid values.
    """
    raw = watcher.config_for_generator(generator_name)
    return WatcherProxyConfig.from_mapping(raw, watcher_name=watcher.name)


@final
class ConfigAssembler:
    """Builds nginx configuration documents from watcher state.

    Stanzas are memoized per watcher and revision, so unchanged watchers
    cost nothing on high churn systems.

    Attributes:
        config: Generator-wide options.
        cache: Per-watcher stanza cache.
    """

    __slots__ = ("_clock", "_generator_name", "_logger", "_rng", "cache", "config")

    def __init__(
        self,
        config: GeneratorConfig,
        *,
        logger: "FilteringBoundLogger",  # noqa: UP037
        generator_name: str = "nginx",
        rng: random.Random | None = None,
        clock: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the assembler.

        Args:
            config: Generator-wide options.
            logger: Logger for generation events.
            generator_name: Key used to look up per-watcher options.
            rng: Random source for shuffled upstreams.
            clock: Returns the timestamp written to the header line.
        """
        self.config = config
        self.cache: RevisionCache[WatcherStanzas] = RevisionCache()
        self._logger = logger
        self._generator_name = generator_name
        self._rng = rng if rng is not None else random.Random()  # noqa: S311
        self._clock = clock if clock is not None else _get_timestamp

    def generate_base_config(self) -> list[str]:
        """Generate the header and the global sections of the document."""
        base_config = [f"{HEADER_PREFIX} {self._clock()}\n"]

        # The "main" context is special and is the top level
        base_config.extend(f"{option};" for option in self.config.context("main"))
        base_config.append("\n")

        for context, options in self.config.contexts.items():
            if context in SPECIAL_CONTEXTS:
                continue
            base_config.append(f"{context} {{")
            base_config.extend(f"\t{option};" for option in options)
            base_config.append("}\n")

        return base_config

    def generate_stanzas(self, watcher: WatcherView, config: WatcherProxyConfig) -> WatcherStanzas:
        """Generate a watcher's stanzas, bypassing the cache."""
        if config.port is None:
            self._logger.debug("server_stanza_skipped", watcher=watcher.name, reason="no port defined")
        return WatcherStanzas(
            server=generate_server(
                watcher,
                config,
                default_listen_address=self.config.listen_address,
            ),
            upstream=generate_upstream(watcher, config, rng=self._rng),
        )

    def generate_config(self, watchers: Iterable[WatcherView]) -> str:
        """Generate the full document for the current watcher state.

        Args:
            watchers: Every watcher known to the framework.

        Returns:
            The document, lines joined with newlines.

        Raises:
            ServiceModeError: If an enabled watcher has an unknown mode.
            ConfigValidationError: If a watcher's options are invalid.
        """
        new_config = self.generate_base_config()

        http = [f"\t{option};" for option in self.config.context("http")]
        stream = [f"\t{option};" for option in self.config.context("stream")]

        observed: list[str] = []
        for watcher in watchers:
            observed.append(watcher.name)
            # Disabled watchers are skipped before their options are validated
            if is_disabled(watcher.config_for_generator(self._generator_name)):
                continue
            watcher_config = resolve_watcher_config(watcher, self._generator_name)
            # nginx has no way to express an empty TCP listener
            if watcher_config.mode == ServiceMode.TCP and not watcher.backends:
                continue

            match watcher_config.mode:
                case ServiceMode.HTTP:
                    section = http
                case ServiceMode.TCP:
                    section = stream
                case _:
                    raise ServiceModeError(watcher_config.mode, watcher_name=watcher.name)

            stanzas = self.cache.get_or_compute(
                watcher.name,
                watcher.revision,
                partial(self.generate_stanzas, watcher, watcher_config),
            )
            section.extend(stanzas.server)
            section.extend(stanzas.upstream)

        pruned = self.cache.prune(observed)
        if pruned:
            self._logger.debug("stanza_cache_pruned", watchers=pruned)

        if http:
            new_config.append("http {")
            new_config.extend(http)
            new_config.append("}\n")

        if stream:
            new_config.append("stream {")
            new_config.extend(stream)
            new_config.append("}\n")

        document = "\n".join(new_config)
        self._logger.debug("config_generated", document=document)
        return document
