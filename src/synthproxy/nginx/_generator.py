"""The nginx generator control loop.

The service-discovery framework drives the generator through two entry
points: ``tick()`` on a fixed period and ``update_config()`` whenever a
watcher changes. Both run synchronously and must not be called
concurrently on the same instance.
"""

import random
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, final

from synthproxy.config import GeneratorConfig, WatcherProxyConfig
from synthproxy.utils import CommandResult, create_logger, run_command
from synthproxy.watchers import WatcherView

from ._assembler import ConfigAssembler
from ._limiter import RestartRateLimiter, RestartState
from ._writer import ChangeGatedWriter

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

NAME = "nginx"


@final
class NginxGenerator:
    """Generates nginx configuration from watchers and keeps nginx current.

    Each cycle flows one way: watchers, stanza cache, assembled document,
    change-gated write, rate-limited reload.

    Attributes:
        config: Generator-wide options.
    """

    name = NAME

    __slots__ = ("_assembler", "_limiter", "_logger", "_writer", "config")

    def __init__(
        self,
        config: GeneratorConfig | Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
        *,
        logger: "FilteringBoundLogger | None" = None,  # noqa: UP037
        runner: Callable[[str], CommandResult] = run_command,
        rng: random.Random | None = None,
        clock: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            config: Validated options, or a raw mapping to validate.
            logger: Logger; built from the logging section when omitted.
            runner: Executes the check, start and reload commands.
            rng: Random source for shuffled upstreams and restart jitter.
            clock: Returns the timestamp written to the header line.

        Raises:
            ConfigValidationError: If the options are invalid.
        """
        if not isinstance(config, GeneratorConfig):
            config = GeneratorConfig.from_dict(config)
        self.config = config
        self._logger = logger if logger is not None else create_logger(config.logging, name=NAME)
        rng = rng if rng is not None else random.Random()  # noqa: S311

        self._assembler = ConfigAssembler(
            config,
            logger=self._logger,
            generator_name=self.name,
            rng=rng,
            clock=clock,
        )
        self._writer: ChangeGatedWriter | None = None
        if config.do_writes and config.config_file_path is not None and config.check_command:
            self._writer = ChangeGatedWriter(
                config.config_file_path,
                config.check_command,
                logger=self._logger,
                runner=runner,
            )
        self._limiter = RestartRateLimiter(
            start_command=config.start_command or "",
            reload_command=config.reload_command or "",
            logger=self._logger,
            interval=config.restart_interval,
            jitter=config.restart_jitter,
            runner=runner,
            rng=rng,
        )

    @property
    def restart_state(self) -> RestartState:
        """Return the restart bookkeeping."""
        return self._limiter.state

    @property
    def assembler(self) -> ConfigAssembler:
        """Return the document assembler."""
        return self._assembler

    def normalize_watcher_provided_config(
        self,
        watcher_name: str,
        watcher_config: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
    ) -> WatcherProxyConfig:
        """Normalize the options a watcher provides to this generator.

        Warns when an enabled watcher has no port: only its upstream is
        generated and traffic must be routed there from custom server
        sections.

        Raises:
            ConfigValidationError: If the options have invalid values.
        """
        normalized = WatcherProxyConfig.from_mapping(watcher_config, watcher_name=watcher_name)
        if normalized.port is None and not normalized.disabled:
            self._logger.warning(
                "watcher_without_port",
                watcher=watcher_name,
                detail="only upstream sections will be created; route traffic with server sections",
            )
        return normalized

    def tick(self, watchers: Iterable[WatcherView]) -> None:  # noqa: ARG002
        """Advance the virtual clock and retry pending work."""
        _ = self._limiter.advance()
        if not self.config.do_reloads:
            return

        # Only needed when the first start failed to happen on a restart
        if not self.restart_state.has_started:
            _ = self.start()

        # A restart may have been rate limited in update_config
        if self.restart_state.restart_required:
            _ = self.restart()

    def update_config(self, watchers: Iterable[WatcherView]) -> None:
        """Regenerate, write and, if needed, reload.

        Raises:
            ServiceModeError: If an enabled watcher has an unknown mode.
            ConfigValidationError: If a watcher's options are invalid.
        """
        new_config = self.generate_config(watchers)

        if not self.config.do_writes:
            return

        if self.write_config(new_config):
            self._limiter.request_restart()
        if self.config.do_reloads and self.restart_state.restart_required:
            _ = self.restart()

    def generate_config(self, watchers: Iterable[WatcherView]) -> str:
        """Generate the document for the current watcher state."""
        return self._assembler.generate_config(watchers)

    def write_config(self, new_config: str) -> bool:
        """Write a document if changed; True when it was written and valid."""
        if self._writer is None:
            return False
        return self._writer.write(new_config)

    def start(self) -> CommandResult:
        """Run the start command; failures are logged, not raised."""
        return self._limiter.start()

    def restart(self) -> bool:
        """Reload nginx if the rate limit allows it."""
        return self._limiter.restart()
