"""Restart rate limiting on a virtual clock.

The clock advances once per tick. After every reload attempt the next
one is pushed ``restart_interval`` ticks out, plus a random jitter that
spreads reloads of several generator instances apart.
"""

import math
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, final

from synthproxy.utils import CommandResult, run_command

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


@dataclass(slots=True)
class RestartState:
    """Mutable restart bookkeeping.

    Attributes:
        time: Virtual clock, in ticks.
        next_restart: Earliest tick at which a reload may run.
        has_started: Whether a start was attempted.
        restart_required: Whether a validated change awaits a reload.
    """

    time: int = 0
    next_restart: int = 0
    has_started: bool = False
    restart_required: bool = False


@final
class RestartRateLimiter:
    """Gates start and reload commands behind a minimum interval.

    Attributes:
        state: Restart bookkeeping.
        interval: Minimum ticks between reload attempts.
        jitter: Fraction of the interval added as random delay.
    """

    __slots__ = (
        "_logger",
        "_rng",
        "_runner",
        "interval",
        "jitter",
        "reload_command",
        "start_command",
        "state",
    )

    def __init__(
        self,
        *,
        start_command: str,
        reload_command: str,
        logger: "FilteringBoundLogger",  # noqa: UP037
        interval: int = 2,
        jitter: float = 0.0,
        runner: Callable[[str], CommandResult] = run_command,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            start_command: Shell command starting the proxy.
            reload_command: Shell command reloading the proxy.
            logger: Logger for restart events.
            interval: Minimum ticks between reload attempts.
            jitter: Fraction of the interval added as random delay.
            runner: Executes shell commands.
            rng: Random source for the jitter.
        """
        self.state = RestartState()
        self.start_command = start_command
        self.reload_command = reload_command
        self.interval = interval
        self.jitter = jitter
        self._logger = logger
        self._runner = runner
        self._rng = rng if rng is not None else random.Random()  # noqa: S311

    def advance(self) -> int:
        """Advance the virtual clock by one tick and return the new time."""
        self.state.time += 1
        return self.state.time

    def request_restart(self) -> None:
        """Mark that a validated configuration change awaits a reload."""
        self.state.restart_required = True

    def jitter_ticks(self) -> int:
        """Draw the extra delay, an integer in [0, jitter * interval + 1)."""
        return self._rng.randrange(math.ceil(self.jitter * self.interval + 1))

    def start(self) -> CommandResult:
        """Run the start command.

        Failure usually means the proxy is already running, so it is logged
        and the proxy is considered started either way.
        """
        self._logger.info("proxy_start_attempt", command=self.start_command)
        try:
            result = self._runner(self.start_command)
        finally:
            self.state.has_started = True

        if not result.ok:
            self._logger.warning(
                "proxy_start_failed",
                command=self.start_command,
                exit_code=result.exit_code,
                output=result.message,
                hint="this can fail if the proxy is already running",
            )
        return result

    def restart(self) -> bool:
        """Reload the proxy if the rate limit allows it.

        Returns:
            True if the reload command ran successfully.
        """
        if self.state.time < self.state.next_restart:
            self._logger.info(
                "restart_deferred",
                time=self.state.time,
                next_restart=self.state.next_restart,
            )
            return False

        self.state.next_restart = self.state.time + self.interval + self.jitter_ticks()

        # On the very first restart we may need to start
        if not self.state.has_started:
            _ = self.start()

        result = self._runner(self.reload_command)
        if not result.ok:
            self._logger.error(
                "proxy_reload_failed",
                command=self.reload_command,
                exit_code=result.exit_code,
                output=result.message,
            )
            return False

        self._logger.info("proxy_reloaded", time=self.state.time, next_restart=self.state.next_restart)
        self.state.restart_required = False
        return True
