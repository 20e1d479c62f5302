"""Shared test fixtures for synthproxy tests."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
import structlog
from structlog.testing import CapturingLogger

from synthproxy.utils import CommandResult
from synthproxy.watchers import Backend, Watcher


@dataclass(slots=True)
class FakeRunner:
    """Command runner recording calls and answering from a script.

    Commands listed in ``failing`` exit with status 1; everything else
    exits 0.
    """

    failing: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def __call__(self, command: str) -> CommandResult:
        self.calls.append(command)
        if command in self.failing:
            return CommandResult(success=True, exit_code=1, stderr=f"{command} failed")
        return CommandResult(success=True, exit_code=0)

    def count(self, command: str) -> int:
        return self.calls.count(command)


@pytest.fixture
def log_capture() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture
def logger(log_capture: CapturingLogger) -> Any:  # pyright: ignore[reportExplicitAny]
    return structlog.wrap_logger(
        log_capture,
        processors=[],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "nginx" / "nginx.conf"


@pytest.fixture
def options(config_path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Minimal valid generator options with writes and reloads enabled."""
    return {
        "contexts": {
            "main": ["worker_processes auto"],
            "events": ["worker_connections 1024"],
        },
        "config_file_path": str(config_path),
        "check_command": "nginx -t",
        "reload_command": "nginx -s reload",
        "start_command": "nginx",
    }


def make_watcher(
    name: str,
    backends: list[tuple[str, int] | tuple[str, int, str]] | None = None,
    *,
    revision: int = 1,
    **nginx: Any,  # pyright: ignore[reportExplicitAny]
) -> Watcher:
    """Build a watcher whose nginx options are the keyword arguments."""
    generator_configs: Mapping[str, Mapping[str, Any]] = {"nginx": nginx}  # pyright: ignore[reportExplicitAny]
    return Watcher(
        name=name,
        revision=revision,
        backends=tuple(Backend(*b) for b in backends or []),
        generator_configs=generator_configs,
    )


@pytest.fixture
def watcher_factory() -> Any:  # pyright: ignore[reportExplicitAny]
    return make_watcher


def logged_events(capture: CapturingLogger, method: str | None = None) -> list[str]:
    """Return the event names captured, optionally filtered by level."""
    return [
        call.kwargs["event"]
        for call in capture.calls
        if method is None or call.method_name == method
    ]


@pytest.fixture
def events(log_capture: CapturingLogger) -> Any:  # pyright: ignore[reportExplicitAny]
    def _events(method: str | None = None) -> list[str]:
        return logged_events(log_capture, method)

    return _events
