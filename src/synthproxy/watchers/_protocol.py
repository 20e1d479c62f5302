"""Protocol definitions for watchers.

Generators never depend on a concrete watcher class. Anything exposing a
name, a revision, a backend sequence and per-generator options can drive
them.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from ._models import Backend


@runtime_checkable
class WatcherView(Protocol):
    """Read-only view of a service watcher.

    Implementations must guarantee that ``revision`` never decreases and
    changes whenever ``backends`` changes.
    """

    @property
    def name(self) -> str:
        """Unique watcher name."""
        ...

    @property
    def revision(self) -> int:
        """Monotonic change counter."""
        ...

    @property
    def backends(self) -> Sequence[Backend]:
        """Discovered backends in discovery order."""
        ...

    def config_for_generator(self, generator_name: str) -> Mapping[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Return this watcher's options for the named generator."""
        ...
