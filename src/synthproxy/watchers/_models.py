"""Watcher-side data types consumed by generators.

- Backend: one address a watcher discovered
- Watcher: a plain, immutable WatcherView implementation
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Backend:
    """A single backend address reported by a watcher.

    Attributes:
        host: Hostname or IP address.
        port: Port number.
        name: Optional backend name, used to disambiguate keys.
    """

    host: str
    port: int
    name: str | None = None

    @property
    def address(self) -> str:
        """Return ``host:port``."""
        return f"{self.host}:{self.port}"

    @property
    def key(self) -> str:
        """Return the unique, sortable key for this backend.

        ``name_host:port`` when a non-empty name is set, ``host:port``
        otherwise.
        """
        if self.name:
            return f"{self.name}_{self.address}"
        return self.address

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Backend":  # pyright: ignore[reportExplicitAny]
        """Build a backend from a ``{"host", "port", "name"}`` mapping."""
        name = data.get("name")
        return cls(
            host=str(data["host"]),
            port=int(data["port"]),
            name=str(name) if name is not None else None,
        )


@dataclass(frozen=True, slots=True)
class Watcher:
    """Immutable snapshot of a service watcher.

    Attributes:
        name: Unique watcher name.
        revision: Change counter; equal revisions mean equal backends.
        backends: Discovered backends in discovery order.
        generator_configs: Per-generator option mappings keyed by
            generator name.
    """

    name: str
    revision: int = 0
    backends: tuple[Backend, ...] = ()
    generator_configs: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)  # pyright: ignore[reportExplicitAny]

    def config_for_generator(self, generator_name: str) -> Mapping[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Return this watcher's options for a generator (empty if none)."""
        return self.generator_configs.get(generator_name, {})
