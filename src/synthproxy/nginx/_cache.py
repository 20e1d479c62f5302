"""Revision-keyed memoization of generated stanzas."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import final


@dataclass(frozen=True, slots=True)
class CacheEntry[T]:
    """A cached value and the watcher revision it was computed from."""

    value: T
    revision: int


@final
class RevisionCache[T]:
    """Memoizes per-watcher values keyed by watcher name and revision.

    An entry is only served while its stored revision equals the watcher's
    current revision; any mismatch or absence recomputes and replaces it.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def revision_of(self, name: str) -> int | None:
        """Return the revision an entry was computed from, if cached."""
        entry = self._entries.get(name)
        return entry.revision if entry is not None else None

    def get_or_compute(self, name: str, revision: int, compute: Callable[[], T]) -> T:
        """Return the cached value for a watcher, recomputing if stale.

        Args:
            name: Watcher name.
            revision: The watcher's current revision.
            compute: Builds the value on a miss.

        Returns:
            The cached or freshly computed value.
        """
        entry = self._entries.get(name)
        if entry is not None and entry.revision == revision:
            return entry.value

        value = compute()
        self._entries[name] = CacheEntry(value=value, revision=revision)
        return value

    def prune(self, live_names: Iterable[str]) -> list[str]:
        """Drop entries for watchers that are no longer observed.

        Args:
            live_names: Names of the watchers in the current cycle.

        Returns:
            The names whose entries were removed.
        """
        live = set(live_names)
        stale = [name for name in self._entries if name not in live]
        for name in stale:
            del self._entries[name]
        return stale
