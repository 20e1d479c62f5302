"""Watcher types consumed by configuration generators."""

from ._models import Backend, Watcher
from ._protocol import WatcherView

__all__ = ["Backend", "Watcher", "WatcherView"]
