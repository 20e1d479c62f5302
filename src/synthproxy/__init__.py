"""synthproxy: reverse-proxy configuration generation from service watchers."""

from synthproxy.config import GeneratorConfig, load_config
from synthproxy.nginx import NginxGenerator
from synthproxy.watchers import Backend, Watcher, WatcherView

__all__ = [
    "Backend",
    "GeneratorConfig",
    "NginxGenerator",
    "Watcher",
    "WatcherView",
    "load_config",
]
