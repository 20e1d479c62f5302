"""nginx configuration generator.

Key Components:
    - generate_server / generate_upstream / generate_proxy: stanza builders
    - RevisionCache: per-watcher memoization keyed by revision
    - ConfigAssembler: full document assembly
    - ChangeGatedWriter: writes and validates only on change
    - RestartRateLimiter: virtual-clock reload admission
    - NginxGenerator: the control loop tying them together

Example:
    >>> from synthproxy.nginx import NginxGenerator
    >>> generator = NginxGenerator(options)
    >>> generator.update_config(watchers)  # on watcher change
    >>> generator.tick(watchers)  # periodically
"""

from ._assembler import ConfigAssembler, WatcherStanzas, is_disabled, resolve_watcher_config
from ._cache import CacheEntry, RevisionCache
from ._generator import NAME, NginxGenerator
from ._limiter import RestartRateLimiter, RestartState
from ._stanzas import (
    EMPTY_UPSTREAM_RESPONSE,
    Stanza,
    generate_proxy,
    generate_server,
    generate_upstream,
    order_backend_keys,
)
from ._writer import ChangeGatedWriter, strip_header

__all__ = [
    "EMPTY_UPSTREAM_RESPONSE",
    "NAME",
    "CacheEntry",
    "ChangeGatedWriter",
    "ConfigAssembler",
    "NginxGenerator",
    "RestartRateLimiter",
    "RestartState",
    "RevisionCache",
    "Stanza",
    "WatcherStanzas",
    "generate_proxy",
    "generate_server",
    "generate_upstream",
    "is_disabled",
    "order_backend_keys",
    "resolve_watcher_config",
    "strip_header",
]
