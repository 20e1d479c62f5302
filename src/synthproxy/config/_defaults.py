"""Default configuration values.

This module defines the built-in defaults that are merged underneath the
generator options before validation.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "do_writes": True,
    "do_reloads": True,
    "restart_interval": 2,
    "restart_jitter": 0.0,
    "logging": {
        "format": "text",
        "file": "",
    },
}

# Injected into every watcher's generator section when the key is absent.
WATCHER_DEFAULTS: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "mode": "http",
    "upstream": [],
    "server": [],
    "disabled": False,
}

# Written only when watcher configuration omits an explicit listen address
# and the generator has no global one.
DEFAULT_LISTEN_ADDRESS = "localhost"

# Required when the matching flag is true.
CONDITIONAL_REQUIREMENTS: dict[str, tuple[str, ...]] = {
    "do_writes": ("config_file_path", "check_command"),
    "do_reloads": ("reload_command", "start_command"),
}

REQUIRED_CONTEXTS: tuple[str, ...] = ("main", "events")
