"""Stanza builders for nginx configuration.

Pure functions turning one watcher and its normalized options into the
lines of a ``server`` block, an ``upstream`` block, or a proxy clause.
Nothing here touches disk or caches.

Indentation follows the nesting of the final document: one tab inside the
``http``/``stream`` block, two inside ``server``/``upstream``, three inside
``location``.
"""

import random

from synthproxy.config import DEFAULT_LISTEN_ADDRESS, ServiceMode, UpstreamOrder, WatcherProxyConfig
from synthproxy.exceptions import ServiceModeError
from synthproxy.watchers import Backend, WatcherView

type Stanza = tuple[str, ...]

EMPTY_UPSTREAM_RESPONSE = "return 503;"


def generate_server(
    watcher: WatcherView,
    config: WatcherProxyConfig,
    *,
    default_listen_address: str | None = None,
) -> Stanza:
    """Build the ``server`` block for a watcher.

    Watchers without a port get no server block; their upstream is still
    generated so operators can route to it from their own server sections.

    Args:
        watcher: The watcher to build for.
        config: The watcher's normalized options.
        default_listen_address: Generator-wide bind address.

    Returns:
        The block's lines, or an empty stanza when no port is configured.

    Raises:
        ServiceModeError: If the watcher's mode is unknown.
    """
    if config.port is None:
        return ()

    listen_address = config.listen_address or default_listen_address or DEFAULT_LISTEN_ADDRESS
    listen_tokens = [f"{listen_address}:{config.port}"]
    if config.listen_options:
        listen_tokens.append(config.listen_options)

    return (
        "\tserver {",
        f"\t\tlisten {' '.join(listen_tokens)};",
        *(f"\t\t{directive};" for directive in config.server),
        *generate_proxy(
            config.mode,
            config.upstream_name_for(watcher.name),
            empty_upstream=not watcher.backends,
            watcher_name=watcher.name,
        ),
        "\t}",
    )


def generate_proxy(
    mode: str,
    upstream_name: str,
    *,
    empty_upstream: bool,
    watcher_name: str | None = None,
) -> Stanza:
    """Build the clause that hands traffic to an upstream.

    The http and stream modules address upstreams differently: http needs
    a ``location`` wrapper and an ``http://`` scheme, stream takes a bare
    upstream name.

    Args:
        mode: ``http`` or ``tcp``.
        upstream_name: Name of the upstream block.
        empty_upstream: Whether the upstream has no backends. In http mode
            this answers 503 instead of pointing at a missing upstream.
        watcher_name: Owning watcher, for error messages.

    Returns:
        The clause's lines.

    Raises:
        ServiceModeError: If the mode is unknown.
    """
    match mode:
        case ServiceMode.HTTP:
            value = EMPTY_UPSTREAM_RESPONSE if empty_upstream else f"proxy_pass http://{upstream_name};"
            return (
                "\t\tlocation / {",
                f"\t\t\t{value}",
                "\t\t}",
            )
        case ServiceMode.TCP:
            return (f"\t\tproxy_pass {upstream_name};",)
        case _:
            raise ServiceModeError(mode, watcher_name=watcher_name)


def order_backend_keys(
    backends: dict[str, Backend],
    order: str,
    *,
    rng: random.Random | None = None,
) -> list[str]:
    """Order backend keys for an upstream block.

    The written file is the source of truth for whether to reload, so every
    order except ``shuffle`` is deterministic. Unknown orders sort ascending.

    Args:
        backends: Backends keyed by their unique key, in insertion order.
        order: One of the UpstreamOrder values.
        rng: Random source for ``shuffle``.

    Returns:
        The keys in emission order.
    """
    keys = list(backends)
    match order:
        case UpstreamOrder.DESC:
            keys.sort(reverse=True)
        case UpstreamOrder.SHUFFLE:
            (rng or random.Random()).shuffle(keys)  # noqa: S311
        case UpstreamOrder.NO_SHUFFLE:
            pass
        case _:
            keys.sort()
    return keys


def generate_upstream(
    watcher: WatcherView,
    config: WatcherProxyConfig,
    *,
    rng: random.Random | None = None,
) -> Stanza:
    """Build the ``upstream`` block for a watcher.

    Backends are de-duplicated by key, the last one reported wins. nginx
    rejects an upstream without servers, so no block is emitted when the
    watcher has no backends.

    Args:
        watcher: The watcher to build for.
        config: The watcher's normalized options.
        rng: Random source for ``shuffle`` ordering.

    Returns:
        The block's lines, or an empty stanza when there are no backends.
    """
    backends: dict[str, Backend] = {}
    for backend in watcher.backends:
        backends[backend.key] = backend

    if not backends:
        return ()

    suffix = f" {config.server_options}" if config.server_options else ""
    return (
        f"\tupstream {config.upstream_name_for(watcher.name)} {{",
        *(f"\t\t{directive};" for directive in config.upstream),
        *(
            f"\t\tserver {backends[key].address}{suffix};"
            for key in order_backend_keys(backends, config.upstream_order, rng=rng)
        ),
        "\t}",
    )
