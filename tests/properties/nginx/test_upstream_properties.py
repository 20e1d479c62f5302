"""Property-based tests for upstream ordering, caching and restart limits."""

import itertools
import logging
import random

import structlog
from hypothesis import given, strategies as st
from structlog.testing import CapturingLogger

from synthproxy.config import WatcherProxyConfig
from synthproxy.nginx import RestartRateLimiter, generate_upstream, strip_header
from synthproxy.utils import CommandResult
from synthproxy.watchers import Backend, Watcher

# =============================================================================
# Strategies
# =============================================================================

backend = st.builds(
    Backend,
    host=st.from_regex(r"10\.0\.[0-9]{1,3}\.[0-9]{1,3}", fullmatch=True),
    port=st.integers(min_value=1, max_value=65535),
    name=st.one_of(st.none(), st.text(alphabet="abcdefghij-", min_size=1, max_size=8)),
)

backends = st.lists(backend, min_size=1, max_size=30)


def _lines(backends: list[Backend], order: str, seed: int = 0) -> list[str]:
    config = WatcherProxyConfig.from_mapping({"upstream_order": order}, watcher_name="svc")
    stanza = generate_upstream(
        Watcher(name="svc", backends=tuple(backends)),
        config,
        rng=random.Random(seed),
    )
    return list(stanza[1:-1])


def _expected_keys(backends: list[Backend]) -> dict[str, Backend]:
    by_key: dict[str, Backend] = {}
    for b in backends:
        by_key[b.key] = b
    return by_key


def _line(b: Backend) -> str:
    return f"\t\tserver {b.address};"


# =============================================================================
# Ordering Properties
# =============================================================================


@given(backends=backends)
def test_ascending_order_follows_sorted_keys(backends: list[Backend]) -> None:
    """Property: asc emits one line per unique key, in sorted key order."""
    by_key = _expected_keys(backends)
    assert _lines(backends, "asc") == [_line(by_key[k]) for k in sorted(by_key)]


@given(backends=backends)
def test_descending_is_reverse_of_ascending(backends: list[Backend]) -> None:
    """Property: desc is exactly the reverse of asc."""
    assert _lines(backends, "desc") == list(reversed(_lines(backends, "asc")))


@given(backends=backends, seed=st.integers(min_value=0, max_value=2**32))
def test_shuffle_is_a_permutation_of_ascending(backends: list[Backend], seed: int) -> None:
    """Property: shuffle emits the same lines as asc, in any order."""
    assert sorted(_lines(backends, "shuffle", seed)) == sorted(_lines(backends, "asc"))


@given(backends=backends)
def test_no_shuffle_follows_first_appearance(backends: list[Backend]) -> None:
    """Property: no_shuffle keeps first-seen key order, last backend wins."""
    by_key = _expected_keys(backends)
    assert _lines(backends, "no_shuffle") == [_line(b) for b in by_key.values()]


# =============================================================================
# Header Properties
# =============================================================================


@given(
    header_a=st.text(alphabet=st.characters(blacklist_characters="\n")),
    header_b=st.text(alphabet=st.characters(blacklist_characters="\n")),
    body=st.text(),
)
def test_header_never_counts_as_change(header_a: str, header_b: str, body: str) -> None:
    """Property: documents differing only in the first line compare equal."""
    assert strip_header(f"{header_a}\n{body}") == strip_header(f"{header_b}\n{body}")


# =============================================================================
# Restart Limit Properties
# =============================================================================


def _limiter(interval: int, jitter: float, seed: int) -> RestartRateLimiter:
    logger = structlog.wrap_logger(
        CapturingLogger(),
        processors=[],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
    )
    return RestartRateLimiter(
        start_command="start",
        reload_command="reload",
        logger=logger,
        interval=interval,
        jitter=jitter,
        runner=lambda _command: CommandResult(success=True, exit_code=0),
        rng=random.Random(seed),
    )


@given(
    interval=st.integers(min_value=0, max_value=20),
    jitter=st.floats(min_value=0.0, max_value=5.0, allow_nan=False),
    seed=st.integers(min_value=0, max_value=2**32),
)
def test_jitter_stays_in_window(interval: int, jitter: float, seed: int) -> None:
    """Property: 0 <= jitter ticks < jitter * interval + 1."""
    limiter = _limiter(interval, jitter, seed)
    for _ in range(10):
        ticks = limiter.jitter_ticks()
        assert 0 <= ticks < jitter * interval + 1


@given(
    interval=st.integers(min_value=1, max_value=10),
    jitter=st.floats(min_value=0.0, max_value=2.0, allow_nan=False),
    seed=st.integers(min_value=0, max_value=2**32),
    ticks=st.integers(min_value=1, max_value=100),
)
def test_reloads_are_at_least_interval_apart(interval: int, jitter: float, seed: int, ticks: int) -> None:
    """Property: with a restart requested every tick, reloads are >= interval ticks apart."""
    limiter = _limiter(interval, jitter, seed)
    reload_times: list[int] = []

    for _ in range(ticks):
        limiter.request_restart()
        if limiter.restart():
            reload_times.append(limiter.state.time)
        _ = limiter.advance()

    assert reload_times[0] == 0
    assert all(b - a >= interval for a, b in itertools.pairwise(reload_times))
