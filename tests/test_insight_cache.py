from datetime import datetime, timezone

import pytest

from exceptions import ConfigurationError
from insights.heuristic import HeuristicInsightBuilder
from storage.insight_cache import InsightCache
from conftest import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return InsightCache(ttl_seconds=600, max_entries=50, clock=clock)


@pytest.fixture
def payload(snapshot):
    return HeuristicInsightBuilder().build(snapshot)


def test_key_combines_name_and_update_time():
    updated_at = datetime(2024, 5, 29, 12, 0, tzinfo=timezone.utc)
    assert InsightCache.key_for("octo/repo", updated_at) == "octo/repo-2024-05-29T12:00:00+00:00"


def test_get_returns_live_entry(cache, clock, payload):
    cache.put("a", payload)
    clock.advance(599)
    assert cache.get("a") is payload


def test_entry_expires_after_ttl(cache, clock, payload):
    cache.put("a", payload)
    clock.advance(601)

    assert cache.get("a") is None
    # lazily removed on access
    assert len(cache) == 0


def test_entry_expires_at_exactly_ttl(cache, clock, payload):
    cache.put("a", payload)
    clock.advance(600)

    assert cache.get("a") is None
    assert "a" not in cache


def test_missing_key(cache):
    assert cache.get("missing") is None


def test_bound_evicts_oldest_insertion(cache, payload):
    for i in range(51):
        cache.put(f"key-{i}", payload)

    assert len(cache) == 50
    assert cache.get("key-0") is None
    assert cache.get("key-1") is payload
    assert cache.get("key-50") is payload


def test_reinsert_moves_key_to_newest(cache, clock, payload):
    for i in range(50):
        cache.put(f"key-{i}", payload)
    clock.advance(10)
    cache.put("key-0", payload)
    cache.put("key-50", payload)

    assert len(cache) == 50
    assert "key-0" in cache
    assert "key-1" not in cache


def test_reinsert_resets_timestamp(cache, clock, payload):
    cache.put("a", payload)
    clock.advance(500)
    cache.put("a", payload)
    clock.advance(500)

    assert cache.get("a") is payload


def test_invalid_configuration():
    with pytest.raises(ConfigurationError):
        InsightCache(ttl_seconds=0)
    with pytest.raises(ConfigurationError):
        InsightCache(max_entries=0)
