import time

from services.cache import TTLCache


def test_get_returns_value_before_expiry(ttl_cache, clock):
    ttl_cache.set("k", "v", ttl=10)
    clock.advance(10)
    assert ttl_cache.get("k") == "v"


def test_get_returns_default_after_expiry_and_evicts(ttl_cache, clock):
    ttl_cache.set("k", "v", ttl=10)
    clock.advance(10.01)
    assert ttl_cache.get("k") is None
    assert ttl_cache.get("k", "missing") == "missing"
    assert "k" not in ttl_cache.keys()


def test_real_clock_expiry():
    cache = TTLCache()
    cache.set("k", "v", ttl=0.1)
    assert cache.get("k") == "v"
    time.sleep(0.15)
    assert cache.get("k") is None


def test_set_overwrites_and_resets_ttl(ttl_cache, clock):
    ttl_cache.set("k", "old", ttl=10)
    clock.advance(8)
    ttl_cache.set("k", "new", ttl=10)
    clock.advance(8)
    assert ttl_cache.get("k") == "new"


def test_default_ttl_applies_when_omitted(ttl_cache, clock):
    ttl_cache.set("k", "v")
    clock.advance(299)
    assert "k" in ttl_cache
    clock.advance(2)
    assert "k" not in ttl_cache


def test_delete_and_clear_are_idempotent(ttl_cache):
    ttl_cache.set("a", 1)
    ttl_cache.delete("a")
    ttl_cache.delete("a")
    ttl_cache.delete("never-set")
    ttl_cache.set("b", 2)
    ttl_cache.clear()
    ttl_cache.clear()
    assert ttl_cache.keys() == []


def test_keys_include_expired_until_swept(ttl_cache, clock):
    ttl_cache.set("short", 1, ttl=1)
    ttl_cache.set("long", 2, ttl=100)
    clock.advance(5)
    assert sorted(ttl_cache.keys()) == ["long", "short"]

    assert ttl_cache.cleanup() == 1
    assert ttl_cache.keys() == ["long"]


def test_delete_prefix(ttl_cache):
    ttl_cache.set("docs:acme/widget:gemini:x", 1)
    ttl_cache.set("docs:acme/widget:mistral:x", 2)
    ttl_cache.set("docs:acme/widget-two:gemini:x", 3)

    assert ttl_cache.delete_prefix("docs:acme/widget:") == 2
    assert ttl_cache.keys() == ["docs:acme/widget-two:gemini:x"]


def test_falsy_values_are_cached(ttl_cache):
    ttl_cache.set("zero", 0)
    assert "zero" in ttl_cache
    assert ttl_cache.get("zero", "missing") == 0
