from rainbow.lru import LRUCache


def test_add_and_get():
    cache = LRUCache(2)
    cache.add("a", 1)
    assert cache.get("a") == 1
    assert len(cache) == 1


def test_missing_key_returns_none():
    cache = LRUCache(2)
    assert cache.get("nope") is None


def test_evicts_least_recently_added():
    cache = LRUCache(2)
    cache.add("a", 1)
    cache.add("b", 2)
    cache.add("c", 3)
    assert "a" not in cache
    assert "b" in cache
    assert "c" in cache
    assert len(cache) == 2


def test_get_refreshes_recency():
    cache = LRUCache(2)
    cache.add("a", 1)
    cache.add("b", 2)
    assert cache.get("a") == 1
    cache.add("c", 3)
    assert "a" in cache
    assert "b" not in cache


def test_overwrite_updates_value_without_growing():
    cache = LRUCache(2)
    cache.add("a", 1)
    cache.add("b", 2)
    cache.add("a", 10)
    assert len(cache) == 2
    assert cache.get("a") == 10
    cache.add("c", 3)
    assert "b" not in cache
    assert "a" in cache


def test_zero_capacity_keeps_nothing():
    cache = LRUCache(0)
    cache.add("a", 1)
    assert len(cache) == 0
    assert cache.get("a") is None