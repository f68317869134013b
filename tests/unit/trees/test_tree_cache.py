from __future__ import annotations

from brocade.core.trees import StaticTree, TreeCache, cache_key


class TestTreeCache:
    def test_factory_runs_once_per_key(self) -> None:
        cache = TreeCache()
        calls = []

        def factory():
            calls.append(1)
            return StaticTree({})

        first = cache.fetch(cache_key("styles"), factory)
        second = cache.fetch(cache_key("styles"), factory)

        assert first is second
        assert len(calls) == 1
        assert cache.stats.misses == 1
        assert cache.stats.hits == 1

    def test_distinct_options_are_distinct_entries(self) -> None:
        cache = TreeCache()

        a = cache.fetch(cache_key("addon", type="addon"), lambda: StaticTree({}))
        b = cache.fetch(cache_key("addon", type="src"), lambda: StaticTree({}))

        assert a is not b
        assert len(cache) == 2
        assert cache_key("addon", type="src") in cache


def test_cache_key_is_stable_for_option_order() -> None:
    assert cache_key("x", opts={"a": 1, "b": 2}) == cache_key("x", opts={"b": 2, "a": 1})
    assert cache_key("x", a=1, b=[1, 2]) == cache_key("x", b=[1, 2], a=1)


def test_cache_key_freezes_lists() -> None:
    key = cache_key("x", files=["a", "b"], opts={"nested": [1]})

    assert hash(key) == hash(cache_key("x", files=["a", "b"], opts={"nested": [1]}))
