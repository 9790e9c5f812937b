"""Caller-owned match memo."""

import threading

import pytest

from smartpath import MatchCache, as_route_map, match

ROUTES = as_route_map({"home": "", "item": ":id"})


def test_cache_returns_same_results_as_match():
    cache = MatchCache(ROUTES)
    for path in ("/", "/7", "/7/extra"):
        assert cache.match(path) == match(path, ROUTES)
    assert (cache.hits, cache.misses) == (0, 3)
    assert cache.match("/7").params == {"id": "7"}
    assert cache.hits == 1


def test_cached_params_are_copies():
    cache = MatchCache(ROUTES)
    first = cache.match("/7")
    first.params["id"] = "changed"
    assert cache.match("/7").params == {"id": "7"}


def test_misses_are_cached_too():
    cache = MatchCache(ROUTES)
    assert cache.match("/a/b") is None
    assert cache.match("/a/b") is None
    assert cache.hits == 1


def test_evicts_least_recently_used():
    cache = MatchCache(ROUTES, maxsize=2)
    cache.match("/1")
    cache.match("/2")
    cache.match("/1")
    cache.match("/3")
    assert len(cache) == 2
    misses = cache.misses
    cache.match("/1")
    assert cache.misses == misses
    cache.match("/2")
    assert cache.misses == misses + 1


def test_clear_resets():
    cache = MatchCache(ROUTES)
    cache.match("/1")
    cache.clear()
    assert len(cache) == 0
    assert (cache.hits, cache.misses) == (0, 0)


def test_invalid_arguments():
    with pytest.raises(TypeError):
        MatchCache({"home": ""})
    with pytest.raises(ValueError):
        MatchCache(ROUTES, maxsize=0)


def test_concurrent_use():
    cache = MatchCache(ROUTES, maxsize=8)
    errors = []

    def worker(offset):
        for index in range(200):
            path = f"/{(index + offset) % 16}"
            if cache.match(path).params != {"id": path[1:]}:
                errors.append(path)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert errors == []
    assert len(cache) <= 8
