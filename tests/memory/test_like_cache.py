from like_labeler.memory.cache import LikeCache, cache_key


def test_cache_key_joins_did_and_rkey():
    assert cache_key("did:plc:a", "r1") == "did:plc:a:r1"
    assert cache_key("", "") == ":"


def test_set_semantics():
    cache = LikeCache()

    cache.add("did:plc:a", "r1")
    cache.add("did:plc:a", "r1")
    assert len(cache) == 1
    assert cache.has("did:plc:a", "r1")
    assert cache_key("did:plc:a", "r1") in cache

    cache.discard("did:plc:a", "r1")
    cache.discard("did:plc:a", "r1")
    assert len(cache) == 0
    assert not cache.has("did:plc:a", "r1")


def test_reset_clears_everything():
    cache = LikeCache([cache_key("a", "1"), cache_key("b", "2")])
    assert len(cache) == 2

    cache.reset()
    assert len(cache) == 0
