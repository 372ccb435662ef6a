from install_review.utils.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestTTLCache:
    def test_get_within_ttl(self):
        clock = FakeClock()
        cache = TTLCache(30, clock=clock)
        cache.set("kinds", ["FACADE_PHOTO"])
        clock.now += 29
        assert cache.get("kinds") == ["FACADE_PHOTO"]

    def test_entry_expires(self):
        clock = FakeClock()
        cache = TTLCache(30, clock=clock)
        cache.set("kinds", ["FACADE_PHOTO"])
        clock.now += 31
        assert cache.get("kinds") is None
        assert "kinds" not in cache._entries

    def test_missing_key(self):
        assert TTLCache(30).get("nope") is None

    def test_invalidate_and_clear(self):
        cache = TTLCache(30)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        cache.invalidate("missing")
        assert cache.get("a") is None
        assert cache.get("b") == 2
        cache.clear()
        assert cache.get("b") is None

    def test_interleaved_expired_reads(self):
        clock = FakeClock()
        cache = TTLCache(30, clock=clock)
        cache.set("kinds", ["FACADE_PHOTO"])
        clock.now += 31
        seen = []

        class InterleavingClock:
            # A second reader evicts the entry while the first one is comparing timestamps.
            def __call__(self):
                if not seen:
                    seen.append(cache.get("kinds"))
                return clock.now

        cache._clock = InterleavingClock()
        assert cache.get("kinds") is None
        assert seen == [None]
