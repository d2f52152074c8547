"""
Tests for ValidationCache.
"""
import threading

from caseledger.database.integrity import IntegrityIssue, Severity, ValidationCache
from caseledger.database.models import EntityType


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


ISSUE = IntegrityIssue(Severity.WARNING, EntityType.CASE, 1, "stale")


class TestValidationCache:
    def test_miss_then_hit(self):
        cache = ValidationCache(300, clock=FakeClock())
        assert cache.get(("case", 1)) is None
        cache.set(("case", 1), [ISSUE])
        assert cache.get(("case", 1)) == [ISSUE]
        assert (cache.hits, cache.misses) == (1, 1)

    def test_empty_result_is_cached(self):
        cache = ValidationCache(300, clock=FakeClock())
        cache.set(("case", 1), [])
        assert cache.get(("case", 1)) == []

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        cache = ValidationCache(300, clock=clock)
        cache.set(("case", 1), [ISSUE])

        clock.now += 299
        assert cache.get(("case", 1)) == [ISSUE]
        clock.now += 1
        assert cache.get(("case", 1)) is None
        assert len(cache) == 0

    def test_returned_list_is_a_copy(self):
        cache = ValidationCache(300, clock=FakeClock())
        cache.set(("case", 1), [ISSUE])
        cache.get(("case", 1)).clear()
        assert cache.get(("case", 1)) == [ISSUE]

    def test_zero_ttl_disables(self):
        cache = ValidationCache(0)
        cache.set(("case", 1), [ISSUE])
        assert not cache.enabled
        assert cache.get(("case", 1)) is None
        assert len(cache) == 0

    def test_clear(self):
        cache = ValidationCache(300, clock=FakeClock())
        cache.set(("case", 1), [ISSUE])
        cache.set(("staff", 2), [])
        cache.clear()
        assert len(cache) == 0

    def test_concurrent_access(self):
        cache = ValidationCache(300)

        def worker(offset):
            for i in range(200):
                cache.set(("case", offset * 1000 + i), [ISSUE])
                cache.get(("case", offset * 1000 + i))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 800
