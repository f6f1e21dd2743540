"""
Test suite for TTLListCache.

System role: Verification of per-owner listing cache semantics
"""

from imgproc.boundary.cache.list_cache import TTLListCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestTTLListCache:
    """Test suite for TTLListCache."""

    def test_get_should_return_none_when_never_populated(self) -> None:
        """Test empty cache."""
        # Act & Assert
        assert TTLListCache().get("owner") is None

    def test_get_within_ttl_should_return_data(self) -> None:
        """Test a fresh entry is served."""
        # Arrange
        clock = FakeClock()
        cache = TTLListCache(ttl_seconds=30, clock=clock)
        cache.put("owner", {"items": []})
        clock.now += 29.9

        # Act & Assert
        assert cache.get("owner") == {"items": []}

    def test_get_after_ttl_should_evict(self) -> None:
        """Test expired entries are dropped on access."""
        # Arrange
        clock = FakeClock()
        cache = TTLListCache(ttl_seconds=30, clock=clock)
        cache.put("owner", {"items": []})
        clock.now += 30

        # Act
        result = cache.get("owner")

        # Assert
        assert result is None
        assert len(cache) == 0

    def test_put_should_overwrite_and_restart_ttl(self) -> None:
        """Test put replaces prior data with a new expiry."""
        # Arrange
        clock = FakeClock()
        cache = TTLListCache(ttl_seconds=30, clock=clock)
        cache.put("owner", "old")
        clock.now += 20
        cache.put("owner", "new")
        clock.now += 20

        # Act & Assert
        assert cache.get("owner") == "new"

    def test_invalidate_should_only_touch_that_owner(self) -> None:
        """Test no cross-owner invalidation."""
        # Arrange
        cache = TTLListCache()
        cache.put("alice", "a")
        cache.put("bob", "b")

        # Act
        cache.invalidate("alice")
        cache.invalidate("nobody")

        # Assert
        assert cache.get("alice") is None
        assert cache.get("bob") == "b"

    def test_should_grow_unbounded_by_default(self) -> None:
        """Test one entry per owner is kept with no bound configured."""
        # Arrange
        cache = TTLListCache()

        # Act
        for i in range(1000):
            cache.put(f"owner-{i}", i)

        # Assert
        assert len(cache) == 1000

    def test_max_entries_should_evict_oldest(self) -> None:
        """Test the optional bound evicts oldest-inserted first."""
        # Arrange
        cache = TTLListCache(max_entries=2)

        # Act
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)

        # Assert
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3
