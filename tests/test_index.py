"""Tests for the in-memory index."""

from config_registry.registry.index import IndexEntry, InMemoryIndex


def _entry(value: str) -> IndexEntry[str]:
    return IndexEntry(value=value, created_at="2026-01-01T00:00:00+00:00", updated_at="2026-01-01T00:00:00+00:00")


class TestInMemoryIndex:
    """Tests for InMemoryIndex."""

    def test_put_and_get(self) -> None:
        index: InMemoryIndex[str] = InMemoryIndex()

        assert index.put("a", _entry("one")) is None
        assert index.get("a") == _entry("one")
        assert "a" in index
        assert len(index) == 1

    def test_put_returns_previous(self) -> None:
        index: InMemoryIndex[str] = InMemoryIndex()
        index.put("a", _entry("one"))

        assert index.put("a", _entry("two")) == _entry("one")
        assert index.get("a").value == "two"

    def test_remove(self) -> None:
        index: InMemoryIndex[str] = InMemoryIndex()
        index.put("a", _entry("one"))

        assert index.remove("a") == _entry("one")
        assert index.remove("a") is None
        assert index.get("a") is None

    def test_snapshot_is_detached(self) -> None:
        """Later writes do not show up in an earlier snapshot."""
        index: InMemoryIndex[str] = InMemoryIndex()
        index.put("a", _entry("one"))
        snapshot = index.snapshot()

        index.put("b", _entry("two"))

        assert [e.value for e in snapshot] == ["one"]
        assert [e.value for e in index.snapshot()] == ["one", "two"]

    def test_replace_all(self) -> None:
        index: InMemoryIndex[str] = InMemoryIndex()
        index.put("stale", _entry("old"))

        index.replace_all([("x", _entry("1")), ("y", _entry("2"))])

        assert "stale" not in index
        assert [e.value for e in index.snapshot()] == ["1", "2"]
