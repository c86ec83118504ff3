"""Tests for primary-key indexes."""

import pytest

from relational_tables.index import HashIndex, IndexType, NoIndex, OrderedIndex, make_index
from relational_tables.key import CompositeKey


class TestMakeIndex:
    """Tests for the make_index factory."""

    def test_by_type(self):
        """Test creating each index from its IndexType."""
        assert isinstance(make_index(IndexType.NO_INDEX), NoIndex)
        assert isinstance(make_index(IndexType.HASH), HashIndex)
        assert isinstance(make_index(IndexType.ORDERED), OrderedIndex)

    def test_by_name(self):
        """Test creating an index from its CLI name."""
        assert isinstance(make_index("hash"), HashIndex)

    def test_unknown_name(self):
        """Test that an unknown index name raises ValueError."""
        with pytest.raises(ValueError):
            make_index("btree")


class TestNoIndex:
    """Tests for the NoIndex placeholder."""

    def test_stores_nothing(self):
        """Test that puts are discarded and lookups always miss."""
        index = NoIndex()
        index.put(CompositeKey(1), (1, "a"))
        assert not index.enabled
        assert index.get(CompositeKey(1)) is None
        assert len(index) == 0
        assert list(index.items()) == []


@pytest.mark.parametrize("index_cls", [HashIndex, OrderedIndex])
class TestKeyedIndexes:
    """Tests shared by the hash and ordered indexes."""

    def test_put_and_get(self, index_cls):
        """Test storing a row and finding it by key."""
        index = index_cls()
        index.put(CompositeKey("Rocky", 1985), ("Rocky", 1985))
        assert index.enabled
        assert index.get(CompositeKey("Rocky", 1985)) == ("Rocky", 1985)
        assert index.get(CompositeKey("Rocky", 1986)) is None
        assert CompositeKey("Rocky", 1985) in index

    def test_put_replaces(self, index_cls):
        """Test that a second put for a key replaces the row."""
        index = index_cls()
        index.put(CompositeKey(1), (1, "a"))
        index.put(CompositeKey(1), (1, "b"))
        assert len(index) == 1
        assert index.get(CompositeKey(1)) == (1, "b")

    def test_get_with_mistyped_key(self, index_cls):
        """Test that a key of different value types is simply absent."""
        index = index_cls()
        index.put(CompositeKey("Star_Wars", 1977), ("Star_Wars", 1977))
        assert index.get(CompositeKey(1977, "Star_Wars")) is None
        assert CompositeKey(1977, "Star_Wars") not in index


class TestOrderedIndex:
    """Tests specific to the ordered index."""

    def test_items_sorted_by_key(self):
        """Test that entries iterate in ascending key order."""
        index = OrderedIndex()
        for n in (5, 1, 3, 2, 4):
            index.put(CompositeKey(n), (n,))
        assert [key[0] for key, _ in index.items()] == [1, 2, 3, 4, 5]
