"""Tests for saving and loading tables."""

import json

import pytest

from helpers import make_movie_table
from relational_tables import CompositeKey, IndexType, PersistenceFailure, Table, TableStore


class TestTableStore:
    """Tests for the TableStore class."""

    def test_path_for(self, tmp_path):
        """Test that a table maps to <name>.dbf in the store directory."""
        store = TableStore(tmp_path)
        assert store.path_for("movie") == tmp_path / "movie.dbf"

    def test_default_directory(self):
        """Test that the store defaults to store/."""
        assert TableStore().data_dir == TableStore.DEFAULT_DIR

    def test_save_creates_directory(self, tmp_path):
        """Test that saving creates missing directories."""
        store = TableStore(tmp_path / "nested" / "store")
        path = store.save("t", {"name": "t"})
        assert path.exists()
        assert store.exists("t")

    def test_list_tables(self, tmp_path):
        """Test that stored table names are listed in sorted order."""
        store = TableStore(tmp_path)
        assert store.list_tables() == []
        store.save("b", {})
        store.save("a", {})
        assert store.list_tables() == ["a", "b"]

    def test_list_tables_missing_directory(self, tmp_path):
        """Test listing a store whose directory does not exist."""
        assert TableStore(tmp_path / "absent").list_tables() == []

    def test_load_missing(self, tmp_path):
        """Test that loading an absent table raises PersistenceFailure."""
        with pytest.raises(PersistenceFailure, match="no stored table 'ghost'"):
            TableStore(tmp_path).load("ghost")

    def test_load_corrupt(self, tmp_path):
        """Test that undecodable content raises PersistenceFailure."""
        (tmp_path / "broken.dbf").write_text("{not json")
        with pytest.raises(PersistenceFailure):
            TableStore(tmp_path).load("broken")

    def test_load_non_object(self, tmp_path):
        """Test that a file not holding a JSON object is rejected."""
        (tmp_path / "list.dbf").write_text("[1, 2, 3]")
        with pytest.raises(PersistenceFailure):
            TableStore(tmp_path).load("list")

    def test_save_unserializable(self, tmp_path):
        """Test that unserializable state raises PersistenceFailure."""
        with pytest.raises(PersistenceFailure):
            TableStore(tmp_path).save("bad", {"value": object()})


class TestTablePersistence:
    """Round trips through Table.save and Table.load."""

    def test_round_trip(self, tmp_path, movie):
        """Test that save then load keeps the schema and rows."""
        movie.save(tmp_path)
        loaded = Table.load("movie", tmp_path)

        assert loaded.name == movie.name
        assert loaded.schema == movie.schema
        assert loaded.rows == movie.rows

    def test_round_trip_all_domains(self, tmp_path):
        """Test a round trip through every domain."""
        table = Table(
            "mixed",
            "b s i l f d c str",
            "Byte Short Integer Long Float Double Character String",
            "i",
        )
        table.insert((-3, 300, 70000, 2**40, 1.5, 2.0, "Z", "text with \"quotes\""))
        table.insert((3, -300, -70000, -(2**40), 0.1, 3, "é", ""))
        table.save(tmp_path)

        loaded = Table.load("mixed", tmp_path)
        assert loaded.rows == table.rows
        assert [type(v) for v in loaded.rows[1]] == [type(v) for v in table.rows[1]]

    def test_round_trip_keeps_index(self, tmp_path):
        """Test that a loaded table rebuilds its index."""
        table = make_movie_table(index_type=IndexType.ORDERED)
        table.save(tmp_path)

        loaded = Table.load("movie", tmp_path)
        assert loaded.index_type is IndexType.ORDERED
        assert len(loaded.index) == 4
        assert loaded.select(CompositeKey("Rocky", 1985)).rows == table.select(CompositeKey("Rocky", 1985)).rows

    def test_save_writes_json(self, tmp_path, movie):
        """Test the layout of the saved JSON file."""
        path = movie.save(TableStore(tmp_path))
        data = json.loads(path.read_text())
        assert data["attributes"][0] == "title"
        assert data["domains"][1] == "Integer"
        assert data["key"] == ["title", "year"]
        assert len(data["tuples"]) == 4

    def test_load_missing_table(self, tmp_path):
        """Test loading a table that was never saved."""
        with pytest.raises(PersistenceFailure):
            Table.load("nothing", tmp_path)

    def test_load_incomplete_state(self, tmp_path):
        """Test that missing fields are reported as corrupt data."""
        (tmp_path / "partial.dbf").write_text(json.dumps({"name": "partial"}))
        with pytest.raises(PersistenceFailure, match="Corrupt table data"):
            Table.load("partial", tmp_path)

    def test_load_ill_typed_rows(self, tmp_path, movie):
        """Test that stored rows are type-checked on load."""
        data = movie.to_dict()
        data["tuples"].append(["Alien", "not a year", 117, "sciFi", "Fox", 1])
        (tmp_path / "movie.dbf").write_text(json.dumps(data))
        with pytest.raises(PersistenceFailure):
            Table.load("movie", tmp_path)

    def test_load_unknown_domain(self, tmp_path, movie):
        """Test that an unknown stored domain is reported."""
        data = movie.to_dict()
        data["domains"][0] = "Varchar"
        (tmp_path / "movie.dbf").write_text(json.dumps(data))
        with pytest.raises(PersistenceFailure):
            Table.load("movie", tmp_path)

    def test_derived_table_round_trip(self, tmp_path, movie, cinema):
        """Test saving and loading a derived table."""
        union = movie.union(cinema)
        union.save(tmp_path)
        assert Table.load(union.name, tmp_path).rows == union.rows
