"""
Unit tests for statement text assembly.
"""
import unittest

import pytest

from packet_import.errors import InvalidSpecError
from packet_import.statement import (
    ColumnList,
    ColumnMapping,
    RawClause,
    add_upsert_column,
    apply_ignore_modifier,
    build_insert_prefix,
    build_statement,
    build_upsert_clause,
    on_duplicate_key_update_sql,
)


@pytest.mark.core
class TestBuildStatement(unittest.TestCase):
    """Test cases for build_statement()."""

    def test_joins_fragments(self):
        sql = build_statement("INSERT INTO t VALUES ", "", ["(1,'a')", "(2,'b')"])
        self.assertEqual(sql, "INSERT INTO t VALUES (1,'a'),(2,'b')")

    def test_suffix_is_appended(self):
        sql = build_statement("INSERT INTO t VALUES ", " ON DUPLICATE KEY UPDATE t.a=VALUES(a)", ["(1)"])
        self.assertEqual(sql, "INSERT INTO t VALUES (1) ON DUPLICATE KEY UPDATE t.a=VALUES(a)")

    def test_bytes_fragments_are_decoded(self):
        sql = build_statement("INSERT INTO t VALUES ", "", [b"('\xc3\xa9')"])
        self.assertEqual(sql, "INSERT INTO t VALUES ('é')")

    def test_binary_bytes_fragments_keep_their_bytes(self):
        sql = build_statement("INSERT INTO t VALUES ", "", [b"(1,_binary'\xff')"])
        self.assertEqual(sql.encode("utf-8", "surrogateescape"), b"INSERT INTO t VALUES (1,_binary'\xff')")

    def test_repeatable(self):
        batch = ["(1)", "(2)"]
        self.assertEqual(build_statement("P ", " S", batch), build_statement("P ", " S", batch))


@pytest.mark.core
class TestUpsertClause(unittest.TestCase):
    """Test cases for ON DUPLICATE KEY UPDATE generation."""

    def test_column_list(self):
        clause = build_upsert_clause("users", ColumnList(["name", "age"]))
        self.assertEqual(clause, "users.name=VALUES(name),users.age=VALUES(age)")

    def test_column_list_keeps_caller_order(self):
        clause = build_upsert_clause("users", ColumnList(["age", "name"]))
        self.assertEqual(clause, "users.age=VALUES(age),users.name=VALUES(name)")

    def test_column_mapping(self):
        clause = build_upsert_clause("users", ColumnMapping({"name": "nickname", "age": "age"}))
        self.assertEqual(clause, "users.name=VALUES(nickname),users.age=VALUES(age)")

    def test_raw_clause(self):
        clause = build_upsert_clause("users", RawClause("hits=hits+1"))
        self.assertEqual(clause, "hits=hits+1")

    def test_unsupported_shape(self):
        with self.assertRaises(InvalidSpecError):
            build_upsert_clause("users", ["name"])
        with self.assertRaises(InvalidSpecError):
            build_upsert_clause("users", None)

    def test_empty_column_list(self):
        with self.assertRaises(InvalidSpecError):
            build_upsert_clause("users", ColumnList([]))
        with self.assertRaises(InvalidSpecError):
            build_upsert_clause("users", ColumnMapping({}))

    def test_on_duplicate_key_update_sql(self):
        sql = on_duplicate_key_update_sql("users", ColumnList(["name"]))
        self.assertEqual(sql, " ON DUPLICATE KEY UPDATE users.name=VALUES(name)")

    def test_specs_are_values(self):
        self.assertEqual(ColumnList(["a", "b"]), ColumnList(("a", "b")))
        self.assertEqual(ColumnMapping({"a": "b"}), ColumnMapping([("a", "b")]))


@pytest.mark.core
class TestAddUpsertColumn(unittest.TestCase):
    """Test cases for add_upsert_column()."""

    def test_none_becomes_column_list(self):
        self.assertEqual(add_upsert_column(None, "updated_at"), ColumnList(["updated_at"]))

    def test_column_list_appends_once(self):
        spec = add_upsert_column(ColumnList(["name"]), "updated_at")
        self.assertEqual(spec, ColumnList(["name", "updated_at"]))
        self.assertIs(add_upsert_column(spec, "name"), spec)

    def test_column_mapping_maps_to_itself(self):
        spec = add_upsert_column(ColumnMapping({"name": "nick"}), "updated_at")
        self.assertEqual(spec.mapping, (("name", "nick"), ("updated_at", "updated_at")))

    def test_raw_clause_unchanged(self):
        raw = RawClause("a=1")
        self.assertIs(add_upsert_column(raw, "updated_at"), raw)


@pytest.mark.core
class TestPrefixHelpers(unittest.TestCase):
    """Test cases for the IGNORE modifier and INSERT prefix helpers."""

    def test_ignore_after_insert(self):
        self.assertEqual(apply_ignore_modifier("INSERT INTO t VALUES "), "INSERT IGNORE INTO t VALUES ")

    def test_ignore_is_case_insensitive(self):
        self.assertEqual(apply_ignore_modifier("insert into t VALUES "), "insert IGNORE into t VALUES ")

    def test_ignore_idempotent(self):
        prefix = "INSERT IGNORE INTO t VALUES "
        self.assertEqual(apply_ignore_modifier(prefix), prefix)

    def test_ignore_on_other_prefix(self):
        self.assertEqual(apply_ignore_modifier("INTO t VALUES "), "IGNORE INTO t VALUES ")

    def test_build_insert_prefix(self):
        self.assertEqual(build_insert_prefix("users", ["id", "name"]), "INSERT INTO users (id,name) VALUES ")
        self.assertEqual(build_insert_prefix("users"), "INSERT INTO users VALUES ")


if __name__ == "__main__":
    unittest.main()
