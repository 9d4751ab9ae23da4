"""
Unit tests for QueryCollector.
"""
import unittest

import pytest

from packet_import.query_collector import QueryCollector


@pytest.mark.core
class TestQueryCollector(unittest.TestCase):
    """Test cases for the QueryCollector class."""

    def setUp(self):
        self.collector = QueryCollector()
        self.collector.add_query("INSERT INTO a VALUES (1),(2)", row_count=2, size=36, table_name="a")
        self.collector.add_query("INSERT INTO a VALUES (3)", row_count=1, size=32, table_name="a")
        self.collector.add_query("INSERT INTO b VALUES (1)", row_count=1, size=32, table_name="b")

    def test_totals(self):
        self.assertEqual(len(self.collector.queries), 3)
        self.assertEqual(self.collector.total_row_count, 4)
        self.assertEqual(self.collector.total_bytes, 100)

    def test_get_queries_by_table(self):
        self.assertEqual(len(self.collector.get_queries_by_table("a")), 2)
        self.assertEqual(self.collector.get_queries_by_table("c"), [])

    def test_get_stats(self):
        stats = self.collector.get_stats()
        self.assertEqual(stats["total_queries"], 3)
        self.assertEqual(stats["max_statement_size"], 36)
        self.assertEqual(stats["tables"], {"a": 2, "b": 1})

    def test_clear(self):
        self.collector.clear()
        self.assertEqual(self.collector.queries, [])
        self.assertEqual(self.collector.total_row_count, 0)
        self.assertEqual(self.collector.get_stats()["max_statement_size"], 0)


if __name__ == "__main__":
    unittest.main()
