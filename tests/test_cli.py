"""
Tests for the packet-import command-line interface.
"""
import os
import tempfile
import unittest
from unittest import mock

import pytest
from click.testing import CliRunner
from pymysql.converters import escape_item

from packet_import.cli import cli, split_columns
from packet_import.errors import DuplicateKeyError


def _mock_adapter(feedback=(10, 2)):
    adapter = mock.MagicMock()
    adapter.literal_row.side_effect = lambda row: escape_item(tuple(row), "utf8mb4")
    adapter.get_max_packet_size.return_value = 0
    adapter.execute.return_value = None
    adapter.fetch_insert_feedback.return_value = feedback
    return adapter


@pytest.mark.core
class TestCLI(unittest.TestCase):
    """Test cases for the click commands."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.csv_file = os.path.join(self.tmpdir.name, "users.csv")
        with open(self.csv_file, "w") as f:
            f.write("id,name\n1,Alice\n2,Bob\n")
        self.runner = CliRunner()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_split_columns(self):
        self.assertEqual(split_columns(" a, b ,,c"), ["a", "b", "c"])
        self.assertEqual(split_columns(None), [])

    def test_plan_single_statement(self):
        result = self.runner.invoke(cli, ["plan", self.csv_file, "--table", "users", "--max-bytes", "0"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("2 rows in 1 statement(s)", result.output)

    def test_plan_splits_rows(self):
        # 8 + 35 byte prefix + 13 byte first row = 56; the second row needs 12 more
        result = self.runner.invoke(cli, ["plan", self.csv_file, "--table", "users", "--max-bytes", "60"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("2 rows in 2 statement(s)", result.output)

    def test_import_csv(self):
        adapter = _mock_adapter()
        with mock.patch("packet_import.cli.MySQLAdapter", return_value=adapter):
            result = self.runner.invoke(cli, ["import-csv", self.csv_file, "--table", "users"])

        self.assertEqual(result.exit_code, 0, result.output)
        adapter.execute.assert_called_once_with(
            "INSERT INTO users (id,name) VALUES ('1','Alice'),('2','Bob')")
        self.assertIn("Imported 2 rows in 1 statement(s)", result.output)
        self.assertIn("10..11", result.output)
        adapter.close.assert_called_once()

    def test_import_csv_upsert(self):
        adapter = _mock_adapter(feedback=(10, 4))
        with mock.patch("packet_import.cli.MySQLAdapter", return_value=adapter):
            result = self.runner.invoke(cli, ["import-csv", self.csv_file, "--table", "users",
                                              "--update-columns", "name"])

        self.assertEqual(result.exit_code, 0, result.output)
        sql = adapter.execute.call_args[0][0]
        self.assertTrue(sql.endswith(" ON DUPLICATE KEY UPDATE users.name=VALUES(name)"))

    def test_import_csv_dry_run(self):
        adapter = _mock_adapter()
        with mock.patch("packet_import.cli.MySQLAdapter", return_value=adapter):
            result = self.runner.invoke(cli, ["import-csv", self.csv_file, "--table", "users", "--dry-run"])

        self.assertEqual(result.exit_code, 0, result.output)
        adapter.execute.assert_not_called()
        adapter.close.assert_called_once()

    def test_import_csv_failure(self):
        adapter = _mock_adapter()
        adapter.execute.side_effect = DuplicateKeyError("Duplicate key", errno=1062)
        with mock.patch("packet_import.cli.MySQLAdapter", return_value=adapter):
            result = self.runner.invoke(cli, ["import-csv", self.csv_file, "--table", "users"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error during import", result.output)
        adapter.close.assert_called_once()

    def test_ignore_and_update_conflict(self):
        result = self.runner.invoke(cli, ["import-csv", self.csv_file, "--table", "users",
                                          "--ignore-duplicates", "--update-columns", "name"])
        self.assertEqual(result.exit_code, 1)


if __name__ == "__main__":
    unittest.main()
