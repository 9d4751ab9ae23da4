"""
Unit tests for configuration defaults.
"""
import unittest
from unittest import mock

import pytest

from packet_import import config


@pytest.mark.core
class TestConfig(unittest.TestCase):
    """Test cases for mysql_connection_params()."""

    def test_overrides_replace_defaults(self):
        params = config.mysql_connection_params(host="db.internal", port=3307)
        self.assertEqual(params["host"], "db.internal")
        self.assertEqual(params["port"], 3307)
        self.assertEqual(params["charset"], "utf8mb4")
        self.assertTrue(params["autocommit"])

    def test_none_values_are_dropped(self):
        with mock.patch.object(config, "DEFAULT_MYSQL_PASSWORD", None), \
                mock.patch.object(config, "DEFAULT_MYSQL_DATABASE", None):
            params = config.mysql_connection_params(password=None)
        self.assertNotIn("password", params)
        self.assertNotIn("database", params)

    def test_none_override_keeps_default(self):
        params = config.mysql_connection_params(host=None)
        self.assertEqual(params["host"], config.DEFAULT_MYSQL_HOST)


if __name__ == "__main__":
    unittest.main()
