"""
Pytest configuration and fixtures for packet_import tests.
"""
import os
import pytest
from unittest.mock import MagicMock


# Define test markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "core: tests that don't require database connections"
    )
    config.addinivalue_line(
        "markers", "mysql: tests that require a MySQL server"
    )


def mysql_connection_params():
    """Connection parameters for the integration test server, from the environment."""
    return {
        "host": os.environ.get("MYSQL_HOST", "localhost"),
        "port": int(os.environ.get("MYSQL_PORT", "3306")),
        "user": os.environ.get("MYSQL_USER", "root"),
        "password": os.environ.get("MYSQL_PASSWORD", ""),
        "database": os.environ.get("MYSQL_DATABASE", "test"),
        "connect_timeout": 5,
        "autocommit": True,
    }


# MySQL connection check
def has_mysql_connection():
    """Check if a MySQL connection is available."""
    if not os.environ.get("MYSQL_HOST"):
        return False

    try:
        import pymysql
        conn = pymysql.connect(**mysql_connection_params())
        conn.close()
        return True
    except Exception:
        return False


# Skip database tests if connection not available
def pytest_collection_modifyitems(config, items):
    """Skip tests based on markers and available connections."""
    skip_mysql = pytest.mark.skip(reason="MySQL connection not available")
    mysql_items = [item for item in items if "mysql" in item.keywords]
    if mysql_items and not has_mysql_connection():
        for item in mysql_items:
            item.add_marker(skip_mysql)


# Generic database connection fixture
@pytest.fixture
def mock_db_connection():
    """Mock DB-API connection whose cursor answers the insert feedback query."""
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value = cursor

    def side_effect(sql, *args, **kwargs):
        if sql.strip().upper().startswith("SELECT LAST_INSERT_ID"):
            cursor.description = [("LAST_INSERT_ID()",), ("ROW_COUNT()",)]
            cursor.fetchall.return_value = [(1, 2)]
        else:
            cursor.description = None
        return None

    cursor.execute.side_effect = side_effect
    return conn
