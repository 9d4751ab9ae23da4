"""
Configuration settings for packet_import.

This module contains default settings used by the command-line interface
and the adapters. Every connection default can be overridden through an
environment variable.
"""
import os
from typing import Any, Dict

# Default MySQL connection parameters
DEFAULT_MYSQL_HOST = os.getenv("PACKET_IMPORT_MYSQL_HOST", "localhost")
DEFAULT_MYSQL_PORT = int(os.getenv("PACKET_IMPORT_MYSQL_PORT", "3306"))
DEFAULT_MYSQL_USER = os.getenv("PACKET_IMPORT_MYSQL_USER", os.getenv("USER", "root"))
DEFAULT_MYSQL_PASSWORD = os.getenv("PACKET_IMPORT_MYSQL_PASSWORD")
DEFAULT_MYSQL_DATABASE = os.getenv("PACKET_IMPORT_MYSQL_DATABASE")
DEFAULT_CHARSET = "utf8mb4"

# Default CSV settings
DEFAULT_CSV_DELIMITER = ","

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def mysql_connection_params(**overrides: Any) -> Dict[str, Any]:
    """
    Build keyword arguments for pymysql.connect().

    Args:
        **overrides: Values that replace the defaults; None values fall back
            to the default

    Returns:
        Connection parameters with unset entries removed
    """
    params = {
        "host": DEFAULT_MYSQL_HOST,
        "port": DEFAULT_MYSQL_PORT,
        "user": DEFAULT_MYSQL_USER,
        "password": DEFAULT_MYSQL_PASSWORD,
        "database": DEFAULT_MYSQL_DATABASE,
        "charset": DEFAULT_CHARSET,
        "autocommit": True,
    }
    params.update({key: value for key, value in overrides.items() if value is not None})
    return {key: value for key, value in params.items() if value is not None}
