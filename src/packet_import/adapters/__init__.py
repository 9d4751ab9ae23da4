"""
packet_import adapters for specific database drivers.

An adapter wraps one database session and provides statement execution,
insert feedback, the packet limit and nested transaction scopes.
"""

from packet_import.adapters.base import SQLAdapter
from packet_import.adapters.generic import GenericAdapter
from packet_import.adapters.mysql import MySQLAdapter

__all__ = ["SQLAdapter", "GenericAdapter", "MySQLAdapter"]
