"""
packet_import - multi-row INSERT imports bounded by the server packet size

This package splits a list of serialized rows into as few INSERT statements
as MySQL's max_allowed_packet allows, runs them as one all-or-nothing
operation, and reconstructs the auto-increment ids the rows received.
"""

from packet_import.errors import (
    DuplicateKeyError,
    InconsistentFeedbackError,
    InvalidSpecError,
    PacketImportError,
    PackingInfeasibleError,
    StatementError,
)
from packet_import.identifiers import reconstruct
from packet_import.importer import BulkImporter, ImportOptions, ImportRequest, ImportResult, import_rows
from packet_import.packer import QUERY_OVERHEAD, pack
from packet_import.query_collector import QueryCollector
from packet_import.statement import (
    ColumnList,
    ColumnMapping,
    RawClause,
    build_statement,
    build_upsert_clause,
)

__version__ = "0.1.0"
__all__ = [
    "BulkImporter",
    "ImportOptions",
    "ImportRequest",
    "ImportResult",
    "import_rows",
    "QueryCollector",
    "pack",
    "QUERY_OVERHEAD",
    "reconstruct",
    "build_statement",
    "build_upsert_clause",
    "ColumnList",
    "ColumnMapping",
    "RawClause",
    "PacketImportError",
    "InvalidSpecError",
    "PackingInfeasibleError",
    "StatementError",
    "DuplicateKeyError",
    "InconsistentFeedbackError",
]
