"""
Collector for the statements an import executes.

A QueryCollector passed to BulkImporter records every INSERT statement it
sends, together with the number of rows and bytes it carried. This is
useful for auditing how an import was split and for dry-run previews.
"""
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)


class QueryCollector:
    """
    Collects and stores executed INSERT statements for analysis.

    Example:
        >>> from packet_import import BulkImporter, ImportRequest, QueryCollector
        >>>
        >>> collector = QueryCollector()
        >>> importer = BulkImporter(adapter, query_collector=collector)
        >>> importer.import_rows(request)
        >>>
        >>> print(f"Sent {len(collector.queries)} statements")
        >>> print(f"Rows: {collector.total_row_count}")
    """

    def __init__(self):
        """Initialize a new query collector."""
        self.queries: List[Dict[str, Any]] = []
        self.total_row_count = 0
        self.total_bytes = 0

    def add_query(self, query: str, row_count: int = 1, size: int = 0,
                  table_name: str = "unknown") -> None:
        """
        Add a statement to the collector.

        Args:
            query: SQL statement text
            row_count: Number of row tuples the statement carried
            size: Statement size in bytes, including protocol overhead
            table_name: Target table name
        """
        self.queries.append({
            "query": query,
            "row_count": row_count,
            "size": size,
            "table_name": table_name,
        })
        self.total_row_count += row_count
        self.total_bytes += size
        logger.debug(f"Collected statement #{len(self.queries)} on {table_name} "
                     f"({row_count} rows, {size} bytes)")

    def clear(self) -> None:
        """Clear all collected statements."""
        self.queries = []
        self.total_row_count = 0
        self.total_bytes = 0

    def get_queries_by_table(self, table_name: str) -> List[Dict[str, Any]]:
        """
        Get all statements for a specific table.

        Args:
            table_name: Table name to filter by

        Returns:
            List of statement dictionaries for the specified table
        """
        return [q for q in self.queries if q["table_name"] == table_name]

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the collected statements.

        Returns:
            Dictionary with statement, row and byte totals, per-table counts
            and the largest statement size
        """
        tables = set(q["table_name"] for q in self.queries)

        return {
            "total_queries": len(self.queries),
            "total_row_count": self.total_row_count,
            "total_bytes": self.total_bytes,
            "max_statement_size": max((q["size"] for q in self.queries), default=0),
            "tables": {
                table: len(self.get_queries_by_table(table))
                for table in tables
            },
        }
