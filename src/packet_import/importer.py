"""
Bulk import orchestration.

BulkImporter turns one ImportRequest into as few multi-row INSERT
statements as the server's packet limit allows, runs them in order on one
adapter, and collects the auto-increment ids they generated.

When everything fits into a single statement (or the server has no limit,
or the caller forces it), exactly one statement is sent. Otherwise the rows
are packed into batches and all batches run inside one nested transaction
scope, so the import is all-or-nothing even inside a caller's transaction.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from packet_import.adapters.base import SQLAdapter
from packet_import.errors import InvalidSpecError, PackingInfeasibleError
from packet_import.identifiers import reconstruct
from packet_import.packer import (
    NO_MAX_PACKET,
    QUERY_OVERHEAD,
    Fragment,
    batch_exceeds_budget,
    fragment_size,
    pack,
    statement_size,
)
from packet_import.query_collector import QueryCollector
from packet_import.statement import (
    UpsertSpec,
    apply_ignore_modifier,
    build_statement,
    on_duplicate_key_update_sql,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportOptions:
    """
    Options for one import.

    Attributes:
        force_single_statement: Send one statement regardless of its size
        ignore_duplicates: Use INSERT IGNORE. Ids are not reconstructed in
            this mode, because skipped rows make the feedback ambiguous.
        upsert_spec: Columns to update on a duplicate key
        allow_oversized: Send a row that cannot fit the packet limit in a
            statement of its own instead of raising PackingInfeasibleError
    """

    force_single_statement: bool = False
    ignore_duplicates: bool = False
    upsert_spec: Optional[UpsertSpec] = None
    allow_oversized: bool = False


@dataclass
class ImportRequest:
    """
    A set of rows to insert.

    Attributes:
        statement_prefix: Text before the values, e.g. "INSERT INTO t (a,b) VALUES "
        statement_suffix: Text after the values
        fragments: Serialized row tuples in insertion order
        options: Import options
        table_name: Target table, required for an upsert clause
    """

    statement_prefix: str
    statement_suffix: str = ""
    fragments: Sequence[Fragment] = ()
    options: ImportOptions = field(default_factory=ImportOptions)
    table_name: Optional[str] = None


@dataclass
class ImportResult:
    """
    Outcome of a successful import.

    Attributes:
        failed_instances: Always empty; failures are raised instead
        num_inserts: Number of statements executed
        ids: Generated ids in insertion order
        results: Results returned by the adapter, one per statement that returned any
    """

    failed_instances: List[Any] = field(default_factory=list)
    num_inserts: int = 0
    ids: List[int] = field(default_factory=list)
    results: List[Any] = field(default_factory=list)

    @property
    def statements_executed(self) -> int:
        return self.num_inserts

    @property
    def generated_ids(self) -> List[int]:
        return self.ids


class BulkImporter:
    """
    Runs bulk imports through an adapter.

    Attributes:
        adapter: Execution collaborator for one database session
        query_collector: Optional collector receiving every executed statement
    """

    def __init__(self, adapter: SQLAdapter, query_collector: Optional[QueryCollector] = None):
        self.adapter = adapter
        self.query_collector = query_collector

    def _validate(self, request: ImportRequest) -> None:
        options = request.options
        if not request.fragments:
            raise InvalidSpecError("Import request has no rows")
        if options.upsert_spec is not None:
            if options.ignore_duplicates:
                raise InvalidSpecError("ignore_duplicates and upsert_spec cannot be combined")
            if not request.table_name:
                raise InvalidSpecError("An upsert requires the request's table_name")

    def statement_parts(self, request: ImportRequest) -> Tuple[str, str]:
        """
        Return the (prefix, suffix) pair every statement of the import uses.

        The IGNORE modifier and the ON DUPLICATE KEY UPDATE clause are applied
        here, before any size is computed, since both add to every statement.
        """
        self._validate(request)
        options = request.options
        prefix = request.statement_prefix
        suffix = request.statement_suffix

        if options.ignore_duplicates:
            prefix = apply_ignore_modifier(prefix)
        if options.upsert_spec is not None:
            suffix = suffix + on_duplicate_key_update_sql(request.table_name, options.upsert_spec)

        return prefix, suffix

    def plan(self, request: ImportRequest, max_bytes: Optional[int] = None) -> List[List[Fragment]]:
        """
        Work out how the rows of a request will be split into statements.

        Args:
            request: The import request
            max_bytes: Packet limit; queried from the adapter when None

        Returns:
            The batches, one per statement to send

        Raises:
            InvalidSpecError: If the request is malformed
            PackingInfeasibleError: If a row cannot fit the packet limit and
                allow_oversized is not set
        """
        prefix, suffix = self.statement_parts(request)
        return self._split(request, prefix, suffix, max_bytes)

    def _split(
        self, request: ImportRequest, prefix: str, suffix: str, max_bytes: Optional[int]
    ) -> List[List[Fragment]]:
        fragments = list(request.fragments)
        options = request.options

        if max_bytes is None:
            max_bytes = self.adapter.get_max_packet_size()

        reserved_bytes = QUERY_OVERHEAD + fragment_size(prefix) + fragment_size(suffix)
        total_bytes = statement_size(fragments, reserved_bytes)

        if max_bytes == NO_MAX_PACKET or total_bytes <= max_bytes or options.force_single_statement:
            return [fragments]

        batches = pack(fragments, reserved_bytes, max_bytes)

        if not options.allow_oversized:
            for batch in batches:
                if batch_exceeds_budget(batch, reserved_bytes, max_bytes):
                    raise PackingInfeasibleError(statement_size(batch, reserved_bytes), max_bytes)

        return batches

    def _insert(self, sql: str, row_count: int, request: ImportRequest, result: ImportResult) -> None:
        raw = self.adapter.execute(sql)
        result.num_inserts += 1

        # Feedback must be consumed before the next statement runs on the session.
        if not request.options.ignore_duplicates:
            first_id, affected_rows = self.adapter.fetch_insert_feedback()
            result.ids.extend(reconstruct(first_id, row_count, affected_rows))

        if raw is not None:
            result.results.append(raw)

        if self.query_collector is not None:
            self.query_collector.add_query(
                sql,
                row_count=row_count,
                size=QUERY_OVERHEAD + fragment_size(sql),
                table_name=request.table_name or "unknown",
            )

    def import_rows(self, request: ImportRequest) -> ImportResult:
        """
        Insert the rows of a request.

        Args:
            request: The import request

        Returns:
            ImportResult with the statement count and generated ids

        Raises:
            InvalidSpecError: If the request is malformed
            PackingInfeasibleError: If a row cannot fit the packet limit
            StatementError: If the adapter fails a statement; a batched import
                has been rolled back by then
            InconsistentFeedbackError: If the insert feedback is impossible
        """
        prefix, suffix = self.statement_parts(request)
        batches = self._split(request, prefix, suffix, None)
        result = ImportResult()

        if len(batches) == 1:
            sql = build_statement(prefix, suffix, batches[0])
            self._insert(sql, len(batches[0]), request, result)
        else:
            logger.info(f"Splitting {len(request.fragments)} rows into {len(batches)} statements")
            with self.adapter.nested_transaction():
                for batch in batches:
                    sql = build_statement(prefix, suffix, batch)
                    logger.debug(f"Inserting batch of {len(batch)} rows ({fragment_size(sql)} bytes)")
                    self._insert(sql, len(batch), request, result)

        logger.info(
            f"Imported {len(request.fragments)} rows in {result.num_inserts} statement(s), "
            f"{len(result.ids)} ids generated"
        )
        return result


def import_rows(
    adapter: SQLAdapter,
    request: ImportRequest,
    query_collector: Optional[QueryCollector] = None,
) -> ImportResult:
    """Insert the rows of a request through the given adapter."""
    return BulkImporter(adapter, query_collector=query_collector).import_rows(request)
