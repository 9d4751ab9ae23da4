"""
Reconstruction of generated primary keys from statement feedback.

After a multi-row INSERT, MySQL only reports two numbers for the session:
LAST_INSERT_ID(), the first auto-increment value the statement generated,
and ROW_COUNT(), the number of affected rows. With ON DUPLICATE KEY UPDATE a
freshly inserted row counts 1 and an updated row counts 2, so for a
statement carrying N rows:

    inserted = 2 * N - affected

The inserted rows received the ids first_id .. first_id + inserted - 1.

This only holds when the statement's auto-increment values form one
contiguous block, i.e. innodb_autoinc_lock_mode is 0 or 1. With mode 2
("interleaved") concurrent sessions can interleave allocations and the
reconstructed ids are wrong. Rows that contribute 0 to ROW_COUNT() (ignored
duplicates, or upserts that changed nothing) also break the arithmetic.
The feedback must be read on the same session, right after the statement.
"""
from typing import List

from packet_import.errors import InconsistentFeedbackError


def inserted_count(requested_rows: int, affected_rows: int) -> int:
    """Return the number of rows a statement actually inserted."""
    return 2 * requested_rows - affected_rows


def reconstruct(first_id: int, requested_rows: int, affected_rows: int) -> List[int]:
    """
    Derive the ids generated by one INSERT statement.

    Args:
        first_id: LAST_INSERT_ID() read right after the statement
        requested_rows: Number of row tuples the statement carried
        affected_rows: ROW_COUNT() read right after the statement

    Returns:
        The generated ids in insertion order

    Raises:
        InconsistentFeedbackError: If the feedback cannot describe the statement
    """
    count = inserted_count(requested_rows, affected_rows)

    if count < 0:
        raise InconsistentFeedbackError(
            f"ROW_COUNT() of {affected_rows} is more than twice the {requested_rows} rows sent"
        )
    if count > requested_rows:
        raise InconsistentFeedbackError(
            f"ROW_COUNT() of {affected_rows} for {requested_rows} rows implies {count} "
            f"inserts; some rows were skipped and ids cannot be attributed"
        )
    if count > 0 and (isinstance(first_id, bool) or not isinstance(first_id, int) or first_id <= 0):
        raise InconsistentFeedbackError(
            f"LAST_INSERT_ID() returned {first_id!r} after inserting {count} rows"
        )

    return list(range(first_id, first_id + count))
