"""
Exception types raised by packet_import.

Every error raised by this package derives from PacketImportError, so callers
can catch the whole family with a single except clause. Driver exceptions
are never raised directly from an adapter; they are wrapped in a
StatementError (or DuplicateKeyError) with the original exception chained.
"""
from typing import Optional


class PacketImportError(Exception):
    """Base class for all packet_import errors."""


class InvalidSpecError(PacketImportError, ValueError):
    """
    Raised for a malformed import request.

    Examples are an empty fragment list, an upsert specification of an
    unsupported shape, or an upsert without a target table name.
    """


class PackingInfeasibleError(PacketImportError):
    """
    Raised when a single row fragment cannot fit the packet budget alone.

    Attributes:
        size: Byte size of the smallest statement that would carry the row
        max_bytes: The server packet limit it was compared against
    """

    def __init__(self, size: int, max_bytes: int):
        self.size = size
        self.max_bytes = max_bytes
        super().__init__(
            f"Statement of {size} bytes cannot fit max_allowed_packet ({max_bytes} bytes)"
        )


class StatementError(PacketImportError, RuntimeError):
    """
    Raised by an adapter when the server rejects or fails a statement.

    Attributes:
        sql: The statement text that failed (may be truncated by callers for logging)
        errno: Driver error code, if the driver exposed one
    """

    def __init__(self, message: str, sql: Optional[str] = None, errno: Optional[int] = None):
        self.sql = sql
        self.errno = errno
        super().__init__(message)


class DuplicateKeyError(StatementError):
    """A StatementError caused by a unique or primary key violation."""


class InconsistentFeedbackError(PacketImportError):
    """
    Raised when LAST_INSERT_ID()/ROW_COUNT() feedback cannot describe the
    statement that was just executed.

    This usually means the server allocates auto-increment values in
    interleaved mode, or the feedback was read on a different session.
    """
