"""
Base adapter interface for packet_import.

An adapter is the execution collaborator of a bulk import: it runs
statements on one database session, reads the post-statement feedback
(LAST_INSERT_ID() and ROW_COUNT()), reports the packet limit, and provides
nestable transaction scopes.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class SQLAdapter(ABC):
    """
    Abstract base class for packet_import adapters.

    Transactions nest: the outermost begin_transaction() opens a real
    transaction (unless the session is already inside one), every inner call
    opens a SAVEPOINT. commit_transaction() and rollback_transaction() always
    act on the innermost scope, so an import can be rolled back on its own
    even when it runs inside a larger transaction owned by the caller.

    One adapter wraps one session. Imports on the same adapter must not run
    concurrently.
    """

    savepoint_prefix = "packet_import"

    def __init__(self):
        # One entry per open scope: None for a real transaction, else the savepoint name.
        self._scopes: List[Optional[str]] = []

    @abstractmethod
    def execute(self, sql: str) -> Any:
        """
        Execute a SQL statement.

        Args:
            sql: SQL statement to execute

        Returns:
            Result rows for statements that return them, None otherwise

        Raises:
            StatementError: If the server rejects the statement
        """
        pass

    @abstractmethod
    def fetch_last_insert_id(self) -> int:
        """Return LAST_INSERT_ID() for the statement just executed."""
        pass

    @abstractmethod
    def fetch_affected_row_count(self) -> int:
        """Return ROW_COUNT() for the statement just executed."""
        pass

    @abstractmethod
    def get_max_packet_size(self) -> int:
        """
        Get the maximum statement size in bytes.

        Returns:
            Packet limit in bytes, or 0 if the server imposes none
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection."""
        pass

    def fetch_insert_feedback(self) -> Tuple[int, int]:
        """Return (LAST_INSERT_ID(), ROW_COUNT()) for the statement just executed."""
        return self.fetch_last_insert_id(), self.fetch_affected_row_count()

    def in_transaction(self) -> bool:
        """
        Return True if the session is inside a transaction.

        Adapters that can see transactions opened outside of them should
        override this; the default only knows about its own scopes.
        """
        return bool(self._scopes)

    @property
    def transaction_depth(self) -> int:
        """Number of scopes opened through this adapter that are still open."""
        return len(self._scopes)

    def _begin(self) -> None:
        self.execute("BEGIN")

    def _commit(self) -> None:
        self.execute("COMMIT")

    def _rollback(self) -> None:
        self.execute("ROLLBACK")

    def begin_transaction(self) -> None:
        """Open a transaction, or a savepoint if one is already open."""
        if self.in_transaction():
            name = f"{self.savepoint_prefix}_{len(self._scopes) + 1}"
            self.execute(f"SAVEPOINT {name}")
            self._scopes.append(name)
            logger.debug(f"Opened savepoint {name}")
        else:
            self._begin()
            self._scopes.append(None)
            logger.debug("Began transaction")

    def commit_transaction(self) -> None:
        """Commit the innermost scope."""
        if not self._scopes:
            return
        name = self._scopes.pop()
        if name is None:
            self._commit()
            logger.debug("Committed transaction")
        else:
            self.execute(f"RELEASE SAVEPOINT {name}")
            logger.debug(f"Released savepoint {name}")

    def rollback_transaction(self) -> None:
        """Roll back the innermost scope."""
        if not self._scopes:
            return
        name = self._scopes.pop()
        if name is None:
            self._rollback()
            logger.info("Rolled back transaction")
        else:
            self.execute(f"ROLLBACK TO SAVEPOINT {name}")
            self.execute(f"RELEASE SAVEPOINT {name}")
            logger.info(f"Rolled back to savepoint {name}")

    @contextmanager
    def nested_transaction(self) -> Iterator["SQLAdapter"]:
        """
        Run a block inside its own transaction scope.

        The scope is committed when the block finishes and rolled back when it
        raises; the exception is re-raised unchanged.
        """
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            try:
                self.rollback_transaction()
            except Exception as e:
                logger.error(f"Rollback failed: {str(e)}")
            raise
        self.commit_transaction()
