"""
Byte-budget packing of row fragments into INSERT statements.

This module splits an ordered list of serialized row tuples ("fragments")
into contiguous batches so that every statement built from a batch stays
within the server's packet limit. The size of a statement is counted as:

    reserved bytes (prefix + suffix + QUERY_OVERHEAD)
    + the byte length of every fragment
    + one separator byte between each pair of fragments
"""
import logging
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# Observed per-statement overhead on MySQL beyond the SQL text itself.
QUERY_OVERHEAD = 8

# A max_allowed_packet of 0 means the server reported no limit.
NO_MAX_PACKET = 0

SEPARATOR = ","

Fragment = Union[str, bytes]


def fragment_size(fragment: Fragment) -> int:
    """
    Return the number of bytes a fragment occupies on the wire.

    Args:
        fragment: A serialized row tuple such as "(1,'a')"

    Returns:
        Byte length. Text is counted as UTF-8, with surrogate-escaped
        characters (binary values quoted by PyMySQL) counting one byte each.
    """
    if isinstance(fragment, bytes):
        return len(fragment)
    return len(fragment.encode("utf-8", "surrogateescape"))


def statement_size(fragments: Sequence[Fragment], reserved_bytes: int) -> int:
    """
    Return the size of one statement carrying all of the given fragments.

    Args:
        fragments: Fragments to be joined into a single statement
        reserved_bytes: Bytes taken by the prefix, suffix and protocol overhead

    Returns:
        Total statement size in bytes
    """
    separators = max(len(fragments) - 1, 0)
    return reserved_bytes + sum(fragment_size(f) for f in fragments) + separators


def batch_exceeds_budget(
    batch: Sequence[Fragment], reserved_bytes: int, max_bytes: int
) -> bool:
    """Return True if the statement for this batch would exceed max_bytes."""
    if max_bytes == NO_MAX_PACKET:
        return False
    return statement_size(batch, reserved_bytes) > max_bytes


class ValueSetPacker:
    """
    Incremental greedy packer for row fragments.

    Fragments are offered one at a time through add_fragment(). The packer
    accepts a fragment while the running statement size stays within
    max_bytes, and otherwise reports that the current batch must be closed
    first. An empty batch always accepts a fragment, even one that alone
    exceeds the budget; such a batch is left for the caller to reject.

    Attributes:
        reserved_bytes: Bytes every statement spends before its first fragment
        max_bytes: Maximum statement size in bytes
        current_batch: Fragments accepted into the open batch
        current_size: Size in bytes of the statement for the open batch
    """

    def __init__(self, reserved_bytes: int, max_bytes: int):
        self.reserved_bytes = reserved_bytes
        self.max_bytes = max_bytes
        self.current_batch: List[Fragment] = []
        self.current_size = reserved_bytes

    def add_fragment(self, fragment: Fragment) -> bool:
        """
        Try to add a fragment to the open batch.

        Args:
            fragment: Next fragment in insertion order

        Returns:
            True if the batch is full and must be closed before the fragment
            can be added, False if the fragment was added
        """
        size = fragment_size(fragment)
        cost = size + len(SEPARATOR) if self.current_batch else size

        if not self.current_batch:
            if self.reserved_bytes + size > self.max_bytes:
                logger.warning(
                    f"Row fragment ({size} bytes) plus statement overhead "
                    f"({self.reserved_bytes} bytes) exceeds max_bytes ({self.max_bytes}). "
                    f"It will be sent in a statement of its own."
                )
            self.current_batch.append(fragment)
            self.current_size += cost
            return False

        if self.current_size + cost <= self.max_bytes:
            self.current_batch.append(fragment)
            self.current_size += cost
            return False

        return True

    def reset(self) -> None:
        """Start a new, empty batch."""
        self.current_batch = []
        self.current_size = self.reserved_bytes

    def take_batch(self) -> List[Fragment]:
        """Return the open batch and start a new one."""
        batch = self.current_batch
        self.reset()
        return batch


def pack(
    fragments: Sequence[Fragment],
    reserved_bytes: int,
    max_bytes: int,
    packer: Optional[ValueSetPacker] = None,
) -> List[List[Fragment]]:
    """
    Partition fragments into ordered batches that fit max_bytes.

    A single left-to-right greedy scan: each batch is filled until the next
    fragment would push the statement over the limit. Concatenating the
    returned batches gives back the input sequence unchanged.

    Args:
        fragments: Serialized row tuples in insertion order
        reserved_bytes: Per-statement bytes spent on prefix, suffix and overhead
        max_bytes: Maximum statement size; NO_MAX_PACKET disables packing
        packer: Optional packer instance to use for the scan

    Returns:
        List of batches, each a list of fragments
    """
    if not fragments:
        return []

    if max_bytes == NO_MAX_PACKET:
        return [list(fragments)]

    packer = packer or ValueSetPacker(reserved_bytes, max_bytes)
    packer.reset()
    batches: List[List[Fragment]] = []

    for fragment in fragments:
        if packer.add_fragment(fragment):
            batches.append(packer.take_batch())
            packer.add_fragment(fragment)

    if packer.current_batch:
        batches.append(packer.take_batch())

    logger.debug(
        f"Packed {len(fragments)} fragments into {len(batches)} batches "
        f"(reserved={reserved_bytes}, max_bytes={max_bytes})"
    )
    return batches
