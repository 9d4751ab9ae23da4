"""
Statement text assembly for multi-row INSERT statements.

Column names passed to these helpers are used as given; quoting them is the
job of the adapter that produced them.
"""
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple, Union

from packet_import.errors import InvalidSpecError
from packet_import.packer import SEPARATOR, Fragment

_INSERT_RE = re.compile(r"^(\s*INSERT)(\s+)(?!IGNORE\b)", re.IGNORECASE)
_IGNORE_RE = re.compile(r"^\s*(INSERT\s+)?IGNORE\b", re.IGNORECASE)


@dataclass(frozen=True)
class ColumnList:
    """Overwrite each listed column with the incoming value on conflict."""

    columns: Tuple[str, ...]

    def __init__(self, columns: Sequence[str]):
        object.__setattr__(self, "columns", tuple(columns))


@dataclass(frozen=True)
class ColumnMapping:
    """On conflict, set each target column from the incoming value of a source column."""

    mapping: Tuple[Tuple[str, str], ...]

    def __init__(self, mapping: Union[Mapping[str, str], Sequence[Tuple[str, str]]]):
        items = mapping.items() if isinstance(mapping, Mapping) else mapping
        object.__setattr__(self, "mapping", tuple((t, s) for t, s in items))


@dataclass(frozen=True)
class RawClause:
    """A literal ON DUPLICATE KEY UPDATE body, used verbatim."""

    sql: str


UpsertSpec = Union[ColumnList, ColumnMapping, RawClause]


def _as_text(fragment: Fragment) -> str:
    if isinstance(fragment, bytes):
        # Undecodable bytes survive as surrogates; PyMySQL re-encodes them the same way.
        return fragment.decode("utf-8", "surrogateescape")
    return fragment


def build_statement(prefix: str, suffix: str, batch: Sequence[Fragment]) -> str:
    """
    Build one executable statement from a batch of row fragments.

    Args:
        prefix: Statement text before the values, e.g. "INSERT INTO t VALUES "
        suffix: Statement text after the values, e.g. an upsert clause
        batch: Row fragments, joined with commas in the given order

    Returns:
        The statement text
    """
    return prefix + SEPARATOR.join(_as_text(f) for f in batch) + suffix


def build_upsert_clause(table_name: str, spec: UpsertSpec) -> str:
    """
    Build the assignment list of an ON DUPLICATE KEY UPDATE clause.

    Args:
        table_name: Table the assignments qualify
        spec: ColumnList, ColumnMapping or RawClause

    Returns:
        Comma-joined assignments, or the raw clause text

    Raises:
        InvalidSpecError: If spec is not one of the supported variants or is empty
    """
    if isinstance(spec, ColumnList):
        if not spec.columns:
            raise InvalidSpecError("ColumnList upsert spec has no columns")
        return ",".join(f"{table_name}.{col}=VALUES({col})" for col in spec.columns)

    if isinstance(spec, ColumnMapping):
        if not spec.mapping:
            raise InvalidSpecError("ColumnMapping upsert spec has no columns")
        return ",".join(
            f"{table_name}.{target}=VALUES({source})" for target, source in spec.mapping
        )

    if isinstance(spec, RawClause):
        return spec.sql

    raise InvalidSpecError(
        f"Expected ColumnList, ColumnMapping or RawClause, got {type(spec).__name__}"
    )


def on_duplicate_key_update_sql(table_name: str, spec: UpsertSpec) -> str:
    """Return the full ON DUPLICATE KEY UPDATE suffix for an upsert spec."""
    return " ON DUPLICATE KEY UPDATE " + build_upsert_clause(table_name, spec)


def add_upsert_column(spec: Optional[UpsertSpec], column: str) -> UpsertSpec:
    """
    Return a copy of spec that also updates the given column on conflict.

    Used to make sure bookkeeping columns (e.g. an updated_at timestamp) are
    refreshed by an upsert. A RawClause cannot be extended and is returned
    unchanged.
    """
    if spec is None:
        return ColumnList((column,))
    if isinstance(spec, ColumnList):
        if column in spec.columns:
            return spec
        return ColumnList(spec.columns + (column,))
    if isinstance(spec, ColumnMapping):
        if any(target == column for target, _ in spec.mapping):
            return spec
        return ColumnMapping(spec.mapping + ((column, column),))
    if isinstance(spec, RawClause):
        return spec
    raise InvalidSpecError(
        f"Expected ColumnList, ColumnMapping or RawClause, got {type(spec).__name__}"
    )


def apply_ignore_modifier(prefix: str) -> str:
    """
    Add the IGNORE modifier to an INSERT prefix.

    "INSERT INTO t VALUES " becomes "INSERT IGNORE INTO t VALUES ". A prefix
    that already carries IGNORE is returned unchanged.
    """
    if _IGNORE_RE.match(prefix):
        return prefix
    if _INSERT_RE.match(prefix):
        return _INSERT_RE.sub(r"\1 IGNORE\2", prefix, count=1)
    return "IGNORE " + prefix


def build_insert_prefix(table_name: str, columns: Sequence[str] = ()) -> str:
    """Return "INSERT INTO table (c1,c2) VALUES " for the given columns."""
    if columns:
        return f"INSERT INTO {table_name} ({','.join(columns)}) VALUES "
    return f"INSERT INTO {table_name} VALUES "
