"""
Parameterized multi-row INSERT composition.

Every multi-row write in the service goes through `build_multi_row_insert`.
Values only ever travel as bound parameters; the statement text holds
identifiers and placeholders, nothing else.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.sql.expression import TextClause

from nom_records.core.exceptions import MalformedRowShape

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class MultiRowInsert:
    sql: str
    params: Tuple[Any, ...]
    row_count: int

    @property
    def bind_params(self) -> Dict[str, Any]:
        """Flat parameter list keyed by placeholder name (p1, p2, ...)."""
        return {f"p{i}": value for i, value in enumerate(self.params, start=1)}

    def statement(self) -> TextClause:
        return text(self.sql)


def _check_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def build_multi_row_insert(
    table: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    shared: Sequence[Any] = (),
    returning: Optional[str] = None,
) -> Optional[MultiRowInsert]:
    """
    Build one INSERT with a placeholder group per row.

    Args:
        table: target table name
        columns: full ordered column list of the statement. When `shared`
            values are given, the first len(shared) columns receive them.
        rows: value tuples for the remaining columns, each of arity
            len(columns) - len(shared)
        shared: leading values repeated in every group (e.g. a parent id).
            They are re-emitted as fresh parameters in each group rather than
            referenced through one reused placeholder.
        returning: optional column to add as RETURNING

    Returns:
        MultiRowInsert, or None when `rows` is empty (no statement to issue).

    Raises:
        MalformedRowShape if any row's arity differs from the expected one.
    """
    _check_identifier(table)
    for column in columns:
        _check_identifier(column)
    if returning is not None:
        _check_identifier(returning)

    shared = tuple(shared)
    arity = len(columns) - len(shared)
    if arity < 1:
        raise MalformedRowShape(
            f"{table}: {len(columns)} columns leave no room for row values after {len(shared)} shared values"
        )

    rows = list(rows)
    if not rows:
        return None

    for position, row in enumerate(rows):
        if isinstance(row, (str, bytes)) or len(row) != arity:
            got = "a scalar string" if isinstance(row, (str, bytes)) else f"{len(row)} values"
            raise MalformedRowShape(f"{table}: row {position} has {got}, expected {arity}")

    group_size = len(shared) + arity
    params: list = []
    groups = []
    for row in rows:
        # index of the first slot in this group, 1-based
        start = len(params) + 1
        params.extend(shared)
        params.extend(row)
        groups.append("(" + ", ".join(f":p{start + offset}" for offset in range(group_size)) + ")")

    sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES {', '.join(groups)}"
    if returning:
        sql += f" RETURNING {returning}"
    return MultiRowInsert(sql=sql, params=tuple(params), row_count=len(rows))
