"""
SQLite flavour.
"""

from typing import Optional

from ..context import SqlFamily
from ..database.describer import ColumnPair
from .base import ColumnTypeChange, SqlFlavour


class SqliteFlavour(SqlFlavour):
    """SQLite redefines the whole table for any type change."""

    family = SqlFamily.SQLITE

    def column_type_change(self, pair: ColumnPair) -> Optional[ColumnTypeChange]:
        if pair.previous.column_type_family != pair.next.column_type_family:
            return ColumnTypeChange.RISKY_CAST
        return None
