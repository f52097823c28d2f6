"""
PostgreSQL flavour.
"""

from typing import Optional

from ..context import SqlFamily
from ..database.describer import ColumnPair
from .base import CastTableFlavour, ColumnTypeChange


class PostgresFlavour(CastTableFlavour):
    """PostgreSQL supports scalar lists, so list-ness is part of the type."""

    family = SqlFamily.POSTGRESQL

    def column_type_change(self, pair: ColumnPair) -> Optional[ColumnTypeChange]:
        if pair.previous.arity.is_list != pair.next.arity.is_list:
            return ColumnTypeChange.NOT_CASTABLE

        return super().column_type_change(pair)
