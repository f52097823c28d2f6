"""
MySQL flavour.
"""

from ..context import SqlFamily
from ..database.describer import ColumnTypeFamily
from .base import CastTableFlavour, ColumnTypeChange


class MysqlFlavour(CastTableFlavour):
    """
    MySQL flavour.

    MySQL converts between most types in place (possibly truncating data),
    and reports JSON column defaults in a form that does not round-trip.
    """

    family = SqlFamily.MYSQL

    def should_ignore_json_defaults(self) -> bool:
        return True

    def _family_change(
        self, previous: ColumnTypeFamily, next_: ColumnTypeFamily
    ) -> ColumnTypeChange:
        change = super()._family_change(previous, next_)
        if change == ColumnTypeChange.NOT_CASTABLE and ColumnTypeFamily.BINARY not in (previous, next_):
            return ColumnTypeChange.RISKY_CAST
        return change
