"""
SQL-level column descriptions.
"""

from .describer import (
    ColumnArity,
    ColumnDefault,
    ColumnDefaultKind,
    ColumnInfo,
    ColumnPair,
    ColumnType,
    ColumnTypeFamily,
    DefaultValueType,
)

__all__ = [
    "ColumnArity",
    "ColumnDefault",
    "ColumnDefaultKind",
    "ColumnInfo",
    "ColumnPair",
    "ColumnType",
    "ColumnTypeFamily",
    "DefaultValueType",
]
