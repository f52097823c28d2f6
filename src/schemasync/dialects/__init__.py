"""
SQL dialect flavours.
"""

from .base import ColumnTypeChange, SqlFlavour
from .factory import FlavourFactory
from .mssql import MssqlFlavour
from .mysql import MysqlFlavour
from .postgres import PostgresFlavour
from .sqlite import SqliteFlavour

__all__ = [
    "ColumnTypeChange",
    "SqlFlavour",
    "FlavourFactory",
    "PostgresFlavour",
    "MysqlFlavour",
    "SqliteFlavour",
    "MssqlFlavour",
]
