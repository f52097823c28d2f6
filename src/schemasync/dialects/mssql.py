"""
SQL Server flavour.
"""

from ..context import SqlFamily
from .base import CastTableFlavour


class MssqlFlavour(CastTableFlavour):
    """SQL Server classifies type changes with the shared cast table."""

    family = SqlFamily.SQLSERVER
