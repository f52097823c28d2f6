"""
Abstract base class for SQL dialect flavours.

A flavour answers the dialect-specific questions the column differ asks:
how a type change should be classified, whether JSON defaults can be trusted,
and whether named constraints are active.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from ..context import PreviewFeature, SqlFamily
from ..database.describer import ColumnPair, ColumnType, ColumnTypeFamily


logger = logging.getLogger(__name__)


class ColumnTypeChange(str, Enum):
    """How a column type change can be carried out."""

    SAFE_CAST = "safe_cast"
    RISKY_CAST = "risky_cast"
    NOT_CASTABLE = "not_castable"


_F = ColumnTypeFamily
_SAFE = ColumnTypeChange.SAFE_CAST
_RISKY = ColumnTypeChange.RISKY_CAST

# Conversions between families that a plain cast handles. Pairs missing from
# the table are not castable.
FAMILY_CASTS: Dict[Tuple[ColumnTypeFamily, ColumnTypeFamily], ColumnTypeChange] = {
    (_F.INT, _F.BIGINT): _SAFE,
    (_F.INT, _F.FLOAT): _SAFE,
    (_F.INT, _F.DECIMAL): _SAFE,
    (_F.INT, _F.BOOLEAN): _RISKY,
    (_F.BIGINT, _F.INT): _RISKY,
    (_F.BIGINT, _F.FLOAT): _RISKY,
    (_F.BIGINT, _F.DECIMAL): _SAFE,
    (_F.FLOAT, _F.INT): _RISKY,
    (_F.FLOAT, _F.BIGINT): _RISKY,
    (_F.FLOAT, _F.DECIMAL): _SAFE,
    (_F.DECIMAL, _F.INT): _RISKY,
    (_F.DECIMAL, _F.BIGINT): _RISKY,
    (_F.DECIMAL, _F.FLOAT): _RISKY,
    (_F.BOOLEAN, _F.INT): _SAFE,
    (_F.BOOLEAN, _F.BIGINT): _SAFE,
    (_F.STRING, _F.INT): _RISKY,
    (_F.STRING, _F.BIGINT): _RISKY,
    (_F.STRING, _F.FLOAT): _RISKY,
    (_F.STRING, _F.DECIMAL): _RISKY,
    (_F.STRING, _F.BOOLEAN): _RISKY,
    (_F.STRING, _F.DATETIME): _RISKY,
    (_F.STRING, _F.JSON): _RISKY,
    (_F.STRING, _F.UUID): _RISKY,
    (_F.STRING, _F.ENUM): _RISKY,
    (_F.UUID, _F.STRING): _SAFE,
    (_F.ENUM, _F.STRING): _SAFE,
    (_F.JSON, _F.STRING): _SAFE,
    (_F.DATETIME, _F.STRING): _SAFE,
}


class SqlFlavour(ABC):
    """
    Abstract base class for all dialect flavours.

    Subclasses set ``family`` and implement ``column_type_change``.
    """

    family: SqlFamily

    def __init__(self, preview_features: Iterable[PreviewFeature] = ()):
        self.preview_features: FrozenSet[PreviewFeature] = frozenset(preview_features)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def named_constraints_enabled(self) -> bool:
        return PreviewFeature.NAMED_CONSTRAINTS in self.preview_features

    def should_ignore_json_defaults(self) -> bool:
        """Whether JSON defaults read back from the catalog are unreliable."""
        return False

    @abstractmethod
    def column_type_change(self, pair: ColumnPair) -> Optional[ColumnTypeChange]:
        """
        Classify the type change between two columns.

        Args:
            pair: Previous and next column

        Returns:
            None when the type did not change, otherwise the classification
        """
        pass

    def __repr__(self) -> str:
        features = ",".join(sorted(f.value for f in self.preview_features))
        return f"{self.__class__.__name__}(family={self.family.value}, features=[{features}])"


class CastTableFlavour(SqlFlavour):
    """Flavour that classifies changes with the shared family cast table."""

    def column_type_change(self, pair: ColumnPair) -> Optional[ColumnTypeChange]:
        previous, next_ = pair.previous.tpe, pair.next.tpe

        if previous.family == next_.family:
            return self._native_type_change(previous, next_)

        change = self._family_change(previous.family, next_.family)
        self.logger.debug(
            f"Column {pair.next.name}: {previous.family.value} -> {next_.family.value} is {change.value}"
        )
        return change

    def _family_change(
        self, previous: ColumnTypeFamily, next_: ColumnTypeFamily
    ) -> ColumnTypeChange:
        if next_ == ColumnTypeFamily.STRING and previous != ColumnTypeFamily.BINARY:
            return ColumnTypeChange.SAFE_CAST
        return FAMILY_CASTS.get((previous, next_), ColumnTypeChange.NOT_CASTABLE)

    def _native_type_change(
        self, previous: ColumnType, next_: ColumnType
    ) -> Optional[ColumnTypeChange]:
        if previous.full_data_type.lower() == next_.full_data_type.lower():
            return None

        if previous.native_name == next_.native_name or previous.family == ColumnTypeFamily.STRING:
            old_len = previous.character_maximum_length
            new_len = next_.character_maximum_length
            if old_len is not None and (new_len is None or new_len >= old_len):
                return ColumnTypeChange.SAFE_CAST

        return ColumnTypeChange.RISKY_CAST
