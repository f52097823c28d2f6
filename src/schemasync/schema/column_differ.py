"""
Column-level change detection for schemasync.

Computes what changed between the previous and next version of one column.
Columns are aligned by the caller; this module never matches columns itself.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterator, Optional

from ..database.describer import ColumnPair
from ..dialects.base import ColumnTypeChange, SqlFlavour
from .defaults import defaults_match


logger = logging.getLogger(__name__)


class ColumnChange(str, Enum):
    """Independent kinds of column change."""

    RENAMING = "renaming"
    ARITY = "arity"
    DEFAULT = "default"
    TYPE_CHANGED = "type_changed"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class ColumnChanges:
    """Result of diffing one column pair."""

    type_change: Optional[ColumnTypeChange] = None
    changes: FrozenSet[ColumnChange] = frozenset()

    @property
    def differs_in_something(self) -> bool:
        return bool(self.changes)

    @property
    def column_was_renamed(self) -> bool:
        return ColumnChange.RENAMING in self.changes

    @property
    def arity_changed(self) -> bool:
        return ColumnChange.ARITY in self.changes

    @property
    def type_changed(self) -> bool:
        return ColumnChange.TYPE_CHANGED in self.changes

    @property
    def default_changed(self) -> bool:
        return ColumnChange.DEFAULT in self.changes

    @property
    def autoincrement_changed(self) -> bool:
        return ColumnChange.SEQUENCE in self.changes

    @property
    def only_default_changed(self) -> bool:
        return self.changes == frozenset({ColumnChange.DEFAULT})

    @property
    def only_type_changed(self) -> bool:
        return self.changes == frozenset({ColumnChange.TYPE_CHANGED})

    def __iter__(self) -> Iterator[ColumnChange]:
        """Iterate over the changes in declaration order."""
        return (change for change in ColumnChange if change in self.changes)


def diff_column(pair: ColumnPair, flavour: SqlFlavour) -> ColumnChanges:
    """
    Compute all changes between two versions of a column.

    Args:
        pair: Previous and next column
        flavour: Capability object of the active dialect

    Returns:
        ColumnChanges with the type change classification and change kinds
    """
    previous, next_ = pair.previous, pair.next
    changes = set()
    type_change = flavour.column_type_change(pair)

    if previous.name != next_.name:
        changes.add(ColumnChange.RENAMING)

    if previous.arity != next_.arity:
        changes.add(ColumnChange.ARITY)

    if type_change is not None:
        changes.add(ColumnChange.TYPE_CHANGED)

    if not defaults_match(pair, flavour):
        changes.add(ColumnChange.DEFAULT)

    if previous.is_autoincrement != next_.is_autoincrement:
        changes.add(ColumnChange.SEQUENCE)

    if changes:
        logger.debug(
            f"Column {previous.name} -> {next_.name}: "
            f"{', '.join(c.value for c in ColumnChange if c in changes)}"
        )

    return ColumnChanges(type_change=type_change, changes=frozenset(changes))
