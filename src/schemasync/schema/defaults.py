"""
Default value equivalence for the column differ.

Decides whether the defaults of a column pair represent a real change. The
rules are directional: ``previous -> next`` and ``next -> previous`` are not
always the same answer.
"""

import json
import logging
from typing import Any, Optional

from ..database.describer import ColumnDefault, ColumnDefaultKind, ColumnPair, DefaultValueType
from ..dialects.base import SqlFlavour


logger = logging.getLogger(__name__)

_JSON_COMPARABLE = (DefaultValueType.JSON, DefaultValueType.STRING)


def defaults_match(pair: ColumnPair, flavour: SqlFlavour) -> bool:
    """
    Check whether the defaults of a column pair are equivalent.

    Args:
        pair: Previous and next column
        flavour: Capability object of the active dialect

    Returns:
        True when no default change should be migrated
    """
    if flavour.should_ignore_json_defaults() and (
        pair.previous.column_type_family.is_json or pair.next.column_type_family.is_json
    ):
        return True

    previous = pair.previous.default
    next_ = pair.next.default

    if flavour.named_constraints_enabled and _constraint_name(previous) != _constraint_name(next_):
        return False

    return _kinds_match(previous, next_)


def _constraint_name(default: Optional[ColumnDefault]) -> Optional[str]:
    return default.constraint_name if default is not None else None


def _kinds_match(previous: Optional[ColumnDefault], next_: Optional[ColumnDefault]) -> bool:
    previous_kind = previous.kind if previous is not None else None
    next_kind = next_.kind if next_ is not None else None

    # Sequence changes are migrated by a separate step.
    if next_kind == ColumnDefaultKind.SEQUENCE:
        return True

    if next_kind == ColumnDefaultKind.DB_GENERATED:
        return (
            previous_kind == ColumnDefaultKind.DB_GENERATED
            and (previous.expression or "").lower() == (next_.expression or "").lower()
        )

    if previous_kind == ColumnDefaultKind.VALUE:
        return next_kind == ColumnDefaultKind.VALUE and _values_match(previous, next_)

    if previous_kind == ColumnDefaultKind.NOW:
        return next_kind == ColumnDefaultKind.NOW

    if previous_kind == ColumnDefaultKind.SEQUENCE:
        return next_kind is None

    if previous_kind is None:
        return next_kind is None

    return False


def _values_match(previous: ColumnDefault, next_: ColumnDefault) -> bool:
    types = (previous.value_type, next_.value_type)
    if DefaultValueType.JSON in types and all(t in _JSON_COMPARABLE for t in types):
        return json_defaults_match(previous.value, next_.value)

    return previous.value_type == next_.value_type and previous.value == next_.value


def json_defaults_match(previous: Any, next_: Any) -> bool:
    """
    Compare two JSON defaults structurally.

    Text is decoded first; values that were already decoded are compared as
    they are. A side whose text does not parse is treated as a lossy read of
    the same value.
    """
    try:
        return _as_json(previous) == _as_json(next_)
    except ValueError as e:
        logger.debug(f"Treating unparsable JSON defaults as equal: {e}")
        return True


def _as_json(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
