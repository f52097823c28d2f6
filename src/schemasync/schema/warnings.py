"""
Warnings emitted by schema reconciliation.

Each recovery category produces at most one warning per reconciliation call,
listing every affected entity in the order it was recovered.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Union


class WarningCategory(str, Enum):
    """Recovery categories reported to the caller."""

    MODEL_RENAMED = "model_renamed"
    FIELD_RENAMED = "field_renamed"
    ENUM_RENAMED = "enum_renamed"
    ENUM_VALUE_RENAMED = "enum_value_renamed"
    CUSTOM_INDEX_NAME = "custom_index_name"
    CUSTOM_PRIMARY_KEY_NAME = "custom_primary_key_name"
    CUID_DEFAULT = "cuid_default"
    UUID_DEFAULT = "uuid_default"
    UPDATED_AT = "updated_at"
    MODEL_IGNORED = "model_ignored"
    FIELD_IGNORED = "field_ignored"


@dataclass(frozen=True)
class ModelRef:
    model: str

    def to_dict(self) -> Dict[str, str]:
        return {"model": self.model}


@dataclass(frozen=True)
class ModelAndField:
    model: str
    field: str

    def to_dict(self) -> Dict[str, str]:
        return {"model": self.model, "field": self.field}


@dataclass(frozen=True)
class ModelAndIndex:
    model: str
    index_db_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"model": self.model, "index_db_name": self.index_db_name}


@dataclass(frozen=True)
class EnumRef:
    enm: str

    def to_dict(self) -> Dict[str, str]:
        return {"enm": self.enm}


@dataclass(frozen=True)
class EnumAndValue:
    enm: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"enm": self.enm, "value": self.value}


AffectedEntity = Union[ModelRef, ModelAndField, ModelAndIndex, EnumRef, EnumAndValue]


@dataclass
class ReconciliationWarning:
    """A warning about information recovered from the previous schema."""

    code: int
    category: WarningCategory
    message: str
    affected: List[AffectedEntity] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "affected": [entity.to_dict() for entity in self.affected],
        }

    def __str__(self) -> str:
        entities = ", ".join(
            ".".join(str(v) for v in entity.to_dict().values()) for entity in self.affected
        )
        return f"[{self.code}] {self.message}: {entities}"


# code, message
_WARNING_TEMPLATES: Dict[WarningCategory, tuple] = {
    WarningCategory.MODEL_RENAMED: (
        7,
        "These models were enriched with `@@map` information taken from the previous schema.",
    ),
    WarningCategory.FIELD_RENAMED: (
        8,
        "These fields were enriched with `@map` information taken from the previous schema.",
    ),
    WarningCategory.ENUM_RENAMED: (
        9,
        "These enums were enriched with `@@map` information taken from the previous schema.",
    ),
    WarningCategory.ENUM_VALUE_RENAMED: (
        10,
        "These enum values were enriched with `@map` information taken from the previous schema.",
    ),
    WarningCategory.CUID_DEFAULT: (
        11,
        "These id fields had a `@default(cuid())` added because it was there in the previous schema.",
    ),
    WarningCategory.UUID_DEFAULT: (
        12,
        "These id fields had a `@default(uuid())` added because it was there in the previous schema.",
    ),
    WarningCategory.UPDATED_AT: (
        13,
        "These DateTime fields had a `@updatedAt` added because it was there in the previous schema.",
    ),
    WarningCategory.MODEL_IGNORED: (
        15,
        "The following models were enriched with an `@@ignore` taken from the previous schema.",
    ),
    WarningCategory.FIELD_IGNORED: (
        16,
        "The following fields were enriched with an `@ignore` taken from the previous schema.",
    ),
    WarningCategory.CUSTOM_INDEX_NAME: (
        17,
        "These indices were enriched with custom index names taken from the previous schema.",
    ),
    WarningCategory.CUSTOM_PRIMARY_KEY_NAME: (
        18,
        "These models were enriched with custom compound id names taken from the previous schema.",
    ),
}


def build_warning(
    category: WarningCategory, affected: Sequence[AffectedEntity]
) -> ReconciliationWarning:
    """Create the warning of a category for a list of affected entities."""
    code, message = _WARNING_TEMPLATES[category]
    return ReconciliationWarning(
        code=code, category=category, message=message, affected=list(affected)
    )
