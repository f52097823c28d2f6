"""
Introspection context shared by the reconciliation engine and the dialects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Union


class SqlFamily(str, Enum):
    """Supported SQL database families."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"

    @property
    def is_mysql(self) -> bool:
        return self == SqlFamily.MYSQL

    @property
    def infers_enums_per_column(self) -> bool:
        """MySQL enums are column types, not named catalog objects."""
        return self == SqlFamily.MYSQL


class PreviewFeature(str, Enum):
    """Feature flags supplied by the connector layer."""

    NAMED_CONSTRAINTS = "namedConstraints"
    REFERENTIAL_ACTIONS = "referentialActions"
    NATIVE_TYPES = "nativeTypes"

    @classmethod
    def parse(cls, value: Union[str, "PreviewFeature"]) -> "PreviewFeature":
        """Parse a feature name, ignoring case."""
        if isinstance(value, cls):
            return value
        for feature in cls:
            if feature.value.lower() == str(value).lower():
                return feature
        raise ValueError(f"Unknown preview feature: {value}")


@dataclass(frozen=True)
class IntrospectionContext:
    """Feature flags and active dialect for one reconciliation call."""

    sql_family: SqlFamily = SqlFamily.POSTGRESQL
    preview_features: FrozenSet[PreviewFeature] = field(default_factory=frozenset)

    @classmethod
    def create(
        cls,
        sql_family: Union[str, SqlFamily] = SqlFamily.POSTGRESQL,
        preview_features: Iterable[Union[str, PreviewFeature]] = (),
    ) -> "IntrospectionContext":
        return cls(
            sql_family=SqlFamily(sql_family),
            preview_features=frozenset(PreviewFeature.parse(f) for f in preview_features),
        )

    @property
    def named_constraints(self) -> bool:
        return PreviewFeature.NAMED_CONSTRAINTS in self.preview_features
