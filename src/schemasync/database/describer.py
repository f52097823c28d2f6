"""
SQL-level column descriptions for schemasync.

These are the snapshots an introspection connector produces for each column
of a table. The column differ compares two of them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ColumnTypeFamily(str, Enum):
    """Broad class of a column type, independent of the native type."""

    INT = "int"
    BIGINT = "bigint"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    STRING = "string"
    DATETIME = "datetime"
    BINARY = "binary"
    JSON = "json"
    UUID = "uuid"
    ENUM = "enum"
    UNSUPPORTED = "unsupported"

    @property
    def is_json(self) -> bool:
        return self == ColumnTypeFamily.JSON


class ColumnArity(str, Enum):
    """Nullability and list-ness of a column."""

    REQUIRED = "required"
    NULLABLE = "nullable"
    LIST = "list"

    @property
    def is_list(self) -> bool:
        return self == ColumnArity.LIST


@dataclass(frozen=True)
class ColumnType:
    """Full type of a column."""

    full_data_type: str
    family: ColumnTypeFamily
    arity: ColumnArity = ColumnArity.REQUIRED
    character_maximum_length: Optional[int] = None

    @property
    def native_name(self) -> str:
        """Lower-cased type name without any length suffix."""
        return self.full_data_type.split("(", 1)[0].strip().lower()


class ColumnDefaultKind(str, Enum):
    """Shape of a column default as read from the catalog."""

    VALUE = "value"
    NOW = "now"
    DB_GENERATED = "db_generated"
    SEQUENCE = "sequence"


class DefaultValueType(str, Enum):
    """Type tag of a literal default value."""

    STRING = "string"
    JSON = "json"
    INT = "int"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ENUM = "enum"
    DATETIME = "datetime"
    BYTES = "bytes"


@dataclass(frozen=True)
class ColumnDefault:
    """A column default, with its optional constraint name."""

    kind: ColumnDefaultKind
    value: Any = None
    value_type: Optional[DefaultValueType] = None
    expression: Optional[str] = None
    sequence_name: Optional[str] = None
    constraint_name: Optional[str] = None

    @classmethod
    def value_of(
        cls,
        value: Any,
        value_type: DefaultValueType = DefaultValueType.STRING,
        constraint_name: Optional[str] = None,
    ) -> "ColumnDefault":
        return cls(
            kind=ColumnDefaultKind.VALUE,
            value=value,
            value_type=DefaultValueType(value_type),
            constraint_name=constraint_name,
        )

    @classmethod
    def now(cls, constraint_name: Optional[str] = None) -> "ColumnDefault":
        return cls(kind=ColumnDefaultKind.NOW, constraint_name=constraint_name)

    @classmethod
    def db_generated(
        cls, expression: str, constraint_name: Optional[str] = None
    ) -> "ColumnDefault":
        return cls(
            kind=ColumnDefaultKind.DB_GENERATED,
            expression=expression,
            constraint_name=constraint_name,
        )

    @classmethod
    def sequence(
        cls, sequence_name: str, constraint_name: Optional[str] = None
    ) -> "ColumnDefault":
        return cls(
            kind=ColumnDefaultKind.SEQUENCE,
            sequence_name=sequence_name,
            constraint_name=constraint_name,
        )

    def __str__(self) -> str:
        if self.kind == ColumnDefaultKind.VALUE:
            return repr(self.value)
        if self.kind == ColumnDefaultKind.NOW:
            return "now()"
        if self.kind == ColumnDefaultKind.DB_GENERATED:
            return f"dbgenerated({self.expression!r})"
        return f"sequence({self.sequence_name})"


@dataclass(frozen=True)
class ColumnInfo:
    """Information about a database column."""

    name: str
    tpe: ColumnType
    default: Optional[ColumnDefault] = None
    auto_increment: bool = False

    @property
    def arity(self) -> ColumnArity:
        return self.tpe.arity

    @property
    def column_type_family(self) -> ColumnTypeFamily:
        return self.tpe.family

    @property
    def is_autoincrement(self) -> bool:
        return self.auto_increment

    def __str__(self) -> str:
        result = f"{self.name} {self.tpe.full_data_type}"
        if self.tpe.arity == ColumnArity.LIST:
            result += "[]"
        elif self.tpe.arity == ColumnArity.REQUIRED:
            result += " NOT NULL"
        if self.default is not None:
            result += f" DEFAULT {self.default}"
        return result


@dataclass(frozen=True)
class ColumnPair:
    """The same column in the previous and the next schema."""

    previous: ColumnInfo
    next: ColumnInfo
