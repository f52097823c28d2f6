"""
In-memory schema model tree.

The tree produced by the parser (old) and the introspection connector (new)
share these types. Lookups are linear scans over ordered lists so that the
first match in declaration order always wins.
"""

from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import Any, Iterator, List, Optional, Tuple, Union

from ..exceptions import UnknownEntityError


class FieldArity(str, PyEnum):
    """Arity of a model field."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    LIST = "list"


class ScalarType(str, PyEnum):
    """Built-in scalar types of the schema language."""

    INT = "Int"
    BIG_INT = "BigInt"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    STRING = "String"
    DATETIME = "DateTime"
    JSON = "Json"
    BYTES = "Bytes"


@dataclass(frozen=True)
class FieldType:
    """Type of a scalar field: a scalar, an enum reference or an unsupported native type."""

    scalar: Optional[ScalarType] = None
    enum: Optional[str] = None
    unsupported: Optional[str] = None

    @classmethod
    def of(cls, scalar: Union[str, ScalarType]) -> "FieldType":
        return cls(scalar=ScalarType(scalar))

    @classmethod
    def enum_type(cls, name: str) -> "FieldType":
        return cls(enum=name)

    @property
    def is_string(self) -> bool:
        return self.scalar == ScalarType.STRING

    @property
    def is_datetime(self) -> bool:
        return self.scalar == ScalarType.DATETIME

    @property
    def is_enum(self) -> bool:
        return self.enum is not None

    def __str__(self) -> str:
        if self.enum is not None:
            return self.enum
        if self.unsupported is not None:
            return f'Unsupported("{self.unsupported}")'
        return self.scalar.value if self.scalar else "Unknown"


class ValueGenerator(str, PyEnum):
    """Generator functions usable in a default expression."""

    AUTOINCREMENT = "autoincrement"
    NOW = "now"
    CUID = "cuid"
    UUID = "uuid"
    DBGENERATED = "dbgenerated"


class DefaultKind(str, PyEnum):
    """Shape of a model-level default value."""

    VALUE = "value"
    ENUM_VALUE = "enum_value"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class DefaultValue:
    """Default value declared on a scalar field."""

    kind: DefaultKind
    value: Any = None
    generator: Optional[ValueGenerator] = None
    expression: Optional[str] = None

    @classmethod
    def single(cls, value: Any) -> "DefaultValue":
        return cls(kind=DefaultKind.VALUE, value=value)

    @classmethod
    def enum_value(cls, name: str) -> "DefaultValue":
        return cls(kind=DefaultKind.ENUM_VALUE, value=name)

    @classmethod
    def generated(
        cls, generator: Union[str, ValueGenerator], expression: Optional[str] = None
    ) -> "DefaultValue":
        return cls(
            kind=DefaultKind.EXPRESSION,
            generator=ValueGenerator(generator),
            expression=expression,
        )

    def references_enum_value(self, name: str) -> bool:
        return self.kind == DefaultKind.ENUM_VALUE and self.value == name


@dataclass
class RelationInfo:
    """Descriptor of one endpoint of a relation."""

    to: str
    fields: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    name: str = ""

    def same_shape(self, other: "RelationInfo") -> bool:
        """Compare target and field lists, leaving the relation name out."""
        return (
            self.to == other.to
            and self.fields == other.fields
            and self.references == other.references
        )


@dataclass
class ScalarField:
    """A column-backed field."""

    name: str
    field_type: FieldType
    arity: FieldArity = FieldArity.REQUIRED
    database_name: Optional[str] = None
    default_value: Optional[DefaultValue] = None
    is_ignored: bool = False
    is_updated_at: bool = False
    documentation: Optional[str] = None

    @property
    def resolved_name(self) -> str:
        return self.database_name or self.name

    @property
    def is_list(self) -> bool:
        return self.arity == FieldArity.LIST


@dataclass
class RelationField:
    """A virtual field describing one side of a relation."""

    name: str
    relation_info: RelationInfo
    arity: FieldArity = FieldArity.REQUIRED
    documentation: Optional[str] = None

    @property
    def is_list(self) -> bool:
        return self.arity == FieldArity.LIST


Field = Union[ScalarField, RelationField]


@dataclass
class Index:
    """A secondary index or unique constraint."""

    fields: List[str]
    name: Optional[str] = None
    db_name: Optional[str] = None
    is_unique: bool = False


@dataclass
class PrimaryKey:
    """A model's primary key."""

    fields: List[str]
    name: Optional[str] = None
    db_name: Optional[str] = None


@dataclass
class Model:
    """A model backed by one table."""

    name: str
    fields: List[Field] = field(default_factory=list)
    database_name: Optional[str] = None
    indices: List[Index] = field(default_factory=list)
    primary_key: Optional[PrimaryKey] = None
    is_ignored: bool = False
    documentation: Optional[str] = None

    @property
    def resolved_name(self) -> str:
        return self.database_name or self.name

    def scalar_fields(self) -> Iterator[ScalarField]:
        return (f for f in self.fields if isinstance(f, ScalarField))

    def relation_fields(self) -> Iterator[RelationField]:
        return (f for f in self.fields if isinstance(f, RelationField))

    def find_field(self, name: str) -> Optional[Field]:
        return next((f for f in self.fields if f.name == name), None)

    def find_scalar_field(self, name: str) -> Optional[ScalarField]:
        return next((f for f in self.scalar_fields() if f.name == name), None)

    def find_scalar_field_db_name(self, db_name: str) -> Optional[ScalarField]:
        return next((f for f in self.scalar_fields() if f.resolved_name == db_name), None)

    def find_relation_field(self, name: str) -> Optional[RelationField]:
        return next((f for f in self.relation_fields() if f.name == name), None)

    def get_field(self, name: str) -> Field:
        found = self.find_field(name)
        if found is None:
            raise UnknownEntityError("field", name, self.name)
        return found


@dataclass
class EnumValue:
    """One value of an enum."""

    name: str
    database_name: Optional[str] = None
    documentation: Optional[str] = None

    @property
    def resolved_name(self) -> str:
        return self.database_name or self.name


@dataclass
class Enum:
    """A named set of values."""

    name: str
    values: List[EnumValue] = field(default_factory=list)
    database_name: Optional[str] = None
    documentation: Optional[str] = None

    @property
    def resolved_name(self) -> str:
        return self.database_name or self.name

    def find_value(self, name: str) -> Optional[EnumValue]:
        return next((v for v in self.values if v.name == name), None)

    def find_value_db_name(self, db_name: str) -> Optional[EnumValue]:
        return next((v for v in self.values if v.resolved_name == db_name), None)

    def value_signature(self) -> List[Tuple[str, Optional[str]]]:
        """Names and mappings of all values, in declaration order."""
        return [(v.name, v.database_name) for v in self.values]


@dataclass
class Datamodel:
    """A complete schema: models and enums in declaration order."""

    models: List[Model] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)

    def find_model(self, name: str) -> Optional[Model]:
        return next((m for m in self.models if m.name == name), None)

    def find_model_db_name(self, db_name: str) -> Optional[Model]:
        return next((m for m in self.models if m.resolved_name == db_name), None)

    def get_model(self, name: str) -> Model:
        found = self.find_model(name)
        if found is None:
            raise UnknownEntityError("model", name)
        return found

    def find_enum(self, name: str) -> Optional[Enum]:
        return next((e for e in self.enums if e.name == name), None)

    def find_enum_db_name(self, db_name: str) -> Optional[Enum]:
        return next((e for e in self.enums if e.resolved_name == db_name), None)

    def get_enum(self, name: str) -> Enum:
        found = self.find_enum(name)
        if found is None:
            raise UnknownEntityError("enum", name)
        return found

    def find_relation_fields_for_model(self, model_name: str) -> List[Tuple[Model, RelationField]]:
        """All relation fields, in any model, that point at ``model_name``."""
        return [
            (model, rf)
            for model in self.models
            for rf in model.relation_fields()
            if rf.relation_info.to == model_name
        ]

    def find_enum_fields(self, enum_name: str) -> List[Tuple[Model, ScalarField]]:
        """All scalar fields whose type is the enum ``enum_name``."""
        return [
            (model, sf)
            for model in self.models
            for sf in model.scalar_fields()
            if sf.field_type.enum == enum_name
        ]

    def find_related_field(
        self, model: Model, rf: RelationField
    ) -> Optional[Tuple[Model, RelationField]]:
        """Find the opposite side of a relation field."""
        related_model = self.find_model(rf.relation_info.to)
        if related_model is None:
            return None
        for candidate in related_model.relation_fields():
            if candidate is rf:
                continue
            if (
                candidate.relation_info.name == rf.relation_info.name
                and candidate.relation_info.to == model.name
            ):
                return related_model, candidate
        return None
