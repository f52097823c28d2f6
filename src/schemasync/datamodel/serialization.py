"""
YAML/JSON documents for schema model trees and column pairs.

The documents are validated with pydantic and converted to the dataclass
tree the engines work on. JSON files are read with the YAML loader.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..database.describer import (
    ColumnArity,
    ColumnDefault,
    ColumnDefaultKind,
    ColumnInfo,
    ColumnPair,
    ColumnType,
    ColumnTypeFamily,
    DefaultValueType,
)
from ..exceptions import DatamodelLoadError
from .models import (
    Datamodel,
    DefaultKind,
    DefaultValue,
    Enum,
    EnumValue,
    FieldArity,
    FieldType,
    Index,
    Model,
    PrimaryKey,
    RelationField,
    RelationInfo,
    ScalarField,
    ValueGenerator,
)


logger = logging.getLogger(__name__)

_UNSUPPORTED_PREFIX = 'Unsupported("'


class _Document(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def parse_field_type(value: str) -> FieldType:
    """Parse ``String``, ``Unsupported("circle")`` or an enum name."""
    if value.startswith(_UNSUPPORTED_PREFIX) and value.endswith('")'):
        return FieldType(unsupported=value[len(_UNSUPPORTED_PREFIX):-2])
    try:
        return FieldType.of(value)
    except ValueError:
        return FieldType.enum_type(value)


class DefaultDocument(_Document):
    """Default value of a scalar field."""

    kind: DefaultKind
    value: Any = None
    generator: Optional[ValueGenerator] = None
    expression: Optional[str] = None

    @model_validator(mode="after")
    def check_generator(self) -> "DefaultDocument":
        if self.kind == DefaultKind.EXPRESSION and self.generator is None:
            raise ValueError("expression defaults need a generator")
        return self

    def to_domain(self) -> DefaultValue:
        return DefaultValue(
            kind=self.kind,
            value=self.value,
            generator=self.generator,
            expression=self.expression,
        )

    @classmethod
    def from_domain(cls, default: DefaultValue) -> "DefaultDocument":
        return cls(
            kind=default.kind,
            value=default.value,
            generator=default.generator,
            expression=default.expression,
        )


class RelationDocument(_Document):
    """Relation descriptor of a relation field."""

    to: str
    fields: List[str] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)
    name: str = ""


class FieldDocument(_Document):
    """A scalar field (with ``type``) or a relation field (with ``relation``)."""

    name: str
    type: Optional[str] = None
    relation: Optional[RelationDocument] = None
    arity: FieldArity = FieldArity.REQUIRED
    database_name: Optional[str] = Field(None, alias="map")
    default: Optional[DefaultDocument] = None
    ignored: bool = False
    updated_at: bool = False
    documentation: Optional[str] = None

    @model_validator(mode="after")
    def check_kind(self) -> "FieldDocument":
        if (self.type is None) == (self.relation is None):
            raise ValueError(f"field '{self.name}' needs exactly one of 'type' or 'relation'")
        return self

    def to_domain(self) -> Union[ScalarField, RelationField]:
        if self.relation is not None:
            return RelationField(
                name=self.name,
                relation_info=RelationInfo(
                    to=self.relation.to,
                    fields=list(self.relation.fields),
                    references=list(self.relation.references),
                    name=self.relation.name,
                ),
                arity=self.arity,
                documentation=self.documentation,
            )
        return ScalarField(
            name=self.name,
            field_type=parse_field_type(self.type),
            arity=self.arity,
            database_name=self.database_name,
            default_value=self.default.to_domain() if self.default else None,
            is_ignored=self.ignored,
            is_updated_at=self.updated_at,
            documentation=self.documentation,
        )

    @classmethod
    def from_domain(cls, field: Union[ScalarField, RelationField]) -> "FieldDocument":
        if isinstance(field, RelationField):
            info = field.relation_info
            return cls(
                name=field.name,
                relation=RelationDocument(
                    to=info.to,
                    fields=list(info.fields),
                    references=list(info.references),
                    name=info.name,
                ),
                arity=field.arity,
                documentation=field.documentation,
            )
        return cls(
            name=field.name,
            type=str(field.field_type),
            arity=field.arity,
            database_name=field.database_name,
            default=DefaultDocument.from_domain(field.default_value) if field.default_value else None,
            ignored=field.is_ignored,
            updated_at=field.is_updated_at,
            documentation=field.documentation,
        )


class IndexDocument(_Document):
    fields: List[str]
    name: Optional[str] = None
    db_name: Optional[str] = Field(None, alias="map")
    unique: bool = False


class PrimaryKeyDocument(_Document):
    fields: List[str]
    name: Optional[str] = None
    db_name: Optional[str] = Field(None, alias="map")


class ModelDocument(_Document):
    name: str
    database_name: Optional[str] = Field(None, alias="map")
    fields: List[FieldDocument] = Field(default_factory=list)
    indices: List[IndexDocument] = Field(default_factory=list)
    primary_key: Optional[PrimaryKeyDocument] = None
    ignored: bool = False
    documentation: Optional[str] = None

    def to_domain(self) -> Model:
        return Model(
            name=self.name,
            database_name=self.database_name,
            fields=[f.to_domain() for f in self.fields],
            indices=[
                Index(fields=list(i.fields), name=i.name, db_name=i.db_name, is_unique=i.unique)
                for i in self.indices
            ],
            primary_key=(
                PrimaryKey(
                    fields=list(self.primary_key.fields),
                    name=self.primary_key.name,
                    db_name=self.primary_key.db_name,
                )
                if self.primary_key
                else None
            ),
            is_ignored=self.ignored,
            documentation=self.documentation,
        )

    @classmethod
    def from_domain(cls, model: Model) -> "ModelDocument":
        pk = model.primary_key
        return cls(
            name=model.name,
            database_name=model.database_name,
            fields=[FieldDocument.from_domain(f) for f in model.fields],
            indices=[
                IndexDocument(fields=list(i.fields), name=i.name, db_name=i.db_name, unique=i.is_unique)
                for i in model.indices
            ],
            primary_key=(
                PrimaryKeyDocument(fields=list(pk.fields), name=pk.name, db_name=pk.db_name)
                if pk
                else None
            ),
            ignored=model.is_ignored,
            documentation=model.documentation,
        )


class EnumValueDocument(_Document):
    name: str
    database_name: Optional[str] = Field(None, alias="map")
    documentation: Optional[str] = None


class EnumDocument(_Document):
    name: str
    database_name: Optional[str] = Field(None, alias="map")
    values: List[Union[str, EnumValueDocument]] = Field(default_factory=list)
    documentation: Optional[str] = None

    def to_domain(self) -> Enum:
        values = []
        for value in self.values:
            if isinstance(value, str):
                values.append(EnumValue(name=value))
            else:
                values.append(
                    EnumValue(
                        name=value.name,
                        database_name=value.database_name,
                        documentation=value.documentation,
                    )
                )
        return Enum(
            name=self.name,
            values=values,
            database_name=self.database_name,
            documentation=self.documentation,
        )

    @classmethod
    def from_domain(cls, enm: Enum) -> "EnumDocument":
        values: List[Union[str, EnumValueDocument]] = []
        for value in enm.values:
            if value.database_name is None and value.documentation is None:
                values.append(value.name)
            else:
                values.append(
                    EnumValueDocument(
                        name=value.name,
                        database_name=value.database_name,
                        documentation=value.documentation,
                    )
                )
        return cls(
            name=enm.name,
            database_name=enm.database_name,
            values=values,
            documentation=enm.documentation,
        )


class DatamodelDocument(_Document):
    """Top-level schema document."""

    models: List[ModelDocument] = Field(default_factory=list)
    enums: List[EnumDocument] = Field(default_factory=list)

    def to_domain(self) -> Datamodel:
        return Datamodel(
            models=[m.to_domain() for m in self.models],
            enums=[e.to_domain() for e in self.enums],
        )

    @classmethod
    def from_domain(cls, datamodel: Datamodel) -> "DatamodelDocument":
        return cls(
            models=[ModelDocument.from_domain(m) for m in datamodel.models],
            enums=[EnumDocument.from_domain(e) for e in datamodel.enums],
        )


class ColumnDefaultDocument(_Document):
    kind: ColumnDefaultKind
    value: Any = None
    value_type: Optional[DefaultValueType] = None
    expression: Optional[str] = None
    sequence_name: Optional[str] = None
    constraint_name: Optional[str] = None

    def to_domain(self) -> ColumnDefault:
        value_type = self.value_type
        if self.kind == ColumnDefaultKind.VALUE and value_type is None:
            value_type = DefaultValueType.STRING
        return ColumnDefault(
            kind=self.kind,
            value=self.value,
            value_type=value_type,
            expression=self.expression,
            sequence_name=self.sequence_name,
            constraint_name=self.constraint_name,
        )


class ColumnDocument(_Document):
    name: str
    type: str
    family: ColumnTypeFamily
    arity: ColumnArity = ColumnArity.REQUIRED
    max_length: Optional[int] = None
    default: Optional[ColumnDefaultDocument] = None
    auto_increment: bool = False

    def to_domain(self) -> ColumnInfo:
        return ColumnInfo(
            name=self.name,
            tpe=ColumnType(
                full_data_type=self.type,
                family=self.family,
                arity=self.arity,
                character_maximum_length=self.max_length,
            ),
            default=self.default.to_domain() if self.default else None,
            auto_increment=self.auto_increment,
        )


class ColumnPairDocument(_Document):
    previous: ColumnDocument
    next: ColumnDocument

    def to_domain(self) -> ColumnPair:
        return ColumnPair(previous=self.previous.to_domain(), next=self.next.to_domain())


def _read_document(path: Union[str, Path]) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError as e:
        raise DatamodelLoadError(str(path), "file not found", e)
    except yaml.YAMLError as e:
        raise DatamodelLoadError(str(path), "invalid YAML or JSON", e)


def datamodel_from_dict(data: Dict[str, Any], source: str = "<dict>") -> Datamodel:
    """Validate a schema document and build the model tree."""
    try:
        return DatamodelDocument.model_validate(data or {}).to_domain()
    except PydanticValidationError as e:
        raise DatamodelLoadError(source, "invalid schema document", e)


def datamodel_to_dict(datamodel: Datamodel) -> Dict[str, Any]:
    """Convert a model tree to a plain document."""
    return DatamodelDocument.from_domain(datamodel).model_dump(
        mode="json", by_alias=True, exclude_defaults=True
    )


def load_datamodel(path: Union[str, Path]) -> Datamodel:
    """
    Load a schema document from a YAML or JSON file.

    Raises:
        DatamodelLoadError: If the file is missing or invalid
    """
    datamodel = datamodel_from_dict(_read_document(path), str(path))
    logger.debug(
        f"Loaded {len(datamodel.models)} models and {len(datamodel.enums)} enums from {path}"
    )
    return datamodel


def dump_datamodel(
    datamodel: Datamodel,
    path: Optional[Union[str, Path]] = None,
    fmt: Literal["yaml", "json"] = "yaml",
) -> str:
    """Render a model tree as YAML or JSON, writing it to ``path`` if given."""
    data = datamodel_to_dict(datamodel)
    if fmt == "json":
        text = json.dumps(data, indent=2) + "\n"
    else:
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, indent=2)

    if path is not None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    return text


def load_column_pairs(path: Union[str, Path]) -> List[ColumnPair]:
    """
    Load a list of ``{previous, next}`` column documents.

    Raises:
        DatamodelLoadError: If the file is missing or invalid
    """
    data = _read_document(path)
    if not isinstance(data, list):
        raise DatamodelLoadError(str(path), "expected a list of column pairs")
    try:
        return [ColumnPairDocument.model_validate(item).to_domain() for item in data]
    except PydanticValidationError as e:
        raise DatamodelLoadError(str(path), "invalid column pair document", e)
