"""
Schema model tree and its document format.
"""

from .models import (
    Datamodel,
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
    ScalarType,
    ValueGenerator,
)
from .serialization import dump_datamodel, load_column_pairs, load_datamodel

__all__ = [
    "Datamodel",
    "DefaultValue",
    "Enum",
    "EnumValue",
    "FieldArity",
    "FieldType",
    "Index",
    "Model",
    "PrimaryKey",
    "RelationField",
    "RelationInfo",
    "ScalarField",
    "ScalarType",
    "ValueGenerator",
    "dump_datamodel",
    "load_column_pairs",
    "load_datamodel",
]
