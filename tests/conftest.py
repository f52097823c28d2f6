"""
Pytest configuration and shared fixtures for schemasync tests.

This module provides shared fixtures and builders for testing all schemasync components.
"""

import logging
from typing import Callable, Optional

import pytest

from schemasync.context import IntrospectionContext
from schemasync.database.describer import (
    ColumnArity,
    ColumnDefault,
    ColumnInfo,
    ColumnPair,
    ColumnType,
    ColumnTypeFamily,
)
from schemasync.datamodel.models import (
    Datamodel,
    FieldArity,
    FieldType,
    Model,
    PrimaryKey,
    RelationField,
    RelationInfo,
    ScalarField,
)


# ============================================================================
# Context Fixtures
# ============================================================================

@pytest.fixture
def postgres_context() -> IntrospectionContext:
    """Default PostgreSQL context without preview features."""
    return IntrospectionContext.create("postgresql")


@pytest.fixture
def named_constraints_context() -> IntrospectionContext:
    """PostgreSQL context with named constraints enabled."""
    return IntrospectionContext.create("postgresql", ["namedConstraints"])


@pytest.fixture
def mysql_context() -> IntrospectionContext:
    """MySQL context, where enums are inferred per column."""
    return IntrospectionContext.create("mysql")


# ============================================================================
# Datamodel Fixtures
# ============================================================================

@pytest.fixture
def authored_blog() -> Datamodel:
    """A user-authored blog schema with custom field names."""
    return Datamodel(
        models=[
            Model(
                name="User",
                fields=[
                    ScalarField("id", FieldType.of("Int")),
                    RelationField(
                        "posts",
                        RelationInfo(to="Post", name="PostToUser"),
                        arity=FieldArity.LIST,
                    ),
                ],
                primary_key=PrimaryKey(["id"]),
            ),
            Model(
                name="Post",
                fields=[
                    ScalarField("id", FieldType.of("Int")),
                    ScalarField("authorId", FieldType.of("Int"), database_name="author_id"),
                    RelationField(
                        "author",
                        RelationInfo(
                            to="User", fields=["authorId"], references=["id"], name="PostToUser"
                        ),
                    ),
                ],
                primary_key=PrimaryKey(["id"]),
            ),
        ]
    )


@pytest.fixture
def introspected_blog() -> Datamodel:
    """The same blog schema as a fresh introspection names it."""
    return Datamodel(
        models=[
            Model(
                name="User",
                fields=[
                    ScalarField("id", FieldType.of("Int")),
                    RelationField(
                        "Post",
                        RelationInfo(to="Post", name="PostToUser"),
                        arity=FieldArity.LIST,
                    ),
                ],
                primary_key=PrimaryKey(["id"]),
            ),
            Model(
                name="Post",
                fields=[
                    ScalarField("id", FieldType.of("Int")),
                    ScalarField("author_id", FieldType.of("Int")),
                    RelationField(
                        "User",
                        RelationInfo(
                            to="User", fields=["author_id"], references=["id"], name="PostToUser"
                        ),
                    ),
                ],
                primary_key=PrimaryKey(["id"]),
            ),
        ]
    )


# ============================================================================
# Column Fixtures
# ============================================================================

@pytest.fixture
def make_column() -> Callable[..., ColumnInfo]:
    """Builder for column descriptions."""

    def _make_column(
        name: str = "col",
        full_data_type: str = "text",
        family: ColumnTypeFamily = ColumnTypeFamily.STRING,
        arity: ColumnArity = ColumnArity.REQUIRED,
        default: Optional[ColumnDefault] = None,
        auto_increment: bool = False,
        max_length: Optional[int] = None,
    ) -> ColumnInfo:
        return ColumnInfo(
            name=name,
            tpe=ColumnType(
                full_data_type=full_data_type,
                family=family,
                arity=arity,
                character_maximum_length=max_length,
            ),
            default=default,
            auto_increment=auto_increment,
        )

    return _make_column


@pytest.fixture
def make_pair(make_column) -> Callable[..., ColumnPair]:
    """Builder for a pair of columns that only differ in their defaults."""

    def _make_pair(
        previous_default: Optional[ColumnDefault],
        next_default: Optional[ColumnDefault],
        family: ColumnTypeFamily = ColumnTypeFamily.STRING,
        full_data_type: str = "text",
    ) -> ColumnPair:
        return ColumnPair(
            previous=make_column(
                full_data_type=full_data_type, family=family, default=previous_default
            ),
            next=make_column(full_data_type=full_data_type, family=family, default=next_default),
        )

    return _make_pair


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture
def restore_logging():
    """Restore root logger handlers changed by CLI commands."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
