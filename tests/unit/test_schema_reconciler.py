"""
Tests for schemasync.schema.reconciler module.
"""

import copy

import pytest

from schemasync.context import IntrospectionContext
from schemasync.datamodel.models import (
    Datamodel,
    FieldType,
    Index,
    Model,
    PrimaryKey,
    RelationField,
    RelationInfo,
    ScalarField,
)
from schemasync.schema.reconciler import RecoveryLog, SchemaReconciler, reconcile
from schemasync.schema.warnings import (
    EnumRef,
    ModelAndField,
    ModelRef,
    WarningCategory,
)


def _model(name, *fields, database_name=None, **kwargs):
    return Model(name=name, fields=list(fields), database_name=database_name, **kwargs)


def _int(name, database_name=None):
    return ScalarField(name, FieldType.of("Int"), database_name=database_name)


class TestRecoveryLog:
    """Test RecoveryLog warning assembly."""

    def test_empty_log_has_no_warnings(self):
        """Test that nothing recovered means no warnings."""
        assert RecoveryLog().warnings() == []

    def test_warnings_follow_reporting_order(self):
        """Test that warnings come out in category order, not insertion order."""
        log = RecoveryLog()
        log.ignored_models.append(ModelRef("Audit"))
        log.enums.append(EnumRef("Color"))
        log.fields.append(ModelAndField("User", "firstName"))
        log.models.append(ModelRef("User"))

        warnings = log.warnings()

        assert [w.code for w in warnings] == [7, 8, 9, 15]
        assert [w.category for w in warnings] == [
            WarningCategory.MODEL_RENAMED,
            WarningCategory.FIELD_RENAMED,
            WarningCategory.ENUM_RENAMED,
            WarningCategory.MODEL_IGNORED,
        ]

    def test_relation_buckets_produce_no_warnings(self):
        """Test that relation field and relation name recoveries stay silent."""
        log = RecoveryLog()
        log.relation_fields.append(ModelAndField("Post", "author"))
        log.relation_names.append(ModelAndField("Post", "author"))

        assert log.warnings() == []


class TestSchemaReconciler:
    """Test SchemaReconciler construction."""

    def test_default_context(self):
        """Test that the reconciler falls back to a PostgreSQL context."""
        reconciler = SchemaReconciler()

        assert reconciler.context == IntrospectionContext()
        assert not reconciler.context.named_constraints

    def test_identical_schemas_produce_no_warnings(self, authored_blog):
        """Test that reconciling a schema with a copy of itself changes nothing."""
        new = copy.deepcopy(authored_blog)

        warnings = reconcile(authored_blog, new)

        assert warnings == []
        assert new == authored_blog

    def test_old_schema_is_not_modified(self, authored_blog, introspected_blog):
        """Test that only the new schema is changed."""
        before = copy.deepcopy(authored_blog)

        reconcile(authored_blog, introspected_blog)

        assert authored_blog == before

    def test_empty_schemas(self):
        """Test reconciliation of empty schemas."""
        new = Datamodel()

        assert reconcile(Datamodel(), new) == []
        assert new == Datamodel()

    def test_summary_counts_relation_fields(self, authored_blog, introspected_blog, caplog):
        """Test that silent relation field recoveries still show up in the summary."""
        caplog.set_level("INFO", logger="schemasync.schema.reconciler")

        warnings = reconcile(authored_blog, introspected_blog)

        assert len(warnings) == 1
        assert "1 field, 2 relation field, 0 relation, 0 enum" in caplog.text
        assert "(1 warnings)" in caplog.text

    def test_summary_counts_relation_names(self, authored_blog, caplog):
        """Test that each renamed relation side is counted once."""
        new = copy.deepcopy(authored_blog)
        for model in new.models:
            for relation_field in model.relation_fields():
                relation_field.relation_info.name = "post_author"
        caplog.set_level("INFO", logger="schemasync.schema.reconciler")

        assert reconcile(authored_blog, new) == []

        assert new == authored_blog
        assert "0 relation field, 2 relation, 0 enum" in caplog.text


class TestModelNames:
    """Test recovery of model names."""

    def test_model_name_recovered_with_mapping(self):
        """Test that an old model name is recovered and the table name kept as a mapping."""
        old = Datamodel(models=[_model("User", _int("id"), database_name="users")])
        new = Datamodel(models=[_model("users", _int("id"))])

        warnings = reconcile(old, new)

        model = new.models[0]
        assert model.name == "User"
        assert model.database_name == "users"
        assert len(warnings) == 1
        assert warnings[0].code == 7
        assert warnings[0].affected == [ModelRef("User")]

    def test_existing_mapping_is_preserved(self):
        """Test that a mapping already present on the new model is not overwritten."""
        old = Datamodel(models=[_model("Account", _int("id"), database_name="?User")])
        new = Datamodel(models=[_model("User", _int("id"), database_name="?User")])

        reconcile(old, new)

        assert new.models[0].name == "Account"
        assert new.models[0].database_name == "?User"

    def test_relation_targets_follow_model_rename(self):
        """Test that relation fields pointing at a renamed model are updated."""
        old = Datamodel(
            models=[
                _model("User", _int("id"), database_name="users"),
                _model(
                    "Post",
                    _int("id"),
                    _int("userId"),
                    RelationField("users", RelationInfo(to="User", fields=["userId"], references=["id"])),
                ),
            ]
        )
        new = Datamodel(
            models=[
                _model("users", _int("id")),
                _model(
                    "Post",
                    _int("id"),
                    _int("userId"),
                    RelationField("users", RelationInfo(to="users", fields=["userId"], references=["id"])),
                ),
            ]
        )

        reconcile(old, new)

        assert new.get_model("Post").find_relation_field("users").relation_info.to == "User"

    def test_rename_skipped_when_old_name_taken(self):
        """Test that an old name already used by another new model is not reused."""
        old = Datamodel(models=[_model("User", _int("id"), database_name="users")])
        new = Datamodel(models=[_model("users", _int("id")), _model("User", _int("id"))])

        warnings = reconcile(old, new)

        assert [m.name for m in new.models] == ["User", "users"]
        assert new.find_model("users").database_name is None
        assert warnings == []

    def test_names_are_stable(self):
        """Test that every mapped model keeps its authored name."""
        old = Datamodel(
            models=[
                _model("User", _int("id"), database_name="users"),
                _model("Post", _int("id"), database_name="posts"),
            ]
        )
        new = Datamodel(models=[_model("users", _int("id")), _model("posts", _int("id"))])

        warnings = reconcile(old, new)

        assert [(m.name, m.database_name) for m in new.models] == [
            ("User", "users"),
            ("Post", "posts"),
        ]
        assert warnings[0].affected == [ModelRef("User"), ModelRef("Post")]

    def test_unmatched_model_is_left_alone(self):
        """Test that a model without counterpart keeps its introspected name."""
        old = Datamodel(models=[_model("User", _int("id"), database_name="users")])
        new = Datamodel(models=[_model("comments", _int("id"))])

        assert reconcile(old, new) == []
        assert new.models[0].name == "comments"


class TestFieldNames:
    """Test recovery of scalar field names."""

    def test_field_rename_scenario(self, authored_blog, introspected_blog):
        """Test the blog scenario: one field rename and recovered relation field names."""
        warnings = reconcile(authored_blog, introspected_blog)

        post = introspected_blog.get_model("Post")
        author_id = post.find_scalar_field("authorId")
        assert author_id is not None
        assert author_id.database_name == "author_id"
        assert post.find_relation_field("author").relation_info.fields == ["authorId"]
        assert introspected_blog.get_model("User").find_relation_field("posts") is not None

        assert len(warnings) == 1
        assert warnings[0].category == WarningCategory.FIELD_RENAMED
        assert warnings[0].affected == [ModelAndField("Post", "authorId")]

    def test_references_to_renamed_field_are_updated(self):
        """Test that primary keys, indices and relation references follow a field rename."""
        old = Datamodel(
            models=[
                _model(
                    "User",
                    _int("userId", database_name="user_id"),
                    primary_key=PrimaryKey(["userId"]),
                    indices=[Index(["userId"], is_unique=True)],
                ),
                _model(
                    "Post",
                    _int("id"),
                    _int("owner"),
                    RelationField("User", RelationInfo(to="User", fields=["owner"], references=["userId"])),
                ),
            ]
        )
        new = Datamodel(
            models=[
                _model(
                    "User",
                    _int("user_id"),
                    primary_key=PrimaryKey(["user_id"]),
                    indices=[Index(["user_id"], is_unique=True)],
                ),
                _model(
                    "Post",
                    _int("id"),
                    _int("owner"),
                    RelationField("User", RelationInfo(to="User", fields=["owner"], references=["user_id"])),
                ),
            ]
        )

        reconcile(old, new)

        user = new.get_model("User")
        assert user.primary_key.fields == ["userId"]
        assert user.indices[0].fields == ["userId"]
        assert new.get_model("Post").find_relation_field("User").relation_info.references == ["userId"]

    def test_duplicate_database_names_do_not_crash(self):
        """Test that two old fields mapped to the same column resolve to the first one."""
        old = Datamodel(
            models=[
                _model(
                    "User",
                    ScalarField("mail", FieldType.of("String"), database_name="email"),
                    ScalarField("emailAddress", FieldType.of("String"), database_name="email"),
                )
            ]
        )
        new = Datamodel(models=[_model("User", ScalarField("email", FieldType.of("String")))])

        warnings = reconcile(old, new)

        field = new.models[0].fields[0]
        assert field.name == "mail"
        assert field.database_name == "email"
        assert warnings[0].affected == [ModelAndField("User", "mail")]

    def test_field_rename_skipped_when_old_name_taken(self):
        """Test that a field is not renamed onto an existing field name."""
        old = Datamodel(models=[_model("User", _int("id", database_name="user_id"))])
        new = Datamodel(models=[_model("User", _int("user_id"), _int("id"))])

        assert reconcile(old, new) == []
        assert [f.name for f in new.models[0].fields] == ["user_id", "id"]

    def test_fields_of_renamed_model_are_recovered(self):
        """Test that field recovery runs against the recovered model name."""
        old = Datamodel(
            models=[_model("User", _int("createdBy", database_name="created_by"), database_name="users")]
        )
        new = Datamodel(models=[_model("users", _int("created_by"))])

        warnings = reconcile(old, new)

        assert new.models[0].name == "User"
        assert new.models[0].fields[0].name == "createdBy"
        assert [w.code for w in warnings] == [7, 8]


class TestConstraintNames:
    """Test recovery of custom index and primary key names."""

    @pytest.fixture
    def schemas(self):
        old = Datamodel(
            models=[
                _model(
                    "User",
                    _int("id"),
                    _int("email"),
                    indices=[Index(["email"], name="email_lookup", db_name="User_email_key", is_unique=True)],
                    primary_key=PrimaryKey(["id"], name="UserPk", db_name="User_pkey"),
                )
            ]
        )
        new = Datamodel(
            models=[
                _model(
                    "User",
                    _int("id"),
                    _int("email"),
                    indices=[Index(["email"], db_name="User_email_key", is_unique=True)],
                    primary_key=PrimaryKey(["id"], db_name="User_pkey"),
                )
            ]
        )
        return old, new

    def test_names_recovered_with_named_constraints(self, schemas, named_constraints_context):
        """Test that custom names come back when named constraints are enabled."""
        old, new = schemas

        warnings = reconcile(old, new, named_constraints_context)

        model = new.models[0]
        assert model.indices[0].name == "email_lookup"
        assert model.primary_key.name == "UserPk"
        assert [w.code for w in warnings] == [17, 18]
        assert warnings[0].affected[0].to_dict() == {
            "model": "User",
            "index_db_name": "User_email_key",
        }

    def test_names_not_recovered_without_named_constraints(self, schemas, postgres_context):
        """Test that the phase is skipped when the feature is off."""
        old, new = schemas

        warnings = reconcile(old, new, postgres_context)

        assert new.models[0].indices[0].name is None
        assert new.models[0].primary_key.name is None
        assert warnings == []

    def test_primary_key_with_different_fields_is_skipped(self, named_constraints_context):
        """Test that a primary key on other columns does not inherit the old name."""
        old = Datamodel(
            models=[_model("User", _int("id"), primary_key=PrimaryKey(["id"], name="UserPk"))]
        )
        new = Datamodel(
            models=[_model("User", _int("id"), _int("tenant"), primary_key=PrimaryKey(["id", "tenant"]))]
        )

        assert reconcile(old, new, named_constraints_context) == []
        assert new.models[0].primary_key.name is None


class TestOrdering:
    """Test restoration of declaration order."""

    def test_models_follow_old_order_and_new_models_go_last(self):
        """Test that known models keep their old positions and new ones are appended."""
        old = Datamodel(models=[_model("Post", _int("id")), _model("User", _int("id"))])
        new = Datamodel(
            models=[
                _model("User", _int("id")),
                _model("Comment", _int("id")),
                _model("Post", _int("id")),
                _model("Attachment", _int("id")),
            ]
        )

        reconcile(old, new)

        assert [m.name for m in new.models] == ["Post", "User", "Comment", "Attachment"]


class TestIdempotence:
    """Test that reconciling twice is a no-op the second time."""

    def test_second_run_changes_nothing(self, authored_blog, introspected_blog):
        """Test that a reconciled schema reconciles with itself silently."""
        reconcile(authored_blog, introspected_blog)
        first = copy.deepcopy(introspected_blog)
        again = copy.deepcopy(introspected_blog)

        warnings = reconcile(first, again)

        assert warnings == []
        assert again == first

    def test_reconciling_against_authored_twice(self, authored_blog, introspected_blog):
        """Test that applying the same old schema twice yields the same result."""
        reconcile(authored_blog, introspected_blog)
        once = copy.deepcopy(introspected_blog)

        warnings = reconcile(authored_blog, introspected_blog)

        assert warnings == []
        assert introspected_blog == once


class TestWarningsOutput:
    """Test warning rendering."""

    def test_warning_to_dict(self, authored_blog, introspected_blog):
        """Test that warnings serialize to plain dictionaries."""
        warnings = reconcile(authored_blog, introspected_blog)

        data = warnings[0].to_dict()

        assert data["code"] == 8
        assert data["category"] == "field_renamed"
        assert "@map" in data["message"]
        assert data["affected"] == [{"model": "Post", "field": "authorId"}]

    def test_warning_str(self, authored_blog, introspected_blog):
        """Test the one-line rendering of a warning."""
        warnings = reconcile(authored_blog, introspected_blog)

        assert str(warnings[0]).startswith("[8] ")
        assert str(warnings[0]).endswith(": Post.authorId")
