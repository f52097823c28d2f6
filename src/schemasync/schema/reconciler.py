"""
Schema reconciliation core logic for schemasync.

Carries the user's naming and customizations from a previously authored
schema over to a freshly introspected one, so that re-introspecting a
database does not rename everything the user chose to call differently.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from ..context import IntrospectionContext
from ..datamodel.models import (
    Datamodel,
    DefaultKind,
    DefaultValue,
    Enum,
    EnumValue,
    FieldType,
    Model,
    RelationField,
    ScalarField,
    ValueGenerator,
)
from .warnings import (
    EnumAndValue,
    EnumRef,
    ModelAndField,
    ModelAndIndex,
    ModelRef,
    ReconciliationWarning,
    WarningCategory,
    build_warning,
)


logger = logging.getLogger(__name__)


@dataclass
class RecoveryLog:
    """Entities recovered by each phase of one reconciliation call."""

    models: List[ModelRef] = field(default_factory=list)
    indices: List[ModelAndIndex] = field(default_factory=list)
    primary_keys: List[ModelRef] = field(default_factory=list)
    fields: List[ModelAndField] = field(default_factory=list)
    relation_fields: List[ModelAndField] = field(default_factory=list)
    relation_names: List[ModelAndField] = field(default_factory=list)
    enums: List[EnumRef] = field(default_factory=list)
    enum_values: List[EnumAndValue] = field(default_factory=list)
    cuids: List[ModelAndField] = field(default_factory=list)
    uuids: List[ModelAndField] = field(default_factory=list)
    updated_at: List[ModelAndField] = field(default_factory=list)
    ignored_models: List[ModelRef] = field(default_factory=list)
    ignored_fields: List[ModelAndField] = field(default_factory=list)

    def warnings(self) -> List[ReconciliationWarning]:
        """One warning per non-empty bucket, in reporting order."""
        buckets = [
            (WarningCategory.MODEL_RENAMED, self.models),
            (WarningCategory.CUSTOM_INDEX_NAME, self.indices),
            (WarningCategory.CUSTOM_PRIMARY_KEY_NAME, self.primary_keys),
            (WarningCategory.FIELD_RENAMED, self.fields),
            (WarningCategory.ENUM_RENAMED, self.enums),
            (WarningCategory.ENUM_VALUE_RENAMED, self.enum_values),
            (WarningCategory.CUID_DEFAULT, self.cuids),
            (WarningCategory.UUID_DEFAULT, self.uuids),
            (WarningCategory.UPDATED_AT, self.updated_at),
            (WarningCategory.MODEL_IGNORED, self.ignored_models),
            (WarningCategory.FIELD_IGNORED, self.ignored_fields),
        ]
        return [build_warning(category, affected) for category, affected in buckets if affected]


class SchemaReconciler:
    """
    Core schema reconciliation engine for schemasync.

    Matches entities of the new schema with entities of the old schema by
    their database names and copies over:
    - model, field, enum and enum value names (adding explicit mappings)
    - custom index and primary key names
    - relation field names and relation names
    - application-level defaults, @updatedAt, ignore flags and documentation
    - declaration order of models and enums

    The new schema is modified in place. The engine keeps no state between
    calls.
    """

    def __init__(self, context: Optional[IntrospectionContext] = None):
        self.context = context or IntrospectionContext()

    def reconcile(self, old: Datamodel, new: Datamodel) -> List[ReconciliationWarning]:
        """
        Reconcile a freshly introspected schema with the previous one.

        Args:
            old: Previously authored schema, left untouched
            new: Introspected schema, modified in place

        Returns:
            Warnings describing what was recovered
        """
        log = RecoveryLog()

        self._recover_model_names(old, new, log)
        if self.context.named_constraints:
            self._recover_constraint_names(old, new, log)
        self._recover_field_names(old, new, log)
        self._recover_relation_field_names(old, new, log)
        self._recover_relation_names(old, new, log)
        self._recover_enum_names(old, new, log)
        self._recover_enum_value_names(old, new, log)
        if self.context.sql_family.infers_enums_per_column:
            self._recover_column_enum_names(old, new, log)
        self._recover_application_level_attributes(old, new, log)
        self._recover_ignores(old, new, log)
        self._recover_documentation(old, new)
        self._restore_order(old, new)

        warnings = log.warnings()
        logger.info(
            f"Reconciliation recovered {len(log.models)} model, {len(log.fields)} field, "
            f"{len(log.relation_fields)} relation field, {len(log.relation_names)} relation, "
            f"{len(log.enums)} enum and {len(log.enum_values)} enum value names "
            f"({len(warnings)} warnings)"
        )
        return warnings

    def _recover_model_names(self, old: Datamodel, new: Datamodel, log: RecoveryLog) -> None:
        changes: List[Tuple[Model, str]] = []
        claimed: Set[str] = set()

        for model in new.models:
            old_model = old.find_model_db_name(model.resolved_name)
            if old_model is None or old_model.name in claimed:
                continue
            if new.find_model(old_model.name) is None:
                claimed.add(old_model.name)
                changes.append((model, old_model.name))

        for model, old_name in changes:
            previous_name = model.name
            model.name = old_name
            if model.database_name is None:
                model.database_name = previous_name

            for _, relation_field in new.find_relation_fields_for_model(previous_name):
                relation_field.relation_info.to = old_name

            logger.debug(f"Recovered model name {previous_name} -> {old_name}")
            log.models.append(ModelRef(old_name))

    def _recover_constraint_names(self, old: Datamodel, new: Datamodel, log: RecoveryLog) -> None:
        for model in new.models:
            old_model = old.find_model(model.name)
            if old_model is None:
                continue

            for index in model.indices:
                if index.db_name is None:
                    continue
                old_index = next(
                    (i for i in old_model.indices if i.db_name == index.db_name), None
                )
                if old_index is None or old_index.name is None:
                    continue
                if index.name != old_index.name:
                    index.name = old_index.name
                    log.indices.append(ModelAndIndex(model.name, index.db_name))

            primary_key = model.primary_key
            old_primary_key = old_model.primary_key
            if (
                primary_key is not None
                and old_primary_key is not None
                and old_primary_key.name is not None
                and old_primary_key.fields == primary_key.fields
                and (primary_key.db_name is None or old_primary_key.db_name == primary_key.db_name)
                and primary_key.name != old_primary_key.name
            ):
                primary_key.name = old_primary_key.name
                log.primary_keys.append(ModelRef(model.name))

    def _recover_field_names(self, old: Datamodel, new: Datamodel, log: RecoveryLog) -> None:
        changes: List[Tuple[Model, ScalarField, str]] = []

        for model in new.models:
            old_model = old.find_model(model.name)
            if old_model is None:
                continue

            claimed: Set[str] = set()
            for scalar_field in model.scalar_fields():
                old_field = old_model.find_scalar_field_db_name(scalar_field.resolved_name)
                if old_field is None or old_field.name in claimed:
                    continue
                if model.find_scalar_field(old_field.name) is None:
                    claimed.add(old_field.name)
                    changes.append((model, scalar_field, old_field.name))

        for model, scalar_field, old_name in changes:
            previous_name = scalar_field.name
            scalar_field.name = old_name
            if scalar_field.database_name is None:
                scalar_field.database_name = previous_name

            if model.primary_key is not None:
                _replace_field_name(model.primary_key.fields, previous_name, old_name)
            for index in model.indices:
                _replace_field_name(index.fields, previous_name, old_name)
            for relation_field in model.relation_fields():
                _replace_field_name(relation_field.relation_info.fields, previous_name, old_name)
            for _, relation_field in new.find_relation_fields_for_model(model.name):
                _replace_field_name(relation_field.relation_info.references, previous_name, old_name)

            logger.debug(f"Recovered field name {model.name}.{previous_name} -> {old_name}")
            log.fields.append(ModelAndField(model.name, old_name))

    def _matching_old_relation_field(
        self,
        old: Datamodel,
        new: Datamodel,
        model: Model,
        relation_field: RelationField,
        many_to_many_allowed: bool,
    ) -> Optional[Tuple[RelationField, RelationField]]:
        """
        Find the old relation field describing the same relation.

        Both sides have to be compared: the side without foreign key fields
        does not carry enough information to identify the relation alone.
        """
        old_model = old.find_model(model.name)
        if old_model is None:
            return None

        related = new.find_related_field(model, relation_field)
        if related is None:
            return None
        _, related_field = related

        for old_field in old_model.relation_fields():
            old_related = old.find_related_field(old_model, old_field)
            if old_related is None:
                continue
            _, old_related_field = old_related

            if not (
                old_field.relation_info.same_shape(relation_field.relation_info)
                and old_related_field.relation_info.same_shape(related_field.relation_info)
            ):
                continue

            many_to_many = old_field.is_list and old_related_field.is_list
            if many_to_many:
                if not many_to_many_allowed:
                    continue
                # Many-to-many sides always look alike; the relation name is
                # the join table. Self relations stay ambiguous even then.
                self_relation = old_field.relation_info.to == old_related_field.relation_info.to
                if self_relation or old_field.relation_info.name != relation_field.relation_info.name:
                    continue

            return old_field, related_field

        return None

    def _recover_relation_field_names(
        self, old: Datamodel, new: Datamodel, log: RecoveryLog
    ) -> None:
        changes: List[Tuple[Model, RelationField, str]] = []

        for model in new.models:
            for relation_field in model.relation_fields():
                match = self._matching_old_relation_field(
                    old, new, model, relation_field, many_to_many_allowed=True
                )
                if match is not None and match[0].name != relation_field.name:
                    changes.append((model, relation_field, match[0].name))

        for model, relation_field, old_name in changes:
            relation_field.name = old_name
            log.relation_fields.append(ModelAndField(model.name, old_name))

    def _recover_relation_names(self, old: Datamodel, new: Datamodel, log: RecoveryLog) -> None:
        changes: List[Tuple[str, RelationField, str]] = []

        for model in new.models:
            for relation_field in model.relation_fields():
                # The opposite side was already renamed together with this one.
                if any(changed is relation_field for _, changed, _ in changes):
                    continue
                match = self._matching_old_relation_field(
                    old, new, model, relation_field, many_to_many_allowed=False
                )
                if match is None:
                    continue
                old_field, related_field = match
                if old_field.relation_info.name == relation_field.relation_info.name:
                    continue
                changes.append((model.name, relation_field, old_field.relation_info.name))
                changes.append(
                    (relation_field.relation_info.to, related_field, old_field.relation_info.name)
                )

        for model_name, relation_field, old_name in changes:
            relation_field.relation_info.name = old_name
            log.relation_names.append(ModelAndField(model_name, relation_field.name))

    def _recover_enum_names(self, old: Datamodel, new: Datamodel, log: RecoveryLog) -> None:
        changes: List[Tuple[Enum, str]] = []
        claimed: Set[str] = set()

        for enm in new.enums:
            old_enum = old.find_enum_db_name(enm.resolved_name)
            if old_enum is None or old_enum.name in claimed:
                continue
            if new.find_enum(old_enum.name) is None:
                claimed.add(old_enum.name)
                changes.append((enm, old_enum.name))

        for enm, old_name in changes:
            previous_name = enm.name
            enm.name = old_name
            if enm.database_name is None:
                enm.database_name = previous_name

            for _, scalar_field in new.find_enum_fields(previous_name):
                scalar_field.field_type = FieldType.enum_type(old_name)

            logger.debug(f"Recovered enum name {previous_name} -> {old_name}")
            log.enums.append(EnumRef(old_name))

    def _recover_enum_value_names(
        self, old: Datamodel, new: Datamodel, log: RecoveryLog
    ) -> None:
        changes: List[Tuple[Enum, EnumValue, str]] = []

        for enm in new.enums:
            old_enum = old.find_enum(enm.name)
            if old_enum is None:
                continue

            claimed: Set[str] = set()
            for value in enm.values:
                old_value = old_enum.find_value_db_name(value.resolved_name)
                if old_value is None or old_value.name in claimed:
                    continue
                if enm.find_value(old_value.name) is None:
                    claimed.add(old_value.name)
                    changes.append((enm, value, old_value.name))

        for enm, value, old_name in changes:
            previous_name = value.name
            value.name = old_name
            if value.database_name is None:
                value.database_name = previous_name

            for _, scalar_field in new.find_enum_fields(enm.name):
                default = scalar_field.default_value
                if default is not None and default.references_enum_value(previous_name):
                    scalar_field.default_value = DefaultValue.enum_value(old_name)

            log.enum_values.append(EnumAndValue(enm.name, old_name))

    def _recover_column_enum_names(
        self, old: Datamodel, new: Datamodel, log: RecoveryLog
    ) -> None:
        """
        Recover enum names on databases where enums belong to a column.

        Introspection names such enums after their table and column, so the
        old enum is found through the first field using the new one.
        """
        changes: List[Tuple[Enum, str]] = []
        claimed: Set[str] = set()

        for enm in new.enums:
            usages = new.find_enum_fields(enm.name)
            if not usages:
                continue
            model, scalar_field = usages[0]

            old_model = old.find_model(model.name)
            if old_model is None:
                continue
            old_field = old_model.find_scalar_field(scalar_field.name)
            if old_field is None or not old_field.field_type.is_enum:
                continue

            old_enum_name = old_field.field_type.enum
            old_enum = old.find_enum(old_enum_name)
            if old_enum is None:
                continue

            if (
                old_enum_name != enm.name
                and old_enum_name not in claimed
                and new.find_enum(old_enum_name) is None
                and enm.value_signature() == old_enum.value_signature()
            ):
                claimed.add(old_enum_name)
                changes.append((enm, old_enum_name))

        for enm, old_name in changes:
            previous_name = enm.name
            enm.name = old_name
            for _, scalar_field in new.find_enum_fields(previous_name):
                scalar_field.field_type = FieldType.enum_type(old_name)

            logger.debug(f"Recovered column enum name {previous_name} -> {old_name}")
            log.enums.append(EnumRef(old_name))

    def _recover_application_level_attributes(
        self, old: Datamodel, new: Datamodel, log: RecoveryLog
    ) -> None:
        """Carry over defaults and @updatedAt that only exist in the schema."""
        for model in new.models:
            old_model = old.find_model(model.name)
            if old_model is None:
                continue

            for scalar_field in model.scalar_fields():
                old_field = old_model.find_scalar_field(scalar_field.name)
                if old_field is None:
                    continue
                entity = ModelAndField(model.name, scalar_field.name)

                if scalar_field.default_value is None and scalar_field.field_type.is_string:
                    generator = _generator_of(old_field.default_value)
                    if generator == ValueGenerator.CUID:
                        scalar_field.default_value = DefaultValue.generated(ValueGenerator.CUID)
                        log.cuids.append(entity)
                    elif generator == ValueGenerator.UUID:
                        scalar_field.default_value = DefaultValue.generated(ValueGenerator.UUID)
                        log.uuids.append(entity)

                if (
                    scalar_field.field_type.is_datetime
                    and old_field.is_updated_at
                    and not scalar_field.is_updated_at
                ):
                    scalar_field.is_updated_at = True
                    log.updated_at.append(entity)

    def _recover_ignores(self, old: Datamodel, new: Datamodel, log: RecoveryLog) -> None:
        for model in new.models:
            old_model = old.find_model(model.name)
            if old_model is None:
                continue

            if old_model.is_ignored and not model.is_ignored:
                model.is_ignored = True
                log.ignored_models.append(ModelRef(model.name))

            for scalar_field in model.scalar_fields():
                old_field = old_model.find_scalar_field(scalar_field.name)
                if old_field is not None and old_field.is_ignored and not scalar_field.is_ignored:
                    scalar_field.is_ignored = True
                    log.ignored_fields.append(ModelAndField(model.name, scalar_field.name))

    def _recover_documentation(self, old: Datamodel, new: Datamodel) -> None:
        for model in new.models:
            old_model = old.find_model(model.name)
            if old_model is None:
                continue
            if old_model.documentation is not None:
                model.documentation = old_model.documentation
            for model_field in model.fields:
                old_field = old_model.find_field(model_field.name)
                if old_field is not None and old_field.documentation is not None:
                    model_field.documentation = old_field.documentation

        for enm in new.enums:
            old_enum = old.find_enum(enm.name)
            if old_enum is None:
                continue
            if old_enum.documentation is not None:
                enm.documentation = old_enum.documentation
            for value in enm.values:
                old_value = old_enum.find_value(value.name)
                if old_value is not None and old_value.documentation is not None:
                    value.documentation = old_value.documentation

    def _restore_order(self, old: Datamodel, new: Datamodel) -> None:
        """Sort by position in the old schema; new entities go last, in order."""
        model_positions = {}
        for position, model in enumerate(old.models):
            model_positions.setdefault(model.name, position)
        enum_positions = {}
        for position, enm in enumerate(old.enums):
            enum_positions.setdefault(enm.name, position)

        new.models.sort(key=lambda m: _position_key(model_positions, m.name))
        new.enums.sort(key=lambda e: _position_key(enum_positions, e.name))


def reconcile(
    old: Datamodel, new: Datamodel, context: Optional[IntrospectionContext] = None
) -> List[ReconciliationWarning]:
    """Reconcile ``new`` with ``old`` in place and return the warnings."""
    return SchemaReconciler(context).reconcile(old, new)


def _replace_field_name(fields: List[str], previous: str, replacement: str) -> None:
    for position, name in enumerate(fields):
        if name == previous:
            fields[position] = replacement


def _generator_of(default: Optional[DefaultValue]) -> Optional[ValueGenerator]:
    if default is None or default.kind != DefaultKind.EXPRESSION:
        return None
    return default.generator


def _position_key(positions: dict, name: str) -> Tuple[int, int]:
    if name in positions:
        return (0, positions[name])
    return (1, 0)
