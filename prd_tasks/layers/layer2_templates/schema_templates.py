"""스키마 마이그레이션 작업 템플릿 (엔티티당 1개)."""

import logging

from prd_tasks.models import (
    ColumnSpec,
    DatabasePayload,
    Entity,
    ForeignKeySpec,
    IndexSpec,
    Priority,
    ProgrammableTask,
    TaskSpecification,
    TaskType,
)
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import GenerationContext

from .type_mapping import AUDIT_COLUMNS, SOFT_DELETE_COLUMNS, sql_type_for

logger = logging.getLogger(__name__)


class SchemaMigrationTemplate(BaseTaskTemplate):
    """엔티티마다 테이블 생성 마이그레이션 작업을 만듭니다. ID는 어댑터가 예약한 값을 사용합니다."""

    _template_name = "SchemaMigrationTemplate"

    def _do_generate(self, context, existing):
        return [self._build(context, entity) for entity in context.entities]

    def _build(self, context: GenerationContext, entity: Entity) -> ProgrammableTask:
        task_id = context.migration_ids[entity.name]
        table = entity.table_name
        payload = self._payload(context, entity)

        requirements = [f'Create table "{table}" for entity {entity.name}']
        for col in payload.columns:
            suffix = " PRIMARY KEY" if col.primary_key else ""
            requirements.append(f"Column {col.name}: {col.sql_type}{suffix}")
        for col in payload.columns:
            if not col.nullable and not col.primary_key:
                requirements.append(f"{col.name} NOT NULL")
        for col in payload.columns:
            if col.unique and not col.primary_key:
                requirements.append(f"{col.name} UNIQUE")
        for idx in payload.indexes:
            requirements.append(f"Create index {idx.name} on ({', '.join(idx.columns)})")
        for fk in payload.foreign_keys:
            requirements.append(
                f"Foreign key {fk.column} references {fk.references_table}({fk.references_column}) "
                f"ON DELETE {fk.on_delete} ON UPDATE {fk.on_update}"
            )
        if payload.audit_columns:
            requirements.append(f"Add audit columns: {', '.join(payload.audit_columns)}")
        if payload.soft_delete_columns:
            requirements.append(f"Add soft delete columns: {', '.join(payload.soft_delete_columns)}")

        acceptance = [
            f'Table "{table}" exists in the database',
            f"Primary key is defined on {payload.primary_key}",
            "All columns match the declared types and NOT NULL constraints",
        ]
        if any(c.unique and not c.primary_key for c in payload.columns):
            acceptance.append("Unique constraints reject duplicate values")
        if payload.foreign_keys:
            acceptance.append("Foreign keys reject references to missing rows")
        if payload.audit_columns:
            acceptance.append("Audit columns are present and populated on insert/update")
        if payload.soft_delete_columns:
            acceptance.append("Soft-deleted rows keep deleted_at/deleted_by and are excluded from default queries")
        acceptance.append("Migration can be rolled back cleanly")

        spec = TaskSpecification(
            objective=f"Create the database table for {entity.name}",
            context=entity.description or f"{entity.kind.value} entity {entity.name}",
            requirements=requirements,
            payload=payload,
            technical_notes=["Write the migration as a reversible up/down pair"],
            edge_cases=["Running the migration twice must not fail or duplicate objects"],
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"Create {table} table migration",
            task_type=TaskType.DATABASE_MIGRATION,
            specification=spec,
            priority=Priority.MUST,
            related_requirement=self._entity_requirement_id(context, entity),
            related_entity=entity.name,
            acceptance_criteria=acceptance,
            test_cases=[
                self._test_case(task_id, 1, "Migration applies on an empty database", "integration",
                                expected_result=f"Table {table} exists"),
                self._test_case(task_id, 2, "Migration rollback removes the table", "integration",
                                expected_result=f"Table {table} no longer exists"),
            ],
            tags=["database", "migration", entity.name],
        )

    def _payload(self, context: GenerationContext, entity: Entity) -> DatabasePayload:
        columns = [
            ColumnSpec(
                name=f.column_name,
                sql_type=sql_type_for(f.data_type),
                nullable=f.constraints.nullable and not f.constraints.primary_key,
                unique=f.constraints.unique,
                primary_key=f.constraints.primary_key,
                default=f.default_value,
            )
            for f in entity.fields
        ]

        indexes = [
            IndexSpec(
                name=f"idx_{entity.table_name}_{f.column_name}",
                columns=[f.column_name],
                unique=f.constraints.unique,
            )
            for f in entity.fields
            if f.constraints.indexed and not f.constraints.primary_key
        ]

        foreign_keys = []
        for rel in context.relationships:
            if rel.source.entity != entity.name:
                continue
            target = context.entity_index.get(rel.target.entity)
            if target is None:
                logger.warning(
                    f"[{self._template_name}] 관계 {rel.name}의 대상 엔티티 없음: {rel.target.entity}"
                )
                continue
            source_field = entity.find_field(rel.source.field)
            target_field = target.find_field(rel.target.field)
            foreign_keys.append(ForeignKeySpec(
                column=source_field.column_name if source_field else rel.source.field,
                references_table=target.table_name,
                references_column=target_field.column_name if target_field else target.primary_key_column,
            ))

        return DatabasePayload(
            table_name=entity.table_name,
            columns=columns,
            primary_key=entity.primary_key_column,
            indexes=indexes,
            foreign_keys=foreign_keys,
            audit_columns=list(AUDIT_COLUMNS) if entity.is_auditable else [],
            soft_delete_columns=list(SOFT_DELETE_COLUMNS) if entity.is_soft_delete else [],
        )
