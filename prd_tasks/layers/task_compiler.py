"""
요구사항 → 작업 컴파일러.

처리 흐름:
┌────────────────────────────────────────────────────────────┐
│ Layer 1  문서 모델 어댑터     → GenerationContext           │
│ Layer 2  작업 템플릿 엔진     → 패밀리 순서대로 작업 생성    │
│ Layer 3  참조 확장           → BR/SCR/FR 조각 인라인        │
│ Layer 4  의존성 해석         → 마이그레이션 간선, 그래프 검증 │
│ Layer 5  분류               → 계층/복잡도                   │
│ Layer 6  요약               → TaskSummary, 크리티컬 패스     │
└────────────────────────────────────────────────────────────┘

컴파일은 동기적이고 부수 효과가 없습니다. 같은 입력과 같은 generated_at이면 같은 TaskSet이 나옵니다.
Layer 7(보강)은 TaskService가 별도로 실행합니다.
"""

import hashlib
import logging
from datetime import datetime
from typing import Optional

from prd_tasks import __version__
from prd_tasks.models import (
    Entity,
    GenerationOptions,
    ProgrammableTask,
    Relationship,
    StructuredRequirementDoc,
    TaskSet,
    TaskSetMetadata,
)

from .layer1_adapter import GenerationContext, build_context
from .layer2_templates import TaskTemplateEngine, minimal_templates
from .layer3_expansion import expand_references
from .layer4_dependencies import (
    attach_dependents,
    calculate_critical_path,
    resolve_dependencies,
    validate_graph,
)
from .layer5_classification import classify_tasks
from .layer6_summary import summarize

logger = logging.getLogger(__name__)


class TaskCompiler:
    """구조화된 요구사항 문서를 TaskSet으로 컴파일합니다."""

    def compile(
        self,
        document: Optional[StructuredRequirementDoc],
        entities: Optional[list[Entity]],
        relationships: Optional[list[Relationship]] = None,
        schema_text: str = "",
        options: Optional[GenerationOptions] = None,
        generated_at: Optional[datetime] = None,
    ) -> TaskSet:
        """
        전체 작업 패밀리 컴파일.

        Args:
            document: 구조화된 요구사항 문서
            entities: 엔티티 목록
            relationships: 관계 목록
            schema_text: 스키마 텍스트 (해시만 기록)
            options: 생성 옵션
            generated_at: 생성 시각 (테스트에서 고정할 때 사용)

        Returns:
            TaskSet

        Raises:
            MissingInputError: 문서/엔티티 없음
            GenerationError: 템플릿 실행 실패
            GraphConsistencyError: 순환 또는 존재하지 않는 의존성
        """
        logger.info("[TaskCompiler] 컴파일 시작")
        start_time = datetime.now()

        context = build_context(document, entities, relationships, schema_text, options)
        tasks = TaskTemplateEngine().generate(context)
        task_set = self._finalize(context, tasks, generated_at)

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"[TaskCompiler] 컴파일 완료: 작업 {task_set.summary.total_tasks}개, "
            f"전체 복잡도 {task_set.summary.overall_complexity.value} ({elapsed:.2f}초)"
        )
        return task_set

    def compile_minimal(
        self,
        document: Optional[StructuredRequirementDoc],
        entities: Optional[list[Entity]],
        relationships: Optional[list[Relationship]] = None,
        schema_text: str = "",
        options: Optional[GenerationOptions] = None,
        generated_at: Optional[datetime] = None,
        reason: Optional[str] = None,
    ) -> TaskSet:
        """
        최소 생성기 (스키마 마이그레이션 + CRUD만).

        전체 컴파일이 GenerationError로 실패했을 때 호출자가 대체 결과로 사용합니다.
        """
        logger.warning(f"[TaskCompiler] 최소 생성 모드: {reason or '요청됨'}")

        context = build_context(document, entities, relationships, schema_text, options)
        tasks = TaskTemplateEngine(minimal_templates()).generate(context)
        task_set = self._finalize(context, tasks, generated_at)

        metadata = task_set.metadata.model_copy(update={
            "degraded": True,
            "degraded_reason": reason or "minimal generation requested",
        })
        return task_set.model_copy(update={"metadata": metadata})

    def _finalize(
        self,
        context: GenerationContext,
        tasks: list[ProgrammableTask],
        generated_at: Optional[datetime],
    ) -> TaskSet:
        tasks = expand_references(tasks, context)
        tasks = resolve_dependencies(tasks, context.migration_ids)
        validate_graph(tasks)
        tasks = attach_dependents(tasks)
        tasks = classify_tasks(tasks)

        critical_path = calculate_critical_path(tasks)
        summary = summarize(tasks, critical_path)

        metadata = TaskSetMetadata(
            generator_version=__version__,
            prd_id=context.document.id,
            project_name=context.document.project_name,
            module_name=context.module_name,
            schema_ref=_schema_ref(context.schema_text),
            expand_references=context.options.expand_references,
        )

        return TaskSet(
            id=_task_set_id(context.document.id, tasks),
            generated_at=generated_at or datetime.now(),
            tasks=tasks,
            summary=summary,
            metadata=metadata,
        )


def _schema_ref(schema_text: str) -> Optional[str]:
    if not schema_text:
        return None
    return hashlib.sha256(schema_text.encode("utf-8")).hexdigest()[:12]


def _task_set_id(prd_id: str, tasks: list[ProgrammableTask]) -> str:
    """문서 ID와 작업 내용으로 결정적인 TaskSet ID 생성."""
    digest = hashlib.sha256(prd_id.encode("utf-8"))
    for task in tasks:
        digest.update(task.model_dump_json().encode("utf-8"))
    return f"TASKSET-{digest.hexdigest()[:12]}"
