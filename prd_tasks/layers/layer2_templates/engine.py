"""
Layer 2: 작업 템플릿 엔진.

패밀리 생성 순서는 고정입니다. 뒤 패밀리의 의존성이 앞 패밀리에서 발급된 ID를 읽기 때문입니다.

┌────┬──────────────────────┬──────────────────────────────┐
│ 순서│ 패밀리               │ 단위                          │
├────┼──────────────────────┼──────────────────────────────┤
│ 1  │ 스키마 마이그레이션   │ 엔티티당 1개                  │
│ 2  │ CRUD API             │ 엔티티당 5개                  │
│ 3  │ UI                   │ 라우트 중복 제거된 화면당 1개 │
│ 4  │ 검증 규칙            │ validation 규칙당 1개         │
│ 5  │ 워크플로우           │ 워크플로우 요구사항당 1개     │
│ 6  │ 엔티티 테스트        │ 엔티티당 1개 (manual)         │
│ 7  │ 환경 셋업            │ 1개                           │
│ 8  │ 서비스 레이어        │ 엔티티당 1개                  │
│ 9  │ API 클라이언트       │ 1개                           │
│ 10 │ 라우트 설정          │ 1개                           │
│ 11 │ 내비게이션           │ 1개                           │
│ 12 │ 페이지 조립          │ 라우트당 1개                  │
│ 13 │ E2E 흐름             │ 요구사항당 1개 (manual)       │
│ 14 │ 테스트 셋업          │ 1개                           │
└────┴──────────────────────┴──────────────────────────────┘
"""

import logging
from datetime import datetime
from typing import Optional

from prd_tasks.models import ProgrammableTask
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import GenerationContext

from .schema_templates import SchemaMigrationTemplate
from .crud_templates import CrudApiTemplate
from .screen_templates import ScreenTemplate
from .rule_templates import ValidationRuleTemplate, WorkflowTemplate
from .verification_templates import EntityTestTemplate, EndToEndFlowTemplate
from .infrastructure_templates import EnvironmentSetupTemplate, TestSetupTemplate
from .service_templates import ServiceLayerTemplate
from .assembly_templates import (
    ApiClientTemplate,
    NavigationTemplate,
    PageCompositionTemplate,
    RouteConfigTemplate,
)

logger = logging.getLogger(__name__)


def default_templates() -> list[BaseTaskTemplate]:
    """도메인 작업 패밀리 (스키마 → CRUD → UI → 검증 → 워크플로우 → 엔티티 테스트)."""
    return [
        SchemaMigrationTemplate(),
        CrudApiTemplate(),
        ScreenTemplate(),
        ValidationRuleTemplate(),
        WorkflowTemplate(),
        EntityTestTemplate(),
    ]


def orchestration_templates() -> list[BaseTaskTemplate]:
    """조립 작업 패밀리 (환경 → 서비스 → 클라이언트 → 라우트 → 내비게이션 → 페이지 → E2E → 테스트 셋업)."""
    return [
        EnvironmentSetupTemplate(),
        ServiceLayerTemplate(),
        ApiClientTemplate(),
        RouteConfigTemplate(),
        NavigationTemplate(),
        PageCompositionTemplate(),
        EndToEndFlowTemplate(),
        TestSetupTemplate(),
    ]


def minimal_templates() -> list[BaseTaskTemplate]:
    """대체 생성용 최소 패밀리 (스키마 + CRUD)."""
    return [SchemaMigrationTemplate(), CrudApiTemplate()]


class TaskTemplateEngine:
    """
    템플릿을 정해진 순서대로 실행해 작업 목록을 만듭니다.

    각 템플릿은 앞서 생성된 작업 목록을 읽기 전용으로 받습니다.
    """

    def __init__(self, templates: Optional[list[BaseTaskTemplate]] = None):
        self._templates = templates

    def generate(self, context: GenerationContext) -> list[ProgrammableTask]:
        """
        모든 패밀리 실행.

        Args:
            context: 생성 컨텍스트

        Returns:
            생성 순서대로 정렬된 작업 목록

        Raises:
            GenerationError: 템플릿 실행 중 예기치 못한 예외
        """
        templates = self._templates
        if templates is None:
            templates = default_templates()
            if context.options.include_orchestration:
                templates += orchestration_templates()

        logger.info(f"[TemplateEngine] 작업 생성 시작: 템플릿 {len(templates)}개")
        start_time = datetime.now()

        tasks: list[ProgrammableTask] = []
        for template in templates:
            tasks.extend(template.generate(context, list(tasks)))

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(f"[TemplateEngine] 작업 생성 완료: {len(tasks)}개 ({elapsed:.2f}초)")
        return tasks
