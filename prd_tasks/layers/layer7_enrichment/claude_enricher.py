"""Claude 기반 작업 보강기 - 작업별 기술 구현 가이드 생성."""

import json
import logging
from datetime import datetime
from typing import Any, Optional

from prd_tasks.exceptions import AuthenticationError, EnrichmentError
from prd_tasks.models import ProgrammableTask, TechnicalImplementation
from prd_tasks.services import ClaudeClient, get_claude_client

from .base_enricher import BaseTaskEnricher, EnrichmentContext
from .prompts import ENRICHMENT_SYSTEM_PROMPT, TASK_IMPLEMENTATION_PROMPT

logger = logging.getLogger(__name__)


class ClaudeTaskEnricher(BaseTaskEnricher):
    """Claude CLI로 작업의 기술 구현 가이드를 생성합니다."""

    def __init__(self, claude_client: Optional[ClaudeClient] = None):
        self.claude_client = claude_client or get_claude_client()

    async def enrich(
        self,
        task: ProgrammableTask,
        context: EnrichmentContext,
    ) -> TechnicalImplementation:
        """
        작업 하나 보강.

        Raises:
            AuthenticationError: 인증 실패 (그대로 전파)
            EnrichmentError: 응답이 비었거나 형식이 잘못됨
        """
        prompt = self._build_prompt(task, context)
        start = datetime.now()

        try:
            result = await self.claude_client.complete_json(
                system_prompt=ENRICHMENT_SYSTEM_PROMPT,
                user_prompt=prompt,
                temperature=0.2,
            )
        except AuthenticationError:
            raise
        except ValueError as e:
            raise EnrichmentError(f"{task.id} 응답 JSON 파싱 실패: {e}", details={"task_id": task.id}) from e

        implementation = self._extract(task.id, result)
        elapsed = (datetime.now() - start).total_seconds()
        logger.info(f"[ClaudeTaskEnricher] {task.id} 보강 완료: {elapsed:.1f}초")
        return implementation

    @staticmethod
    def _build_prompt(task: ProgrammableTask, context: EnrichmentContext) -> str:
        requirements = "\n".join(f"- {r}" for r in task.specification.requirements)
        criteria = "\n".join(f"- {c}" for c in task.acceptance_criteria)
        payload = task.specification.payload
        payload_json = json.dumps(payload.model_dump(mode="json"), ensure_ascii=False, indent=2) if payload else "{}"
        stack = ", ".join(context.preferred_stack) if context.preferred_stack else "지정되지 않음"

        return f"""{TASK_IMPLEMENTATION_PROMPT}

프로젝트: {context.project_name} (모듈: {context.module_name})
선호 기술 스택: {stack}

작업 ID: {task.id}
작업 제목: {task.title}
작업 유형: {task.type.value}
목표: {task.specification.objective}

요구사항:
{requirements or "- 없음"}

인수 조건:
{criteria or "- 없음"}

상세 명세:
{payload_json}
"""

    @staticmethod
    def _extract(task_id: str, result: Any) -> TechnicalImplementation:
        """응답에서 해당 작업의 technicalImplementation을 꺼냅니다."""
        if not isinstance(result, dict) or not result:
            raise EnrichmentError(f"{task_id} 응답이 비어 있습니다", details={"task_id": task_id})

        entry: Any = None
        implementations = result.get("implementations")
        if isinstance(implementations, list):
            entry = next((i for i in implementations if isinstance(i, dict) and i.get("id") == task_id), None)
            if entry is None and len(implementations) == 1:
                entry = implementations[0]
        elif "technicalImplementation" in result:
            entry = result

        data = entry.get("technicalImplementation") if isinstance(entry, dict) else None
        if not isinstance(data, dict):
            raise EnrichmentError(
                f"{task_id} 응답에 technicalImplementation이 없습니다",
                details={"task_id": task_id},
            )

        effort = data.get("estimatedEffortHours")
        return TechnicalImplementation(
            stack=_as_list(data.get("stack")),
            libraries=_as_list(data.get("libraries")),
            infra=_as_list(data.get("infra")),
            config=_as_list(data.get("config")),
            steps=_as_list(data.get("steps")),
            code_examples=_as_list(data.get("codeExamples")),
            estimated_effort_hours=float(effort) if isinstance(effort, (int, float)) else None,
        )


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]
