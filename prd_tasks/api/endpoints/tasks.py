"""
작업(Task) API입니다.
구조화된 요구사항 문서로 작업 목록을 생성하고, 조회/내보내기/보강 기능을 제공합니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from prd_tasks.exceptions import InputValidationError
from prd_tasks.models import EnrichmentRequest, TaskGenerationRequest
from prd_tasks.services.task_service import TaskService, get_task_service

router = APIRouter()

# 내보내기 형식 → (media type, 확장자)
EXPORT_FORMATS = {
    "markdown": ("text/markdown", "md"),
    "json": ("application/json", "json"),
    "yaml": ("application/x-yaml", "yaml"),
}


@router.post("/generate")
async def generate_tasks(
    request: TaskGenerationRequest,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """
    작업 목록 생성.

    전체 생성이 실패하면 최소 생성(스키마 + CRUD) 결과가 metadata.degraded=true로 반환됩니다.
    """
    task_set = service.generate(request)
    return task_set.model_dump(mode="json")


@router.get("/{task_set_id}")
async def get_task_set(
    task_set_id: str,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """ID로 TaskSet 조회"""
    return service.get(task_set_id).model_dump(mode="json")


@router.get("/{task_set_id}/export")
async def export_task_set(
    task_set_id: str,
    format: str = "markdown",
    service: TaskService = Depends(get_task_service),
) -> Response:
    """
    TaskSet을 파일로 다운로드하는 API.

    지원하는 형식:
    - markdown: 모듈별로 묶은 마크다운 (.md)
    - json: 데이터 원본 (.json)
    - yaml: 사람이 읽기 쉬운 YAML (.yaml)
    """
    if format not in EXPORT_FORMATS:
        raise InputValidationError(
            f"지원하지 않는 형식입니다: {format}",
            details={"supported": list(EXPORT_FORMATS)},
        )

    task_set = service.get(task_set_id)
    media_type, extension = EXPORT_FORMATS[format]

    if format == "markdown":
        content = task_set.to_markdown()
    elif format == "json":
        content = task_set.to_json()
    else:
        content = task_set.to_yaml()

    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{task_set.id}.{extension}"'
        }
    )


@router.post("/{task_set_id}/enrich")
async def enrich_task_set(
    task_set_id: str,
    request: Optional[EnrichmentRequest] = None,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """
    code-generation 작업에 기술 구현 가이드를 붙입니다.

    같은 TaskSet에 대한 보강이 이미 진행 중이면 409, 인증 실패면 401을 반환합니다.
    """
    task_set = await service.enrich(task_set_id, request)
    return {
        "id": task_set.id,
        "implementation_status": task_set.metadata.implementation_status,
        "implementation_skipped_reason": task_set.metadata.implementation_skipped_reason,
        "enriched_tasks": task_set.summary.enriched_tasks,
        "enrichment_failures": [f.model_dump() for f in task_set.metadata.enrichment_failures],
    }


@router.post("/{task_set_id}/enrich/cancel")
async def cancel_enrichment(
    task_set_id: str,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """진행 중인 보강 취소 요청. 이미 끝난 작업 결과는 유지됩니다."""
    cancelled = service.cancel_enrichment(task_set_id)
    return {"id": task_set_id, "cancelled": cancelled}
