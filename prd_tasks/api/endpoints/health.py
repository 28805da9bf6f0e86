"""
헬스 체크(Health Check) 엔드포인트입니다.
서버가 정상적으로 응답하는지 확인하는 용도입니다.
"""

from fastapi import APIRouter

from prd_tasks import __version__
from prd_tasks.config import get_settings

router = APIRouter()


@router.get("")
async def health_check():
    """기본 상태 확인. 서버가 켜져 있으면 {"status": "healthy"}를 반환합니다."""
    return {"status": "healthy"}


@router.get("/detail")
async def health_check_detail():
    """
    상세 상태 확인 함수.
    현재 작업 생성/보강 설정도 같이 보여줍니다.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "version": __version__,
        "config": {
            "claude_model": settings.claude_model,
            "expand_references": settings.expand_references,
            "environment_provisioned": settings.environment_provisioned,
            "enrichment_enabled": settings.enrichment_enabled,
            "enrichment_concurrency": settings.enrichment_concurrency,
            "api_key_configured": bool(settings.anthropic_api_key),
        }
    }
