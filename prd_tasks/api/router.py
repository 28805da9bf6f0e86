"""
API 라우터 설정 파일입니다.
기능별로 나누어진 API 주소들을 하나로 모읍니다.
"""

from fastapi import APIRouter

from prd_tasks.api.endpoints import health, tasks

# 메인 API 라우터 생성
api_router = APIRouter()

# 헬스 체크 엔드포인트: 서버 상태 확인용 (/health)
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)

# 작업 엔드포인트: 작업 생성, 조회, 내보내기, 보강 (/tasks)
api_router.include_router(
    tasks.router,
    prefix="/tasks",
    tags=["tasks"]
)
