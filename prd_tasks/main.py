"""
요구사항 → 개발 작업 컴파일러의 메인 진입점 파일입니다.
웹 서버 애플리케이션을 생성하고 설정하는 역할을 담당합니다.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prd_tasks import __version__
from prd_tasks.config import get_settings
from prd_tasks.api.router import api_router
from prd_tasks.exceptions import (
    TaskCompilerError,
    InputValidationError,
    MissingInputError,
    AuthenticationError,
    TaskSetNotFoundError,
    ConcurrentOperationError,
)
from prd_tasks.models import ErrorResponse

logger = logging.getLogger(__name__)

# 예외 유형 → HTTP 상태 코드 (목록에 없으면 500)
STATUS_BY_ERROR = (
    (InputValidationError, 400),
    (MissingInputError, 400),
    (AuthenticationError, 401),
    (TaskSetNotFoundError, 404),
    (ConcurrentOperationError, 409),
)


def status_code_for(exc: TaskCompilerError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션의 생명주기(시작과 종료)를 관리하는 함수입니다.

    서버가 시작될 때 설정을 불러오고 시작 로그를 출력합니다.
    서버가 종료될 때 종료 로그를 출력합니다.
    """
    settings = get_settings()
    logger.info(f"작업 컴파일러가 다음 주소에서 시작됩니다: {settings.host}:{settings.port}")
    if settings.enrichment_enabled:
        logger.info("작업 보강을 위해 Claude Code CLI를 사용합니다")
    else:
        logger.info("작업 보강이 비활성화되어 있습니다")

    yield

    logger.info("작업 컴파일러가 종료됩니다")


def create_app() -> FastAPI:
    """
    FastAPI 웹 애플리케이션을 생성하고 설정하는 함수입니다.

    주요 기능:
    1. 기본 앱 정보 설정 (제목, 설명 등)
    2. CORS 설정 (프론트엔드와의 통신 허용 설정)
    3. 예외 핸들러 등록
    4. API 라우터 연결
    """
    settings = get_settings()

    app = FastAPI(
        title="요구사항 → 개발 작업 컴파일러",
        description="구조화된 요구사항 문서를 의존성 순서가 정해진 개발 작업 목록으로 변환",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 글로벌 예외 핸들러: 커스텀 예외를 구조화된 JSON 응답으로 변환
    @app.exception_handler(TaskCompilerError)
    async def task_compiler_error_handler(request: Request, exc: TaskCompilerError):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"[{exc.error_code}] {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse.from_exception(exc).to_content(),
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.error(f"처리되지 않은 예외: {exc}", exc_info=True)
        error = ErrorResponse(error_code="ERR_INTERNAL", message="내부 서버 오류가 발생했습니다")
        return JSONResponse(status_code=500, content=error.to_content())

    # API 라우터 포함: /api/v1 주소 아래에 모든 기능을 연결합니다.
    app.include_router(api_router, prefix="/api/v1")

    return app


# 애플리케이션 인스턴스 생성
app = create_app()


@app.get("/")
async def root():
    """루트 엔드포인트: 서버의 기본 정보를 반환합니다."""
    return {
        "name": "요구사항 → 개발 작업 컴파일러",
        "version": __version__,
        "description": "구조화된 요구사항 문서를 개발 작업 목록으로 변환",
        "docs": "/docs",
        "api": "/api/v1",
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "prd_tasks.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,  # 개발 모드
    )
