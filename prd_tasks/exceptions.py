"""
작업 컴파일러 커스텀 예외 계층입니다.
각 레이어/서비스별 구조화된 에러 코드와 메시지를 제공합니다.
"""

from typing import Optional, Any


class TaskCompilerError(Exception):
    """작업 컴파일러 기본 예외 클래스."""

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_UNKNOWN",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class InputValidationError(TaskCompilerError):
    """입력 유효성 검증 에러 (400 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_INPUT_001", details=details)


class MissingInputError(TaskCompilerError):
    """Layer 1: 문서 또는 엔티티가 없어 작업을 생성할 수 없음."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_INPUT_002", details=details)


class GenerationError(TaskCompilerError):
    """Layer 2: 작업 템플릿 실행 중 예기치 못한 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_GEN_001", details=details)


class GraphConsistencyError(TaskCompilerError):
    """Layer 4: 의존성 그래프에 순환 또는 존재하지 않는 작업 ID가 있음."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_GRAPH_001", details=details)


class EnrichmentError(TaskCompilerError):
    """Layer 7: 개별 작업 보강 실패. 작업 단위로 기록되고 전체 결과는 유지됩니다."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_ENRICH_001", details=details)


class AuthenticationError(TaskCompilerError):
    """AI 공급자 인증 실패. 재시도하지 않고 보강 배치 전체를 중단합니다."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_AUTH_001", details=details)


class ClaudeClientError(TaskCompilerError):
    """Claude AI 클라이언트 통신 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CLAUDE_001", details=details)


class ConcurrentOperationError(TaskCompilerError):
    """같은 TaskSet에 대해 이미 보강 작업이 진행 중 (409 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CONFLICT_001", details=details)


class TaskSetNotFoundError(TaskCompilerError):
    """요청한 TaskSet이 존재하지 않음 (404 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_NOT_FOUND_001", details=details)
