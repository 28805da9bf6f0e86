"""에러 응답 모델."""

from datetime import datetime
from typing import Optional, Any

from pydantic import BaseModel, Field

from prd_tasks.exceptions import TaskCompilerError


class ErrorResponse(BaseModel):
    """구조화된 API 에러 응답 모델."""

    error_code: str = Field(description="에러 코드 (예: ERR_INPUT_001)")
    message: str = Field(description="에러 메시지")
    details: Optional[Any] = Field(default=None, description="추가 에러 상세 정보")
    timestamp: datetime = Field(default_factory=datetime.now, description="에러 발생 시각")

    @classmethod
    def from_exception(cls, exc: TaskCompilerError) -> "ErrorResponse":
        """커스텀 예외를 응답 모델로 변환합니다."""
        return cls(error_code=exc.error_code, message=exc.message, details=exc.details)

    def to_content(self) -> dict:
        """JSONResponse 본문으로 쓸 수 있는 dict (datetime은 ISO 문자열)."""
        return self.model_dump(mode="json")
