from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    애플리케이션의 설정을 관리하는 클래스입니다.
    환경 변수(.env 파일)에서 설정값을 읽어옵니다.
    """

    # API 설정: 작업 보강(enrichment)에 사용할 AI 모델
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"

    # 작업 생성 설정
    expand_references: bool = True  # BR/SCR 참조를 작업 본문에 인라인으로 펼칠지 여부
    environment_provisioned: bool = False  # 개발 환경이 이미 구성되어 있으면 환경/테스트 셋업 작업을 skip 처리
    default_module_name: str = "core"  # 문서에 모듈명이 없을 때 사용할 기본 모듈
    orphan_policy: str = "first-requirement"  # 소속 없는 규칙/화면 배정 정책 (first-requirement | placeholder)

    # 작업 보강(enrichment) 설정
    enrichment_enabled: bool = True
    enrichment_concurrency: int = 3  # 동시에 보강할 최대 작업 수

    # 서버 설정: 서버가 실행될 주소와 포트 번호
    host: str = "0.0.0.0"  # 모든 외부 접속 허용
    port: int = 8000
    allowed_origins: list[str] = ["http://localhost:3000"]

    class Config:
        # 설정을 읽어올 파일 지정
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """
    설정을 가져오는 함수입니다.
    @lru_cache를 사용하여 한 번 읽은 설정은 메모리에 저장해두고 재사용합니다.
    """
    return Settings()
