"""Claude Code CLI client service for task enrichment.

Uses Claude CLI (claude -p) for all AI operations.

이 모듈은 Claude CLI를 래핑하여 비동기 AI 호출을 제공합니다.

주요 기능:
- complete(): 텍스트 응답 요청
- complete_json(): JSON 응답 요청 (자동 파싱)

실행 환경:
- Claude CLI가 PATH에 설치되어 있어야 함
- ThreadPoolExecutor를 사용하여 동기 CLI 호출을 비동기로 래핑

재시도 전략:
- 최대 3회 시도
- 지수 백오프 (2초, 4초)
- 인증 실패(401/403, 로그인 필요)는 재시도하지 않고 즉시 AuthenticationError
"""

import json
import subprocess
import os
import sys
import asyncio
import logging
from typing import Optional
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor

from prd_tasks.exceptions import AuthenticationError, ClaudeClientError

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# stderr에 이 문자열이 있으면 인증 실패로 판단
AUTH_ERROR_MARKERS = (
    "401",
    "403",
    "unauthorized",
    "forbidden",
    "authentication",
    "invalid api key",
    "not logged in",
    "please run /login",
)


def is_auth_failure(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in AUTH_ERROR_MARKERS)


class ClaudeClient:
    """
    Claude Code CLI 래퍼 클래스.

    Attributes:
        _max_retries: 최대 시도 횟수 (기본값: 3)
        _retry_delay: 초기 재시도 대기 시간(초) (기본값: 2)
        _executor: CLI 실행용 ThreadPoolExecutor
    """

    def __init__(self, max_retries: int = 3, retry_delay: float = 2):
        """
        ClaudeClient 초기화.

        ThreadPoolExecutor의 max_workers는 CPU 코어 수에 따라 동적 설정:
        - 최소: 2
        - 최대: 8
        """
        self._max_retries = max_retries
        self._retry_delay = retry_delay  # seconds

        cpu_count = os.cpu_count() or 4
        max_workers = min(8, max(2, cpu_count))
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

        logger.info(f"[ClaudeClient] CLI 모드 초기화 완료 (workers={max_workers})")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
    ) -> str:
        """
        Send a completion request to Claude via CLI.

        Args:
            system_prompt: System-level instructions
            user_prompt: User message content
            temperature: Sampling temperature (not used in CLI mode)

        Returns:
            Claude's response text
        """
        full_prompt = f"""당신은 요구사항을 개발 작업으로 구체화하는 소프트웨어 아키텍트입니다.

다음 지침을 따라 작업해 주세요:
{system_prompt}

---

{user_prompt}"""

        return await self._execute_claude_cli(full_prompt)

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
    ) -> dict:
        """
        Send a completion request expecting JSON response.

        Args:
            system_prompt: System-level instructions (should specify JSON output)
            user_prompt: User message content
            temperature: Lower temperature for more consistent JSON

        Returns:
            Parsed JSON response as dict

        Raises:
            AuthenticationError: CLI 인증 실패
            ValueError: JSON 파싱 실패
        """
        full_prompt = f"""당신은 요구사항을 개발 작업으로 구체화하는 소프트웨어 아키텍트입니다.

다음 지침을 따라 작업해 주세요:
{system_prompt}

---

{user_prompt}

---

응답 형식: 반드시 유효한 JSON만 출력하세요. 설명이나 마크다운 코드 블록 없이 순수 JSON만 반환합니다."""

        response = await self._execute_claude_cli(full_prompt)
        return self._parse_json_response(response)

    def _get_env(self) -> dict:
        """Get environment with proper PATH for Claude CLI."""
        env = os.environ.copy()

        if sys.platform == "win32":
            extra_paths = [
                os.path.expanduser("~\\AppData\\Roaming\\npm"),
            ]
            path_separator = ";"
        else:
            extra_paths = [
                os.path.expanduser("~/.npm-global/bin"),
                "/usr/local/bin",
                "/opt/homebrew/bin",
            ]
            path_separator = ":"

        env["PATH"] = path_separator.join(extra_paths) + path_separator + env.get("PATH", "")
        return env

    def _run_claude_sync(self, prompt: str) -> str:
        """Run Claude CLI synchronously."""
        env = self._get_env()

        logger.info(f"[CLI] 프롬프트 길이: {len(prompt)} chars")
        start_time = datetime.now()

        try:
            use_shell = sys.platform == "win32"
            result = subprocess.run(
                ["claude", "-p", prompt, "--output-format", "text"],
                capture_output=True,
                text=True,
                timeout=300,  # 5 minute timeout
                env=env,
                shell=use_shell,
                encoding='utf-8',
            )
        except subprocess.TimeoutExpired:
            elapsed = (datetime.now() - start_time).total_seconds()
            logger.error(f"[CLI] 타임아웃! {elapsed:.1f}초")
            raise

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(f"[CLI] 완료: {elapsed:.1f}초, returncode={result.returncode}")

        if result.returncode != 0:
            error_msg = result.stderr or result.stdout or "Unknown error"
            logger.error(f"[CLI] 에러: {error_msg}")
            if is_auth_failure(error_msg):
                raise AuthenticationError(
                    "Claude CLI 인증에 실패했습니다",
                    details={"stderr": error_msg.strip()[:500]},
                )
            raise ClaudeClientError(f"Claude CLI error: {error_msg}")

        logger.info(f"[CLI] 응답 길이: {len(result.stdout)} chars")
        return result.stdout.strip()

    async def _execute_claude_cli(self, prompt: str) -> str:
        """
        Claude Code CLI를 비동기로 실행.

        재시도 전략:
        ┌─────────────────────────────────────────────────────┐
        │ 시도 │ 대기 시간 │ 누적 시간 │                      │
        ├─────────────────────────────────────────────────────┤
        │ 1차  │ -         │ 0초       │ 첫 시도              │
        │ 2차  │ 2초       │ 2초       │ 2^0 * 2초           │
        │ 3차  │ 4초       │ 6초       │ 2^1 * 2초           │
        └─────────────────────────────────────────────────────┘

        AuthenticationError는 재시도하지 않고 바로 전파합니다.

        Args:
            prompt: Claude에 전송할 프롬프트

        Returns:
            Claude의 응답 텍스트

        Raises:
            AuthenticationError: 인증 실패 (첫 시도에서 즉시)
            마지막 시도에서 발생한 예외
        """
        last_error: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                logger.info(f"[CLI] 시도 {attempt + 1}/{self._max_retries}")

                # ThreadPoolExecutor에서 동기 CLI 실행
                loop = asyncio.get_running_loop()
                result = await loop.run_in_executor(
                    self._executor, self._run_claude_sync, prompt
                )

                logger.info(f"[CLI] 시도 {attempt + 1} 성공")
                return result

            except AuthenticationError:
                logger.error("[CLI] 인증 실패 - 재시도하지 않음")
                raise

            except Exception as e:
                last_error = e
                logger.error(f"[CLI] 시도 {attempt + 1} 실패: {type(e).__name__}: {e}")

                # 마지막 시도가 아니면 지수 백오프 대기
                if attempt < self._max_retries - 1:
                    wait_time = self._retry_delay * (2 ** attempt)
                    logger.info(f"[CLI] {wait_time}초 후 재시도...")
                    await asyncio.sleep(wait_time)

        logger.error(f"[CLI] 모든 시도 실패: {last_error}")
        raise last_error

    def _parse_json_response(self, response: Optional[str]) -> dict:
        """
        Claude 응답에서 JSON 파싱 (포맷팅 문제 처리 포함).

        파싱 전략 3단계:
        ┌─────────────────────────────────────────────────────────────┐
        │ 단계     │ 방법                     │ 성공 시               │
        ├─────────────────────────────────────────────────────────────┤
        │ 1. 직접  │ 마크다운 제거 후 파싱    │ 바로 반환             │
        │ 2. 추출  │ JSON 구조 찾아서 파싱    │ 추출된 JSON 반환      │
        │ 3. 실패  │ -                        │ ValueError 발생       │
        └─────────────────────────────────────────────────────────────┘

        빈 응답은 빈 딕셔너리로 처리합니다.

        Args:
            response: Claude의 원시 응답 텍스트

        Returns:
            파싱된 JSON 딕셔너리 또는 리스트

        Raises:
            ValueError: JSON 파싱 실패 시
        """
        if not response or not response.strip():
            logger.warning("[JSON] 빈 응답")
            return {}

        # ========== 1단계: 마크다운 코드 블록 제거 ==========
        cleaned = response.strip()

        if cleaned.startswith("```json"):
            cleaned = cleaned[7:]
        elif cleaned.startswith("```"):
            cleaned = cleaned[3:]
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
        cleaned = cleaned.strip()

        try:
            result = json.loads(cleaned)
            logger.debug("[JSON] 직접 파싱 성공")
            return result
        except json.JSONDecodeError as e:
            logger.warning(f"[JSON] 직접 파싱 실패: {e}")

            # ========== 2단계: JSON 구조 추출 파싱 ==========
            start_idx = cleaned.find("{")
            if start_idx == -1:
                start_idx = cleaned.find("[")

            if start_idx != -1:
                bracket = "{" if cleaned[start_idx] == "{" else "["
                closing = "}" if bracket == "{" else "]"

                # 괄호 깊이 추적하여 완전한 JSON 범위 찾기
                depth = 0
                end_idx = start_idx

                for i, char in enumerate(cleaned[start_idx:], start_idx):
                    if char == bracket:
                        depth += 1
                    elif char == closing:
                        depth -= 1
                        if depth == 0:
                            end_idx = i + 1
                            break

                try:
                    result = json.loads(cleaned[start_idx:end_idx])
                    logger.debug("[JSON] 추출 파싱 성공")
                    return result
                except json.JSONDecodeError as e2:
                    logger.error(f"[JSON] 추출 파싱 실패: {e2}")

            # ========== 3단계: 최종 실패 ==========
            logger.error("[JSON] 최종 파싱 실패")
            raise ValueError(f"Failed to parse JSON response: {e}")


# Singleton instance for dependency injection
_claude_client: Optional[ClaudeClient] = None


def get_claude_client() -> ClaudeClient:
    """Get or create Claude client singleton."""
    global _claude_client
    if _claude_client is None:
        _claude_client = ClaudeClient()
    return _claude_client
