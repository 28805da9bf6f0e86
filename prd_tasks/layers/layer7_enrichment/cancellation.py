"""보강 작업 협조적 취소 토큰."""

from typing import Optional


class CancellationToken:
    """
    협조적 취소 토큰.

    보강 실행기는 작업을 하나 보내기 직전마다 토큰을 확인합니다.
    이미 진행 중인 작업은 끝까지 수행되고 결과도 유지됩니다.
    """

    def __init__(self):
        self._cancelled = False
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._cancelled:
            self._cancelled = True
            self._reason = reason

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason
