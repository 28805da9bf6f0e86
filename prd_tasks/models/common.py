"""
공통 데이터 모델 모듈입니다.
요구사항 문서와 작업(Task) 모델에서 함께 사용하는 열거형을 정의합니다.
"""

from enum import Enum


class Priority(str, Enum):
    """
    MoSCoW 우선순위입니다.

    분류:
    - MUST: 반드시 구현해야 함
    - SHOULD: 구현하는 것이 바람직함
    - COULD: 여유가 있으면 구현
    - WONT: 이번 범위에서는 구현하지 않음
    """
    MUST = "must"
    SHOULD = "should"
    COULD = "could"
    WONT = "wont"


# 정렬용 순위 (값이 작을수록 높은 우선순위)
PRIORITY_RANK: dict[Priority, int] = {
    Priority.MUST: 0,
    Priority.SHOULD: 1,
    Priority.COULD: 2,
    Priority.WONT: 3,
}


def highest_priority(priorities: list[Priority], default: Priority = Priority.SHOULD) -> Priority:
    """가장 높은 우선순위를 반환합니다. 목록이 비어 있으면 기본값."""
    if not priorities:
        return default
    return min(priorities, key=lambda p: PRIORITY_RANK[p])
