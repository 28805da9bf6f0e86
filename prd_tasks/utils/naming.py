"""이름 변환 유틸리티 (kebab-case, PascalCase)."""

import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[\s_\-/:.]+")


def split_words(name: str) -> list[str]:
    """camelCase, snake_case, 공백/경로 구분자를 모두 단어 목록으로 분리합니다."""
    spaced = _WORD_BOUNDARY.sub(" ", name)
    return [w for w in _SEPARATORS.split(spaced) if w]


def to_kebab(name: str) -> str:
    """order_items, OrderItems → order-items"""
    return "-".join(w.lower() for w in split_words(name))


def to_pascal(name: str) -> str:
    """order items, order_items → OrderItems"""
    return "".join(w[:1].upper() + w[1:] for w in split_words(name))


def page_name_for_route(route: str) -> str:
    """라우트에서 페이지 컴포넌트 이름을 만듭니다. /orders/:id → OrdersIdPage, / → HomePage"""
    base = to_pascal(route)
    return f"{base or 'Home'}Page"
