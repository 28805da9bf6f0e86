"""유틸리티 모듈."""

from .naming import (
    split_words,
    to_kebab,
    to_pascal,
    page_name_for_route,
)

__all__ = [
    "split_words",
    "to_kebab",
    "to_pascal",
    "page_name_for_route",
]
