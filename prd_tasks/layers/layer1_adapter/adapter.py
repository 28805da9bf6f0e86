"""
Layer 1: 문서 모델 어댑터.

구조화된 요구사항 문서와 엔티티/관계/스키마 텍스트를 받아
템플릿 엔진이 사용할 GenerationContext를 만듭니다.

처리 순서:
1. 필수 입력 확인 (문서, 엔티티) - 하나라도 없으면 즉시 실패
2. 소속 없는(orphan) 규칙/화면 배정
3. 엔티티별 마이그레이션 작업 ID 예약 (TASK-001부터)
4. 라우트 기준 화면 중복 제거
5. 규칙/화면/요구사항 인덱스 구성
"""

import logging
from typing import Optional

from prd_tasks.exceptions import InputValidationError, MissingInputError
from prd_tasks.models import (
    Entity,
    FunctionalRequirement,
    GenerationOptions,
    Priority,
    Relationship,
    Screen,
    StructuredRequirementDoc,
)

from .context import GenerationContext, TaskIdCounter

logger = logging.getLogger(__name__)

PLACEHOLDER_REQUIREMENT_ID = "FR-001"
PLACEHOLDER_REQUIREMENT_TITLE = "Main Requirement"


def build_context(
    document: Optional[StructuredRequirementDoc],
    entities: Optional[list[Entity]],
    relationships: Optional[list[Relationship]] = None,
    schema_text: str = "",
    options: Optional[GenerationOptions] = None,
) -> GenerationContext:
    """
    GenerationContext 생성.

    Args:
        document: 구조화된 요구사항 문서
        entities: 추출된 엔티티 목록 (1개 이상)
        relationships: 엔티티 관계 목록
        schema_text: 스키마 생성기 출력 (해석하지 않음)
        options: 생성 옵션

    Returns:
        GenerationContext

    Raises:
        MissingInputError: 문서가 없거나 엔티티가 하나도 없을 때
        InputValidationError: 엔티티 이름이 중복될 때 (대소문자 무시)
    """
    if document is None:
        raise MissingInputError("요구사항 문서가 없습니다")
    if not entities:
        raise MissingInputError(
            "엔티티가 없어 작업을 생성할 수 없습니다",
            details={"prd_id": document.id},
        )

    options = options or GenerationOptions()
    relationships = list(relationships or [])

    entity_index: dict[str, Entity] = {}
    seen_names: set[str] = set()
    for entity in entities:
        # 대소문자만 다른 이름도 중복으로 취급
        if entity.name.lower() in seen_names:
            raise InputValidationError(
                f"엔티티 이름이 중복되었습니다: {entity.name}",
                details={"entity": entity.name},
            )
        seen_names.add(entity.name.lower())
        entity_index[entity.name] = entity

    document = assign_orphans(document, options.orphan_policy)

    # 마이그레이션 ID는 가장 먼저 발급 (스키마 작업이 첫 번째 패밀리)
    counter = TaskIdCounter()
    migration_ids = {entity.name: counter.next_id() for entity in entities}

    screens, screen_owner = _dedupe_screens_by_route(document.functional_requirements)

    rule_index = {}
    rule_owner = {}
    screen_index = {}
    for fr in document.functional_requirements:
        for rule in fr.business_rules:
            rule_index.setdefault(rule.id, rule)
            rule_owner.setdefault(rule.id, fr.id)
        for screen in fr.screens:
            screen_index.setdefault(screen.id, screen)

    module_name = options.module_name or document.module_name or "core"

    context = GenerationContext(
        document=document,
        entities=list(entities),
        relationships=relationships,
        schema_text=schema_text or "",
        options=options,
        counter=counter,
        module_name=module_name,
        migration_ids=migration_ids,
        screens=screens,
        entity_index=entity_index,
        rule_index=rule_index,
        screen_index=screen_index,
        requirement_index={fr.id: fr for fr in document.functional_requirements},
        screen_owner=screen_owner,
        rule_owner=rule_owner,
    )

    logger.info(
        f"[DocumentAdapter] 컨텍스트 생성: 요구사항 {len(document.functional_requirements)}개, "
        f"엔티티 {len(entities)}개, 화면 {len(screens)}개 (중복 제거 후)"
    )
    return context


def assign_orphans(
    document: StructuredRequirementDoc,
    policy: str = "first-requirement",
) -> StructuredRequirementDoc:
    """
    소속 없는 비즈니스 규칙/화면을 요구사항에 배정합니다.

    정책:
    - first-requirement: 문서의 첫 번째 요구사항에 배정. 요구사항이 없으면 자리표시 요구사항 생성
    - placeholder: 항상 자리표시 요구사항을 만들어 배정

    원본 문서는 변경하지 않고 사본을 반환합니다.
    """
    rules = document.unassigned_business_rules
    screens = document.unassigned_screens
    if not rules and not screens:
        return document

    requirements = [fr.model_copy(deep=True) for fr in document.functional_requirements]

    if policy == "first-requirement" and requirements:
        target = requirements[0]
    else:
        target = FunctionalRequirement(
            id=_placeholder_id(requirements),
            title=PLACEHOLDER_REQUIREMENT_TITLE,
            description="Collects business rules and screens not attached to any requirement.",
            priority=Priority.SHOULD,
        )
        requirements.append(target)

    target.business_rules.extend(r.model_copy(deep=True) for r in rules)
    target.screens.extend(s.model_copy(deep=True) for s in screens)

    logger.info(
        f"[DocumentAdapter] 미배정 규칙 {len(rules)}개, 화면 {len(screens)}개를 "
        f"{target.id}에 배정 (정책: {policy})"
    )

    return document.model_copy(
        update={
            "functional_requirements": requirements,
            "unassigned_business_rules": [],
            "unassigned_screens": [],
        }
    )


def _placeholder_id(requirements: list[FunctionalRequirement]) -> str:
    existing = {fr.id for fr in requirements}
    if PLACEHOLDER_REQUIREMENT_ID not in existing:
        return PLACEHOLDER_REQUIREMENT_ID
    n = len(requirements) + 1
    while f"FR-{n:03d}" in existing:
        n += 1
    return f"FR-{n:03d}"


def _dedupe_screens_by_route(
    requirements: list[FunctionalRequirement],
) -> tuple[list[Screen], dict[str, str]]:
    """라우트가 같은 화면은 처음 나온 것만 남깁니다."""
    seen_routes: dict[str, str] = {}
    screens: list[Screen] = []
    owner: dict[str, str] = {}

    for fr in requirements:
        for screen in fr.screens:
            owner.setdefault(screen.id, fr.id)
            if screen.route in seen_routes:
                logger.warning(
                    f"[DocumentAdapter] 라우트 중복으로 화면 제외: {screen.id} "
                    f"({screen.route}, 기존 {seen_routes[screen.route]})"
                )
                continue
            seen_routes[screen.route] = screen.id
            screens.append(screen)

    return screens, owner
