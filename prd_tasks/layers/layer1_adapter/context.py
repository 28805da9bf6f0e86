"""작업 생성 컨텍스트.

모든 템플릿은 전역 상태 대신 이 컨텍스트를 인자로 받아 작업 ID를 발급받고
엔티티/규칙/화면 정보를 조회합니다.
"""

from dataclasses import dataclass, field
from typing import Optional

from prd_tasks.models import (
    BusinessRule,
    Entity,
    FunctionalRequirement,
    GenerationOptions,
    Relationship,
    Screen,
    StructuredRequirementDoc,
)


class TaskIdCounter:
    """
    작업 ID 발급기 (TASK-001, TASK-002 ...).

    컴파일마다 새로 만들어지므로 같은 입력은 항상 같은 ID 순서를 얻습니다.
    """

    def __init__(self, prefix: str = "TASK", start: int = 1):
        self._prefix = prefix
        self._next = start

    def next_id(self) -> str:
        task_id = f"{self._prefix}-{self._next:03d}"
        self._next += 1
        return task_id

    @property
    def issued(self) -> int:
        """지금까지 발급한 ID 수."""
        return self._next - 1


@dataclass(frozen=True)
class GenerationContext:
    """한 번의 컴파일 동안 공유되는 읽기 전용 컨텍스트."""
    document: StructuredRequirementDoc
    entities: list[Entity]
    relationships: list[Relationship]
    schema_text: str
    options: GenerationOptions
    counter: TaskIdCounter
    module_name: str

    # 엔티티 이름 → 마이그레이션 작업 ID (어댑터가 한 번만 만든다)
    migration_ids: dict[str, str] = field(default_factory=dict)

    # 라우트 기준으로 중복 제거된 화면 (먼저 나온 화면 우선)
    screens: list[Screen] = field(default_factory=list)

    # 참조 확장/추적용 인덱스
    entity_index: dict[str, Entity] = field(default_factory=dict)
    rule_index: dict[str, BusinessRule] = field(default_factory=dict)
    screen_index: dict[str, Screen] = field(default_factory=dict)
    requirement_index: dict[str, FunctionalRequirement] = field(default_factory=dict)

    # 화면/규칙 ID → 소속 요구사항 ID
    screen_owner: dict[str, str] = field(default_factory=dict)
    rule_owner: dict[str, str] = field(default_factory=dict)

    @property
    def requirements(self) -> list[FunctionalRequirement]:
        return self.document.functional_requirements

    def requirements_for_entity(self, entity_name: str) -> list[FunctionalRequirement]:
        """엔티티를 다루는 요구사항 목록 (문서 순서)."""
        return [fr for fr in self.requirements if entity_name in fr.involved_entities]

    def owner_of_screen(self, screen_id: str) -> Optional[FunctionalRequirement]:
        owner_id = self.screen_owner.get(screen_id)
        return self.requirement_index.get(owner_id) if owner_id else None

    def first_known_entity(self, fr: FunctionalRequirement) -> Optional[str]:
        """요구사항이 다루는 엔티티 중 실제로 정의된 첫 번째 엔티티."""
        for name in fr.involved_entities:
            if name in self.entity_index:
                return name
        return None
