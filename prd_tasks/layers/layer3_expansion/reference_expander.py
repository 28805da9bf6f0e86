"""
Layer 3: 참조 확장.

작업 본문의 "see BR-003", "as per SCR-002" 같은 참조를 원문 조각으로 치환해
각 작업이 다른 문서 없이도 읽히도록 만듭니다. 인라인된 조각에는 출처 ID를 태그로 붙입니다.

확장 규칙:
- 참조만 있는 줄("BR-003", "See BR-003", "as per SCR-002.")은 조각으로 치환
- 참조와 다른 내용이 섞인 줄은 유지하고, 조각을 뒤에 추가
- 템플릿이 첨부한 참조(task.references)는 조각을 추가
- 확장을 끄면 조각 대신 "See BR-003" 포인터만 추가
"""

import logging
import re
from typing import Optional

from prd_tasks.models import BusinessRule, FunctionalRequirement, ProgrammableTask, Screen
from prd_tasks.layers.layer1_adapter import GenerationContext

logger = logging.getLogger(__name__)

REFERENCE_TOKEN = re.compile(r"\b(?:FR|BR|SCR)-\d{3}(?:-[A-Z0-9]+)?\b")
BARE_REFERENCE = re.compile(
    r"^\s*(?:(?:see|as per|refer to|per)\s+)?"
    r"((?:FR|BR|SCR)-\d{3}(?:-[A-Z0-9]+)?)\s*[.;:]?\s*$",
    re.IGNORECASE,
)


def find_references(text: str) -> list[str]:
    """텍스트에 등장하는 참조 ID (등장 순서, 중복 제거)."""
    return list(dict.fromkeys(REFERENCE_TOKEN.findall(text)))


def is_bare_reference(line: str) -> bool:
    """참조 토큰만 있는 줄인지 여부."""
    return BARE_REFERENCE.match(line) is not None


def render_rule(rule: BusinessRule) -> str:
    parts = [f"[{rule.id}] {rule.name} ({rule.kind.value}): {rule.description}".rstrip(": ")]
    if rule.formula:
        parts.append(f"Formula: {rule.formula}")
    if rule.conditions:
        parts.append(f"Conditions: {'; '.join(rule.conditions)}")
    if rule.error_message:
        parts.append(f"(Error: {rule.error_message})")
    return " ".join(parts)


def render_screen(screen: Screen) -> str:
    text = f"[{screen.id}] {screen.name} ({screen.kind.value}, {screen.route})"
    if screen.field_mappings:
        text += f" fields: {', '.join(fm.label or fm.field_name for fm in screen.field_mappings)}"
    if screen.actions:
        text += f"; actions: {', '.join(a.name for a in screen.actions)}"
    return text


def render_requirement(fr: FunctionalRequirement) -> str:
    text = f"[{fr.id}] {fr.title}"
    if fr.description:
        text += f": {fr.description}"
    return text


class ReferenceExpander:
    """컨텍스트의 규칙/화면/요구사항 인덱스를 이용해 참조를 펼칩니다."""

    def __init__(self, context: GenerationContext):
        self._context = context

    def fragment_for(self, ref_id: str) -> Optional[str]:
        """참조 ID에 해당하는 원문 조각 (알 수 없는 ID면 None)."""
        ctx = self._context
        if ref_id in ctx.rule_index:
            return render_rule(ctx.rule_index[ref_id])
        if ref_id in ctx.screen_index:
            return render_screen(ctx.screen_index[ref_id])
        if ref_id in ctx.requirement_index:
            return render_requirement(ctx.requirement_index[ref_id])
        return None

    def expand_task(self, task: ProgrammableTask) -> ProgrammableTask:
        """작업 하나의 requirements를 확장한 사본을 반환합니다."""
        expanded: list[str] = []
        inlined: set[str] = set()
        unresolved: list[str] = []

        def _inline(ref_id: str) -> bool:
            if ref_id in inlined:
                return True
            fragment = self.fragment_for(ref_id)
            if fragment is None:
                if ref_id not in unresolved:
                    unresolved.append(ref_id)
                return False
            expanded.append(fragment)
            inlined.add(ref_id)
            return True

        for line in task.specification.requirements:
            match = BARE_REFERENCE.match(line)
            if match:
                ref_id = match.group(1)
                if not _inline(ref_id):
                    # 정의가 없는 참조는 포인터 대신 미해결 표시로 바꿈
                    expanded.append(f"{ref_id} (unresolved reference, no definition in the document)")
                continue
            expanded.append(line)
            for ref_id in find_references(line):
                _inline(ref_id)

        for ref_id in task.references:
            _inline(ref_id)

        notes = list(task.notes)
        if unresolved:
            logger.warning(f"[ReferenceExpander] {task.id} 해석할 수 없는 참조: {unresolved}")
            notes.append(f"Unresolved references: {', '.join(unresolved)}")

        spec = task.specification.model_copy(update={"requirements": expanded})
        return task.model_copy(update={"specification": spec, "notes": notes})

    def add_pointers(self, task: ProgrammableTask) -> ProgrammableTask:
        """확장을 끈 경우: 첨부된 참조마다 "See <ID>" 포인터만 추가합니다."""
        requirements = list(task.specification.requirements)
        for ref_id in task.references:
            pointer = f"See {ref_id}"
            if pointer not in requirements:
                requirements.append(pointer)
        spec = task.specification.model_copy(update={"requirements": requirements})
        return task.model_copy(update={"specification": spec})


def expand_references(
    tasks: list[ProgrammableTask],
    context: GenerationContext,
) -> list[ProgrammableTask]:
    """
    전체 작업에 참조 확장 적용.

    Args:
        tasks: 템플릿 엔진이 만든 작업 목록
        context: 생성 컨텍스트 (options.expand_references로 동작 결정)

    Returns:
        확장된 작업 사본 목록 (입력 순서 유지)
    """
    expander = ReferenceExpander(context)
    if not context.options.expand_references:
        return [expander.add_pointers(t) for t in tasks]

    result = [expander.expand_task(t) for t in tasks]
    inlined = sum(
        1 for t in result for line in t.specification.requirements if line.startswith("[")
    )
    logger.info(f"[ReferenceExpander] 참조 조각 {inlined}개 인라인")
    return result
