"""
Layer 4: 의존성 해석.

(작업 목록, 엔티티 → 마이그레이션 ID 맵)만으로 동작하는 순수 함수 모음입니다.

1. resolve_dependencies: API/UI/서비스 계열 작업에 엔티티 마이그레이션 의존성 추가
2. validate_graph: 존재하지 않는 ID, 순환 검사 (위반 시 GraphConsistencyError)
3. attach_dependents: 역방향 간선(dependents) 채우기
4. calculate_critical_path: 복잡도 가중 최장 경로
"""

import logging

from prd_tasks.exceptions import GraphConsistencyError
from prd_tasks.models import COMPLEXITY_ORDINAL, ProgrammableTask, TaskType

logger = logging.getLogger(__name__)


def needs_migration_dependency(task: ProgrammableTask) -> bool:
    """API/UI/서비스 계열 작업인지 여부."""
    return (
        task.type.value.startswith("api-")
        or task.type.value.startswith("ui-")
        or task.type == TaskType.SERVICE_LAYER
    )


def resolve_dependencies(
    tasks: list[ProgrammableTask],
    migration_ids: dict[str, str],
) -> list[ProgrammableTask]:
    """
    관련 엔티티가 있는 API/UI/서비스 작업에 해당 엔티티의 마이그레이션 의존성을 추가합니다.

    Args:
        tasks: 작업 목록
        migration_ids: 엔티티 이름 → 마이그레이션 작업 ID

    Returns:
        의존성이 보강된 작업 사본 목록
    """
    # 엔티티 이름은 대소문자 구분 없이 비교
    by_name = {name.lower(): task_id for name, task_id in migration_ids.items()}

    resolved = []
    added = 0
    for task in tasks:
        migration_id = by_name.get(task.related_entity.lower()) if task.related_entity else None
        if (
            migration_id
            and migration_id != task.id
            and needs_migration_dependency(task)
            and migration_id not in task.dependencies
        ):
            task = task.model_copy(update={"dependencies": [*task.dependencies, migration_id]})
            added += 1
        resolved.append(task)

    logger.info(f"[DependencyResolver] 마이그레이션 의존성 {added}개 추가")
    return resolved


def topological_order(tasks: list[ProgrammableTask]) -> list[str]:
    """
    의존성 그래프의 위상 정렬 (같은 깊이에서는 생성 순서 유지).

    Raises:
        GraphConsistencyError: 중복 ID, 존재하지 않는 의존성, 순환이 있을 때
    """
    ids = [t.id for t in tasks]
    known = set(ids)
    if len(known) != len(ids):
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        raise GraphConsistencyError("작업 ID가 중복되었습니다", details={"duplicates": duplicates})

    for task in tasks:
        missing = [d for d in task.dependencies if d not in known]
        if missing:
            raise GraphConsistencyError(
                f"{task.id}의 의존성이 존재하지 않습니다: {', '.join(missing)}",
                details={"task_id": task.id, "missing": missing},
            )

    deps = {t.id: list(dict.fromkeys(t.dependencies)) for t in tasks}

    # DFS (WHITE=0, GRAY=1, BLACK=2)
    state = {task_id: 0 for task_id in ids}
    order: list[str] = []

    for root in ids:
        if state[root]:
            continue
        stack = [(root, iter(deps[root]))]
        state[root] = 1
        path = [root]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                path.pop()
                state[node] = 2
                order.append(node)
            elif state[child] == 1:
                cycle = path[path.index(child):] + [child]
                raise GraphConsistencyError(
                    f"의존성 순환이 있습니다: {' → '.join(cycle)}",
                    details={"cycle": cycle},
                )
            elif state[child] == 0:
                state[child] = 1
                path.append(child)
                stack.append((child, iter(deps[child])))

    return order


def validate_graph(tasks: list[ProgrammableTask]) -> None:
    """존재하지 않는 의존성 ID와 순환을 검사합니다. 위반 시 GraphConsistencyError."""
    topological_order(tasks)
    edges = sum(len(t.dependencies) for t in tasks)
    logger.info(f"[DependencyResolver] 그래프 검증 완료: 작업 {len(tasks)}개, 간선 {edges}개")


def attach_dependents(tasks: list[ProgrammableTask]) -> list[ProgrammableTask]:
    """각 작업의 dependents(이 작업에 의존하는 작업 ID)를 채운 사본을 반환합니다."""
    dependents: dict[str, list[str]] = {t.id: [] for t in tasks}
    for task in tasks:
        for dep in task.dependencies:
            if dep in dependents and task.id not in dependents[dep]:
                dependents[dep].append(task.id)
    return [t.model_copy(update={"dependents": dependents[t.id]}) for t in tasks]


def calculate_critical_path(tasks: list[ProgrammableTask]) -> list[str]:
    """
    크리티컬 패스 계산 (위상 정렬 기반 동적 프로그래밍).

    작업 가중치는 복잡도 서열값(trivial=1 ... very-complex=5)이며,
    같은 길이의 경로가 여럿이면 먼저 생성된 작업 쪽을 택합니다.
    """
    if not tasks:
        return []

    task_dict = {t.id: t for t in tasks}
    position = {t.id: i for i, t in enumerate(tasks)}

    def weight(task_id: str) -> int:
        return COMPLEXITY_ORDINAL[task_dict[task_id].estimated_complexity]

    # 각 작업까지의 최장 경로 거리(자기 자신 제외)와 이전 작업
    dist: dict[str, int] = {t.id: 0 for t in tasks}
    prev: dict[str, str | None] = {t.id: None for t in tasks}

    for task_id in topological_order(tasks):
        for pred_id in task_dict[task_id].dependencies:
            new_dist = dist[pred_id] + weight(pred_id)
            current = prev[task_id]
            if new_dist > dist[task_id] or (
                new_dist == dist[task_id] and current is not None and position[pred_id] < position[current]
            ):
                dist[task_id] = new_dist
                prev[task_id] = pred_id

    # 가장 긴 경로의 끝점 찾기 (동률이면 먼저 생성된 작업)
    end_task_id = max(tasks, key=lambda t: (dist[t.id] + weight(t.id), -position[t.id])).id

    # 경로 역추적
    critical_path = []
    current = end_task_id
    while current is not None:
        critical_path.append(current)
        current = prev[current]

    critical_path.reverse()
    return critical_path
