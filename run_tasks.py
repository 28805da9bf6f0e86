"""작업 목록 생성 스크립트 (구조화된 요구사항 번들 기반).

사용법:
    python run_tasks.py                      # workspace/inputs/tasks의 최신 BUNDLE-*.json
    python run_tasks.py path/to/bundle.json  # 지정한 번들
    python run_tasks.py path/to/bundle.json --enrich
"""

import asyncio
import json
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from prd_tasks.models import TaskGenerationRequest, TaskSet
from prd_tasks.services.task_service import TaskService


def find_latest_json(directory: str, prefix: str) -> Optional[Path]:
    """최신 JSON 파일 찾기."""
    dir_path = Path(directory)
    json_files = list(dir_path.glob(f"{prefix}-*.json"))
    if not json_files:
        return None
    return max(json_files, key=lambda x: x.stat().st_mtime)


def load_bundle(bundle_path: Path) -> TaskGenerationRequest:
    """번들 JSON (document, entities, relationships, schema_text, options) 로드."""
    with open(bundle_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return TaskGenerationRequest(**data)


def save_outputs(task_set: TaskSet, output_dir: Path) -> None:
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")

    md_path = output_dir / f"TASKS-{timestamp}.md"
    md_path.write_text(task_set.to_markdown(), encoding="utf-8")
    print(f"\nMarkdown 저장: {md_path}")

    json_path = output_dir / f"TASKS-{timestamp}.json"
    json_path.write_text(task_set.to_json(), encoding="utf-8")
    print(f"JSON 저장: {json_path}")

    yaml_path = output_dir / f"TASKS-{timestamp}.yaml"
    yaml_path.write_text(task_set.to_yaml(), encoding="utf-8")
    print(f"YAML 저장: {yaml_path}")


async def generate_tasks(bundle_arg: Optional[str], enrich: bool) -> TaskSet:
    print("\n" + "=" * 70)
    print("작업 목록 생성 시작")
    print(f'시작 시간: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}')
    print("=" * 70)

    bundle_path = Path(bundle_arg) if bundle_arg else find_latest_json("workspace/inputs/tasks", "BUNDLE")
    if not bundle_path or not bundle_path.exists():
        raise FileNotFoundError(
            "번들 JSON 파일을 찾을 수 없습니다. workspace/inputs/tasks/BUNDLE-*.json을 준비하세요."
        )
    print(f"\n[입력] 번들: {bundle_path}")

    request = load_bundle(bundle_path)
    print(f"  - 프로젝트: {request.document.project_name}")
    print(f"  - 기능 요구사항: {len(request.document.functional_requirements)}개")
    print(f"  - 엔티티: {len(request.entities)}개")
    print(f"  - 관계: {len(request.relationships)}개")

    output_dir = Path("workspace/outputs/tasks")
    output_dir.mkdir(parents=True, exist_ok=True)

    total_start = time.time()
    service = TaskService()
    task_set = service.generate(request)

    if enrich:
        print("\n" + "-" * 70)
        print("[Layer 7] 작업 보강")
        print("-" * 70)
        task_set = await service.enrich(task_set.id)

    total_time = time.time() - total_start

    print("\n" + "=" * 70)
    print("작업 목록 생성 완료")
    print("=" * 70)
    print(f"\n  TaskSet ID: {task_set.id}")
    print(f"  총 작업: {task_set.summary.total_tasks}개")
    for tier, count in task_set.summary.tier_breakdown.items():
        print(f"  {tier}: {count}개")
    print(f"  전체 복잡도: {task_set.summary.overall_complexity.value}")
    print(f"  크리티컬 패스: {len(task_set.summary.critical_path)}개 작업")
    print(f"  보강 상태: {task_set.metadata.implementation_status}")
    if task_set.metadata.degraded:
        print(f"  [주의] 최소 생성 모드: {task_set.metadata.degraded_reason}")
    print(f"  총 소요시간: {total_time:.1f}초")

    save_outputs(task_set, output_dir)
    return task_set


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    asyncio.run(generate_tasks(args[0] if args else None, "--enrich" in sys.argv))
