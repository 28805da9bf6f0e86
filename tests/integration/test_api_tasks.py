"""
작업(Task) API 통합 테스트.
생성, 조회, 내보내기, 보강, 취소 엔드포인트와 에러 응답 형식을 확인합니다.
"""

import json

import pytest
import yaml
from httpx import AsyncClient, ASGITransport

from prd_tasks.config import Settings
from prd_tasks.main import app
from prd_tasks.services.task_service import TaskService, get_task_service


@pytest.fixture
def service(fake_enricher):
    return TaskService(enricher=fake_enricher, settings=Settings(_env_file=None))


@pytest.fixture
async def client(service):
    app.dependency_overrides[get_task_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def payload(generation_request):
    return generation_request.model_dump(mode="json", by_alias=True)


async def _generate(client: AsyncClient, payload: dict) -> dict:
    response = await client.post("/api/v1/tasks/generate", json=payload)
    assert response.status_code == 200
    return response.json()


async def test_generate(client: AsyncClient, payload: dict):
    """POST /tasks/generate 는 31개 작업이 담긴 TaskSet을 반환해야 한다."""
    data = await _generate(client, payload)

    assert data["id"].startswith("TASKSET-")
    assert len(data["tasks"]) == 31
    assert data["summary"]["total_tasks"] == 31
    assert data["metadata"]["degraded"] is False


async def test_generate_without_entities(client: AsyncClient, payload: dict):
    """엔티티가 없으면 400과 ERR_INPUT_002를 반환해야 한다."""
    payload["entities"] = []

    response = await client.post("/api/v1/tasks/generate", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_INPUT_002"
    assert "timestamp" in body


async def test_generate_invalid_body(client: AsyncClient):
    """문서가 없는 요청은 FastAPI 검증 단계에서 422로 거부되어야 한다."""
    response = await client.post("/api/v1/tasks/generate", json={"entities": []})

    assert response.status_code == 422


async def test_get_task_set(client: AsyncClient, payload: dict):
    generated = await _generate(client, payload)

    response = await client.get(f"/api/v1/tasks/{generated['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == generated["id"]


async def test_get_unknown_task_set(client: AsyncClient):
    """없는 TaskSet은 404와 ERR_NOT_FOUND_001을 반환해야 한다."""
    response = await client.get("/api/v1/tasks/TASKSET-missing")

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.parametrize("export_format,media_type,extension", [
    ("markdown", "text/markdown", "md"),
    ("json", "application/json", "json"),
    ("yaml", "application/x-yaml", "yaml"),
])
async def test_export(client: AsyncClient, payload: dict, export_format, media_type, extension):
    generated = await _generate(client, payload)

    response = await client.get(
        f"/api/v1/tasks/{generated['id']}/export", params={"format": export_format}
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(media_type)
    assert f'filename="{generated["id"]}.{extension}"' in response.headers["content-disposition"]

    if export_format == "markdown":
        assert response.text.startswith("# 주문 관리 시스템")
    elif export_format == "json":
        assert json.loads(response.text)["id"] == generated["id"]
    else:
        assert yaml.safe_load(response.text)["id"] == generated["id"]


async def test_export_unknown_format(client: AsyncClient, payload: dict):
    """지원하지 않는 형식은 400을 반환해야 한다."""
    generated = await _generate(client, payload)

    response = await client.get(f"/api/v1/tasks/{generated['id']}/export", params={"format": "xml"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INPUT_001"


async def test_enrich(client: AsyncClient, payload: dict):
    """POST /tasks/{id}/enrich 는 code-generation 작업 27개를 보강해야 한다."""
    generated = await _generate(client, payload)

    response = await client.post(f"/api/v1/tasks/{generated['id']}/enrich", json={"concurrency_limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["implementation_status"] == "enriched"
    assert data["enriched_tasks"] == 27
    assert data["enrichment_failures"] == []

    stored = (await client.get(f"/api/v1/tasks/{generated['id']}")).json()
    assert stored["metadata"]["implementation_status"] == "enriched"


async def test_enrich_partial_failure(client: AsyncClient, payload: dict, service, make_enricher):
    service._enricher = make_enricher(fail_ids={"TASK-003"})
    generated = await _generate(client, payload)

    response = await client.post(f"/api/v1/tasks/{generated['id']}/enrich")

    data = response.json()
    assert data["implementation_status"] == "partial"
    assert data["enrichment_failures"] == [{"task_id": "TASK-003", "error": "boom TASK-003"}]


async def test_enrich_authentication_failure(client: AsyncClient, payload: dict, service, make_enricher):
    """인증 실패는 401과 ERR_AUTH_001을 반환해야 한다."""
    service._enricher = make_enricher(auth_fail_ids={"TASK-001"})
    generated = await _generate(client, payload)

    response = await client.post(f"/api/v1/tasks/{generated['id']}/enrich")

    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_AUTH_001"


async def test_enrich_invalid_concurrency(client: AsyncClient, payload: dict):
    generated = await _generate(client, payload)

    response = await client.post(f"/api/v1/tasks/{generated['id']}/enrich", json={"concurrency_limit": 0})

    assert response.status_code == 422


async def test_cancel_without_running_enrichment(client: AsyncClient, payload: dict):
    generated = await _generate(client, payload)

    response = await client.post(f"/api/v1/tasks/{generated['id']}/enrich/cancel")

    assert response.status_code == 200
    assert response.json() == {"id": generated["id"], "cancelled": False}


async def test_cancel_unknown_task_set(client: AsyncClient):
    response = await client.post("/api/v1/tasks/TASKSET-missing/enrich/cancel")

    assert response.status_code == 404
