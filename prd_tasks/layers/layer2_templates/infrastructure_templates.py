"""환경 셋업 / 테스트 셋업 작업 템플릿.

환경이 이미 구성된 경우(environment_provisioned) 두 작업 모두 skip으로 표시합니다.
"""

from prd_tasks.models import (
    EnvironmentPayload,
    ExecutionMode,
    Priority,
    TaskSpecification,
    TaskType,
)
from prd_tasks.layers.base_template import BaseTaskTemplate

SCAFFOLDED_PREFIX = "[ALREADY SCAFFOLDED]"

RUNTIME_COMPONENTS = ["Node.js runtime", "PostgreSQL database", "Database migration tool", "Web frontend build"]
RUNTIME_VERSIONS = {"node": "20.x", "postgresql": "16.x", "typescript": "5.x"}

TEST_COMPONENTS = ["Unit test runner", "API integration test harness", "Browser E2E runner"]
TEST_VERSIONS = {"vitest": "1.x", "supertest": "7.x", "playwright": "1.x"}


class EnvironmentSetupTemplate(BaseTaskTemplate):
    """개발 환경 구성 작업 (1개)."""

    _template_name = "EnvironmentSetupTemplate"

    def _do_generate(self, context, existing):
        mode = self._provisioning_mode(context)
        provisioned = mode == ExecutionMode.SKIP
        title = "Environment setup"

        payload = EnvironmentPayload(
            components=list(RUNTIME_COMPONENTS),
            dependency_versions=dict(RUNTIME_VERSIONS),
            verification_steps=[
                "Install dependencies without errors",
                "Connect to the database with the configured credentials",
                "Run the migration tool's status command",
                "Start the dev server and load the home page",
            ],
            provisioned=provisioned,
        )

        spec = TaskSpecification(
            objective=f"Prepare the runtime environment for {context.document.project_name}",
            requirements=[
                f"Install: {', '.join(payload.components)}",
                "Versions: " + ", ".join(f"{k} {v}" for k, v in payload.dependency_versions.items()),
                "Provide an .env.example with database and auth settings",
            ],
            payload=payload,
            security_notes=["Never commit real credentials; read secrets from environment variables"],
        )

        task_id = context.counter.next_id()
        return [self._new_task(
            context,
            task_id=task_id,
            title=f"{SCAFFOLDED_PREFIX} {title}" if provisioned else title,
            task_type=TaskType.ENVIRONMENT_SETUP,
            specification=spec,
            priority=Priority.MUST,
            acceptance_criteria=list(payload.verification_steps),
            tags=["environment", "setup"],
            execution_mode=mode,
        )]


class TestSetupTemplate(BaseTaskTemplate):
    """테스트 환경 구성 작업 (1개, 환경 셋업 작업에 의존)."""

    __test__ = False
    _template_name = "TestSetupTemplate"

    def _do_generate(self, context, existing):
        mode = self._provisioning_mode(context)
        provisioned = mode == ExecutionMode.SKIP
        title = "Test setup"
        environment = self._tasks_of(existing, TaskType.ENVIRONMENT_SETUP)

        payload = EnvironmentPayload(
            components=list(TEST_COMPONENTS),
            dependency_versions=dict(TEST_VERSIONS),
            verification_steps=[
                "Run the unit test command with a sample test",
                "Run an API test against a disposable database",
                "Run a headless browser smoke test",
            ],
            provisioned=provisioned,
        )

        spec = TaskSpecification(
            objective="Configure unit, integration and E2E test tooling",
            requirements=[
                f"Install: {', '.join(payload.components)}",
                "Versions: " + ", ".join(f"{k} {v}" for k, v in payload.dependency_versions.items()),
                "Isolate test data from development data",
            ],
            payload=payload,
        )

        task_id = context.counter.next_id()
        return [self._new_task(
            context,
            task_id=task_id,
            title=f"{SCAFFOLDED_PREFIX} {title}" if provisioned else title,
            task_type=TaskType.TEST_SETUP,
            specification=spec,
            priority=Priority.SHOULD,
            dependencies=[t.id for t in environment],
            acceptance_criteria=list(payload.verification_steps),
            tags=["test", "setup"],
            execution_mode=mode,
        )]
