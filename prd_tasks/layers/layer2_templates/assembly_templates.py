"""프런트엔드 조립 작업 템플릿 (API 클라이언트, 라우트 설정, 내비게이션, 페이지 조립)."""

from prd_tasks.models import (
    ApiClientCall,
    ApiClientPayload,
    NavigationItem,
    NavigationPayload,
    PagePayload,
    Priority,
    RouteConfigPayload,
    RouteSpec,
    TaskSpecification,
    TaskType,
)
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.utils import page_name_for_route

from .type_mapping import CRUD_OPERATIONS, api_base_path

UI_TYPES = (
    TaskType.UI_LIST,
    TaskType.UI_FORM,
    TaskType.UI_DETAIL,
    TaskType.UI_MODAL,
    TaskType.UI_DASHBOARD,
    TaskType.UI_REPORT,
)

CLIENT_CALL_NAMES = {
    "create": "create{name}",
    "list": "list{name}s",
    "get": "get{name}",
    "update": "update{name}",
    "delete": "delete{name}",
}

PAGE_COMPOSITION_STEPS = [
    "Import the screen components for this route",
    "Set up page state",
    "Fetch data on mount through the API client",
    "Wire component props and action callbacks",
    "Handle loading and error states",
]


class ApiClientTemplate(BaseTaskTemplate):
    """모든 CRUD 엔드포인트를 감싸는 타입 지정 API 클라이언트 작업 (1개)."""

    _template_name = "ApiClientTemplate"

    def _do_generate(self, context, existing):
        services = self._tasks_of(existing, TaskType.SERVICE_LAYER)
        calls = [
            ApiClientCall(
                name=CLIENT_CALL_NAMES[operation].format(name=entity.name),
                method=method,
                path=f"{api_base_path(entity)}{suffix}",
                entity=entity.name,
            )
            for entity in context.entities
            for operation, method, suffix, _ in CRUD_OPERATIONS
        ]
        payload = ApiClientPayload(calls=calls)

        spec = TaskSpecification(
            objective="Implement a typed API client for all CRUD endpoints",
            requirements=[f"{c.name}(): {c.method} {c.path}" for c in calls],
            payload=payload,
            technical_notes=["Share request/response types with the API handlers"],
            edge_cases=["Surface 401 responses so the UI can redirect to login"],
        )

        task_id = context.counter.next_id()
        return [self._new_task(
            context,
            task_id=task_id,
            title="Typed API client",
            task_type=TaskType.API_CLIENT,
            specification=spec,
            priority=Priority.MUST,
            dependencies=[t.id for t in services],
            acceptance_criteria=[f"Client exposes {len(calls)} typed calls", "Errors are mapped to typed exceptions"],
            tags=["frontend", "api-client"],
        )]


class RouteConfigTemplate(BaseTaskTemplate):
    """중복 제거된 라우트 전체에 대한 라우팅 설정 작업 (화면이 없어도 빈 라우터로 생성)."""

    _template_name = "RouteConfigTemplate"

    def _do_generate(self, context, existing):
        ui_tasks = self._tasks_of(existing, *UI_TYPES)
        routes = [
            RouteSpec(path=s.route, component=page_name_for_route(s.route), screen_id=s.id)
            for s in context.screens
        ]
        payload = RouteConfigPayload(routes=routes)

        spec = TaskSpecification(
            objective="Register all application routes",
            requirements=[f"{r.path} → {r.component}" for r in routes],
            payload=payload,
            edge_cases=["Unknown routes render a not-found page"],
        )

        task_id = context.counter.next_id()
        return [self._new_task(
            context,
            task_id=task_id,
            title="Route configuration",
            task_type=TaskType.ROUTE_CONFIG,
            specification=spec,
            priority=Priority.MUST,
            dependencies=[t.id for t in ui_tasks],
            acceptance_criteria=[f"Navigating to {r.path} renders {r.component}" for r in routes]
            or ["Unknown routes render a not-found page"],
            tags=["frontend", "routing"],
        )]


class NavigationTemplate(BaseTaskTemplate):
    """내비게이션 메뉴 작업 (라우트 설정 작업에 의존)."""

    _template_name = "NavigationTemplate"

    def _do_generate(self, context, existing):
        route_config = self._tasks_of(existing, TaskType.ROUTE_CONFIG)
        if not route_config:
            return []
        # 경로 파라미터가 있는 라우트는 메뉴에서 제외
        items = [
            NavigationItem(label=s.name, path=s.route)
            for s in context.screens
            if ":" not in s.route
        ]
        payload = NavigationPayload(items=items)

        spec = TaskSpecification(
            objective="Build the main navigation menu",
            requirements=[f"Menu item {i.label} → {i.path}" for i in items],
            payload=payload,
            edge_cases=["Highlight the active menu item for nested routes"],
        )

        task_id = context.counter.next_id()
        return [self._new_task(
            context,
            task_id=task_id,
            title="Navigation menu",
            task_type=TaskType.NAVIGATION,
            specification=spec,
            priority=Priority.SHOULD,
            dependencies=[t.id for t in route_config],
            acceptance_criteria=[f"Menu shows {len(items)} items linking to their routes"],
            tags=["frontend", "navigation"],
        )]


class PageCompositionTemplate(BaseTaskTemplate):
    """라우트마다 해당 라우트의 UI 작업들을 조립하는 페이지 작업."""

    _template_name = "PageCompositionTemplate"

    def _do_generate(self, context, existing):
        ui_tasks = self._tasks_of(existing, *UI_TYPES)
        tasks = []
        for route in dict.fromkeys(s.route for s in context.screens):
            ui_ids = [t.id for t in ui_tasks if t.specification.payload.route == route]
            page_name = page_name_for_route(route)
            payload = PagePayload(
                route=route,
                page_name=page_name,
                ui_task_ids=ui_ids,
                composition_steps=list(PAGE_COMPOSITION_STEPS),
            )
            spec = TaskSpecification(
                objective=f"Compose {page_name} for route {route}",
                requirements=[*PAGE_COMPOSITION_STEPS, f"Components from tasks: {', '.join(ui_ids)}"],
                payload=payload,
            )
            task_id = context.counter.next_id()
            tasks.append(self._new_task(
                context,
                task_id=task_id,
                title=f"Compose page {route}",
                task_type=TaskType.PAGE_COMPOSITION,
                specification=spec,
                priority=Priority.SHOULD,
                dependencies=ui_ids,
                acceptance_criteria=[
                    f"{route} shows all its components with live data",
                    "Loading and error states are visible to the user",
                ],
                tags=["frontend", "page"],
            ))
        return tasks
