"""
Asana REST API client.

Reads the operational project of the first workspace: workspaces -> project
whose name contains "operacional" -> every task (paginated). Also reads the
stories (comments) of a task.

When ASANA_ACCESS_TOKEN is missing or still the template value the client
runs in mock mode and serves three canned tasks, so the dashboard can be
demoed without credentials.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from maritime_tracking.config import (
    ASANA_BASE_URL,
    ASANA_MAX_RETRIES,
    ASANA_PAGE_LIMIT,
    ASANA_PROJECT_KEYWORD,
    ASANA_STORIES_TIMEOUT_SECONDS,
    ASANA_TIMEOUT_SECONDS,
    get_asana_token,
    is_placeholder,
)
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import counter, log_event, time_block

logger = get_logger(__name__)

TASK_OPT_FIELDS = ",".join(
    [
        "name",
        "notes",
        "completed",
        "assignee.name",
        "custom_fields.name",
        "custom_fields.text_value",
        "custom_fields.number_value",
        "custom_fields.enum_value.name",
        "custom_fields.display_value",
        "memberships.section.name",
        "due_date",
        "created_at",
        "modified_at",
        "parent",
    ]
)

STORY_OPT_FIELDS = "text,created_at,created_by.name,resource_subtype"


class AsanaAPIError(Exception):
    """Asana responded with an error or could not be read."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AsanaRateLimitError(AsanaAPIError):
    """HTTP 429 from Asana (retried)."""


class AsanaConfigurationError(AsanaAPIError):
    """Token missing or still the template placeholder."""


class ProjectNotFoundError(AsanaAPIError):
    """No project matches the operational keyword."""

    def __init__(self, available: list[str]):
        super().__init__(
            f"Operational project not found. Available projects: {', '.join(available)}",
            status_code=404,
        )
        self.available = available


@dataclass
class TaskBatch:
    """Result of one full fetch of the operational project."""

    workspace: dict[str, Any]
    project: dict[str, Any]
    tasks: list[dict[str, Any]]
    source: str = "asana"
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class AsanaClient:
    """
    Async client for the Asana endpoints the dashboard needs.

    Transient failures (429 and transport errors, timeouts included) are
    retried with exponential backoff; other HTTP errors surface as
    AsanaAPIError with the status code.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str = ASANA_BASE_URL,
        timeout: float = ASANA_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token if token is not None else get_asana_token()
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self.mock_mode = is_placeholder(self.token)

        if self.mock_mode:
            logger.warning("Asana token not configured - AsanaClient running in MOCK mode")
        else:
            logger.info("AsanaClient initialized for %s", base_url)

    def _http(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self.token}",
            },
            timeout=timeout or self.timeout,
            transport=self._transport,
        )

    @retry(
        stop=stop_after_attempt(ASANA_MAX_RETRIES + 1),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((AsanaRateLimitError, httpx.TransportError)),
        reraise=True,
    )
    async def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """GET ``path`` and return the decoded body.

        Raises:
            AsanaConfigurationError: In mock mode (no real token)
            AsanaRateLimitError: On 429 (retried)
            AsanaAPIError: On any other non-2xx status or an "errors" body
        """
        if self.mock_mode:
            raise AsanaConfigurationError("Asana token not configured")

        counter("asana.requests")
        async with self._http(timeout) as client:
            response = await client.get(path, params=params)

        if response.status_code == 429:
            counter("asana.rate_limited")
            logger.warning("Asana rate limited on %s", path)
            raise AsanaRateLimitError("Asana rate limit exceeded", status_code=429)

        if response.status_code >= 400:
            counter("asana.errors")
            logger.error("Asana API error %s on %s: %s", response.status_code, path, response.text[:200])
            raise AsanaAPIError(
                f"Asana API error: {response.status_code}", status_code=response.status_code
            )

        payload = response.json()
        if payload.get("errors"):
            message = payload["errors"][0].get("message", "unknown error")
            raise AsanaAPIError(f"Asana API error: {message}", status_code=response.status_code)
        return payload

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """_request() with transport failures surfaced as AsanaAPIError (503) once retries run out."""
        try:
            return await self._request(path, params=params, timeout=timeout)
        except httpx.TransportError as e:
            counter("asana.transport_errors")
            logger.error("Asana unreachable on %s: %s", path, e)
            raise AsanaAPIError(f"Asana unreachable: {type(e).__name__}", status_code=503) from e

    async def get_workspaces(self) -> list[dict[str, Any]]:
        payload = await self._get("/workspaces")
        return payload.get("data") or []

    async def find_operational_project(
        self, workspace_gid: str, keyword: str = ASANA_PROJECT_KEYWORD
    ) -> dict[str, Any]:
        """First project of the workspace whose name contains ``keyword`` (case-insensitive)."""
        payload = await self._get(
            "/projects",
            params={"workspace": workspace_gid, "limit": ASANA_PAGE_LIMIT, "opt_fields": "name,notes,created_at"},
        )
        projects = payload.get("data") or []
        for project in projects:
            name = project.get("name") or ""
            if keyword.lower() in name.lower():
                return project
        raise ProjectNotFoundError([p.get("name") or "" for p in projects])

    async def get_project_tasks(self, project_gid: str) -> list[dict[str, Any]]:
        """All tasks of a project, following next_page.offset until exhausted."""
        tasks: list[dict[str, Any]] = []
        offset: str | None = None
        while True:
            params: dict[str, Any] = {
                "project": project_gid,
                "opt_fields": TASK_OPT_FIELDS,
                "limit": ASANA_PAGE_LIMIT,
            }
            if offset:
                params["offset"] = offset
            payload = await self._get("/tasks", params=params)
            tasks.extend(payload.get("data") or [])
            offset = (payload.get("next_page") or {}).get("offset")
            if not offset:
                return tasks

    async def get_task_stories(self, task_gid: str) -> list[dict[str, Any]]:
        """Stories (comments and system events) of a task. Empty in mock mode."""
        if self.mock_mode:
            return []
        payload = await self._get(
            f"/tasks/{task_gid}/stories",
            params={"opt_fields": STORY_OPT_FIELDS},
            timeout=ASANA_STORIES_TIMEOUT_SECONDS,
        )
        return payload.get("data") or []

    async def fetch_operational_tasks(self) -> TaskBatch:
        """
        Workspace -> operational project -> tasks.

        Raises:
            AsanaAPIError: If no workspace is visible or any call fails
            ProjectNotFoundError: If no project matches the keyword
        """
        if self.mock_mode:
            return mock_task_batch()

        with time_block("asana.fetch_operational_tasks"):
            workspaces = await self.get_workspaces()
            if not workspaces:
                raise AsanaAPIError("No workspaces found for this token", status_code=404)
            workspace = workspaces[0]
            project = await self.find_operational_project(workspace["gid"])
            tasks = await self.get_project_tasks(project["gid"])

        log_event(
            "asana.fetch_complete",
            workspace=workspace.get("name"),
            project=project.get("name"),
            tasks=len(tasks),
        )
        return TaskBatch(workspace=workspace, project=project, tasks=tasks)

    def get_config_status(self) -> dict[str, Any]:
        return {
            "token_configured": not self.mock_mode,
            "using_mock_data": self.mock_mode,
            "token_length": len(self.token or ""),
            "base_url": self.base_url,
            "timeout_seconds": self.timeout,
            "message": (
                "Usando dados de demonstração (configure ASANA_ACCESS_TOKEN)"
                if self.mock_mode
                else "Conectado ao Asana"
            ),
        }


def mock_task_batch() -> TaskBatch:
    """Three demo tasks in the shape returned by /tasks."""

    def _task(gid: str, name: str, completed: bool, exporter: str, carrier: str, etd: str, eta: str):
        return {
            "gid": gid,
            "name": name,
            "completed": completed,
            "notes": "Mock tracking data",
            "assignee": None,
            "parent": None,
            "modified_at": "2024-02-01T12:00:00.000Z",
            "custom_fields": [
                {"name": "Exportador", "text_value": exporter},
                {"name": "CIA DE TRANSPORTE", "text_value": carrier},
                {"name": "ETD", "text_value": etd},
                {"name": "ETA", "text_value": eta},
            ],
        }

    return TaskBatch(
        workspace={"gid": "mock-workspace", "name": "Mock Workspace"},
        project={"gid": "mock-project", "name": "Projeto Operacional (Mock)"},
        tasks=[
            _task("mock-1", "661º UNIVAR (PO 4527659420)", False, "UNIVAR", "MSC", "2024-01-15", "2024-02-15"),
            _task("mock-2", "662º AGRIVALE (BL MSCUNE1234567)", False, "AGRIVALE", "MAERSK", "2024-01-20", "2024-02-20"),
            _task("mock-3", "663º WCB (Container MSKU7654321)", True, "WCB", "CMA CGM", "2024-01-10", "2024-02-10"),
        ],
        source="mock",
    )


_client: AsanaClient | None = None


def get_asana_client() -> AsanaClient:
    """Get or create the singleton AsanaClient."""
    global _client
    if _client is None:
        _client = AsanaClient()
    return _client


def reset_asana_client() -> None:
    """Drop the singleton so the next call re-reads the environment."""
    global _client
    _client = None
