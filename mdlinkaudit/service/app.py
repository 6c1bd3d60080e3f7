"""FastAPI application entrypoint for mdlinkaudit service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import AuditConfig, load_config
from ..coordinator import FleetCoordinator
from ..github import GitHubClient, ListingError
from ..models import RepositoryReport
from ..report import ReportRenderer


class AuditRequest(BaseModel):
    username: str
    repository: Optional[str] = None


class LinkResult(BaseModel):
    text: str
    kind: str
    target: Optional[str] = None
    status: str
    detail: str
    http_status: Optional[int] = None


class FileResult(BaseModel):
    path: str
    links: List[LinkResult]


class RepositoryResult(BaseModel):
    name: str
    html_url: str
    default_branch: str
    status: str
    state: Optional[str] = None
    all_links_ok: bool
    file_errors: List[str]
    files: List[FileResult]


class AuditResponse(BaseModel):
    reports: List[RepositoryResult]
    markdown: str


class HealthResponse(BaseModel):
    status: str


def _default_client(config: AuditConfig) -> GitHubClient:
    return GitHubClient(config.github, timeout=config.request_timeout, user_agent=config.user_agent)


def _default_coordinator(config: AuditConfig) -> FleetCoordinator:
    return FleetCoordinator(config)


def create_app(
    config: AuditConfig | None = None,
    *,
    client_factory: Callable[[AuditConfig], GitHubClient] = _default_client,
    coordinator_factory: Callable[[AuditConfig], FleetCoordinator] = _default_coordinator,
) -> FastAPI:
    """Create the FastAPI application exposing audit runs."""
    settings = config or load_config(Path.cwd())
    renderer = ReportRenderer()
    app = FastAPI(title="mdlinkaudit Service", version="0.1.0")

    async def get_config() -> AuditConfig:
        return settings

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/audit", response_model=AuditResponse)
    async def audit(
        payload: AuditRequest,
        audit_config: AuditConfig = Depends(get_config),
    ) -> AuditResponse:
        def _run_audit() -> List[RepositoryReport]:
            client = client_factory(audit_config)
            repositories = client.list_repositories(payload.username, payload.repository)
            if not repositories:
                return []
            return coordinator_factory(audit_config).run(repositories)

        loop = asyncio.get_running_loop()
        reports = await loop.run_in_executor(None, _run_audit)
        return AuditResponse(
            reports=[_to_result(report) for report in reports],
            markdown=renderer.render(reports, escape_links=True),
        )

    @app.exception_handler(ListingError)
    async def listing_error_handler(_: Any, exc: ListingError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    return app


def _to_result(report: RepositoryReport) -> RepositoryResult:
    repository = report.repository
    return RepositoryResult(
        name=repository.name,
        html_url=repository.html_url,
        default_branch=repository.default_branch,
        status=report.status,
        state=report.state,
        all_links_ok=report.all_links_ok,
        file_errors=list(report.file_errors),
        files=[
            FileResult(
                path=file_report.path,
                links=[
                    LinkResult(
                        text=link.raw.text,
                        kind=link.kind,
                        target=link.target,
                        status=link.outcome.status if link.outcome else "pending",
                        detail=link.outcome.detail if link.outcome else "",
                        http_status=link.outcome.http_status if link.outcome else None,
                    )
                    for link in file_report.links
                ],
            )
            for file_report in report.files
        ],
    )


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
