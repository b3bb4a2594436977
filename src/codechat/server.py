"""FastAPI routes for the AI chat endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fastapi import FastAPI, HTTPException
from pydantic import Field

from . import service
from .errors import CodechatError, ConfigurationError, UpstreamError, ValidationError
from .models import (
    ChatAnswer,
    ConfigStatus,
    FileReference,
    OverviewResult,
    Project,
    ProjectOverview,
    CamelModel,
)
from .projects import ProjectCatalog

logger = logging.getLogger(__name__)

app = FastAPI(title="codechat", version="0.1.0")

# Set by start_server() before uvicorn starts.
_projects: ProjectCatalog = ProjectCatalog()
# None means "read os.environ on each request".
_environ: Mapping[str, str] | None = None


class ChatContext(CamelModel):
    project_overview: ProjectOverview | None = None
    file_references: list[FileReference] | None = None


class ChatRequest(CamelModel):
    message: str | None = None
    context: ChatContext = Field(default_factory=ChatContext)
    project_name: str | None = None


class OverviewRequest(CamelModel):
    project_name: str | None = None
    files: list[FileReference] | None = None


def _http_error(exc: CodechatError, summary: str) -> HTTPException:
    """Map a core error to an HTTP status; the detail never includes credentials."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, UpstreamError):
        return HTTPException(status_code=502, detail=f"{summary}: {exc}")
    return HTTPException(status_code=500, detail=f"{summary}: {exc}")


# ---------------------------------------------------------------------------
# API endpoints
# ---------------------------------------------------------------------------

@app.post("/api/ai/chat", response_model=ChatAnswer)
async def chat(req: ChatRequest) -> ChatAnswer:
    """Answer a question about a project, inlining any referenced files."""
    try:
        return await service.answer_question(
            req.message,
            req.context.project_overview,
            req.context.file_references,
            project_name=req.project_name,
            project_lookup=_projects,
            environ=_environ,
        )
    except ValidationError as exc:
        raise _http_error(exc, "Invalid request") from exc
    except (ConfigurationError, UpstreamError) as exc:
        logger.error("AI chat error: %s", exc)
        raise _http_error(exc, "Failed to process AI request") from exc


@app.post("/api/ai/generate-overview", response_model=OverviewResult)
async def generate_overview(req: OverviewRequest) -> OverviewResult:
    """Generate a project overview from its file list."""
    try:
        return await service.summarize_project(req.project_name, req.files, environ=_environ)
    except ValidationError as exc:
        raise _http_error(exc, "Invalid request") from exc
    except (ConfigurationError, UpstreamError) as exc:
        logger.error("AI overview generation error: %s", exc)
        raise _http_error(exc, "Failed to generate project overview") from exc


@app.get("/api/ai/config", response_model=ConfigStatus, response_model_exclude_none=True)
async def config_status() -> ConfigStatus:
    """Report whether an AI provider is configured."""
    return service.get_config_status(_environ)


@app.get("/api/projects", response_model=list[Project])
async def list_projects() -> list[Project]:
    return _projects.list_projects()


# ---------------------------------------------------------------------------
# Server launcher
# ---------------------------------------------------------------------------

def start_server(
    projects: ProjectCatalog,
    host: str = "127.0.0.1",
    port: int = 3001,
) -> None:
    """Start the API server with *projects* as the project catalog."""
    import uvicorn

    global _projects
    _projects = projects
    uvicorn.run(app, host=host, port=port)
