"""Request orchestrator -- the operations exposed to the routing layer.

Each call runs a strictly sequential pipeline: resolve configuration, read
referenced files, build the prompt, call the provider.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from . import adapters
from .config import Settings, resolve
from .errors import CodechatError, ValidationError
from .files import read_all_async
from .models import (
    ChatAnswer,
    ConfigStatus,
    FileReference,
    OverviewResult,
    ProjectOverview,
    ResolvedFileContent,
)
from .projects import ProjectLookup
from .prompts import build_conversation, build_overview_conversation, build_system_prompt

logger = logging.getLogger(__name__)


async def answer_question(
    user_text: str | None,
    overview: ProjectOverview | None = None,
    file_references: Sequence[FileReference] | None = None,
    *,
    project_name: str | None = None,
    project_lookup: ProjectLookup | None = None,
    environ: Mapping[str, str] | None = None,
) -> ChatAnswer:
    """Answer *user_text* about a project, with any referenced files inlined.

    If files are referenced but *project_name* cannot be found, the question
    is still answered, just without file contents.
    """
    if not user_text or not user_text.strip():
        raise ValidationError("Message is required")

    settings = Settings.from_env(environ)
    config = resolve(settings)
    refs = list(file_references or [])

    system_prompt = build_system_prompt(overview, refs)

    resolved: list[ResolvedFileContent] = []
    if refs:
        root = None
        if project_lookup is not None and project_name:
            root = project_lookup.find_root(project_name)
        if root is None:
            logger.warning(
                "Project %r not found; answering without %d referenced file(s)",
                project_name, len(refs),
            )
        else:
            resolved = await read_all_async(root, refs, timeout=settings.file_read_timeout)

    conversation = build_conversation(user_text, system_prompt, resolved)
    response = await adapters.invoke(conversation, config)
    return ChatAnswer(response=response, provider=config.provider, model=config.model)


async def summarize_project(
    project_name: str | None,
    files: Sequence[FileReference] | None,
    *,
    environ: Mapping[str, str] | None = None,
) -> OverviewResult:
    """Ask the provider for an overview of a project's file layout."""
    if not project_name or not files:
        raise ValidationError("Project name and files are required")

    config = resolve(Settings.from_env(environ))
    conversation = build_overview_conversation([f.path for f in files])
    overview = await adapters.invoke(conversation, config)
    return OverviewResult(overview=overview)


def get_config_status(environ: Mapping[str, str] | None = None) -> ConfigStatus:
    """Report whether a provider is usable. Never raises."""
    try:
        config = resolve(Settings.from_env(environ))
    except CodechatError as exc:
        return ConfigStatus(configured=False, error=str(exc))
    return ConfigStatus(configured=True, provider=config.provider, model=config.model)
