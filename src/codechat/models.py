"""Pydantic models for codechat requests, responses, and value objects."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    """Current time as an ISO 8601 UTC string (``...Z``)."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------

Role = Literal["system", "user", "model-response"]


class Message(BaseModel):
    """One role-tagged entry of a conversation."""

    role: Role
    content: str


# ---------------------------------------------------------------------------
# Project context
# ---------------------------------------------------------------------------

class FileReference(BaseModel):
    """A file the caller wants included. The path is untrusted."""

    model_config = ConfigDict(extra="ignore")

    path: str


class ResolvedFileContent(BaseModel):
    """Content read for one FileReference, or a description of the failure."""

    path: str
    content: str
    extension: str = ""
    error: bool = False


class ProjectOverview(CamelModel):
    """Opaque project metadata supplied by the caller."""

    project_name: str | None = None
    display_name: str | None = None
    technologies: list[str] | None = None
    file_count: int | None = None


# ---------------------------------------------------------------------------
# Operation results
# ---------------------------------------------------------------------------

class ChatAnswer(BaseModel):
    response: str
    provider: str
    model: str
    timestamp: str = Field(default_factory=utc_timestamp)


class OverviewResult(BaseModel):
    overview: str
    timestamp: str = Field(default_factory=utc_timestamp)


class ConfigStatus(BaseModel):
    """Readiness probe result. Unset fields are dropped from the JSON."""

    configured: bool
    provider: str | None = None
    model: str | None = None
    error: str | None = None


class Project(BaseModel):
    """A project known to the catalog."""

    name: str
    path: str
