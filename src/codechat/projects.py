"""Project catalog -- maps project names to their root directories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from .models import Project

logger = logging.getLogger(__name__)


@runtime_checkable
class ProjectLookup(Protocol):
    """What the orchestrator needs from the project-listing service."""

    def find_root(self, name: str) -> Path | None:
        """Return the project's root directory, or None if unknown."""
        ...


class ProjectCatalog:
    """Projects registered by name, optionally discovered from a directory."""

    def __init__(self, projects: dict[str, Path] | None = None) -> None:
        self._projects: dict[str, Path] = dict(projects or {})

    @classmethod
    def from_directory(cls, base_dir: Path) -> ProjectCatalog:
        """Treat every non-hidden subdirectory of *base_dir* as a project."""
        base_dir = base_dir.resolve()
        projects: dict[str, Path] = {}
        try:
            for child in sorted(base_dir.iterdir()):
                if child.is_dir() and not child.name.startswith("."):
                    projects[child.name] = child
        except OSError as exc:
            logger.warning("Could not list projects in %s: %s", base_dir, exc)
        return cls(projects)

    def add(self, name: str, root: Path) -> None:
        self._projects[name] = root

    def find_root(self, name: str) -> Path | None:
        return self._projects.get(name)

    def list_projects(self) -> list[Project]:
        return [Project(name=n, path=str(p)) for n, p in sorted(self._projects.items())]
