"""Repo scanner -- walks a project tree to list files and detect technologies."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .models import ProjectOverview

# Directories to skip unconditionally.
SKIP_DIRS: set[str] = {
    ".git", ".venv", "venv", "__pycache__", "dist", "build", ".tox", ".eggs",
    "node_modules", ".mypy_cache", ".pytest_cache",
    "target",          # Rust / Java (Maven)
    "bin", "obj",      # C# / Go binaries
    ".gradle",
    ".next", ".nuxt",
    "vendor",
    ".cargo",
    "Pods",
    ".build",
    "coverage",
    ".cache",
}

# Extension -> technology name.
LANGUAGE_EXTENSIONS: dict[str, str] = {
    ".py": "Python",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".go": "Go",
    ".rs": "Rust",
    ".java": "Java",
    ".kt": "Kotlin",
    ".cs": "C#",
    ".swift": "Swift",
    ".rb": "Ruby",
    ".cpp": "C++",
    ".c": "C",
    ".h": "C",
    ".hpp": "C++",
}

# Marker files that name a framework or toolchain.
MARKER_FILES: dict[str, str] = {
    "package.json": "Node.js",
    "pyproject.toml": "Python packaging",
    "requirements.txt": "pip",
    "go.mod": "Go modules",
    "Cargo.toml": "Cargo",
    "pom.xml": "Maven",
    "build.gradle": "Gradle",
    "Gemfile": "Bundler",
    "Dockerfile": "Docker",
}


@dataclass
class ScanResult:
    """Files and technologies found under a project root."""

    root: Path
    files: list[str] = field(default_factory=list)         # root-relative, forward slashes
    technologies: list[str] = field(default_factory=list)

    def overview(self, name: str | None = None) -> ProjectOverview:
        name = name or self.root.name
        return ProjectOverview(
            project_name=name,
            display_name=name,
            technologies=self.technologies,
            file_count=len(self.files),
        )


def scan_repo(root: Path, *, max_files: int | None = None) -> ScanResult:
    """Walk *root* and collect file paths plus detected technologies.

    Paths are returned **relative to root** using forward slashes.  Walking
    stops after *max_files* files when given.
    """
    root = root.resolve()
    result = ScanResult(root=root)
    seen: set[str] = set()

    for dirpath, dirnames, filenames in os.walk(root):
        # Prune excluded directories in-place so os.walk skips them.
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)

        rel_dir = Path(dirpath).relative_to(root).as_posix()
        if rel_dir == ".":
            rel_dir = ""

        for fname in sorted(filenames):
            ext = os.path.splitext(fname)[1].lower()
            tech = LANGUAGE_EXTENSIONS.get(ext) or MARKER_FILES.get(fname)
            if tech:
                seen.add(tech)
            result.files.append(f"{rel_dir}/{fname}" if rel_dir else fname)
            if max_files is not None and len(result.files) >= max_files:
                break
        else:
            continue
        break

    result.files.sort()
    result.technologies = sorted(seen)
    return result
