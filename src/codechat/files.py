"""Secure file reader -- resolves caller-supplied paths inside a project root.

Every reference produces exactly one :class:`ResolvedFileContent`.  Bad
references (absolute paths, traversal out of the root, missing or unreadable
files) become error-content entries; they never abort the batch.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from .errors import FileAccessError
from .models import FileReference, ResolvedFileContent

logger = logging.getLogger(__name__)

MAX_FILE_CHARS = 10_000
ROOT_CACHE_SIZE = 256


@lru_cache(maxsize=ROOT_CACHE_SIZE)
def canonical_root(project_root: str) -> str:
    """Canonical absolute form of *project_root* (symlinks resolved).

    Cached per root; call :func:`clear_root_cache` if a project is moved.
    """
    return os.path.realpath(project_root)


def clear_root_cache() -> None:
    canonical_root.cache_clear()


def is_within_root(root: str, target: str) -> bool:
    """True if *target* is *root* itself or lies underneath it.

    Both arguments must already be canonical.  A bare prefix match is not
    enough: ``/a/b`` must not contain ``/a/bc``.
    """
    if target == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return target.startswith(prefix)


def resolve_reference(project_root: str | Path, ref_path: str) -> Path:
    """Map *ref_path* to a canonical path inside *project_root*.

    Raises :class:`FileAccessError` for absolute paths and for anything that
    resolves outside the root.  Does not open the file.
    """
    if os.path.isabs(ref_path):
        raise FileAccessError("Absolute paths are not allowed")

    root = canonical_root(str(project_root))
    try:
        target = os.path.realpath(os.path.join(root, ref_path))
    except (OSError, ValueError) as exc:
        raise FileAccessError(f"Invalid path: {exc}") from exc
    if not is_within_root(root, target):
        raise FileAccessError("Referenced path is outside of the project directory")
    return Path(target)


def _read_text(target: Path) -> str:
    try:
        if not target.is_file():
            if target.exists():
                raise FileAccessError("Not a regular file")
            raise FileAccessError("File not found")
        with target.open("r", encoding="utf-8", errors="replace") as fh:
            return fh.read(MAX_FILE_CHARS)
    except OSError as exc:
        raise FileAccessError(exc.strerror or str(exc)) from exc


def _error_entry(ref: FileReference, message: str) -> ResolvedFileContent:
    return ResolvedFileContent(
        path=ref.path,
        content=f"Error reading file: {message}",
        extension="text",
        error=True,
    )


def read_file(project_root: str | Path, ref: FileReference) -> ResolvedFileContent:
    """Read one reference. Never raises for a bad reference."""
    try:
        target = resolve_reference(project_root, ref.path)
        content = _read_text(target)
    except FileAccessError as exc:
        logger.warning("Error reading file %s: %s", ref.path, exc)
        return _error_entry(ref, str(exc))

    extension = os.path.splitext(ref.path)[1].lstrip(".").lower()
    return ResolvedFileContent(path=ref.path, content=content, extension=extension)


def read_all(
    project_root: str | Path,
    refs: Sequence[FileReference],
) -> list[ResolvedFileContent]:
    """Read every reference in order. Output length always equals input length."""
    return [read_file(project_root, ref) for ref in refs]


async def read_all_async(
    project_root: str | Path,
    refs: Sequence[FileReference],
    *,
    timeout: float | None = None,
) -> list[ResolvedFileContent]:
    """Concurrent :func:`read_all` with an optional per-read timeout.

    A read that exceeds *timeout* becomes an error-content entry.
    """

    async def _one(ref: FileReference) -> ResolvedFileContent:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(read_file, project_root, ref), timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Timed out reading file %s after %ss", ref.path, timeout)
            return _error_entry(ref, f"Timed out after {timeout} seconds")

    return list(await asyncio.gather(*(_one(ref) for ref in refs)))
