"""Tests for the secure file reader."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from codechat import files
from codechat.files import (
    MAX_FILE_CHARS,
    canonical_root,
    clear_root_cache,
    is_within_root,
    read_all,
    read_all_async,
    read_file,
)
from codechat.models import FileReference


@pytest.fixture(autouse=True)
def _fresh_root_cache():
    clear_root_cache()
    yield
    clear_root_cache()


def _populate(base: Path, structure: dict) -> None:
    for name, content in structure.items():
        path = base / name
        if isinstance(content, dict):
            path.mkdir(parents=True, exist_ok=True)
            _populate(path, content)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "work" / "demo"
    root.mkdir(parents=True)
    _populate(root, {
        "src": {"index.js": "console.log(1)", "lib": {"Util.PY": "x = 1"}},
        "README": "hello",
    })
    (tmp_path / "work" / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


def _refs(*paths: str) -> list[FileReference]:
    return [FileReference(path=p) for p in paths]


class TestContainment:
    def test_root_itself_is_contained(self):
        assert is_within_root("/proj/app", "/proj/app")

    def test_nested_path_is_contained(self):
        assert is_within_root("/proj/app", "/proj/app/src/main.py")

    def test_sibling_with_prefix_name_is_rejected(self):
        assert not is_within_root("/proj/app", "/proj/app2")
        assert not is_within_root("/proj/app", "/proj/app2/x.py")

    def test_parent_is_rejected(self):
        assert not is_within_root("/proj/app", "/proj")

    def test_filesystem_root(self):
        assert is_within_root("/", "/etc/passwd")


class TestReadFile:
    def test_reads_file_inside_root(self, project: Path):
        result = read_file(project, FileReference(path="src/index.js"))
        assert result.path == "src/index.js"
        assert result.content == "console.log(1)"
        assert result.extension == "js"
        assert result.error is False

    def test_nested_file_with_lowercased_extension(self, project: Path):
        result = read_file(project, FileReference(path="src/lib/Util.PY"))
        assert result.content == "x = 1"
        assert result.extension == "py"

    def test_file_without_extension(self, project: Path):
        result = read_file(project, FileReference(path="README"))
        assert result.content == "hello"
        assert result.extension == ""

    def test_redundant_segments_that_stay_inside_are_allowed(self, project: Path):
        result = read_file(project, FileReference(path="src/lib/../index.js"))
        assert result.content == "console.log(1)"

    def test_parent_traversal_is_rejected(self, project: Path):
        result = read_file(project, FileReference(path="../secret.txt"))
        assert result.error is True
        assert result.path == "../secret.txt"
        assert "outside of the project directory" in result.content
        assert "top secret" not in result.content

    def test_deep_traversal_is_rejected(self, project: Path):
        result = read_file(project, FileReference(path="../../etc/passwd"))
        assert result.error is True
        assert "outside of the project directory" in result.content

    def test_traversal_into_sibling_with_prefix_name(self, project: Path):
        sibling = project.parent / "demo2"
        sibling.mkdir()
        (sibling / "a.txt").write_text("sibling", encoding="utf-8")

        result = read_file(project, FileReference(path="../demo2/a.txt"))
        assert result.error is True
        assert "sibling" not in result.content

    def test_absolute_path_is_rejected_without_reading(self, project: Path, monkeypatch):
        opened: list[Path] = []
        original_open = Path.open

        def _tracking_open(self, *args, **kwargs):
            opened.append(self)
            return original_open(self, *args, **kwargs)

        monkeypatch.setattr(Path, "open", _tracking_open)
        target = project / "src" / "index.js"

        result = read_file(project, FileReference(path=str(target)))
        assert result.error is True
        assert "Absolute paths are not allowed" in result.content
        assert opened == []

    def test_absolute_path_is_rejected_before_root_resolution(self, project: Path, monkeypatch):
        calls: list[str] = []
        monkeypatch.setattr(files.os.path, "realpath", lambda p: calls.append(p) or p)

        result = read_file(project, FileReference(path="/etc/passwd"))
        assert result.error is True
        assert calls == []

    def test_missing_file_becomes_error_entry(self, project: Path):
        result = read_file(project, FileReference(path="src/nope.js"))
        assert result.error is True
        assert result.extension == "text"
        assert result.content.startswith("Error reading file:")

    def test_directory_is_not_a_regular_file(self, project: Path):
        result = read_file(project, FileReference(path="src"))
        assert result.error is True
        assert "Not a regular file" in result.content

    def test_content_is_truncated(self, project: Path):
        (project / "big.txt").write_text("a" * (MAX_FILE_CHARS + 500), encoding="utf-8")
        result = read_file(project, FileReference(path="big.txt"))
        assert len(result.content) == MAX_FILE_CHARS

    def test_undecodable_bytes_are_replaced(self, project: Path):
        (project / "bin.dat").write_bytes(b"ok\xff\xfe")
        result = read_file(project, FileReference(path="bin.dat"))
        assert result.error is False
        assert result.content.startswith("ok")


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
class TestSymlinks:
    def test_symlink_pointing_outside_is_rejected(self, project: Path):
        (project / "escape.txt").symlink_to(project.parent / "secret.txt")
        result = read_file(project, FileReference(path="escape.txt"))
        assert result.error is True
        assert "top secret" not in result.content

    def test_symlinked_directory_pointing_outside_is_rejected(self, project: Path):
        (project / "up").symlink_to(project.parent, target_is_directory=True)
        result = read_file(project, FileReference(path="up/secret.txt"))
        assert result.error is True

    def test_symlink_inside_root_is_followed(self, project: Path):
        (project / "alias.js").symlink_to(project / "src" / "index.js")
        result = read_file(project, FileReference(path="alias.js"))
        assert result.content == "console.log(1)"

    def test_root_reached_through_symlink(self, project: Path, tmp_path: Path):
        link = tmp_path / "demo-link"
        link.symlink_to(project, target_is_directory=True)
        result = read_file(link, FileReference(path="src/index.js"))
        assert result.content == "console.log(1)"
        outside = read_file(link, FileReference(path="../secret.txt"))
        assert outside.error is True


class TestReadAll:
    def test_preserves_order_and_isolates_failures(self, project: Path):
        results = read_all(project, _refs("src/index.js", "../secret.txt", "/etc/passwd", "README"))
        assert [r.path for r in results] == ["src/index.js", "../secret.txt", "/etc/passwd", "README"]
        assert [r.error for r in results] == [False, True, True, False]

    def test_permission_denied_is_isolated(self, project: Path, monkeypatch):
        original_open = Path.open

        def _guarded_open(self, *args, **kwargs):
            if self.name == "index.js":
                raise PermissionError(13, "Permission denied")
            return original_open(self, *args, **kwargs)

        monkeypatch.setattr(Path, "open", _guarded_open)

        results = read_all(project, _refs("README", "src/index.js", "src/lib/Util.PY"))

        assert [r.error for r in results] == [False, True, False]
        assert "Permission denied" in results[1].content
        assert results[1].extension == "text"
        assert results[0].content == "hello"
        assert results[2].content == "x = 1"

    def test_empty_input(self, project: Path):
        assert read_all(project, []) == []

    def test_async_matches_sync(self, project: Path):
        refs = _refs("README", "missing.txt", "src/index.js")
        results = asyncio.run(read_all_async(project, refs, timeout=5))
        assert results == read_all(project, refs)

    def test_async_timeout_becomes_error_entry(self, project: Path, monkeypatch):
        import time

        def _slow(root, ref):
            time.sleep(0.5)
            return read_file(root, ref)

        monkeypatch.setattr(files, "read_file", _slow)
        results = asyncio.run(read_all_async(project, _refs("README"), timeout=0.05))
        assert results[0].error is True
        assert "Timed out" in results[0].content


def test_canonical_root_is_cached(tmp_path: Path):
    canonical_root(str(tmp_path))
    canonical_root(str(tmp_path))
    assert canonical_root.cache_info().hits >= 1
