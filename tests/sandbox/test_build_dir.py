"""Tests for build directory assembly.

Uses real temp trees; the environment store is the in-memory one.
"""

import os
import re
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conftest import ENV_DATA, make_descriptor, project_file_set
from lambdapack.descriptor.validator import validate_descriptor
from lambdapack.envstore.static import StaticEnvironmentStore
from lambdapack.errors import EnvironmentFetchFailed, ProjectCopyFailed
from lambdapack.sandbox.build_dir import (
    assemble_build_dir,
    copy_project,
    create_build_dir,
    write_environment_file,
)
from lambdapack.sandbox.exclusion import ExclusionMatcher


def _descriptor(tmp_path: Path, **kwargs):
    return validate_descriptor(make_descriptor(**kwargs), tmp_path / "awsm.json")


class TestCreateBuildDir:
    def test_name_is_function_at_millis(self, tmp_path):
        build_dir = create_build_dir("users-show", tmp_path)
        assert build_dir.parent == tmp_path
        assert re.fullmatch(r"users-show@\d{13}", build_dir.name)
        assert build_dir.is_dir()

    def test_same_millisecond_does_not_collide(self, tmp_path):
        with patch("lambdapack.sandbox.build_dir.time.time", return_value=1700000000.0):
            first = create_build_dir("fn", tmp_path)
            second = create_build_dir("fn", tmp_path)

        assert first != second
        assert first.name == "fn@1700000000000"
        assert second.name == "fn@1700000000001"

    def test_defaults_to_system_temp(self, tmp_path):
        with patch("lambdapack.sandbox.build_dir.tempfile.gettempdir", return_value=str(tmp_path)):
            build_dir = create_build_dir("fn")
        assert build_dir.parent == tmp_path

    def test_build_root_that_is_a_file_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(ProjectCopyFailed) as exc_info:
            create_build_dir("fn", blocker)
        assert exc_info.value.detail == str(blocker)

    def test_unwritable_build_root_raises(self, tmp_path):
        with patch.object(Path, "mkdir", side_effect=PermissionError("permission denied")):
            with pytest.raises(ProjectCopyFailed, match="permission denied"):
                create_build_dir("fn", tmp_path)


class TestCopyProject:
    def test_copies_everything_without_patterns(self, project, tmp_path):
        dest = tmp_path / "dest"
        copy_project(project, dest, ExclusionMatcher())
        assert project_file_set(dest) == project_file_set(project)

    def test_excluded_paths_absent_and_siblings_identical(self, project, tmp_path):
        dest = tmp_path / "dest"
        copy_project(project, dest, ExclusionMatcher(["^tests", r"^lib/b\.js$"]))

        copied = project_file_set(dest)
        assert "tests/index.test.js" not in copied
        assert not (dest / "tests").exists()
        assert "lib/b.js" not in copied
        for rel in copied:
            assert (dest / rel).read_bytes() == (project / rel).read_bytes()
        assert copied == project_file_set(project) - {"tests/index.test.js", "lib/b.js"}

    def test_excluded_directory_drops_subtree(self, project, tmp_path):
        dest = tmp_path / "dest"
        copy_project(project, dest, ExclusionMatcher(["^node_modules$"]))
        assert not (dest / "node_modules").exists()

    def test_binary_content_preserved(self, project, tmp_path):
        blob = bytes(range(256)) * 4
        (project / "bin").mkdir()
        (project / "bin" / "native.node").write_bytes(blob)

        dest = tmp_path / "dest"
        copy_project(project, dest, ExclusionMatcher())
        assert (dest / "bin" / "native.node").read_bytes() == blob

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(ProjectCopyFailed) as exc_info:
            copy_project(tmp_path / "missing", tmp_path / "dest", ExclusionMatcher())
        assert "missing" in exc_info.value.detail

    def test_os_error_is_wrapped(self, project, tmp_path):
        with patch("lambdapack.sandbox.build_dir.shutil.copytree", side_effect=OSError("disk full")):
            with pytest.raises(ProjectCopyFailed, match="disk full"):
                copy_project(project, tmp_path / "dest", ExclusionMatcher())


class TestWriteEnvironmentFile:
    def test_writes_fetched_bytes(self, tmp_path, target, store):
        env_path = write_environment_file(tmp_path, target, store)
        assert env_path == tmp_path / ".env"
        assert env_path.read_bytes() == ENV_DATA

    def test_custom_file_name(self, tmp_path, target, store):
        env_path = write_environment_file(tmp_path, target, store, "env.properties")
        assert env_path.name == "env.properties"

    def test_missing_object_raises(self, tmp_path, target):
        with pytest.raises(EnvironmentFetchFailed):
            write_environment_file(tmp_path, target, StaticEnvironmentStore())

    def test_unexpected_store_error_is_wrapped(self, tmp_path, target):
        store = MagicMock()
        store.fetch_object.side_effect = RuntimeError("connection reset")
        with pytest.raises(EnvironmentFetchFailed, match="connection reset"):
            write_environment_file(tmp_path, target, store)

    def test_write_failure_is_wrapped(self, tmp_path, target, store):
        with patch.object(Path, "write_bytes", side_effect=OSError("no space left on device")):
            with pytest.raises(ProjectCopyFailed, match="no space left") as exc_info:
                write_environment_file(tmp_path, target, store)
        assert exc_info.value.detail == str(tmp_path / ".env")


class TestAssembleBuildDir:
    def test_copy_plus_env(self, tmp_path, project, target, store, settings):
        descriptor = _descriptor(tmp_path, exclude_patterns=["^tests"])
        build_dir = assemble_build_dir(descriptor, project, target, store, settings)

        assert build_dir.parent == Path(settings.build_root)
        assert build_dir.name.startswith("users-show@")
        files = project_file_set(build_dir)
        assert ".env" in files
        assert "tests/index.test.js" not in files
        assert (build_dir / ".env").read_bytes() == ENV_DATA

    def test_env_fetch_failure_is_terminal(self, tmp_path, project, target, settings):
        descriptor = _descriptor(tmp_path)
        with pytest.raises(EnvironmentFetchFailed):
            assemble_build_dir(descriptor, project, target, StaticEnvironmentStore(), settings)

    def test_each_run_gets_a_fresh_directory(self, tmp_path, project, target, store, settings):
        descriptor = _descriptor(tmp_path)
        first = assemble_build_dir(descriptor, project, target, store, settings)
        second = assemble_build_dir(descriptor, project, target, store, settings)
        assert first != second
        assert sorted(os.listdir(settings.build_root)) == sorted([first.name, second.name])
