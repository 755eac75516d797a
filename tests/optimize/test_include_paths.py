"""Unit tests for include-path resolution."""

import os

import pytest

from lambdapack.errors import IncludePathNotFound
from lambdapack.optimize.include_paths import resolve_include_paths


@pytest.fixture
def build_dir(tmp_path):
    root = tmp_path / "build"
    files = {
        "app.js": "app",
        "lib/b.js": "b",
        "lib/a.js": "a",
        "lib/sub/c.js": "c",
        "lib/.DS_Store": "junk",
        "lib/z.js": "z",
        "vendor/bin/tool": "tool",
        ".env": "A=1",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def _names(entries) -> list[str]:
    return [e.name for e in entries]


class TestResolveIncludePaths:
    def test_file_uses_declared_path(self, build_dir):
        entries = resolve_include_paths(build_dir, ["app.js"])
        assert _names(entries) == ["app.js"]
        assert entries[0].data == b"app"

    def test_leading_dot_slash_is_normalised(self, build_dir):
        assert _names(resolve_include_paths(build_dir, ["./app.js"])) == ["app.js"]

    def test_directory_prefixed_with_basename(self, build_dir):
        entries = resolve_include_paths(build_dir, ["lib/"])
        assert _names(entries) == ["lib/a.js", "lib/b.js", "lib/z.js", "lib/sub/c.js"]

    def test_nested_directory_uses_only_basename(self, build_dir):
        entries = resolve_include_paths(build_dir, ["vendor/bin"])
        assert _names(entries) == ["bin/tool"]

    def test_dot_includes_tree_at_root(self, build_dir):
        names = _names(resolve_include_paths(build_dir, ["."]))
        assert names == [
            ".env",
            "app.js",
            "lib/a.js",
            "lib/b.js",
            "lib/z.js",
            "lib/sub/c.js",
            "vendor/bin/tool",
        ]

    def test_ignore_rules_skip_housekeeping_files(self, build_dir):
        names = _names(resolve_include_paths(build_dir, ["lib"]))
        assert "lib/.DS_Store" not in names

    def test_ignore_is_case_insensitive(self, build_dir):
        (build_dir / "lib" / ".ds_store").write_text("junk")
        names = _names(resolve_include_paths(build_dir, ["lib"]))
        assert not any("ds_store" in n.lower() for n in names)

    def test_custom_ignore_rules(self, build_dir):
        names = _names(resolve_include_paths(build_dir, ["lib"], ignore=["sub/"]))
        assert "lib/sub/c.js" not in names
        assert "lib/.DS_Store" in names

    def test_declaration_order_preserved(self, build_dir):
        names = _names(resolve_include_paths(build_dir, ["vendor/bin", "app.js", "lib/sub"]))
        assert names == ["bin/tool", "app.js", "sub/c.js"]

    def test_stable_across_runs(self, build_dir):
        first = resolve_include_paths(build_dir, [".", "lib"])
        second = resolve_include_paths(build_dir, [".", "lib"])
        assert first == second

    def test_missing_path_raises(self, build_dir):
        with pytest.raises(IncludePathNotFound) as exc_info:
            resolve_include_paths(build_dir, ["app.js", "missing/"])
        assert exc_info.value.path == "missing/"

    def test_absolute_path_rejected(self, build_dir):
        with pytest.raises(IncludePathNotFound):
            resolve_include_paths(build_dir, [str(build_dir / "app.js")])

    def test_escaping_path_rejected(self, build_dir):
        with pytest.raises(IncludePathNotFound, match="escapes"):
            resolve_include_paths(build_dir, ["../outside.js"])

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_symlinked_files_inside_directory_skipped(self, build_dir, tmp_path):
        target = tmp_path / "elsewhere.js"
        target.write_text("x")
        os.symlink(target, build_dir / "lib" / "link.js")

        names = _names(resolve_include_paths(build_dir, ["lib"]))
        assert "lib/link.js" not in names

    def test_empty_include_list(self, build_dir):
        assert resolve_include_paths(build_dir, []) == []

    def test_entry_names_never_absolute(self, build_dir):
        for entry in resolve_include_paths(build_dir, [".", "lib", "app.js"]):
            assert not entry.name.startswith("/")

    @pytest.mark.skipif(os.name == "nt", reason="backslash is a separator on Windows")
    def test_unarchivable_file_name_raises(self, build_dir):
        (build_dir / "lib" / "odd\\name.js").write_text("x")
        with pytest.raises(IncludePathNotFound, match="cannot be archived") as exc_info:
            resolve_include_paths(build_dir, ["lib"])
        assert exc_info.value.detail == "lib"
