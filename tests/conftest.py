"""Shared fixtures for the lambdapack test suite.

Builds a small node project on disk, a static environment store holding
its `.env`, and settings that keep build directories under tmp_path.
"""

import json
from pathlib import Path

import pytest

from lambdapack.core.config import Settings
from lambdapack.descriptor.types import DeploymentTarget
from lambdapack.envstore.static import StaticEnvironmentStore

ENV_DATA = b"API_KEY=abc123\nTABLE=users-dev\n"

PROJECT_FILES = {
    "index.js": "const lib = require('./lib/a');\nexports.handler = (e, c) => c.done(null, lib());\n",
    "lib/a.js": "module.exports = () => require('./b');\n",
    "lib/b.js": "module.exports = 'b';\n",
    "node_modules/dep/index.js": "module.exports = 42;\n",
    "tests/index.test.js": "// not shipped when excluded\n",
    "package.json": '{"name": "myproj"}\n',
}


class FakeBundler:
    """Records flatten() calls and returns a canned bundle."""

    def __init__(self, output: bytes = b"(function(){/* bundled */})();\n"):
        self.output = output
        self.calls: list[tuple] = []

    def flatten(self, entry, root, options) -> bytes:
        self.calls.append((entry, root, options))
        return self.output


class FakeMinifier:
    def __init__(self, output: bytes = b"!function(){}();"):
        self.output = output
        self.calls: list[Path] = []

    def minify(self, source: Path) -> bytes:
        self.calls.append(source)
        return self.output


def make_descriptor(
    handler: str = "index.handler",
    builder: str | None = None,
    minify: bool = False,
    include_paths: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    name: str = "users-show",
    **optimize_extra,
) -> dict:
    optimize = {"builder": builder, "minify": minify, **optimize_extra}
    if include_paths is not None:
        optimize["includePaths"] = include_paths
    return {
        "name": name,
        "cloudFormation": {
            "lambda": {
                "Function": {
                    "Type": "AWS::Lambda::Function",
                    "Properties": {"Runtime": "nodejs", "Handler": handler},
                }
            }
        },
        "package": {
            "optimize": optimize,
            "excludePatterns": exclude_patterns or [],
        },
    }


@pytest.fixture
def project(tmp_path) -> Path:
    root = tmp_path / "project"
    for rel_path, content in PROJECT_FILES.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def write_descriptor(tmp_path):
    """Write a descriptor document outside the project tree."""

    def _write(data: dict, filename: str = "awsm.json") -> Path:
        path = tmp_path / "descriptors" / data.get("name", "fn") / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(build_root=str(tmp_path / "builds"), env_store="static")


@pytest.fixture
def target() -> DeploymentTarget:
    return DeploymentTarget(
        region="us-east-1",
        stage="dev",
        project_name="myproj",
        bucket="myproj-env",
    )


@pytest.fixture
def store(target) -> StaticEnvironmentStore:
    store = StaticEnvironmentStore()
    store.put(target.bucket, target.project_name, target.stage, ENV_DATA)
    return store


@pytest.fixture
def fake_bundler() -> FakeBundler:
    return FakeBundler()


@pytest.fixture
def fake_minifier() -> FakeMinifier:
    return FakeMinifier()


def project_file_set(root: Path) -> set[str]:
    return {
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.is_file()
    }
