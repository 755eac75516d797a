"""Packaging run orchestrator — the host-facing entry point.

Run flow (strictly sequential, each step finishes before the next starts):
1. Load and validate the function descriptor.
2. Assemble the build directory (filtered copy + environment file).
3. Select the files to ship (bundled or raw).
4. Compress them into `<build dir>/package.zip` under the size ceiling.

Any failure is terminal. Components raise typed PackagingErrors; this is
the only place that logs the final failure before re-raising it unchanged.
"""

import logging
from pathlib import Path
from typing import Optional

from lambdapack.core.config import Settings, get_settings
from lambdapack.core.logging import bind_run_context, clear_run_context
from lambdapack.descriptor.types import DeploymentTarget
from lambdapack.descriptor.validator import load_and_validate
from lambdapack.envstore.base import EnvironmentStore
from lambdapack.errors import PackagingError
from lambdapack.optimize.bundler import Bundler
from lambdapack.optimize.minifier import Minifier
from lambdapack.optimize.pipeline import build_compression_entries
from lambdapack.packaging.archive import build_archive
from lambdapack.packaging.types import PackageArtifact
from lambdapack.sandbox.build_dir import assemble_build_dir

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "package.zip"


def package_function(
    descriptor_path: Path | str,
    target: DeploymentTarget,
    project_root: Path | str,
    store: EnvironmentStore,
    settings: Optional[Settings] = None,
    bundler: Optional[Bundler] = None,
    minifier: Optional[Minifier] = None,
) -> PackageArtifact:
    """Package one function into a deployable archive.

    Args:
        descriptor_path: Path to the function's descriptor document.
        target: Region, stage and project identity being deployed to.
        project_root: Root of the project tree copied into the build dir.
        store: Source of the stage's environment file.
        settings: Packager settings; loaded from the environment if omitted.
        bundler: Overrides the builder named in the descriptor.
        minifier: Overrides the default uglify-js minifier.

    Raises:
        PackagingError: Any terminal failure, typed by stage.
    """
    settings = settings or get_settings()
    descriptor_path = Path(descriptor_path)
    bind_run_context(descriptor_path.parent.name, target.stage)

    try:
        descriptor = load_and_validate(descriptor_path)
        bind_run_context(descriptor.name, target.stage)

        build_dir = assemble_build_dir(descriptor, project_root, target, store, settings)
        entries = build_compression_entries(
            descriptor, build_dir, settings, bundler=bundler, minifier=minifier
        )
        archive_path = build_archive(entries, build_dir / ARCHIVE_NAME)
    except PackagingError as exc:
        logger.error(
            "Packaging %s failed [%s]: %s", descriptor_path, exc.code, exc,
        )
        raise
    finally:
        clear_run_context()

    artifact = PackageArtifact(
        descriptor_path=descriptor.path or str(descriptor_path.resolve()),
        archive_path=str(archive_path),
        build_dir=str(build_dir),
        entry_names=[entry.name for entry in entries],
        size_bytes=archive_path.stat().st_size,
    )
    logger.info(
        "Packaged '%s': %d files, %d bytes -> %s",
        descriptor.name, len(artifact.entry_names), artifact.size_bytes, archive_path,
    )
    return artifact
