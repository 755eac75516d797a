"""Build directory assembly.

Each packaging run gets its own directory, `<build root>/<function>@<ms>`,
holding a filtered copy of the project plus the stage's environment file.
Build directories are left in place after the run; reclaiming them is the
host's job.
"""

import logging
import shutil
import tempfile
import time
from pathlib import Path
from typing import Optional

from lambdapack.core.config import Settings
from lambdapack.descriptor.types import DeploymentTarget, FunctionDescriptor
from lambdapack.envstore.base import EnvironmentStore
from lambdapack.errors import EnvironmentFetchFailed, PackagingError, ProjectCopyFailed
from lambdapack.sandbox.exclusion import ExclusionMatcher

logger = logging.getLogger(__name__)


def create_build_dir(function_name: str, build_root: Optional[Path | str] = None) -> Path:
    """Reserve a fresh `<function>@<epoch ms>` directory.

    The directory is created exclusively. If another run for the same
    function already holds this millisecond, the timestamp is bumped until
    a free name is found.
    """
    root = Path(build_root) if build_root else Path(tempfile.gettempdir())
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ProjectCopyFailed(
            f"Cannot create build root {root}: {exc}", detail=str(root)
        ) from exc

    stamp = int(time.time() * 1000)
    while True:
        candidate = root / f"{function_name}@{stamp}"
        try:
            candidate.mkdir()
            return candidate
        except FileExistsError:
            stamp += 1
        except OSError as exc:
            raise ProjectCopyFailed(
                f"Cannot create build directory {candidate}: {exc}",
                detail=str(candidate),
            ) from exc


def copy_project(project_root: Path, build_dir: Path, matcher: ExclusionMatcher) -> None:
    """Copy the project tree into `build_dir`, skipping excluded entries.

    Raises:
        ProjectCopyFailed: Missing source, permission error, disk full.
    """
    if not project_root.is_dir():
        raise ProjectCopyFailed(
            f"Project root {project_root} does not exist or is not a directory",
            detail=str(project_root),
        )

    logger.debug("Copying %s to %s", project_root, build_dir)
    try:
        shutil.copytree(
            project_root,
            build_dir,
            ignore=matcher.ignore_callback(project_root),
            symlinks=True,
            dirs_exist_ok=True,
        )
    except (shutil.Error, OSError) as exc:
        raise ProjectCopyFailed(
            f"Failed to copy project {project_root} to {build_dir}: {exc}",
            detail=str(project_root),
        ) from exc


def write_environment_file(
    build_dir: Path,
    target: DeploymentTarget,
    store: EnvironmentStore,
    env_file_name: str = ".env",
) -> Path:
    """Fetch the stage's environment file and write it into the build dir."""
    logger.debug(
        "Fetching environment for project=%s stage=%s region=%s",
        target.project_name, target.stage, target.region,
    )
    try:
        data = store.fetch_object(target.bucket, target.project_name, target.stage)
    except PackagingError:
        raise
    except Exception as exc:
        raise EnvironmentFetchFailed(
            f"Environment store error for {target.project_name}/{target.stage}: {exc}",
            detail=f"{target.bucket}/{target.project_name}/{target.stage}",
        ) from exc

    if data is None:
        raise EnvironmentFetchFailed(
            f"Environment store returned no data for {target.project_name}/{target.stage}",
            detail=f"{target.bucket}/{target.project_name}/{target.stage}",
        )

    env_path = build_dir / env_file_name
    try:
        env_path.write_bytes(data)
    except OSError as exc:
        raise ProjectCopyFailed(
            f"Cannot write environment file {env_path}: {exc}",
            detail=str(env_path),
        ) from exc
    return env_path


def assemble_build_dir(
    descriptor: FunctionDescriptor,
    project_root: Path | str,
    target: DeploymentTarget,
    store: EnvironmentStore,
    settings: Settings,
) -> Path:
    """Create the build directory for one packaging run.

    Copy first, then inject the environment file; the directory is only
    usable once both have completed.
    """
    project_root = Path(project_root).resolve()
    matcher = ExclusionMatcher(descriptor.exclude_patterns)

    build_dir = create_build_dir(descriptor.name, settings.build_root)
    logger.info("Packaging '%s'...", descriptor.name)
    logger.info("Saving in build dir %s", build_dir)

    copy_project(project_root, build_dir, matcher)
    write_environment_file(build_dir, target, store, settings.env_file_name)
    return build_dir
