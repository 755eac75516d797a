"""Optimization pipeline — decides what goes into the archive.

Two branches share one entry point:

Raw (no builder):
  The declared include paths (the whole build directory, `.`, when none
  are declared) are resolved as-is, and the environment file is added if
  the traversal did not already pick it up.

Bundled (builder set):
  1. Resolve the handler module (`lib/users.handler` -> `lib/users.js`).
  2. Flatten its dependency graph with the builder.
  3. Save the raw bundle to `bundled.js` in the build dir.
  4. Optionally minify it, saving `minified.js`.
  5. Ship `<handler module>.js` + the environment file.
  6. Append any declared include paths (native assets the bundler
     cannot inline).

The audit files are written before the next step starts so a failed run
can be inspected from the build directory.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from lambdapack.core.config import Settings
from lambdapack.descriptor.types import BundledOptimize, FunctionDescriptor
from lambdapack.errors import (
    BundleBuildFailed,
    IncludePathNotFound,
    MinificationFailed,
    PackagingError,
)
from lambdapack.optimize.bundler import Bundler, BundleOptions, get_bundler
from lambdapack.optimize.include_paths import resolve_include_paths
from lambdapack.optimize.minifier import Minifier, UglifyMinifier
from lambdapack.packaging.types import CompressionEntry

logger = logging.getLogger(__name__)

BUNDLED_FILE = "bundled.js"
MINIFIED_FILE = "minified.js"
HANDLER_EXTENSION = ".js"

# Raw mode with no declared include paths ships the whole build directory
WHOLE_BUILD_DIR = (".",)


def build_compression_entries(
    descriptor: FunctionDescriptor,
    build_dir: Path | str,
    settings: Optional[Settings] = None,
    bundler: Optional[Bundler] = None,
    minifier: Optional[Minifier] = None,
) -> list[CompressionEntry]:
    """Produce the ordered list of files to ship for `descriptor`."""
    build_dir = Path(build_dir)
    settings = settings or Settings()

    if isinstance(descriptor.optimize, BundledOptimize):
        return _bundled_entries(
            descriptor, descriptor.optimize, build_dir, settings, bundler, minifier
        )
    return _raw_entries(descriptor, build_dir, settings)


def _raw_entries(
    descriptor: FunctionDescriptor,
    build_dir: Path,
    settings: Settings,
) -> list[CompressionEntry]:
    include_paths = descriptor.include_paths or WHOLE_BUILD_DIR
    logger.debug("Raw packaging of %s with include paths %s", descriptor.name, include_paths)

    entries = resolve_include_paths(build_dir, include_paths)
    if all(entry.name != settings.env_file_name for entry in entries):
        entries.append(_env_entry(build_dir, settings.env_file_name))
    return entries


def _bundled_entries(
    descriptor: FunctionDescriptor,
    optimize: BundledOptimize,
    build_dir: Path,
    settings: Settings,
    bundler: Optional[Bundler],
    minifier: Optional[Minifier],
) -> list[CompressionEntry]:
    if bundler is None:
        bundler = get_bundler(optimize.builder, settings)

    handler_name = handler_archive_name(descriptor)
    entry_path = build_dir / handler_name
    if not entry_path.is_file():
        raise BundleBuildFailed(
            f"Handler module {handler_name} not found in {build_dir}",
            detail=handler_name,
        )

    options = BundleOptions(
        exclude=optimize.exclude,
        ignore=optimize.ignore,
        transforms=optimize.transforms,
    )
    try:
        bundled = bundler.flatten(entry_path, build_dir, options)
    except PackagingError:
        raise
    except Exception as exc:
        raise BundleBuildFailed(
            f"{optimize.builder} bundle of {handler_name} failed: {exc}",
            detail=handler_name,
        ) from exc

    if not bundled:
        raise BundleBuildFailed(
            f"{optimize.builder} produced an empty bundle for {handler_name}",
            detail=handler_name,
        )

    bundled_path = build_dir / BUNDLED_FILE
    try:
        bundled_path.write_bytes(bundled)
    except OSError as exc:
        raise BundleBuildFailed(
            f"Cannot write {bundled_path}: {exc}", detail=BUNDLED_FILE
        ) from exc
    logger.info("Bundled file written to %s", bundled_path)

    code = bundled
    if optimize.minify:
        minifier = minifier or UglifyMinifier(settings.uglify_bin)
        try:
            code = minifier.minify(bundled_path)
            minified_path = build_dir / MINIFIED_FILE
            minified_path.write_bytes(code)
        except PackagingError:
            raise
        except Exception as exc:
            raise MinificationFailed(
                f"Minification of {bundled_path} failed: {exc}", detail=BUNDLED_FILE
            ) from exc
        logger.info("Minified file written to %s", minified_path)

    entries = [
        CompressionEntry(name=handler_name, data=code),
        _env_entry(build_dir, settings.env_file_name),
    ]
    entries.extend(resolve_include_paths(build_dir, descriptor.include_paths))
    return entries


def handler_archive_name(descriptor: FunctionDescriptor) -> str:
    """Archive name of the bundled handler: its module path with `.js`."""
    module = os.path.normpath(descriptor.handler_module).replace(os.sep, "/")
    return module + HANDLER_EXTENSION


def _env_entry(build_dir: Path, env_file_name: str) -> CompressionEntry:
    try:
        data = (build_dir / env_file_name).read_bytes()
    except OSError as exc:
        raise IncludePathNotFound(env_file_name) from exc
    return CompressionEntry(name=env_file_name, data=data)
