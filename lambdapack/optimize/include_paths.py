"""Include-path resolution.

Expands declared include paths (files or directories, relative to the
build directory) into compression entries. A directory is stored under its
basename: including `node_modules/sharp` yields `sharp/...` entries, and
including `.` stores the tree at the archive root.

Traversal is deterministic: within each directory, files are emitted in
name order before descending into subdirectories in name order.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Iterator

from lambdapack.errors import IncludePathNotFound
from lambdapack.packaging.types import CompressionEntry

logger = logging.getLogger(__name__)

# Housekeeping files never shipped from an included directory.
# Matched case-insensitively anywhere in the directory-relative path.
DEFAULT_IGNORE: tuple[str, ...] = (".DS_Store",)


def resolve_include_paths(
    build_dir: Path | str,
    include_paths: Iterable[str],
    ignore: Iterable[str] = DEFAULT_IGNORE,
) -> list[CompressionEntry]:
    """Resolve every declared include path into compression entries.

    Raises:
        IncludePathNotFound: A declared path is absolute, escapes the build
            directory, does not exist, or cannot be stat'd. Nothing is
            returned for the other paths in that case.
    """
    build_dir = Path(build_dir)
    ignore_rules = [rule.lower() for rule in ignore]
    entries: list[CompressionEntry] = []

    for declared in include_paths:
        full_path = _resolve_declared(build_dir, declared)
        try:
            st = os.lstat(full_path)
        except OSError as exc:
            logger.debug("Cant find include path %s: %s", declared, exc)
            raise IncludePathNotFound(declared) from exc

        if stat.S_ISREG(st.st_mode):
            name = _archive_name(declared)
            logger.debug("INCLUDING %s", name)
            entries.append(_entry(name, full_path, declared))
        elif stat.S_ISDIR(st.st_mode):
            try:
                entries.extend(_directory_entries(full_path, declared, ignore_rules))
            except OSError as exc:
                raise IncludePathNotFound(declared, f"could not be traversed ({exc})") from exc
        else:
            logger.warning("Include path %s is neither a file nor a directory; skipped", declared)

    return entries


def _resolve_declared(build_dir: Path, declared: str) -> str:
    if not declared or os.path.isabs(declared):
        raise IncludePathNotFound(declared, "must be relative to the build directory")

    root = os.path.normpath(str(build_dir))
    full_path = os.path.normpath(os.path.join(root, declared))
    if full_path != root and not full_path.startswith(root + os.sep):
        raise IncludePathNotFound(declared, "escapes the build directory")
    return full_path


def _directory_entries(
    full_path: str,
    declared: str,
    ignore_rules: list[str],
) -> Iterator[CompressionEntry]:
    dirname = os.path.basename(os.path.normpath(declared))

    for rel_path in _walk_files(full_path):
        lowered = rel_path.lower()
        if any(rule in lowered for rule in ignore_rules):
            continue

        file_path = os.path.join(full_path, rel_path)
        if not stat.S_ISREG(os.lstat(file_path).st_mode):
            continue

        rel_posix = rel_path.replace(os.sep, "/")
        name = rel_posix if dirname in (".", "") else f"{dirname}/{rel_posix}"
        logger.debug("INCLUDING %s", name)
        yield _entry(name, file_path, declared)


def _walk_files(top: str) -> Iterator[str]:
    """Yield file paths relative to `top` in a stable order."""

    def _raise(exc: OSError) -> None:
        raise exc

    for current, dirnames, filenames in os.walk(top, onerror=_raise):
        dirnames.sort()
        rel_dir = os.path.relpath(current, top)
        for filename in sorted(filenames):
            yield filename if rel_dir == "." else os.path.join(rel_dir, filename)


def _archive_name(declared: str) -> str:
    return os.path.normpath(declared).replace(os.sep, "/")


def _entry(name: str, path: str, declared: str) -> CompressionEntry:
    try:
        return CompressionEntry(name=name, data=_read(path, declared))
    except ValueError as exc:
        raise IncludePathNotFound(declared, f"holds a file that cannot be archived ({exc})") from exc


def _read(path: str, declared: str) -> bytes:
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as exc:
        raise IncludePathNotFound(declared, f"could not be read ({exc})") from exc
