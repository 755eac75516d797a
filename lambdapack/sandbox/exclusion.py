"""Regex exclusion rules for the project copy.

Each rule is a regular expression searched against the path relative to
the copy root, using forward slashes. The first matching rule excludes the
entry; an excluded directory takes its whole subtree with it.
"""

import logging
import os
import re
from pathlib import Path
from typing import Callable, Iterable

from lambdapack.errors import InvalidExcludePattern

logger = logging.getLogger(__name__)


class ExclusionMatcher:
    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns = list(patterns)
        self._compiled: list[re.Pattern[str]] = []
        for pattern in self.patterns:
            try:
                self._compiled.append(re.compile(pattern))
            except re.error as exc:
                raise InvalidExcludePattern(
                    f"Invalid exclude pattern {pattern!r}: {exc}", detail=pattern
                ) from exc

    def __bool__(self) -> bool:
        return bool(self._compiled)

    def is_excluded(self, candidate: Path | str, root: Path | str) -> bool:
        """Return True if `candidate` (under `root`) matches any rule."""
        if not self._compiled:
            return False

        rel_path = relative_to_root(candidate, root)
        for regex in self._compiled:
            if regex.search(rel_path):
                logger.info("Excluding %s (pattern %r)", rel_path, regex.pattern)
                return True
        return False

    def ignore_callback(self, root: Path | str) -> Callable[[str, list[str]], set[str]]:
        """Build a `shutil.copytree` ignore callable bound to `root`."""

        def _ignore(directory: str, names: list[str]) -> set[str]:
            if not self._compiled:
                return set()
            return {
                name for name in names
                if self.is_excluded(os.path.join(directory, name), root)
            }

        return _ignore


def relative_to_root(candidate: Path | str, root: Path | str) -> str:
    """Path of `candidate` relative to `root`, POSIX style, no leading slash."""
    candidate_str = str(candidate)
    root_str = str(root)
    rel = candidate_str[len(root_str):] if candidate_str.startswith(root_str) else candidate_str
    if rel.startswith(os.sep):
        rel = rel[1:]
    return rel.replace(os.sep, "/")
