"""Bundle minification via uglify-js (mangle + compress)."""

import logging
from pathlib import Path
from typing import Protocol

from lambdapack.errors import MinificationFailed
from lambdapack.optimize.tools import ToolError, run_tool

logger = logging.getLogger(__name__)


class Minifier(Protocol):
    def minify(self, source: Path) -> bytes:
        ...


class UglifyMinifier:
    def __init__(self, binary: str = "uglifyjs"):
        self.binary = binary

    def minify(self, source: Path) -> bytes:
        """Minify `source` and return the minified code.

        Raises:
            MinificationFailed: uglifyjs failed or produced no code.
        """
        logger.debug("Minifying %s", source)
        try:
            code = run_tool([self.binary, str(source), "--mangle", "--compress"], cwd=source.parent)
        except ToolError as exc:
            raise MinificationFailed(
                f"Problem uglifying code: {exc}", detail=str(source)
            ) from exc

        if not code or not code.strip():
            raise MinificationFailed(
                f"Problem uglifying code: no output for {source}", detail=str(source)
            )
        return code
