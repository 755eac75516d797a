"""Module bundlers — flatten a handler's dependency graph into one file.

The packager only relies on the `Bundler` protocol; the graph algorithm is
whatever the named builder does. `browserify` is registered by default and
configured for a node target:

  --standalone lambda        expose the handler module as a UMD bundle
  --no-browser-field         resolve like node, not like a browser
  --no-builtins              leave node core modules to the runtime
  --no-commondir             keep real __dirname values
  --insert-global-vars ...   only __filename/__dirname; `process` is real
  --ignore-missing           partial graphs are fine (optional deps)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

from lambdapack.core.config import Settings
from lambdapack.errors import UnsupportedBuilder
from lambdapack.optimize.tools import run_tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BundleOptions:
    exclude: tuple[str, ...] = ()
    ignore: tuple[str, ...] = ()
    transforms: tuple[str, ...] = ()
    # Missing optional dependencies never abort a bundle
    ignore_missing: bool = True
    standalone: str = "lambda"


class Bundler(Protocol):
    def flatten(self, entry: Path, root: Path, options: BundleOptions) -> bytes:
        """Bundle `entry` (resolved from `root`) into a single module.

        Raises:
            ToolError: The bundler failed.
        """
        ...


class BrowserifyBundler:
    def __init__(self, binary: str = "browserify"):
        self.binary = binary

    def build_command(self, entry: Path, root: Path, options: BundleOptions) -> list[str]:
        command = [
            self.binary,
            str(entry),
            "--basedir", str(root),
            "--standalone", options.standalone,
            "--no-browser-field",
            "--no-builtins",
            "--no-commondir",
            "--insert-global-vars", "__filename,__dirname",
        ]
        if options.ignore_missing:
            command.append("--ignore-missing")

        for transform in options.transforms:
            logger.debug("Adding transform %s", transform)
            command.extend(["--transform", transform])
        for module in options.exclude:
            logger.debug("EXCLUDING %s", module)
            command.extend(["--exclude", module])
        for module in options.ignore:
            logger.debug("IGNORING %s", module)
            command.extend(["--ignore", module])
        return command

    def flatten(self, entry: Path, root: Path, options: BundleOptions) -> bytes:
        return run_tool(self.build_command(entry, root, options), cwd=root)


BundlerFactory = Callable[[Settings], Bundler]

_BUILDERS: dict[str, BundlerFactory] = {
    "browserify": lambda settings: BrowserifyBundler(settings.browserify_bin),
}


def register_builder(name: str, factory: BundlerFactory) -> None:
    """Make `name` available as an `optimize.builder` value."""
    _BUILDERS[name.lower()] = factory


def get_bundler(name: str, settings: Optional[Settings] = None) -> Bundler:
    """Look up a bundler by builder name (case-insensitive).

    Raises:
        UnsupportedBuilder: No bundler is registered under `name`.
    """
    factory = _BUILDERS.get(name.strip().lower())
    if factory is None:
        raise UnsupportedBuilder(name)
    return factory(settings or Settings())
