"""Types describing one function and where it is being deployed.

OptimizeSettings is a two-variant sum type: RawOptimize ships the project
as-is (minus excludes), BundledOptimize flattens the handler's module graph
with a named builder first.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

# Separator between the module path and the exported function in a handler
HANDLER_SEPARATOR = "."


@dataclass(frozen=True)
class RawOptimize:
    """Ship the build directory without bundling."""

    @property
    def is_bundled(self) -> bool:
        return False


@dataclass(frozen=True)
class BundledOptimize:
    """Bundle the handler module with `builder` before archiving.

    exclude: modules dropped from the graph entirely.
    ignore: modules kept as present-but-empty stubs.
    transforms: source transforms applied before flattening, in order.
    """

    builder: str
    minify: bool = False
    transforms: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    ignore: tuple[str, ...] = ()

    @property
    def is_bundled(self) -> bool:
        return True


OptimizeSettings = Union[RawOptimize, BundledOptimize]


@dataclass(frozen=True)
class FunctionDescriptor:
    """A validated function descriptor.

    `path` is the resolved absolute path of the descriptor document; it is
    None until validation attaches it.
    """

    name: str
    runtime: str
    handler: str
    resource_type: str
    optimize: OptimizeSettings = field(default_factory=RawOptimize)
    include_paths: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    path: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def handler_module(self) -> str:
        """Module path of the handler, relative to the build directory."""
        return self.handler.split(HANDLER_SEPARATOR)[0]


@dataclass(frozen=True)
class DeploymentTarget:
    """Where the function is headed.

    `bucket` is the environment-store namespace holding the project's
    per-stage environment files.
    """

    region: str
    stage: str
    project_name: str
    bucket: str
