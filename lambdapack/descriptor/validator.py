"""Descriptor validation.

A descriptor must declare its deployment block at
`cloudFormation.lambda.Function` with a `Type`, a `Properties` block, and
`Properties.Runtime` / `Properties.Handler`. Packaging options live under
`package`:

    {
      "name": "users-show",
      "cloudFormation": {"lambda": {"Function": {
          "Type": "AWS::Lambda::Function",
          "Properties": {"Runtime": "nodejs", "Handler": "index.handler"}
      }}},
      "package": {
        "excludePatterns": ["^tests/"],
        "optimize": {
          "builder": "browserify", "minify": true, "babel": false,
          "transform": [], "exclude": [], "ignore": [], "includePaths": []
        }
      }
    }

Validation never touches the filesystem beyond resolving the descriptor
path.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Any

from lambdapack.descriptor.loader import load_descriptor
from lambdapack.descriptor.types import (
    HANDLER_SEPARATOR,
    BundledOptimize,
    FunctionDescriptor,
    OptimizeSettings,
    RawOptimize,
)
from lambdapack.errors import (
    IncompleteDeploymentMetadata,
    InvalidDescriptorDocument,
    MissingDeploymentMetadata,
)

logger = logging.getLogger(__name__)

# The name becomes a single build-directory segment, `<name>@<ms>`
_NAME_SEPARATORS = ("/", "\\", "\0")

DEPLOYMENT_BLOCK_PATH = ("cloudFormation", "lambda", "Function")

# Transform prepended when `optimize.babel` is set
BABEL_TRANSFORM = "babelify"


def validate_descriptor(raw: dict, source_path: Path | str) -> FunctionDescriptor:
    """Check a parsed descriptor and return it with its resolved path attached.

    Raises:
        MissingDeploymentMetadata: The deployment block is absent.
        IncompleteDeploymentMetadata: A required attribute is missing, or the
            handler is not in `module.exportedFunction` form.
        InvalidDescriptorDocument: A packaging option has the wrong type.
    """
    source_path = Path(source_path)
    block = _deployment_block(raw)
    if block is None:
        raise MissingDeploymentMetadata(
            f"{source_path} does not have a {'.'.join(DEPLOYMENT_BLOCK_PATH)} property",
            detail=".".join(DEPLOYMENT_BLOCK_PATH),
        )

    missing = _missing_attributes(block)
    if missing:
        raise IncompleteDeploymentMetadata(
            f"{source_path} is missing required deployment attributes: "
            + ", ".join(missing),
            fields=missing,
        )

    properties = block["Properties"]
    handler = str(properties["Handler"])
    module, sep, exported = handler.partition(HANDLER_SEPARATOR)
    if not sep or not module or not exported:
        field_name = _field("Properties", "Handler")
        raise IncompleteDeploymentMetadata(
            f"{source_path}: handler '{handler}' must be in "
            "'module.exportedFunction' form",
            fields=[field_name],
        )

    package = raw.get("package") or {}
    if not isinstance(package, dict):
        raise InvalidDescriptorDocument(
            f"{source_path}: 'package' must be a mapping", detail="package"
        )
    optimize_raw = package.get("optimize") or {}
    if not isinstance(optimize_raw, dict):
        raise InvalidDescriptorDocument(
            f"{source_path}: 'package.optimize' must be a mapping",
            detail="package.optimize",
        )

    name = str(raw.get("name") or source_path.resolve().parent.name)
    if name in (".", "..") or any(sep in name for sep in _NAME_SEPARATORS):
        raise InvalidDescriptorDocument(
            f"{source_path}: function name '{name}' must not contain path separators",
            detail="name",
        )

    descriptor = FunctionDescriptor(
        name=name,
        runtime=str(properties["Runtime"]),
        handler=handler,
        resource_type=str(block["Type"]),
        optimize=_parse_optimize(optimize_raw, source_path),
        include_paths=_string_list(
            optimize_raw.get("includePaths"), "package.optimize.includePaths", source_path
        ),
        exclude_patterns=_string_list(
            package.get("excludePatterns"), "package.excludePatterns", source_path
        ),
        raw=raw,
    )

    logger.debug(
        "Descriptor %s valid (runtime=%s handler=%s bundled=%s)",
        descriptor.name, descriptor.runtime, descriptor.handler,
        descriptor.optimize.is_bundled,
    )
    return dataclasses.replace(descriptor, path=str(source_path.resolve()))


def load_and_validate(path: Path | str) -> FunctionDescriptor:
    """Load a descriptor document from disk and validate it."""
    return validate_descriptor(load_descriptor(path), path)


def _deployment_block(raw: dict) -> dict | None:
    node: Any = raw
    for key in DEPLOYMENT_BLOCK_PATH:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node if isinstance(node, dict) else None


def _missing_attributes(block: dict) -> list[str]:
    missing: list[str] = []
    if not block.get("Type"):
        missing.append(_field("Type"))

    properties = block.get("Properties")
    if not isinstance(properties, dict) or not properties:
        missing.append(_field("Properties"))
        properties = {}

    if not properties.get("Runtime"):
        missing.append(_field("Properties", "Runtime"))
    if not properties.get("Handler"):
        missing.append(_field("Properties", "Handler"))
    return missing


def _field(*parts: str) -> str:
    return ".".join(DEPLOYMENT_BLOCK_PATH + parts)


def _parse_optimize(optimize: dict, source_path: Path) -> OptimizeSettings:
    builder = optimize.get("builder")
    if not builder:
        return RawOptimize()

    transforms = list(_string_list(
        optimize.get("transform"), "package.optimize.transform", source_path
    ))
    if optimize.get("babel"):
        transforms.insert(0, BABEL_TRANSFORM)

    return BundledOptimize(
        builder=str(builder),
        minify=bool(optimize.get("minify", False)),
        transforms=tuple(transforms),
        exclude=_string_list(optimize.get("exclude"), "package.optimize.exclude", source_path),
        ignore=_string_list(optimize.get("ignore"), "package.optimize.ignore", source_path),
    )


def _string_list(value: Any, field_name: str, source_path: Path) -> tuple[str, ...]:
    """Normalise an optional string-or-list option into a tuple of strings."""
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(v for v in value if v)
    raise InvalidDescriptorDocument(
        f"{source_path}: '{field_name}' must be a string or a list of strings",
        detail=field_name,
    )
