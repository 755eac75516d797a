"""Descriptor document loading.

Descriptors are JSON by default; `.yaml` / `.yml` documents are parsed
with PyYAML's safe loader.
"""

import json
import logging
from pathlib import Path

import yaml

from lambdapack.errors import InvalidDescriptorDocument

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def load_descriptor(path: Path | str) -> dict:
    """Read and parse a descriptor document.

    Raises:
        InvalidDescriptorDocument: If the file is unreadable, malformed, or
            does not hold a mapping at the top level.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidDescriptorDocument(
            f"Cannot read descriptor {path}: {exc}", detail=str(path)
        ) from exc

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidDescriptorDocument(
            f"Cannot parse descriptor {path}: {exc}", detail=str(path)
        ) from exc

    if not isinstance(data, dict):
        raise InvalidDescriptorDocument(
            f"Descriptor {path} must contain a mapping at the top level",
            detail=str(path),
        )

    logger.debug("Loaded descriptor %s", path)
    return data
