"""Function descriptor loading and validation.

Public API:
    load_and_validate(path) -> FunctionDescriptor
    validate_descriptor(raw, source_path) -> FunctionDescriptor
"""

from lambdapack.descriptor.loader import load_descriptor
from lambdapack.descriptor.types import (
    BundledOptimize,
    DeploymentTarget,
    FunctionDescriptor,
    RawOptimize,
)
from lambdapack.descriptor.validator import load_and_validate, validate_descriptor

__all__ = [
    "BundledOptimize",
    "DeploymentTarget",
    "FunctionDescriptor",
    "RawOptimize",
    "load_and_validate",
    "load_descriptor",
    "validate_descriptor",
]
