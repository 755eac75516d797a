"""lambdapack — package a serverless function into a deployable zip.

Public API:
    package_function(descriptor_path, target, project_root, store) -> PackageArtifact
"""

from lambdapack.descriptor.types import DeploymentTarget
from lambdapack.orchestrator import package_function
from lambdapack.packaging.types import PackageArtifact

__all__ = ["DeploymentTarget", "PackageArtifact", "package_function"]
