"""Error taxonomy for a packaging run.

Every failure is terminal for the current run. Components raise these
unchanged; only the orchestrator logs the final failure.
"""

from typing import Optional


class PackagingError(Exception):
    """Base class for all packaging failures.

    `code` is a stable identifier for hosts that map failures to exit codes
    or status messages. `detail` names the offending path or descriptor field.
    """

    code = "packaging_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class InvalidDescriptorDocument(PackagingError):
    """The descriptor file could not be read or parsed."""

    code = "invalid_descriptor_document"


class MissingDeploymentMetadata(PackagingError):
    """The descriptor has no deployment block at all."""

    code = "missing_deployment_metadata"


class IncompleteDeploymentMetadata(PackagingError):
    """The deployment block lacks one or more required attributes."""

    code = "incomplete_deployment_metadata"

    def __init__(self, message: str, fields: list[str]):
        super().__init__(message, detail=", ".join(fields))
        self.fields = fields


class InvalidExcludePattern(PackagingError):
    code = "invalid_exclude_pattern"


class ProjectCopyFailed(PackagingError):
    code = "project_copy_failed"


class EnvironmentFetchFailed(PackagingError):
    code = "environment_fetch_failed"


class UnsupportedBuilder(PackagingError):
    code = "unsupported_builder"

    def __init__(self, builder: str):
        super().__init__(f"Unsupported builder '{builder}'", detail=builder)
        self.builder = builder


class BundleBuildFailed(PackagingError):
    code = "bundle_build_failed"


class MinificationFailed(PackagingError):
    code = "minification_failed"


class IncludePathNotFound(PackagingError):
    code = "include_path_not_found"

    def __init__(self, path: str, reason: str = "not found"):
        super().__init__(f"Include path '{path}' {reason}", detail=path)
        self.path = path


class ArchiveTooLarge(PackagingError):
    """The compressed archive exceeds the deploy size ceiling."""

    code = "archive_too_large"

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Zip file is larger than the {limit // (1024 * 1024)}MB deploy limit "
            f"({size} bytes)",
            detail=str(size),
        )
        self.size = size
        self.limit = limit
