"""Packaging module for archive assembly.

Public API:
    build_archive(entries, destination) -> Path
    read_archive_names(path) -> list[str]
"""

from lambdapack.packaging.archive import MAX_ARCHIVE_BYTES, build_archive, read_archive_names
from lambdapack.packaging.types import CompressionEntry, PackageArtifact

__all__ = [
    "MAX_ARCHIVE_BYTES",
    "CompressionEntry",
    "PackageArtifact",
    "build_archive",
    "read_archive_names",
]
