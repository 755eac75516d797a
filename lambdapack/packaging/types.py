"""Types for the packaging module."""

from dataclasses import dataclass, field
from pathlib import PurePosixPath, PureWindowsPath


@dataclass(frozen=True)
class CompressionEntry:
    """A single file destined for the archive.

    `name` is always archive-relative with forward slashes; absolute names
    and names that climb out of the archive root are rejected.
    """

    name: str
    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Compression entry name must not be empty")
        if "\\" in self.name:
            raise ValueError(f"Compression entry name must use '/' separators: {self.name!r}")
        posix = PurePosixPath(self.name)
        if posix.is_absolute() or PureWindowsPath(self.name).drive:
            raise ValueError(f"Compression entry name must be archive-relative: {self.name!r}")
        if ".." in posix.parts:
            raise ValueError(f"Compression entry name escapes the archive root: {self.name!r}")


@dataclass
class PackageArtifact:
    """Result of a successful packaging run.

    to_dict() yields the host-facing contract:
        {"descriptorPath": ..., "archivePath": ...}
    """

    descriptor_path: str
    archive_path: str
    build_dir: str = ""
    entry_names: list[str] = field(default_factory=list)
    size_bytes: int = 0

    def to_dict(self) -> dict:
        return {
            "descriptorPath": self.descriptor_path,
            "archivePath": self.archive_path,
        }
