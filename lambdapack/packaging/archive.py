"""Archive builder — compresses entries into the deployable zip.

The archive is generated fully in memory, size-checked, and only then
written to disk. Entries carry a fixed timestamp and permissions so an
unchanged entry list produces a byte-identical archive.
"""

import io
import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable

from lambdapack.errors import ArchiveTooLarge
from lambdapack.packaging.types import CompressionEntry

logger = logging.getLogger(__name__)

# Deploy limit for a directly uploaded function package (50 MiB)
MAX_ARCHIVE_BYTES = 52_428_800

# Earliest timestamp the zip format can represent
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_FILE_MODE = 0o644


def compress_entries(entries: Iterable[CompressionEntry]) -> bytes:
    """Deflate every entry into an in-memory zip and return its bytes.

    Duplicate names keep the first entry; later ones are dropped with a
    warning.
    """
    buffer = io.BytesIO()
    seen: set[str] = set()

    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for entry in entries:
            if entry.name in seen:
                logger.warning("Skipping duplicate archive entry %s", entry.name)
                continue
            seen.add(entry.name)

            info = zipfile.ZipInfo(entry.name, date_time=_FIXED_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = (0o100000 | _FILE_MODE) << 16
            zf.writestr(info, entry.data)

    return buffer.getvalue()


def build_archive(
    entries: Iterable[CompressionEntry],
    destination: Path | str,
    max_bytes: int = MAX_ARCHIVE_BYTES,
) -> Path:
    """Compress `entries` and write the archive to `destination`.

    Raises:
        ArchiveTooLarge: The compressed archive exceeds `max_bytes`. Nothing
            is written to `destination` in that case.
    """
    destination = Path(destination)
    archive_bytes = compress_entries(entries)

    if len(archive_bytes) > max_bytes:
        raise ArchiveTooLarge(len(archive_bytes), max_bytes)

    _write_atomic(destination, archive_bytes)
    logger.info("Compressed code written to %s (%d bytes)", destination, len(archive_bytes))
    return destination


def read_archive_names(path: Path | str) -> list[str]:
    """Return the entry names of an archive in stored order."""
    with zipfile.ZipFile(path) as zf:
        return zf.namelist()


def _write_atomic(destination: Path, data: bytes) -> None:
    """Write via a sibling temp file so a failed write leaves no partial zip."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, destination)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
