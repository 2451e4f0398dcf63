from __future__ import annotations

import calendar
import logging
import lzma
import zipfile
import zlib
from pathlib import Path
from typing import List, Optional, Set

import yaml
from pydantic import ValidationError

from pharinfo.config import AppConfig
from pharinfo.model import ArchiveInfo, CompressionAlgorithm, FileEntry

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIXES = (".json", ".yaml", ".yml")

ZIP_COMPRESSION = {
    zipfile.ZIP_STORED: CompressionAlgorithm.NONE,
    zipfile.ZIP_DEFLATED: CompressionAlgorithm.GZ,
    zipfile.ZIP_BZIP2: CompressionAlgorithm.BZ2,
    zipfile.ZIP_LZMA: CompressionAlgorithm.LZMA,
}


class ArchiveOpenError(Exception):
    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


def _is_safe_member_path(member_path: str) -> bool:
    p = Path(member_path)
    if p.is_absolute():
        return False
    if any(part == ".." for part in p.parts):
        return False
    return True


def _archive_compression(algorithms: Set[CompressionAlgorithm]) -> CompressionAlgorithm:
    # A ZIP has no archive-wide compression; report it when every member agrees.
    if len(algorithms) == 1:
        return next(iter(algorithms))
    return CompressionAlgorithm.NONE


def _read_descriptor(zf: zipfile.ZipFile, info: zipfile.ZipInfo, max_bytes: int) -> Optional[str]:
    if info.file_size > max_bytes:
        logger.warning("Requirements descriptor %s exceeds %d bytes; not loaded.", info.filename, max_bytes)
        return None
    try:
        with zf.open(info, "r") as f:
            return f.read().decode("utf-8", errors="replace")
    except (RuntimeError, OSError, EOFError, zipfile.BadZipFile, zlib.error, lzma.LZMAError) as e:
        # encrypted or corrupt member
        logger.warning("Requirements descriptor %s could not be read: %s", info.filename, e)
        return None


def _member_timestamp(info: zipfile.ZipInfo) -> Optional[int]:
    try:
        return calendar.timegm(info.date_time + (0, 0, 0))
    except ValueError:
        # DOS date fields left at zero decode as month 0 / day 0
        logger.debug("Ignoring invalid date %s on member %s", info.date_time, info.filename)
        return None


def open_zip_archive(path: Path, config: Optional[AppConfig] = None) -> ArchiveInfo:
    cfg = config or AppConfig()
    files: List[FileEntry] = []
    algorithms: Set[CompressionAlgorithm] = set()
    timestamp = 0

    try:
        with zipfile.ZipFile(path, "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                if not _is_safe_member_path(info.filename):
                    logger.warning("Skipping unsafe archive member path: %s", info.filename)
                    continue

                compression = ZIP_COMPRESSION.get(info.compress_type)
                if compression is None:
                    raise ArchiveOpenError(path, f"Unsupported compression method {info.compress_type} for {info.filename}.")
                algorithms.add(compression)

                content = None
                if info.filename == cfg.requirements_path:
                    content = _read_descriptor(zf, info, cfg.max_descriptor_bytes)

                files.append(
                    FileEntry(
                        relative_path=info.filename,
                        compression=compression,
                        compressed_size=int(info.compress_size or 0),
                        size=int(info.file_size or 0),
                        content=content,
                    )
                )
                member_time = _member_timestamp(info)
                if member_time is not None:
                    timestamp = max(timestamp, member_time)

            comment = zf.comment.decode("utf-8", errors="replace") if zf.comment else None
    except zipfile.BadZipFile as e:
        raise ArchiveOpenError(path, "Not a valid ZIP file or ZIP is corrupted.") from e
    except OSError as e:
        raise ArchiveOpenError(path, f"Failed to read archive: {type(e).__name__}: {e}") from e

    logger.debug("Read %d members from %s", len(files), path)

    return ArchiveInfo(
        path=str(path),
        size=path.stat().st_size,
        compression=_archive_compression(algorithms),
        metadata=comment,
        timestamp=timestamp,
        files=files,
    )


def load_snapshot(path: Path) -> ArchiveInfo:
    """Loads an archive description previously dumped as JSON or YAML."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        info = ArchiveInfo.model_validate(data)
    except (OSError, yaml.YAMLError) as e:
        raise ArchiveOpenError(path, f"Failed to read snapshot: {type(e).__name__}: {e}") from e
    except ValidationError as e:
        raise ArchiveOpenError(path, f"Invalid snapshot: {e}") from e

    if info.size is None:
        target = path.parent / info.path
        if not target.is_file():
            raise ArchiveOpenError(path, f"Snapshot has no size and {target} does not exist.")
        info = info.model_copy(update={"size": target.stat().st_size})
    return info


def open_archive(path: Path, config: Optional[AppConfig] = None) -> ArchiveInfo:
    if path.suffix.lower() in SNAPSHOT_SUFFIXES:
        return load_snapshot(path)
    return open_zip_archive(path, config)
