from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class CompressionAlgorithm(str, Enum):
    NONE = "NONE"
    GZ = "GZ"
    BZ2 = "BZ2"
    LZMA = "LZMA"

    @property
    def display_name(self) -> str:
        return "None" if self is CompressionAlgorithm.NONE else self.value


class Signature(BaseModel):
    hash_type: str
    hash: str


class FileMeta(BaseModel):
    compression: CompressionAlgorithm
    compressed_size: int


class FileEntry(BaseModel):
    relative_path: str
    compression: CompressionAlgorithm = CompressionAlgorithm.NONE
    compressed_size: int = 0
    size: int = 0
    content: Optional[str] = None  # only loaded for embedded descriptors

    @property
    def filename(self) -> str:
        return self.relative_path.rsplit("/", 1)[-1]

    @property
    def relative_dir(self) -> str:
        """Directory part of the path, '' for files at the archive root."""
        if "/" not in self.relative_path:
            return ""
        return self.relative_path.rsplit("/", 1)[0]

    @property
    def parent_directories(self) -> List[str]:
        return [part for part in self.relative_dir.split("/") if part]

    @property
    def depth(self) -> int:
        return len(self.parent_directories)


class ArchiveInfo(BaseModel):
    """
    Read-only snapshot of an opened archive.
    Produced by pharinfo.archive; the reporters only read it.
    """

    path: str
    size: Optional[int] = None
    version: str = "1.1.0"
    compression: CompressionAlgorithm = CompressionAlgorithm.NONE
    signature: Optional[Signature] = None
    metadata: Optional[str] = None
    timestamp: int = 0
    files: List[FileEntry] = Field(default_factory=list)

    def get_files(self) -> List[FileEntry]:
        return list(self.files)

    def get_file(self, relative_path: str) -> Optional[FileEntry]:
        for entry in self.files:
            if entry.relative_path == relative_path:
                return entry
        return None

    def get_file_meta(self, relative_path: str) -> FileMeta:
        entry = self.get_file(relative_path)
        if entry is None:
            raise KeyError(relative_path)
        return FileMeta(compression=entry.compression, compressed_size=entry.compressed_size)

    def files_compression_count(self) -> Dict[str, int]:
        count: Dict[str, int] = {algorithm.value: 0 for algorithm in CompressionAlgorithm}
        for entry in self.files:
            count[entry.compression.value] += 1
        return count

    def archive_size(self) -> int:
        if self.size is not None:
            return self.size
        return Path(self.path).stat().st_size
