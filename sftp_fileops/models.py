"""
Metadata records returned by directory listings.

RemoteEntry describes one entry of a single-level listing. FileRecord is the
flattened form produced by a recursive walk, with its location expressed
relative to the walk root.
"""

from __future__ import annotations

import stat
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RemoteEntry:
    name: str
    size: int
    mode: int
    mtime: datetime | None
    is_dir: bool
    raw: Any = None  # Server-reported attributes, never interpreted

    @classmethod
    def from_attributes(cls, attr) -> RemoteEntry:
        """Build an entry from a paramiko SFTPAttributes object."""
        mode = attr.st_mode or 0
        mtime = datetime.fromtimestamp(attr.st_mtime) if attr.st_mtime is not None else None
        return cls(
            name=attr.filename,
            size=attr.st_size or 0,
            mode=mode,
            mtime=mtime,
            is_dir=stat.S_ISDIR(mode),
            raw=attr,
        )


@dataclass(frozen=True)
class FileRecord:
    path: str  # Relative to the walk root, always starts with "/"
    size: int
    mode: int
    mtime: datetime | None
    is_dir: bool
    raw: Any = None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @classmethod
    def from_entry(cls, prefix: str, entry: RemoteEntry) -> FileRecord:
        return cls(
            path=f"{prefix}/{entry.name}",
            size=entry.size,
            mode=entry.mode,
            mtime=entry.mtime,
            is_dir=entry.is_dir,
            raw=entry.raw,
        )
