"""Plain data types shared by the transfer code, and their JSON forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

BLOCK_SIZE = 4096
BUF_SIZE = 1 << 22
DEFAULT_PORT = 2021


def round_block_size(length: int) -> int:
    """Round ``length`` up to a whole number of blocks."""
    return (length + BLOCK_SIZE - 1) & ~(BLOCK_SIZE - 1)


@dataclass
class FileStatus:
    """The parts of a file's stat record that travel with a transfer."""

    mode: int = 0
    uid: int = 0
    gid: int = 0
    dev: int = 0
    blk_size: int = 0
    blk_count: int = 0
    size: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "mode": self.mode,
            "uid": self.uid,
            "gid": self.gid,
            "dev": self.dev,
            "blksize": self.blk_size,
            "blocks": self.blk_count,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileStatus":
        """Build from a mapping; a missing key raises KeyError."""
        return cls(
            mode=data["mode"],
            uid=data["uid"],
            gid=data["gid"],
            dev=data["dev"],
            blk_size=data["blksize"],
            blk_count=data["blocks"],
            size=data["size"],
        )


@dataclass
class FileInfo:
    """A file taking part in a transfer, with its id and stat record."""

    path: str = ""
    status: FileStatus = field(default_factory=FileStatus)
    id: int = 0
    target_suffix: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "status": self.status.to_dict(),
            "id": self.id,
        }
        if self.target_suffix:
            data["target_suffix"] = self.target_suffix
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileInfo":
        """Build from a mapping; a missing required key raises KeyError."""
        return cls(
            path=data["path"],
            target_suffix=data.get("target_suffix", ""),
            status=FileStatus.from_dict(data["status"]),
            id=data["id"],
        )


@dataclass(frozen=True)
class NetworkTarget:
    ip: str = ""
    port: int = 0


@dataclass
class Segment:
    offset: int = 0
    len: int = 0


@dataclass
class SessionConfig:
    targets: List[NetworkTarget] = field(default_factory=list)
    service: NetworkTarget = field(default_factory=NetworkTarget)
    path_root: str = "."
    journal_path: str = ""
    use_direct_io: bool = True
    no_write: bool = False