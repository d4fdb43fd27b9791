"""File helpers: chunked reads and writes, file discovery and target setup."""

from __future__ import annotations

import logging
import os
import re
import stat
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from draftxfer.model import DEFAULT_PORT, FileInfo, FileStatus, NetworkTarget

log = logging.getLogger(__name__)

OFF_T_MAX = (1 << 63) - 1
_PORT_MAX = 0xFFFF
_NUMBER = re.compile(r"\s*\+?(\d+)")


def read_chunk(fd: int, length: int, file_offset: int) -> bytes:
    """Read up to ``length`` bytes at ``file_offset``; shorter only at end of file."""
    chunks = []
    got = 0
    while got < length:
        data = os.pread(fd, length - got, file_offset + got)
        if not data:
            break
        chunks.append(data)
        got += len(data)
    return b"".join(chunks)


def write_chunk(
    fd: int,
    buffers: Sequence[bytes],
    offset: Optional[int] = None,
    flags: int = 0,
) -> int:
    """Write every buffer in order, retrying partial writes.

    With ``offset`` the data goes to that file position; otherwise to the
    current position. Returns the number of bytes written.
    """
    views = [memoryview(b).cast("B") for b in buffers]
    views = [v for v in views if len(v)]
    written = 0

    while views:
        if offset is None:
            n = os.writev(fd, views)
        else:
            if offset > OFF_T_MAX:
                raise OverflowError("write_chunk offset is out of off_t range")
            n = os.pwritev(fd, views, offset, flags)
            offset += n

        if not n:
            break
        written += n

        while n and views:
            adv = min(len(views[0]), n)
            views[0] = views[0][adv:]
            n -= adv
            if not len(views[0]):
                views.pop(0)

    return written


def _file_info(path: str) -> FileInfo:
    st = os.lstat(path)
    return FileInfo(
        path=path,
        status=FileStatus(
            mode=st.st_mode,
            uid=st.st_uid,
            gid=st.st_gid,
            dev=st.st_dev,
            blk_size=st.st_blksize,
            blk_count=st.st_blocks,
            size=st.st_size,
        ),
    )


def _walk(root: str) -> Iterator[os.DirEntry]:
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        yield entry
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path)


def get_file_info(path: str) -> List[FileInfo]:
    """Describe ``path``, or everything below it if it is a directory.

    Files get ids counting up from 1; directories keep id 0. A missing path
    gives an empty list.
    """
    if not os.path.exists(path):
        log.warning("get_file_info: specified path '%s' does not exist.", path)
        return []

    if not os.path.isdir(path):
        info = _file_info(path)
        info.id = 1
        return [info]

    infos = []
    file_id = 0
    for entry in _walk(path):
        info = _file_info(entry.path)
        if not entry.is_dir():
            file_id += 1
            info.id = file_id
        infos.append(info)
    return infos


def parse_target(text: str) -> NetworkTarget:
    """Parse ``host[:port]``; the port defaults to 2021."""
    if not text:
        raise ValueError("parse_target: empty target")

    port = DEFAULT_PORT
    ip_end = text.find(":")

    if ip_end != -1 and ip_end + 1 < len(text):
        port_str = text[ip_end + 1:]
        match = _NUMBER.match(port_str)
        if not match:
            raise ValueError(f"invalid port in target: {text}")
        if match.end() != len(port_str):
            raise ValueError(f"invalid target string (trailing chars): {text}")
        port = int(match.group(1))
        if port > _PORT_MAX:
            raise ValueError(f"invalid port number: {port}")

    host = text if ip_end == -1 else text[:ip_end]
    return NetworkTarget(host, port)


def parse_size(text: str) -> int:
    """Parse a whole decimal size; anything after the digits is an error."""
    match = _NUMBER.match(text)
    if not match or match.end() != len(text):
        raise ValueError(f"size option: {text}")
    return int(match.group(1))


def create_target_files(root: str, infos: Iterable[FileInfo]) -> None:
    """Create and preallocate every non-directory entry under ``root``."""
    for info in infos:
        if stat.S_ISDIR(info.status.mode):
            continue

        path = rooted_path(root, info.path, info.target_suffix)
        log.info("create_target_files: create file %s: '%s'", info.id, path)

        os.makedirs(dirname(str(path)), exist_ok=True)

        if info.status.size > OFF_T_MAX:
            raise ValueError(
                f"create_target_files: file '{info.path}' is too large for off_t "
                f"(limit: {OFF_T_MAX})"
            )

        fd = os.open(path, os.O_RDWR | os.O_CREAT, info.status.mode & 0o777)
        try:
            if info.status.size:
                os.posix_fallocate(fd, 0, info.status.size)
        finally:
            os.close(fd)


def dirname(path: str) -> str:
    """The parent part of ``path``, as POSIX dirname(3) gives it."""
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path else "."
    slash = stripped.rfind("/")
    if slash == -1:
        return "."
    parent = stripped[:slash].rstrip("/")
    return parent or "/"


def rooted_path(root: str, path: str, suffix: str) -> Path:
    """Place ``path`` plus ``suffix`` beneath the absolute form of ``root``."""
    joined = os.path.abspath(root) + "/" + path + suffix
    return Path(os.path.abspath(joined))