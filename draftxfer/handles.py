"""Owning wrappers for raw file descriptors and self-removing temporary files."""

from __future__ import annotations

import errno
import os
import secrets
import string
from typing import Any, Tuple

_TEMPLATE_CHARS = string.ascii_letters + string.digits
_TEMPLATE_LEN = 6
_ATTEMPTS = 100


class ScopedFd:
    """Owns a file descriptor and closes it when done; -1 means none."""

    def __init__(self, fd: int = -1) -> None:
        self._fd = fd

    def get(self) -> int:
        return self._fd

    def fileno(self) -> int:
        return self._fd

    def release(self) -> int:
        """Give up ownership and return the descriptor without closing it."""
        fd, self._fd = self._fd, -1
        return fd

    def close(self) -> None:
        """Close the descriptor if one is held; closing twice is harmless."""
        fd, self._fd = self._fd, -1
        if fd >= 0:
            os.close(fd)

    def __enter__(self) -> "ScopedFd":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except (OSError, AttributeError):
            pass

    def __repr__(self) -> str:
        return f"ScopedFd({self._fd})"


def make_temp_file(prefix: str, suffix: str = "", flags: int = 0) -> Tuple[ScopedFd, str]:
    """Create a new file named ``prefix`` + six random characters + ``suffix``.

    The file is opened for reading and writing with ``flags`` added, and is
    created with mode 0600. Returns the open descriptor and the path.
    """
    for _ in range(_ATTEMPTS):
        name = "".join(secrets.choice(_TEMPLATE_CHARS) for _ in range(_TEMPLATE_LEN))
        path = prefix + name + suffix
        try:
            fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_EXCL | flags, 0o600)
        except FileExistsError:
            continue
        return ScopedFd(fd), path
    raise FileExistsError(errno.EEXIST, "make_temp_file: no unused name found", prefix)


class ScopedTempFile:
    """A temporary file that is unlinked and closed when the object is closed."""

    def __init__(self, prefix: str, suffix: str = "", flags: int = 0) -> None:
        self._fd, self._path = make_temp_file(prefix, suffix, flags)

    def fd(self) -> int:
        return self._fd.get()

    def path(self) -> str:
        return self._path

    def release_fd(self) -> ScopedFd:
        """Hand the descriptor to the caller; the file is still unlinked on close."""
        return ScopedFd(self._fd.release())

    def close(self) -> None:
        """Remove the file if it is still there and close the descriptor."""
        try:
            if self._path:
                try:
                    self.unlink()
                except FileNotFoundError:
                    pass
        finally:
            self._fd.close()
            self._path = ""

    def unlink(self) -> None:
        """Remove the file from the file system; the descriptor stays open."""
        os.unlink(self._path)

    def __enter__(self) -> "ScopedTempFile":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except (OSError, AttributeError):
            pass