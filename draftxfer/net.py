"""Socket helpers: binding, connecting and moving whole buffers."""

from __future__ import annotations

import errno
import fcntl
import os
import select
import socket
import struct
import termios
from typing import Any, Iterable, List, Optional, Union

from draftxfer.handles import ScopedFd
from draftxfer.model import NetworkTarget

IFNAMSIZ = 16
TUNSETIFF = 0x400454CA
IFF_TUN = 0x0001
_INT_MAX = (1 << 31) - 1

SockLike = Union[int, socket.socket, ScopedFd]


def _fileno(sock: SockLike) -> int:
    return sock if isinstance(sock, int) else sock.fileno()


def bind_tun(name: str) -> ScopedFd:
    """Open the tun device and attach it to the interface ``name``."""
    raw = name.encode()
    if len(raw) >= IFNAMSIZ:
        raise ValueError(f"bind_tun: tunnel name too long ({len(raw)} > {IFNAMSIZ})")

    fd = ScopedFd(os.open("/dev/net/tun", os.O_RDWR))
    ifr = struct.pack("16sH22x", raw, IFF_TUN)
    try:
        fcntl.ioctl(fd.get(), TUNSETIFF, ifr)
    except OSError as exc:
        fd.close()
        raise OSError(exc.errno, f"bind_tun: ioctl - {name}") from exc
    return fd


def bind_tcp(host: str, port: int, backlog: int = 1) -> socket.socket:
    """A listening IPv4 TCP socket; an empty host listens on every address."""
    if backlog > _INT_MAX:
        raise ValueError(f"bind_tcp backlog: {backlog}")

    if not host:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        address: Any = ("", port)
    else:
        family, socktype, proto, _, address = socket.getaddrinfo(
            host, port, socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP
        )[0]
        sock = socket.socket(family, socktype, proto)

    try:
        sock.bind(address)
        sock.listen(backlog)
    except BaseException:
        sock.close()
        raise
    return sock


def connect_tcp(host: str, port: int, timeout_ms: int = 0) -> Optional[socket.socket]:
    """Connect to an IPv4 address.

    With a timeout the attempt gives up after ``timeout_ms`` milliseconds and
    returns None. The returned socket is always blocking.
    """
    socket.inet_pton(socket.AF_INET, host)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        if timeout_ms:
            sock.setblocking(False)

        err = sock.connect_ex((host, port))
        if err:
            if err != errno.EINPROGRESS:
                raise OSError(err, f"connect_tcp: connect {host}:{port}: {os.strerror(err)}")

            poller = select.poll()
            poller.register(sock, select.POLLOUT)
            events = poller.poll(timeout_ms)
            if not events or not events[0][1] & select.POLLOUT:
                sock.close()
                return None

            err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
            if err:
                raise OSError(err, f"connect_tcp: connect/poll: {os.strerror(err)}")

        sock.setblocking(True)
    except BaseException:
        sock.close()
        raise
    return sock


def bind_udp(host: str, port: int) -> socket.socket:
    """An IPv4 UDP socket bound to ``host``; empty means every address."""
    if host:
        socket.inet_pton(socket.AF_INET, host)
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, port))
    except BaseException:
        sock.close()
        raise
    return sock


def connect_udp(host: str, port: int) -> socket.socket:
    """An IPv4 UDP socket whose peer is fixed to ``host:port``."""
    socket.inet_pton(socket.AF_INET, host)
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect((host, port))
    except BaseException:
        sock.close()
        raise
    return sock


def accept(sock: socket.socket) -> socket.socket:
    """Accept one connection on a listening socket."""
    if sock.fileno() < 0:
        raise ValueError("accept: invalid socket file descriptor")
    conn, _ = sock.accept()
    return conn


def set_non_blocking(sock: SockLike, on: bool) -> None:
    """Switch non-blocking mode on or off."""
    if isinstance(sock, socket.socket):
        sock.setblocking(not on)
        return
    fd = _fileno(sock)
    flags = fcntl.fcntl(fd, fcntl.F_GETFL)
    flags = flags | os.O_NONBLOCK if on else flags & ~os.O_NONBLOCK
    fcntl.fcntl(fd, fcntl.F_SETFL, flags)


def udp_send_queue_size(sock: SockLike) -> int:
    """Bytes still waiting in the socket's send queue."""
    raw = fcntl.ioctl(_fileno(sock), termios.TIOCOUTQ, struct.pack("i", 0))
    (value,) = struct.unpack("i", raw)
    if value < 0:
        raise RuntimeError(f"ioctl SIOCOUTQ returned negative value: {value}")
    return value


def _wait(fd: int, writing: bool) -> None:
    if writing:
        select.select([], [fd], [])
    else:
        select.select([fd], [], [])


def write_all(sock: SockLike, *args: bytes) -> int:
    """Write every given buffer in full, in order; return the byte count."""
    fd = _fileno(sock)
    views = [memoryview(b).cast("B") for b in args]
    views = [v for v in views if len(v)]
    total = 0

    while views:
        try:
            n = os.writev(fd, views)
        except InterruptedError:
            continue
        except BlockingIOError:
            _wait(fd, writing=True)
            continue

        total += n
        while n and views:
            adv = min(len(views[0]), n)
            views[0] = views[0][adv:]
            n -= adv
            if not len(views[0]):
                views.pop(0)

    return total


def read_all(sock: SockLike, size: int) -> bytes:
    """Read exactly ``size`` bytes; raises EOFError if the peer closes first."""
    fd = _fileno(sock)
    buf = bytearray(size)
    view = memoryview(buf)
    got = 0

    while got < size:
        try:
            n = os.readv(fd, [view[got:]])
        except InterruptedError:
            continue
        except BlockingIOError:
            _wait(fd, writing=False)
            continue
        if not n:
            raise EOFError(f"read_all: connection closed after {got} of {size} bytes")
        got += n

    return bytes(buf)


def peer_name(sock: socket.socket) -> str:
    """The connected peer as ``host:service``, resolved by name."""
    host, port = socket.getnameinfo(sock.getpeername(), socket.NI_NAMEREQD)
    return f"{host}:{port}"


def connect_network_targets(targets: Iterable[NetworkTarget]) -> List[Optional[socket.socket]]:
    """Connect to every target, in order."""
    return [connect_tcp(t.ip, t.port) for t in targets]


def bind_network_targets(targets: Iterable[NetworkTarget]) -> List[socket.socket]:
    """Listen on every target, in order."""
    return [bind_tcp(t.ip, t.port) for t in targets]