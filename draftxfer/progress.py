"""Terminal progress display built from ANSI escape sequences."""

from __future__ import annotations

import enum
import fcntl
import math
import struct
import sys
import termios
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TextIO

CURSOR_INVISIBLE = "\x1b[?25l"
CURSOR_VISIBLE = "\x1b[?25h"
CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"
SAVE_CURSOR_POSITION = "\x1b[s"
RESTORE_CURSOR_POSITION = "\x1b[u"
ERASE_LINE = "\x1b[2K"
ERASE_CURSOR_TO_END = "\x1b[0J"

_WHIRLY_PERIOD = 0.15
_EXPIRY = 1.0


def cursor_position(row: int, col: int) -> str:
    return f"\x1b[{row};{col}f"


def cursor_right(cols: int) -> str:
    return f"\x1b[{cols}C"


def cursor_begin_down(lines: int) -> str:
    return f"\x1b[{lines}E"


def cursor_col(col: int) -> str:
    return f"\x1b[{col}G"


def format_eta(seconds: float) -> str:
    """Describe a remaining duration in words, hours, minutes or seconds."""
    if seconds > 24 * 3600:
        return "more than a day. is your network healthy?"
    if seconds > 10 * 3600:
        return "a long while (> 10h)"
    if seconds > 5 * 3600:
        return "a good while (> 5h)"
    if seconds > 2 * 3600:
        return "a while (> 2h)"

    hours = int(seconds / 3600)
    minutes = int((seconds - hours * 3600) / 60)
    secs = int(seconds - hours * 3600 - minutes * 60)

    text = ""
    if hours > 0:
        text += f"{hours} h "
    if hours > 0 or minutes > 0:
        return text + f"{minutes} m "
    return text + f"{secs} s"


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def progress_meter(start_col: int, end_col: int, pct: float) -> str:
    """A bar of '=' filling ``pct`` of the columns, then a move past the end."""
    length = end_col - start_col if start_col < end_col else 0
    filled = min(max(_round_half_away(length * pct), 0), length)
    return "=" * filled + cursor_col(end_col + 1)


@dataclass(frozen=True)
class WinSize:
    rows: int
    cols: int


def win_size(fd: int = 1) -> WinSize:
    """Terminal size of ``fd``; raises OSError if it is not a terminal."""
    raw = fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\0" * 8)
    rows, cols, _, _ = struct.unpack("HHHH", raw)
    return WinSize(rows, cols)


class WhirlyState:
    """A spinner character that advances at most once per period."""

    CHARS = "|/-\\"

    def __init__(self) -> None:
        self._update_time = time.monotonic() + _WHIRLY_PERIOD
        self._idx = 0

    def tick(self) -> None:
        now = time.monotonic()
        if now < self._update_time:
            return
        self._update_time = now + _WHIRLY_PERIOD
        self._idx = (self._idx + 1) % len(self.CHARS)

    def get(self) -> str:
        return self.CHARS[self._idx]

    def reset(self) -> None:
        self._idx = 0


class LineType(enum.Enum):
    TEXT = "text"
    PROGRESS = "progress"


@dataclass
class LineConfig:
    start_char: WhirlyState = field(default_factory=WhirlyState)
    end_char: WhirlyState = field(default_factory=WhirlyState)
    completion_time: float = 0.0
    pct: float = 0.0
    row: int = 0
    start_col: int = 0
    end_col: int = 0
    type: LineType = LineType.TEXT


class ProgressDisplay:
    """Renders one progress line per key plus an overall ETA line."""

    def __init__(self, stream: Optional[TextIO] = None, fd: int = 1) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._fd = fd
        self.lines: Dict[str, LineConfig] = {}
        self.eta = 0.0
        self.bandwidth = 0.0
        self._rows = 0
        self._term_state: Optional[list] = None

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()

    def init(self) -> None:
        """Save the terminal state where possible and hide the cursor."""
        self._term_state = None
        try:
            self._term_state = termios.tcgetattr(self._fd)
        except (termios.error, OSError):
            pass
        self._write(CURSOR_INVISIBLE)

    def close(self) -> None:
        """Show the cursor and restore the saved terminal state."""
        self._write(CURSOR_VISIBLE)
        if self._term_state is not None:
            try:
                termios.tcsetattr(self._fd, termios.TCSANOW, self._term_state)
            except (termios.error, OSError):
                pass

    def render(self) -> None:
        """Draw every line and the ETA, then drop lines finished over a second ago."""
        size = win_size(self._fd)
        parts = [cursor_col(0), SAVE_CURSOR_POSITION]

        for name, conf in sorted(self.lines.items()):
            if conf.pct >= 1.0:
                conf.start_char.reset()
                conf.end_char.reset()
            parts.append(
                ERASE_LINE
                + name
                + cursor_right(2)
                + conf.start_char.get()
                + progress_meter(conf.start_col, min(size.cols, conf.end_col), conf.pct)
                + conf.end_char.get()
                + cursor_begin_down(1)
            )
            conf.start_char.tick()
            conf.end_char.tick()

        parts.append(
            ERASE_LINE + cursor_begin_down(1) + ERASE_LINE + "ETA: " + format_eta(self.eta)
        )
        parts.append(cursor_begin_down(1) + ERASE_CURSOR_TO_END + RESTORE_CURSOR_POSITION)
        self._write("".join(parts))

        now = time.monotonic()
        self.lines = {
            name: conf
            for name, conf in self.lines.items()
            if not (conf.pct >= 1.0 and now - conf.completion_time >= _EXPIRY)
        }

    def update(self, key: str, pct: float) -> None:
        """Set a line's fraction done; unknown keys are ignored."""
        line = self.lines.get(key)
        if line is None:
            return
        line.pct = pct
        if pct >= 1.0 and line.completion_time == 0.0:
            line.completion_time = time.monotonic()

    def update_bandwidth(self, bps: float) -> None:
        self.bandwidth = bps

    def update_eta(self, seconds: float) -> None:
        """Blend a new estimate into the smoothed ETA."""
        self.eta = 0.7 * self.eta + 0.3 * seconds

    def add(self, key: str, pct: float = 0.0) -> None:
        conf = self.lines.setdefault(key, LineConfig())
        conf.pct = min(max(pct, 0.0), 1.0)
        conf.row = self._rows
        self._rows += 1
        conf.start_col = len(key) + 2
        conf.end_col = 120

    def remove(self, key: str) -> None:
        self.lines.pop(key, None)

    def complete(self) -> None:
        """Zero the ETA, draw a final frame and move below it."""
        self.eta = 0.0
        self.render()
        self._write(cursor_begin_down(2) + "\n")

    def __enter__(self) -> "ProgressDisplay":
        self.init()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()