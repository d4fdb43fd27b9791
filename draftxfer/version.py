"""Build identification string."""

from __future__ import annotations

import os
import time

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def version_string() -> str:
    """Date and time the package was built, as ``Mmm dd yyyy hh:mm:ss``."""
    built = time.localtime(os.path.getmtime(__file__))
    date = f"{_MONTHS[built.tm_mon - 1]} {built.tm_mday:>2} {built.tm_year}"
    return f"{date} {built.tm_hour:02d}:{built.tm_min:02d}:{built.tm_sec:02d}"