"""
console.py – terminal output for the player.

Regular chatter goes through say() and disappears with --quiet; errors
always reach stderr.
"""

from __future__ import annotations
import sys
from typing import Optional

import config


def say(*parts, end: str = "\n") -> None:
    """print() that honours config.QUIET."""
    if config.QUIET:
        return
    print(*parts, end=end, flush=True)


def status(line: str) -> None:
    """Overwrite the current terminal line (carriage return, no newline)."""
    say(line, end="\r")


def error(*parts) -> None:
    print(*parts, file=sys.stderr, flush=True)


# ── status line ────────────────────────────────────────────────────────────
_SECOND = 1_000_000_000


def fmt_time(ns: int) -> str:
    """H:MM:SS.d – GStreamer's time format cut to nine characters."""
    ns = max(0, ns)
    secs, frac = divmod(ns, _SECOND)
    m, s = divmod(secs, 60)
    h, m = divmod(m, 60)
    return f"{h}:{m:02d}:{s:02d}.{frac:09d}"[:9]


def status_line(pos: Optional[int], dur: Optional[int], paused: bool) -> Optional[str]:
    """'pos / dur' plus a paused marker; None until both are known."""
    if pos is None or dur is None or pos < 0 or dur <= 0:
        return None
    flag = "Paused" if paused else " " * len("Paused")
    return f"{fmt_time(pos)} / {fmt_time(dur)} {flag}"
