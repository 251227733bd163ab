"""
engine.py – what the control code needs from the media engine.

Public API
----------
set_state(state)          → StateChange
get_state()               → current State (non-blocking)
set_uri(uri)
query_position()          → ns or None
query_seeking()           → (seekable, duration_ns) or None
seek(rate, flags, start, stop) → bool
volume / mute             (cubic volume)
get_property / set_property / track_language
recalculate_latency(), dump_graph(tag)

Times are integer nanoseconds, like GstClockTime.  gst_engine.GstEngine
is the playbin implementation; tests use a scripted fake.
"""

from __future__ import annotations

import abc
import enum
from typing import Any, Optional, Tuple

from session import State

SECOND = 1_000_000_000
CLOCK_TIME_NONE = -1


class EngineError(RuntimeError):
    """The engine (or a required element) could not be constructed."""


class StateChange(enum.Enum):
    FAILURE    = 0
    SUCCESS    = 1
    ASYNC      = 2
    NO_PREROLL = 3


class SeekFlags(enum.IntFlag):
    """Subset of GstSeekFlags used by the player (same bit values)."""
    NONE                = 0
    FLUSH               = 1 << 0
    ACCURATE            = 1 << 1
    TRICKMODE           = 1 << 4
    TRICKMODE_KEY_UNITS = 1 << 7
    TRICKMODE_NO_AUDIO  = 1 << 8


class PlayFlags(enum.IntFlag):
    """playbin 'flags' bits that enable each stream type."""
    VIDEO = 0x1
    AUDIO = 0x2
    TEXT  = 0x4


class MediaEngine(abc.ABC):
    # ── lifecycle ──────────────────────────────────────────────────────────
    @abc.abstractmethod
    def set_state(self, state: State) -> StateChange: ...

    @abc.abstractmethod
    def get_state(self) -> State: ...

    @abc.abstractmethod
    def set_uri(self, uri: str) -> None: ...

    # ── queries / seeking ─────────────────────────────────────────────────
    @abc.abstractmethod
    def query_position(self) -> Optional[int]: ...

    @abc.abstractmethod
    def query_duration(self) -> Optional[int]: ...

    @abc.abstractmethod
    def query_seeking(self) -> Optional[Tuple[bool, int]]: ...

    @abc.abstractmethod
    def seek(self, rate: float, flags: SeekFlags,
             start: int, stop: int) -> bool: ...

    # ── audio ─────────────────────────────────────────────────────────────
    @abc.abstractmethod
    def get_volume(self) -> float: ...

    @abc.abstractmethod
    def set_volume(self, volume: float) -> None: ...

    @abc.abstractmethod
    def get_mute(self) -> bool: ...

    @abc.abstractmethod
    def set_mute(self, mute: bool) -> None: ...

    # ── track selection ───────────────────────────────────────────────────
    @abc.abstractmethod
    def get_property(self, name: str) -> Any: ...

    @abc.abstractmethod
    def set_property(self, name: str, value: Any) -> None: ...

    @abc.abstractmethod
    def track_language(self, tags_signal: str, index: int) -> Optional[str]:
        """Language name from the tags of track *index*, if tagged."""

    # ── misc ──────────────────────────────────────────────────────────────
    def recalculate_latency(self) -> None:
        pass

    def dump_graph(self, tag: str) -> None:
        pass
