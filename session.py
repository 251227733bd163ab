"""
session.py

The mutable record of one playback session: playlist, cursor, rate,
trick mode, buffering/live flags and the per-type stream selection.

It carries no behaviour beyond its own invariants; navigation.py,
seeking.py, tracks.py and dispatcher.py all work on a shared reference
owned by the control loop in app.py.
"""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import config


# ── enums ──────────────────────────────────────────────────────────────────
class State(enum.IntEnum):
    """Engine states, ordered like GstState."""
    VOID_PENDING = 0
    NULL         = 1
    READY        = 2
    PAUSED       = 3
    PLAYING      = 4


class TrickMode(enum.IntEnum):
    NONE               = 0
    DEFAULT            = 1
    DEFAULT_NO_AUDIO   = 2
    KEY_UNITS          = 3
    KEY_UNITS_NO_AUDIO = 4

    @property
    def description(self) -> str:
        return _TRICK_MODE_DESCRIPTIONS[self]

    def successor(self) -> "TrickMode":
        """Next mode in cyclic order; KEY_UNITS_NO_AUDIO wraps to NONE."""
        return TrickMode((self + 1) % len(TrickMode))


_TRICK_MODE_DESCRIPTIONS = {
    TrickMode.NONE:               "normal playback, trick modes disabled",
    TrickMode.DEFAULT:            "trick mode: default",
    TrickMode.DEFAULT_NO_AUDIO:   "trick mode: default, no audio",
    TrickMode.KEY_UNITS:          "trick mode: key frames only",
    TrickMode.KEY_UNITS_NO_AUDIO: "trick mode: key frames only, no audio",
}


class StreamType(enum.IntFlag):
    """Same bit values as GstStreamType."""
    UNKNOWN   = 1 << 0
    AUDIO     = 1 << 1
    VIDEO     = 1 << 2
    CONTAINER = 1 << 3
    TEXT      = 1 << 4


class TrackType(enum.Enum):
    AUDIO    = "audio"
    VIDEO    = "video"
    SUBTITLE = "subtitle"


# ── stream collection ──────────────────────────────────────────────────────
@dataclass(frozen=True)
class Stream:
    stream_id: str
    stream_type: StreamType


@dataclass(frozen=True)
class StreamCollection:
    """Immutable snapshot of the selectable streams of the current media."""
    streams: Tuple[Stream, ...] = ()

    def __len__(self) -> int:
        return len(self.streams)

    def __iter__(self):
        return iter(self.streams)

    def of_type(self, kind: StreamType) -> Tuple[Stream, ...]:
        return tuple(s for s in self.streams if s.stream_type & kind)


@dataclass
class Selection:
    """
    Currently applied stream id per track type plus the last seen
    collection.  Hold `lock` for any read-modify-write.
    """
    collection: Optional[StreamCollection] = None
    audio_sid: Optional[str] = None
    video_sid: Optional[str] = None
    text_sid:  Optional[str] = None
    lock: threading.Lock = field(default_factory=threading.Lock,
                                 repr=False, compare=False)

    def clear_ids(self) -> None:
        self.audio_sid = self.video_sid = self.text_sid = None


# ── session ────────────────────────────────────────────────────────────────
class PlaybackSession:
    def __init__(self,
                 playlist: Sequence[str],
                 *,
                 rate: float = config.DEFAULT_RATE,
                 gapless: bool = False) -> None:
        self.playlist: Tuple[str, ...] = tuple(playlist)
        self.cursor = -1                   # -1 → nothing loaded yet
        self.desired_state = State.PLAYING
        self._rate = 1.0
        self.rate = rate
        self.trick_mode = TrickMode.NONE
        self.buffering = False
        self.is_live = False
        self.gapless = gapless
        self.stop_requested = False
        self.selection = Selection()

    # ---------------------------------------------------------------- rate
    @property
    def rate(self) -> float:
        return self._rate

    @rate.setter
    def rate(self, value: float) -> None:
        if value == 0:
            raise ValueError("playback rate must be non-zero")
        self._rate = float(value)

    # ------------------------------------------------------------- cursor
    @property
    def current_uri(self) -> Optional[str]:
        if 0 <= self.cursor < len(self.playlist):
            return self.playlist[self.cursor]
        return None

    def has_next(self) -> bool:
        return self.cursor + 1 < len(self.playlist)

    def has_previous(self) -> bool:
        return self.cursor > 0 and len(self.playlist) > 1

    # -------------------------------------------------------------- misc
    def reset_transient(self) -> None:
        """Forget per-item flags before loading a new URI."""
        self.buffering = False
        self.is_live = False

    def toggle_desired_state(self) -> State:
        self.desired_state = (State.PAUSED
                              if self.desired_state == State.PLAYING
                              else State.PLAYING)
        return self.desired_state

    def __repr__(self) -> str:
        return (f"PlaybackSession(cursor={self.cursor}/{len(self.playlist)}, "
                f"state={self.desired_state.name}, rate={self.rate:.2f}, "
                f"trick={self.trick_mode.name}, buffering={self.buffering}, "
                f"live={self.is_live})")
