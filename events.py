#!/usr/bin/env python3
"""
events.py  – central hub

• Command: one remote or local instruction (consumed once).
• BusEvent variants: what the media engine reports on its bus.
• EventManager: thread-safe queue so *any* source (video window keys,
  tests, …) can inject commands that the control loop drains.
"""

from __future__ import annotations

import enum
import queue
from dataclasses import dataclass
from typing import Optional, Tuple

from session import State, Stream, StreamCollection


# ── commands ───────────────────────────────────────────────────────────────
class Command(enum.Enum):
    QUIT                  = "quit"
    TOGGLE_PAUSED         = "toggle_paused"
    PLAY_NEXT             = "play_next"
    PLAY_PREVIOUS         = "play_previous"
    INCREASE_RATE         = "increase_rate"
    DECREASE_RATE         = "decrease_rate"
    CHANGE_DIRECTION      = "change_direction"
    TOGGLE_TRICK_MODE     = "toggle_trick_mode"
    CHANGE_AUDIO_TRACK    = "change_audio_track"
    CHANGE_VIDEO_TRACK    = "change_video_track"
    CHANGE_SUBTITLE_TRACK = "change_subtitle_track"
    SEEK_TO_BEGINNING     = "seek_to_beginning"
    TOGGLE_MUTE           = "toggle_mute"
    VOLUME_UP             = "volume_up"
    VOLUME_DOWN           = "volume_down"
    SEEK_FORWARD          = "seek_forward"
    SEEK_BACKWARD         = "seek_backward"


# ── bus events ─────────────────────────────────────────────────────────────
class BusEvent:
    """Base class for everything the engine posts on its bus."""
    __slots__ = ()


@dataclass(frozen=True)
class Prerolled(BusEvent):
    pass


@dataclass(frozen=True)
class BufferingProgress(BusEvent):
    percent: int


@dataclass(frozen=True)
class ClockLost(BusEvent):
    pass


@dataclass(frozen=True)
class LatencyChanged(BusEvent):
    pass


@dataclass(frozen=True)
class StateRequested(BusEvent):
    state: State
    requester: str = ""


@dataclass(frozen=True)
class EndOfStream(BusEvent):
    pass


@dataclass(frozen=True)
class BusWarning(BusEvent):
    message: str
    debug: Optional[str] = None


@dataclass(frozen=True)
class BusError(BusEvent):
    message: str
    debug: Optional[str] = None


@dataclass(frozen=True)
class PropertyChanged(BusEvent):
    object: str
    name: str
    value: Optional[str]            # already serialised, None → no value


@dataclass(frozen=True)
class CollectionChanged(BusEvent):
    collection: StreamCollection


@dataclass(frozen=True)
class StreamsSelected(BusEvent):
    collection: StreamCollection
    selected: Tuple[Stream, ...] = ()


@dataclass(frozen=True)
class WindowHandleRequested(BusEvent):
    overlay: object                 # element implementing GstVideoOverlay


# ── command queue ──────────────────────────────────────────────────────────
class EventManager:
    _fifo: "queue.Queue[Command]" = queue.Queue()      # global, thread-safe

    @classmethod
    def post(cls, command: Command) -> None:
        """
        Any thread may call this to inject a command, e.g.:
            EventManager.post(Command.PLAY_NEXT)
        """
        cls._fifo.put(command)

    @classmethod
    def poll(cls) -> Command | None:
        """Return next queued command or None (non-blocking)."""
        try:
            return cls._fifo.get_nowait()
        except queue.Empty:
            return None

    @classmethod
    def clear(cls) -> None:
        while cls.poll() is not None:
            pass
