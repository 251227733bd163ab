"""
tracks.py

Cycling through the audio, video and subtitle tracks of the current
media.  Each press selects the next track; after the last one audio and
subtitles are switched off, video wraps around to the first track.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

from console import say
from engine import MediaEngine, PlayFlags
from session import PlaybackSession, TrackType


@dataclass(frozen=True)
class _TrackProps:
    current: str
    count: str
    tags_signal: str
    flag: PlayFlags


TRACK_PROPS = {
    TrackType.AUDIO:    _TrackProps("current-audio", "n-audio", "get-audio-tags", PlayFlags.AUDIO),
    TrackType.VIDEO:    _TrackProps("current-video", "n-video", "get-video-tags", PlayFlags.VIDEO),
    TrackType.SUBTITLE: _TrackProps("current-text",  "n-text",  "get-text-tags",  PlayFlags.TEXT),
}


class TrackPlan(NamedTuple):
    index: int                  # -1 → disabled
    flags: int                  # playbin flags to apply
    enabled: bool


def plan_cycle(track_type: TrackType, cur: int, n: int, flags: int) -> Optional[TrackPlan]:
    """
    Work out the next selection from the current index, track count and
    playbin flags.  None when there are no tracks of this type.
    """
    if n < 1:
        return None

    flag = TRACK_PROPS[track_type].flag
    if not flags & flag:
        cur = 0
    else:
        cur = (cur + 1) % (n + 1)

    if cur == n and track_type is not TrackType.VIDEO:
        return TrackPlan(-1, flags & ~int(flag), False)

    if cur >= n:
        cur = 0
    return TrackPlan(cur, flags | int(flag), True)


def cycle_track(session: PlaybackSession,
                engine: MediaEngine,
                track_type: TrackType) -> Optional[int]:
    """Select the next track of *track_type*; returns the new index."""
    props = TRACK_PROPS[track_type]
    name = track_type.value

    with session.selection.lock:
        cur = engine.get_property(props.current)
        n = engine.get_property(props.count)
        flags = int(engine.get_property("flags"))

        plan = plan_cycle(track_type, cur, n, flags)
        if plan is None:
            say(f"No {name} tracks.")
            return None

        if not plan.enabled:
            say(f"Disabling {name}.")
        else:
            lang = engine.track_language(props.tags_signal, plan.index)
            if lang:
                say(f"Switching to {name} track {plan.index + 1} of {n} ({lang}).")
            else:
                say(f"Switching to {name} track {plan.index + 1} of {n}.")

    if plan.flags != flags:
        engine.set_property("flags", plan.flags)
    engine.set_property(props.current, plan.index)
    return plan.index
