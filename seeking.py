"""
seeking.py

Seek, playback-rate, trick-mode and volume arithmetic.

Every function takes the session and the engine explicitly.  Failures
never raise: they print a message and leave the session untouched.  The
session's rate and trick mode only change inside seek_absolute(), after
the engine accepted the seek.
"""

from __future__ import annotations

import enum
import math

import config
from console import say
from engine import CLOCK_TIME_NONE, MediaEngine, SeekFlags
from session import PlaybackSession, TrickMode

# ── trick modes ────────────────────────────────────────────────────────────
TRICK_MODE_FLAGS = {
    TrickMode.NONE:               SeekFlags.NONE,
    TrickMode.DEFAULT:            SeekFlags.TRICKMODE,
    TrickMode.DEFAULT_NO_AUDIO:   SeekFlags.TRICKMODE | SeekFlags.TRICKMODE_NO_AUDIO,
    TrickMode.KEY_UNITS:          SeekFlags.TRICKMODE_KEY_UNITS,
    TrickMode.KEY_UNITS_NO_AUDIO: SeekFlags.TRICKMODE_KEY_UNITS | SeekFlags.TRICKMODE_NO_AUDIO,
}


def seek_flags(mode: TrickMode) -> SeekFlags:
    return SeekFlags.FLUSH | SeekFlags.ACCURATE | TRICK_MODE_FLAGS[mode]


class SeekResult(enum.Enum):
    SEEKED   = "seeked"
    FAILED   = "failed"
    PAST_END = "past_end"       # caller should move to the next item


# ── volume ─────────────────────────────────────────────────────────────────
def quantize_volume(volume: float) -> float:
    """Snap to the 1/VOLUME_STEPS grid and clamp to [0, VOLUME_MAX]."""
    steps = config.VOLUME_STEPS
    volume = math.floor(volume * steps + 0.5) / steps      # halves round up
    return min(max(volume, 0.0), config.VOLUME_MAX)


def set_volume_relative(engine: MediaEngine, step: float) -> float:
    volume = quantize_volume(engine.get_volume() + step)
    engine.set_volume(volume)
    say(f"Volume: {volume * 100:.0f}%")
    return volume


def toggle_mute(engine: MediaEngine) -> bool:
    mute = not engine.get_mute()
    engine.set_mute(mute)
    say(f"Mute: {'on' if mute else 'off'}")
    return mute


# ── seeking ────────────────────────────────────────────────────────────────
def _query_seekable(engine: MediaEngine) -> tuple[bool, int]:
    answer = engine.query_seeking()
    if answer is None:
        return False, -1
    return answer


def seek_absolute(session: PlaybackSession,
                  engine: MediaEngine,
                  position: int,
                  rate: float,
                  mode: TrickMode) -> bool:
    """
    Seek to *position* (ns) with *rate* and *mode*.  Forward rates play
    [position, end), reverse rates play [0, position] backwards.
    """
    seekable, _ = _query_seekable(engine)
    if not seekable:
        return False

    flags = seek_flags(mode)
    if rate >= 0:
        ok = engine.seek(rate, flags, position, CLOCK_TIME_NONE)
    else:
        ok = engine.seek(rate, flags, 0, position)
    if not ok:
        return False

    session.rate = rate
    session.trick_mode = mode
    return True


def seek_relative(session: PlaybackSession,
                  engine: MediaEngine,
                  fraction: float) -> SeekResult:
    """Jump by *fraction* of the duration (at least one second)."""
    if not -1.0 <= fraction <= 1.0:
        raise ValueError(f"relative seek fraction out of range: {fraction}")

    pos = engine.query_position()
    seekable, dur = _query_seekable(engine)
    if pos is None or not seekable or dur <= 0:
        say("\nCould not seek.")
        return SeekResult.FAILED

    step = int(dur * fraction)
    if abs(step) < config.MIN_SEEK_STEP_NS:
        step = -config.MIN_SEEK_STEP_NS if fraction < 0 else config.MIN_SEEK_STEP_NS

    pos += step
    if pos > dur:
        return SeekResult.PAST_END
    pos = max(pos, 0)

    if not seek_absolute(session, engine, pos, session.rate, session.trick_mode):
        say("\nCould not seek.")
        return SeekResult.FAILED
    return SeekResult.SEEKED


# ── rate ───────────────────────────────────────────────────────────────────
def set_rate_and_trick_mode(session: PlaybackSession,
                            engine: MediaEngine,
                            rate: float,
                            mode: TrickMode) -> bool:
    """Re-seek at the current position with a new rate and/or mode."""
    if rate == 0:
        return False
    pos = engine.query_position()
    if pos is None:
        return False
    return seek_absolute(session, engine, pos, rate, mode)


def set_playback_rate(session: PlaybackSession,
                      engine: MediaEngine,
                      rate: float) -> bool:
    if set_rate_and_trick_mode(session, engine, rate, session.trick_mode):
        say(f"Playback rate: {rate:.2f}")
        return True
    say(f"\nCould not change playback rate to {rate:.2f}.")
    return False


def change_rate_relative(session: PlaybackSession,
                         engine: MediaEngine,
                         delta: float,
                         reverse_direction: bool = False) -> bool:
    new_rate = session.rate + delta
    if reverse_direction:
        new_rate *= -1.0
    return set_playback_rate(session, engine, new_rate)


def rate_step(rate: float, increase: bool) -> tuple[float, bool]:
    """
    (delta, reverse_direction) for one rate-up / rate-down press.
    Near zero the direction flips instead; otherwise the step grows with
    the current speed.
    """
    mag = abs(rate)
    if increase:
        if -0.2 < rate < 0.0:
            return 0.0, True
        if mag < 2.0:
            return 0.1, False
        if mag < 4.0:
            return 0.5, False
        return 1.0, False

    if 0.0 < rate < 0.2:
        return 0.0, True
    if mag <= 2.0:
        return -0.1, False
    if mag <= 4.0:
        return -0.5, False
    return -1.0, False


# ── trick mode ─────────────────────────────────────────────────────────────
def cycle_trick_mode(session: PlaybackSession, engine: MediaEngine) -> bool:
    new_mode = session.trick_mode.successor()
    desc = new_mode.description

    if set_rate_and_trick_mode(session, engine, session.rate, new_mode):
        say(f"Rate: {session.rate:.2f} ({desc})")
        return True
    say(f"\nCould not change trick mode to {desc}.")
    return False
