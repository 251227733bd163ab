"""
navigation.py

Moving the session cursor through the playlist and (re)loading the
engine for the new item.

Only the control loop calls these, on its own thread, except
prepare_next() which playbin fires from a streaming thread when
gapless playback is enabled.
"""

from __future__ import annotations

import time
import urllib.parse

import config
import seeking
from console import say
from engine import MediaEngine, StateChange
from session import PlaybackSession, State


# ── helpers ────────────────────────────────────────────────────────────────
def display_name(uri: str) -> str:
    """Local path for file:// and pushfile:// URIs, the URI otherwise."""
    lowered = uri.lower()
    if lowered.startswith("pushfile://"):
        uri = uri[len("push"):]
        lowered = lowered[len("push"):]
    if lowered.startswith("file://"):
        parsed = urllib.parse.urlparse(uri)
        return urllib.parse.unquote(parsed.path)
    return uri


def _wait_until_started(session: PlaybackSession, engine: MediaEngine) -> bool:
    """
    Poll until the engine has left NULL/READY.  Bounded, and abandoned as
    soon as the session is asked to stop.
    """
    for _ in range(config.PREROLL_POLL_LIMIT):
        if session.stop_requested:
            return False
        if engine.get_state() > State.READY:
            return True
        time.sleep(config.PREROLL_POLL_INTERVAL)
    return False


# ── loading ────────────────────────────────────────────────────────────────
def load(session: PlaybackSession, engine: MediaEngine, uri: str) -> None:
    engine.set_state(State.READY)
    session.reset_transient()

    say(f"Now playing {display_name(uri)}")
    engine.set_uri(uri)

    ret = engine.set_state(State.PAUSED)
    if ret is StateChange.NO_PREROLL:
        say("Pipeline is live.")
        session.is_live = True
    elif ret is StateChange.ASYNC:
        say("Prerolling...", end="\r")
    # FAILURE: an error message follows on the bus

    engine.set_state(session.desired_state)

    if not _wait_until_started(session, engine):
        say("Pipeline did not start, keeping current rate.")
        return
    seeking.set_playback_rate(session, engine, session.rate)


# ── playlist navigation ────────────────────────────────────────────────────
def advance(session: PlaybackSession, engine: MediaEngine) -> bool:
    """Load the next item.  False when the playlist is exhausted."""
    if not session.has_next():
        return False
    session.cursor += 1
    load(session, engine, session.playlist[session.cursor])
    return True


def retreat(session: PlaybackSession, engine: MediaEngine) -> bool:
    """Load the previous item.  False at the start of the playlist."""
    if not session.has_previous():
        return False
    session.cursor -= 1
    load(session, engine, session.playlist[session.cursor])
    return True


def prepare_next(session: PlaybackSession, engine: MediaEngine) -> bool:
    """
    Gapless hand-over: queue the next URI on the running pipeline and
    move the cursor, without stopping or reloading anything.
    """
    if not session.gapless or not session.has_next():
        return False

    next_uri = session.playlist[session.cursor + 1]
    say(f"About to finish, preparing next title: {display_name(next_uri)}")
    engine.set_uri(next_uri)
    session.cursor += 1
    return True
