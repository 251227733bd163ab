"""
dispatcher.py

Reacts to the engine's bus events: buffering pauses, clock/latency
housekeeping, end-of-stream and error hand-over to the next playlist
item, and stream-collection bookkeeping.

Nothing raised by a handler for an engine-originated problem leaves this
module; such problems become a log line or a playlist advance.
"""

from __future__ import annotations

from typing import Callable, Optional

import config
import navigation
from console import error, say
from engine import MediaEngine
from events import (BufferingProgress, BusError, BusEvent, BusWarning,
                    ClockLost, CollectionChanged, EndOfStream, LatencyChanged,
                    Prerolled, PropertyChanged, StateRequested,
                    StreamsSelected, WindowHandleRequested)
from session import PlaybackSession, State, StreamType

END_OF_PLAYLIST = "Reached end of play list."


class BusDispatcher:
    """
    Parameters
    ----------
    status_tick : prints the position/duration line (used on EOS)
    quit        : unwinds the control loop
    window_factory : returns a native window handle for video overlays
    """

    def __init__(self,
                 session: PlaybackSession,
                 engine: MediaEngine,
                 *,
                 quit: Callable[[], None],
                 status_tick: Optional[Callable[[], object]] = None,
                 window_factory: Optional[Callable[[], Optional[int]]] = None) -> None:
        self.session = session
        self.engine = engine
        self._quit = quit
        self._status_tick = status_tick
        self._window_factory = window_factory
        self._handlers: dict[type, Callable] = {
            Prerolled:             self._on_prerolled,
            BufferingProgress:     self._on_buffering,
            ClockLost:             self._on_clock_lost,
            LatencyChanged:        self._on_latency,
            StateRequested:        self._on_state_requested,
            EndOfStream:           self._on_eos,
            BusWarning:            self._on_warning,
            BusError:              self._on_error,
            PropertyChanged:       self._on_property,
            CollectionChanged:     self._on_collection,
            StreamsSelected:       self._on_streams_selected,
            WindowHandleRequested: self._on_window_request,
        }

    # ── entry point ───────────────────────────────────────────────────────
    def dispatch(self, event: BusEvent) -> bool:
        """Handle one event.  Always True so the bus watch stays installed."""
        handler = self._handlers.get(type(event))
        if handler is not None:
            handler(event)
        return True

    # ── helpers ───────────────────────────────────────────────────────────
    def _dump(self, tag: str) -> None:
        if not config.DUMP_GRAPHS:
            return
        try:
            self.engine.dump_graph(tag)
        except Exception as exc:                  # diagnostics only
            error(f"[dispatcher] graph dump failed: {exc}")

    def _next_or_quit(self) -> None:
        if not navigation.advance(self.session, self.engine):
            say(END_OF_PLAYLIST)
            self._quit()

    # ── handlers ──────────────────────────────────────────────────────────
    def _on_prerolled(self, ev: Prerolled) -> None:
        self._dump("async-done")
        say("Prerolled.", end="\r")

    def _on_buffering(self, ev: BufferingProgress) -> None:
        s = self.session
        if not s.buffering:
            say()
        say(f"Buffering... {ev.percent}%  ", end="\r")

        if ev.percent >= 100:
            if s.buffering:
                s.buffering = False
                if not s.is_live:
                    self.engine.set_state(s.desired_state)
        elif not s.buffering:
            if not s.is_live:
                self.engine.set_state(State.PAUSED)
            s.buffering = True

    def _on_clock_lost(self, ev: ClockLost) -> None:
        say("Clock lost, selecting a new one")
        self.engine.set_state(State.PAUSED)
        self.engine.set_state(State.PLAYING)

    def _on_latency(self, ev: LatencyChanged) -> None:
        say("Redistribute latency...")
        self.engine.recalculate_latency()

    def _on_state_requested(self, ev: StateRequested) -> None:
        say(f"Setting state to {ev.state.name} as requested by {ev.requester}...")
        self.engine.set_state(ev.state)

    def _on_eos(self, ev: EndOfStream) -> None:
        if self._status_tick is not None:
            self._status_tick()
        say()
        self._next_or_quit()

    def _on_warning(self, ev: BusWarning) -> None:
        self._dump("warning")
        error(f"WARNING {ev.message}")
        if ev.debug:
            error(f"WARNING debug information: {ev.debug}")

    def _on_error(self, ev: BusError) -> None:
        self._dump("error")
        error(f"ERROR {ev.message} for {self.session.current_uri}")
        if ev.debug:
            error(f"ERROR debug information: {ev.debug}")

        # drop whatever else the failing pipeline still has queued
        self.engine.set_state(State.NULL)
        self._next_or_quit()

    def _on_property(self, ev: PropertyChanged) -> None:
        value = ev.value if ev.value is not None else "(no value)"
        say(f"{ev.object}: {ev.name} = {value}")

    def _on_collection(self, ev: CollectionChanged) -> None:
        with self.session.selection.lock:
            self.session.selection.collection = ev.collection

    def _on_streams_selected(self, ev: StreamsSelected) -> None:
        sel = self.session.selection
        with sel.lock:
            sel.collection = ev.collection
            sel.clear_ids()
            for stream in ev.selected:
                kind = stream.stream_type
                if kind & StreamType.AUDIO:
                    sel.audio_sid = stream.stream_id
                elif kind & StreamType.VIDEO:
                    sel.video_sid = stream.stream_id
                elif kind & StreamType.TEXT:
                    sel.text_sid = stream.stream_id
                else:
                    say(f"Unknown stream type with stream-id {stream.stream_id}")

    def _on_window_request(self, ev: WindowHandleRequested) -> None:
        if self._window_factory is None:
            return
        handle = self._window_factory()
        if handle is None:
            return
        try:
            ev.overlay.set_window_handle(handle)
        except Exception as exc:
            error(f"[dispatcher] could not hand window to video sink: {exc}")
