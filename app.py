#!/usr/bin/env python3
"""
app.py – the control loop

One GLib main loop owns the PlaybackSession and pumps three sources into
it: the 100 ms status tick (which also drains window key presses from
events.py), the playbin bus watch and the D-Bus remote listener.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

import gi
gi.require_version("GLib", "2.0")
from gi.repository import GLib

import config
import navigation
import seeking
from commands import CommandHandler
from console import say, status, status_line
from dbus_remote import RemoteServer
from dispatcher import BusDispatcher
from events import EventManager
from overlay_window import VideoWindow
from session import PlaybackSession, State

if TYPE_CHECKING:
    from gst_engine import GstEngine


# ── main application ───────────────────────────────────────────────────────
class Player:
    def __init__(self,
                 playlist: Sequence[str],
                 engine: GstEngine,
                 *,
                 gapless: bool = False,
                 rate: float = config.DEFAULT_RATE,
                 volume: Optional[float] = None,
                 remote: bool = True):
        # core state ------------------------------------------------------
        self.session = PlaybackSession(playlist, rate=rate, gapless=gapless)
        self.engine = engine
        self.loop = GLib.MainLoop()
        self.window = VideoWindow()

        self.dispatcher = BusDispatcher(
            self.session, self.engine,
            quit=self.quit,
            status_tick=self.print_status,
            window_factory=self.window.create,
        )
        self.commands = CommandHandler(self.session, self.engine, quit=self.quit)
        self.remote = RemoteServer(self.commands.handle_signal) if remote else None

        # event sources ---------------------------------------------------
        self.engine.add_watch(self.dispatcher.dispatch)
        self._timer_id = GLib.timeout_add(config.STATUS_INTERVAL_MS, self._on_tick)
        if gapless:
            self.engine.connect_about_to_finish(
                lambda: navigation.prepare_next(self.session, self.engine))

        if volume is not None:
            seeking.set_volume_relative(self.engine, volume - 1.0)

    # ── status tick -------------------------------------------------------
    def print_status(self) -> None:
        line = status_line(self.engine.query_position(),
                           self.engine.query_duration(),
                           self.session.desired_state == State.PAUSED)
        if line:
            status(line)

    def _on_tick(self) -> bool:
        self.window.pump()
        while (cmd := EventManager.poll()) is not None:
            self.commands.apply(cmd)
            if self.session.stop_requested:
                return True

        if not self.session.buffering:
            self.print_status()
        return True

    # ── run / stop --------------------------------------------------------
    def quit(self) -> None:
        self.session.stop_requested = True
        self.loop.quit()

    def run(self) -> None:
        try:
            if self.remote is not None:
                self.remote.start()
            if navigation.advance(self.session, self.engine) \
                    and not self.session.stop_requested:
                self.loop.run()
        finally:
            self.teardown()
        say()

    def teardown(self) -> None:
        self.engine.stop()
        if self._timer_id:
            GLib.source_remove(self._timer_id)
            self._timer_id = 0
        self.engine.close()
        if self.remote is not None:
            self.remote.stop()
        self.window.close()
        EventManager.clear()
