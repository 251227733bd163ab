#!/usr/bin/env python3
"""
dbus_remote.py  –  remote control over the D-Bus session bus

Server: owns config.INTERFACE_NAME and listens for payload-less signals
on that interface; each signal member is one command (see
commands.SIGNAL_COMMANDS).  Signals arrive on the GLib main loop thread,
the same thread as the status tick and the playbin bus watch.

Client: `send_signal("PlayNext")` fires one signal and returns.

    gst-remote-play --emit TogglePaused
"""

from __future__ import annotations

from typing import Callable, Optional

import gi
gi.require_version("Gio", "2.0")
from gi.repository import Gio, GLib

import config
from console import error, say

# org.freedesktop.DBus.RequestName flags / replies
_NAME_FLAG_REPLACE_EXISTING = 0x2
_NAME_REPLY_PRIMARY_OWNER   = 1

SignalHandler = Callable[[Optional[str], Optional[str]], bool]


class RemoteError(RuntimeError):
    """The remote-control listener could not be set up."""


class RemoteServer:
    def __init__(self, handler: SignalHandler) -> None:
        self._handler = handler
        self._conn: Optional[Gio.DBusConnection] = None
        self._sub_id = 0

    # ── lifecycle ─────────────────────────────────────────────────────────
    def start(self) -> None:
        try:
            self._conn = Gio.bus_get_sync(Gio.BusType.SESSION, None)
        except GLib.Error as exc:
            raise RemoteError(f"Failed to get a session DBus connection: {exc.message}") from exc

        try:
            reply = self._conn.call_sync(
                "org.freedesktop.DBus", "/org/freedesktop/DBus",
                "org.freedesktop.DBus", "RequestName",
                GLib.Variant("(su)", (config.INTERFACE_NAME, _NAME_FLAG_REPLACE_EXISTING)),
                GLib.VariantType.new("(u)"),
                Gio.DBusCallFlags.NONE, -1, None)
        except GLib.Error as exc:
            raise RemoteError(f"Failed to request name on bus: {exc.message}") from exc
        if reply.unpack()[0] != _NAME_REPLY_PRIMARY_OWNER:
            raise RemoteError(f"Failed to request name on bus: {config.INTERFACE_NAME} is taken")

        self._sub_id = self._conn.signal_subscribe(
            None,                       # any sender
            config.INTERFACE_NAME,
            None,                       # any member
            None,                       # any path
            None,
            Gio.DBusSignalFlags.NONE,
            self._on_signal,
        )

    def stop(self) -> None:
        if self._conn is None:
            return
        if self._sub_id:
            self._conn.signal_unsubscribe(self._sub_id)
            self._sub_id = 0
        try:
            self._conn.call_sync(
                "org.freedesktop.DBus", "/org/freedesktop/DBus",
                "org.freedesktop.DBus", "ReleaseName",
                GLib.Variant("(s)", (config.INTERFACE_NAME,)),
                None, Gio.DBusCallFlags.NONE, -1, None)
        except GLib.Error as exc:
            error(f"[dbus_remote] could not release name: {exc.message}")
        self._conn = None

    # ── delivery ──────────────────────────────────────────────────────────
    def _on_signal(self, conn, sender, path, interface, member, params):
        # unknown members are simply not ours: ignore
        self._handler(interface, member)


# ── client ─────────────────────────────────────────────────────────────────
def send_signal(name: str) -> bool:
    """Emit one remote-control signal.  True when it was handed to the bus."""
    try:
        conn = Gio.bus_get_sync(Gio.BusType.SESSION, None)
    except GLib.Error as exc:
        error(f"Failed to connect to the D-Bus daemon: {exc.message}")
        return False

    try:
        conn.emit_signal(None, config.OBJECT_PATH, config.INTERFACE_NAME, name, None)
        conn.flush_sync(None)
    except GLib.Error as exc:
        error(f"Failed to send signal: {exc.message}")
        return False

    say(f"Signal sent: {name}")
    return True
