# =========  gst_engine.py  =========
"""
playbin-backed MediaEngine.

Public API
----------
GstEngine(audio_sink, video_sink, flags, verbose)
add_watch(callback)           → bus messages delivered as BusEvent
parse_flags(flags_type, text) → int or None
connect_about_to_finish(cb)   → gapless hook (streaming thread!)
close()
message_to_event(msg)         → BusEvent or None
"""
import gi
gi.require_version("Gst", "1.0")
gi.require_version("GstAudio", "1.0")
gi.require_version("GstVideo", "1.0")
from gi.repository import GLib, GObject, Gst, GstAudio, GstVideo

import re
from typing import Any, Callable, Optional

from console import error
from engine import EngineError, MediaEngine, SeekFlags, StateChange
from events import (BufferingProgress, BusError, BusEvent, BusWarning,
                    ClockLost, CollectionChanged, EndOfStream, LatencyChanged,
                    Prerolled, PropertyChanged, StateRequested,
                    StreamsSelected, WindowHandleRequested)
from session import State, Stream, StreamCollection, StreamType

_STATE_CHANGE = {
    Gst.StateChangeReturn.FAILURE:    StateChange.FAILURE,
    Gst.StateChangeReturn.SUCCESS:    StateChange.SUCCESS,
    Gst.StateChangeReturn.ASYNC:      StateChange.ASYNC,
    Gst.StateChangeReturn.NO_PREROLL: StateChange.NO_PREROLL,
}


# ── message translation ────────────────────────────────────────────────────
def _collection(coll) -> StreamCollection:
    if coll is None:
        return StreamCollection()
    return StreamCollection(tuple(
        _stream(coll.get_stream(i)) for i in range(coll.get_size())))


def _stream(st) -> Stream:
    return Stream(st.get_stream_id() or "", StreamType(int(st.get_stream_type())))


def _serialize(value: Any) -> Optional[str]:
    """String form of a property value: caps and tag lists get their own."""
    if value is None:
        return None
    if isinstance(value, GObject.Value):
        value = value.get_value()
        if value is None:
            return None
    if isinstance(value, str):
        return value
    if isinstance(value, (Gst.Caps, Gst.TagList)):
        return value.to_string()
    if isinstance(value, GObject.Object):
        return value.get_name() if hasattr(value, "get_name") else repr(value)
    return str(value)


def message_to_event(msg: Gst.Message) -> Optional[BusEvent]:
    if GstVideo.is_video_overlay_prepare_window_handle_message(msg):
        return WindowHandleRequested(msg.src)

    t = msg.type
    if t == Gst.MessageType.ASYNC_DONE:
        return Prerolled()
    if t == Gst.MessageType.BUFFERING:
        return BufferingProgress(msg.parse_buffering())
    if t == Gst.MessageType.CLOCK_LOST:
        return ClockLost()
    if t == Gst.MessageType.LATENCY:
        return LatencyChanged()
    if t == Gst.MessageType.REQUEST_STATE:
        return StateRequested(State(int(msg.parse_request_state())),
                              msg.src.get_path_string())
    if t == Gst.MessageType.EOS:
        return EndOfStream()
    if t == Gst.MessageType.WARNING:
        err, dbg = msg.parse_warning()
        return BusWarning(err.message, dbg)
    if t == Gst.MessageType.ERROR:
        err, dbg = msg.parse_error()
        return BusError(err.message, dbg)
    if t == Gst.MessageType.PROPERTY_NOTIFY:
        obj, name, val = msg.parse_property_notify()
        return PropertyChanged(obj.get_path_string(), name, _serialize(val))
    if t == Gst.MessageType.STREAM_COLLECTION:
        coll = msg.parse_stream_collection()
        return CollectionChanged(_collection(coll)) if coll else None
    if t == Gst.MessageType.STREAMS_SELECTED:
        coll = msg.parse_streams_selected()
        if not coll:
            return None
        selected = []
        for i in range(msg.streams_selected_get_size()):
            st = msg.streams_selected_get_stream(i)
            if st is not None:
                selected.append(_stream(st))
        return StreamsSelected(_collection(coll), tuple(selected))
    return None


def parse_flags(flags_type: type, text: str) -> Optional[int]:
    """
    Read a GFlags string the way gst-launch does: tokens joined by "+" or
    "/", each a value name, a nick or an integer.  None if any token is
    unknown.
    """
    bits = {}
    for bit, member in flags_type.__flags_values__.items():
        for name in (*member.value_names, *member.value_nicks):
            bits[name] = int(bit)

    value = 0
    for token in re.split(r"[+/]", text):
        token = token.strip()
        if token in bits:
            value |= bits[token]
            continue
        try:
            value |= int(token, 0)
        except ValueError:
            return None
    return value


# ────────────────────────────────────────────────────────────────────────────
class GstEngine(MediaEngine):
    def __init__(self,
                 audio_sink: Optional[str] = None,
                 video_sink: Optional[str] = None,
                 flags: Optional[str] = None,
                 verbose: bool = False):
        Gst.init(None)

        self.playbin = Gst.ElementFactory.make("playbin", "playbin")
        if self.playbin is None:
            raise EngineError("Failed to create 'playbin' element. "
                              "Check your GStreamer installation.")

        if audio_sink:
            self._install_sink("audio-sink", audio_sink)
        if video_sink:
            self._install_sink("video-sink", video_sink)
        if flags:
            self._set_flags_string(flags)

        self._deep_notify_id = 0
        if verbose:
            self._deep_notify_id = self.playbin.add_property_deep_notify_watch(None, True)

        self._watch_id = 0

    # ── construction helpers ──────────────────────────────────────────────
    def _install_sink(self, prop: str, desc: str) -> None:
        """A description with a space is a bin, otherwise a factory name."""
        try:
            if " " in desc:
                sink = Gst.parse_bin_from_description(desc, True)
            else:
                sink = Gst.ElementFactory.make(desc, None)
        except GLib.Error:
            sink = None
        if sink is None:
            error(f"Couldn't create specified {prop.split('-')[0]} sink '{desc}'")
            return
        self.playbin.set_property(prop, sink)

    def _set_flags_string(self, flags: str) -> None:
        """e.g. "video+audio+soft-volume"; names, nicks or a number."""
        value = parse_flags(type(self.playbin.get_property("flags")), flags)
        if value is None:
            error(f"Couldn't convert '{flags}' to playbin flags!")
            return
        self.playbin.set_property("flags", value)

    # ── bus / signals ─────────────────────────────────────────────────────
    def add_watch(self, callback: Callable[[BusEvent], bool]) -> None:
        bus = self.playbin.get_bus()
        self._watch_id = bus.add_watch(GLib.PRIORITY_DEFAULT,
                                       self._on_bus_msg, callback)

    def _on_bus_msg(self, bus, msg, callback):
        ev = message_to_event(msg)
        if ev is not None:
            callback(ev)
        return True

    def connect_about_to_finish(self, callback: Callable[[], Any]) -> None:
        self.playbin.connect("about-to-finish", lambda _pb: callback())

    # ── MediaEngine ───────────────────────────────────────────────────────
    def set_state(self, state: State) -> StateChange:
        ret = self.playbin.set_state(Gst.State(int(state)))
        return _STATE_CHANGE.get(ret, StateChange.FAILURE)

    def get_state(self) -> State:
        _, cur, _ = self.playbin.get_state(0)
        return State(int(cur))

    def set_uri(self, uri: str) -> None:
        self.playbin.set_property("uri", uri)

    def query_position(self) -> Optional[int]:
        ok, pos = self.playbin.query_position(Gst.Format.TIME)
        return pos if ok and pos >= 0 else None

    def query_duration(self) -> Optional[int]:
        ok, dur = self.playbin.query_duration(Gst.Format.TIME)
        return dur if ok and dur >= 0 else None

    def query_seeking(self):
        q = Gst.Query.new_seeking(Gst.Format.TIME)
        if not self.playbin.query(q):
            return None
        _fmt, seekable, _start, end = q.parse_seeking()
        return bool(seekable), end

    def seek(self, rate: float, flags: SeekFlags, start: int, stop: int) -> bool:
        ev = Gst.Event.new_seek(rate, Gst.Format.TIME, Gst.SeekFlags(int(flags)),
                                Gst.SeekType.SET, start,
                                Gst.SeekType.SET, stop)
        return self.playbin.send_event(ev)

    def get_volume(self) -> float:
        return GstAudio.StreamVolume.get_volume(
            self.playbin, GstAudio.StreamVolumeFormat.CUBIC)

    def set_volume(self, volume: float) -> None:
        GstAudio.StreamVolume.set_volume(
            self.playbin, GstAudio.StreamVolumeFormat.CUBIC, volume)

    def get_mute(self) -> bool:
        return bool(self.playbin.get_property("mute"))

    def set_mute(self, mute: bool) -> None:
        self.playbin.set_property("mute", mute)

    def get_property(self, name: str) -> Any:
        return self.playbin.get_property(name)

    def set_property(self, name: str, value: Any) -> None:
        self.playbin.set_property(name, value)

    def track_language(self, tags_signal: str, index: int) -> Optional[str]:
        tags = self.playbin.emit(tags_signal, index)
        if tags is None:
            return None
        ok, lang = tags.get_string(Gst.TAG_LANGUAGE_NAME)
        return lang if ok else None

    def recalculate_latency(self) -> None:
        self.playbin.recalculate_latency()

    def dump_graph(self, tag: str) -> None:
        Gst.debug_bin_to_dot_file_with_ts(
            self.playbin, Gst.DebugGraphDetails.ALL, f"gst-play.{tag}")

    # ── teardown ──────────────────────────────────────────────────────────
    def stop(self) -> None:
        self.playbin.set_state(Gst.State.NULL)

    def close(self) -> None:
        if self._deep_notify_id:
            self.playbin.remove_property_notify_watch(self._deep_notify_id)
            self._deep_notify_id = 0
        self.stop()
        if self._watch_id:
            GLib.source_remove(self._watch_id)
            self._watch_id = 0


def gst_version() -> str:
    Gst.init(None)
    return Gst.version_string()
