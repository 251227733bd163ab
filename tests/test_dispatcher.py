import pytest

import config
from dispatcher import BusDispatcher
from events import (BufferingProgress, BusError, BusWarning, ClockLost,
                    CollectionChanged, EndOfStream, LatencyChanged, Prerolled,
                    PropertyChanged, StateRequested, StreamsSelected,
                    WindowHandleRequested)
from session import (PlaybackSession, State, Stream, StreamCollection,
                     StreamType)


class _Quit:
    def __init__(self):
        self.called = 0

    def __call__(self):
        self.called += 1


@pytest.fixture
def session():
    s = PlaybackSession(["a://1", "a://2"])
    s.cursor = 0
    return s


@pytest.fixture
def quit_():
    return _Quit()


@pytest.fixture
def dispatcher(session, engine, quit_):
    return BusDispatcher(session, engine, quit=quit_)


def _states(engine):
    return [c[1] for c in engine.calls if c[0] == "set_state"]


# ── buffering ──────────────────────────────────────────────────────────────
def test_buffering_pauses_then_resumes(dispatcher, session, engine):
    dispatcher.dispatch(BufferingProgress(10))
    dispatcher.dispatch(BufferingProgress(50))
    assert session.buffering
    assert _states(engine) == [State.PAUSED]

    dispatcher.dispatch(BufferingProgress(100))
    assert not session.buffering
    assert _states(engine) == [State.PAUSED, State.PLAYING]


def test_buffering_resumes_desired_state(dispatcher, session, engine):
    session.desired_state = State.PAUSED
    dispatcher.dispatch(BufferingProgress(10))
    dispatcher.dispatch(BufferingProgress(100))
    assert _states(engine) == [State.PAUSED, State.PAUSED]


def test_live_sources_ignore_buffering(dispatcher, session, engine):
    session.is_live = True
    dispatcher.dispatch(BufferingProgress(10))
    assert session.buffering
    dispatcher.dispatch(BufferingProgress(100))
    assert not session.buffering
    assert _states(engine) == []


def test_complete_buffering_without_prior_report_is_quiet(dispatcher, engine):
    dispatcher.dispatch(BufferingProgress(100))
    assert _states(engine) == []


# ── housekeeping ───────────────────────────────────────────────────────────
def test_clock_lost_pauses_then_plays(dispatcher, session, engine):
    session.buffering = True
    dispatcher.dispatch(ClockLost())
    assert _states(engine) == [State.PAUSED, State.PLAYING]


def test_latency(dispatcher, engine):
    dispatcher.dispatch(LatencyChanged())
    assert engine.latency_recalcs == 1


def test_state_request(dispatcher, engine, capsys):
    dispatcher.dispatch(StateRequested(State.PAUSED, "/playbin/sink"))
    assert _states(engine) == [State.PAUSED]
    assert "as requested by /playbin/sink" in capsys.readouterr().out


def test_prerolled_dumps_graph(dispatcher, engine, monkeypatch):
    monkeypatch.setattr(config, "DUMP_GRAPHS", True)
    dispatcher.dispatch(Prerolled())
    assert engine.graph_dumps == ["async-done"]


def test_graph_dump_failure_is_not_fatal(dispatcher, engine, capsys):
    def boom(tag):
        raise RuntimeError("no dot dir")
    engine.dump_graph = boom
    dispatcher.dispatch(Prerolled())
    assert "graph dump failed" in capsys.readouterr().err


def test_warning_only_logs(dispatcher, session, engine, capsys):
    dispatcher.dispatch(BusWarning("late buffers", "sink.c:12"))
    err = capsys.readouterr().err
    assert "WARNING late buffers" in err
    assert "WARNING debug information: sink.c:12" in err
    assert _states(engine) == [] and session.cursor == 0


# ── end of stream / errors ─────────────────────────────────────────────────
def test_eos_advances(dispatcher, session, engine, quit_):
    ticks = []
    dispatcher._status_tick = lambda: ticks.append(1)
    dispatcher.dispatch(EndOfStream())
    assert ticks == [1]
    assert session.cursor == 1
    assert engine.uri == "a://2"
    assert quit_.called == 0


def test_eos_at_end_quits(dispatcher, session, quit_, capsys):
    session.cursor = 1
    dispatcher.dispatch(EndOfStream())
    assert quit_.called == 1
    assert "Reached end of play list." in capsys.readouterr().out


def test_error_reports_uri_stops_and_advances(dispatcher, session, engine, capsys):
    dispatcher.dispatch(BusError("not found", None))
    assert "ERROR not found for a://1" in capsys.readouterr().err
    assert _states(engine)[0] == State.NULL
    assert session.cursor == 1


def test_error_on_last_item_quits(dispatcher, session, quit_):
    session.cursor = 1
    dispatcher.dispatch(BusError("decoder", "dbg"))
    assert quit_.called == 1


# ── streams ────────────────────────────────────────────────────────────────
_COLL = StreamCollection((
    Stream("v0", StreamType.VIDEO),
    Stream("a0", StreamType.AUDIO),
    Stream("a1", StreamType.AUDIO),
    Stream("t0", StreamType.TEXT),
))


def test_collection_replaced(dispatcher, session):
    dispatcher.dispatch(CollectionChanged(_COLL))
    assert session.selection.collection is _COLL
    assert not session.selection.lock.locked()


def test_streams_selected_classifies(dispatcher, session, capsys):
    session.selection.text_sid = "stale"
    dispatcher.dispatch(StreamsSelected(
        _COLL, (Stream("v0", StreamType.VIDEO),
                Stream("a1", StreamType.AUDIO),
                Stream("x", StreamType.CONTAINER))))
    sel = session.selection
    assert sel.collection is _COLL
    assert (sel.audio_sid, sel.video_sid, sel.text_sid) == ("a1", "v0", None)
    assert "Unknown stream type with stream-id x" in capsys.readouterr().out


# ── observation ────────────────────────────────────────────────────────────
def test_property_changed(dispatcher, capsys):
    dispatcher.dispatch(PropertyChanged("/playbin/sink", "caps", "video/x-raw"))
    dispatcher.dispatch(PropertyChanged("/playbin", "uri", None))
    out = capsys.readouterr().out
    assert "/playbin/sink: caps = video/x-raw" in out
    assert "/playbin: uri = (no value)" in out


def test_window_request_hands_handle_to_overlay(session, engine, quit_):
    class Overlay:
        handle = None

        def set_window_handle(self, h):
            self.handle = h

    overlay = Overlay()
    d = BusDispatcher(session, engine, quit=quit_, window_factory=lambda: 0x2a00001)
    d.dispatch(WindowHandleRequested(overlay))
    assert overlay.handle == 0x2a00001


def test_window_request_without_factory_is_ignored(dispatcher):
    assert dispatcher.dispatch(WindowHandleRequested(object())) is True


def test_unknown_event_is_ignored(dispatcher):
    assert dispatcher.dispatch(object()) is True
