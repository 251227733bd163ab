import pytest

import config
from commands import SIGNAL_COMMANDS, CommandHandler, command_for_signal
from engine import SECOND
from events import Command
from fakes import FakeEngine
from session import PlaybackSession, State, TrickMode

IFACE = config.INTERFACE_NAME


@pytest.fixture
def session():
    s = PlaybackSession(["a://1", "a://2"])
    s.cursor = 0
    return s


@pytest.fixture
def quits():
    return []


@pytest.fixture
def handler(session, engine, quits):
    return CommandHandler(session, engine, quit=lambda: quits.append(1))


def test_every_signal_maps_to_a_command():
    assert set(SIGNAL_COMMANDS.values()) == set(Command)
    assert command_for_signal(IFACE, "ToggleAudioMute") is Command.TOGGLE_MUTE
    assert command_for_signal(IFACE, "ChangePlaybackDirection") is Command.CHANGE_DIRECTION


def test_foreign_or_unknown_signals_are_unhandled(handler, session, engine):
    assert handler.handle_signal("org.other.Player", "Quit") is False
    assert handler.handle_signal(IFACE, "Explode") is False
    assert handler.handle_signal(IFACE, None) is False
    assert engine.calls == [] and not session.stop_requested


def test_quit_signal(handler, quits, capsys):
    assert handler.handle_signal(IFACE, "Quit") is True
    assert quits == [1]
    err = capsys.readouterr().err
    assert f"Got D-Bus request: {IFACE}.Quit" in err
    assert "Server exiting..." in err


def test_toggle_paused_twice_restores(handler, session, engine):
    handler.apply(Command.TOGGLE_PAUSED)
    assert session.desired_state == State.PAUSED
    handler.apply(Command.TOGGLE_PAUSED)
    assert session.desired_state == State.PLAYING
    assert [c[1] for c in engine.calls] == [State.PAUSED, State.PLAYING]


def test_toggle_paused_while_buffering_is_deferred(handler, session, engine, capsys):
    session.buffering = True
    session.desired_state = State.PAUSED
    handler.apply(Command.TOGGLE_PAUSED)
    assert engine.calls == []
    assert "Will play as soon as buffering finishes" in capsys.readouterr().out


def test_play_next_and_previous(handler, session, quits):
    handler.apply(Command.PLAY_NEXT)
    assert session.cursor == 1
    handler.apply(Command.PLAY_PREVIOUS)
    assert session.cursor == 0
    handler.apply(Command.PLAY_PREVIOUS)
    assert session.cursor == 0 and quits == []


def test_play_next_at_end_quits(handler, session, quits, capsys):
    session.cursor = 1
    handler.apply(Command.PLAY_NEXT)
    assert quits == [1]
    assert "Reached end of play list." in capsys.readouterr().out


def test_rate_commands(handler, session):
    handler.apply(Command.INCREASE_RATE)
    assert session.rate == pytest.approx(1.1)
    handler.apply(Command.DECREASE_RATE)
    handler.apply(Command.DECREASE_RATE)
    assert session.rate == pytest.approx(0.9)
    handler.apply(Command.CHANGE_DIRECTION)
    assert session.rate == pytest.approx(-0.9)


def test_decrease_near_zero_flips_direction(handler, session):
    session.rate = 0.1
    handler.apply(Command.DECREASE_RATE)
    assert session.rate == pytest.approx(-0.1)


def test_trick_mode_command(handler, session):
    handler.apply(Command.TOGGLE_TRICK_MODE)
    assert session.trick_mode == TrickMode.DEFAULT


def test_track_commands(handler, engine):
    engine.props.update({"n-audio": 2, "current-audio": 0})
    handler.apply(Command.CHANGE_AUDIO_TRACK)
    assert engine.props["current-audio"] == 1
    handler.apply(Command.CHANGE_SUBTITLE_TRACK)
    handler.apply(Command.CHANGE_VIDEO_TRACK)


def test_seek_to_beginning_keeps_rate_and_mode(handler, session, engine):
    session.rate = 2.0
    session.trick_mode = TrickMode.KEY_UNITS
    handler.apply(Command.SEEK_TO_BEGINNING)
    rate, _flags, start, _stop = engine.seeks[-1]
    assert (rate, start) == (2.0, 0)


def test_volume_and_mute(handler, engine):
    handler.apply(Command.VOLUME_DOWN)
    assert engine.volume == pytest.approx(0.95)
    handler.apply(Command.VOLUME_UP)
    assert engine.volume == pytest.approx(1.0)
    handler.apply(Command.TOGGLE_MUTE)
    assert engine.mute


def test_seek_left_and_right_use_named_fractions(session, quits, monkeypatch):
    monkeypatch.setattr(config, "SEEK_RIGHT_FRACTION", 0.08)
    monkeypatch.setattr(config, "SEEK_LEFT_FRACTION", -0.08)
    engine = FakeEngine(position=50 * SECOND)
    h = CommandHandler(session, engine, quit=lambda: quits.append(1))
    h.handle_signal(IFACE, "SeekRight")
    assert engine.seeks[-1][2] == 58 * SECOND
    h.handle_signal(IFACE, "SeekLeft")
    assert engine.seeks[-1][2] == 42 * SECOND


def test_default_seek_left_moves_forward(handler, engine):
    handler.apply(Command.SEEK_BACKWARD)
    assert engine.seeks[-1][2] == 10 * SECOND + 8 * SECOND


def test_seek_past_end_moves_on(session, quits):
    engine = FakeEngine(position=99 * SECOND)
    h = CommandHandler(session, engine, quit=lambda: quits.append(1))
    h.apply(Command.SEEK_FORWARD)
    assert session.cursor == 1
    engine.position = 99 * SECOND
    h.apply(Command.SEEK_FORWARD)
    assert quits == [1]
