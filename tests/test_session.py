import threading

import pytest

from session import (PlaybackSession, Selection, State, Stream,
                     StreamCollection, StreamType, TrickMode)


def test_new_session_has_not_started():
    s = PlaybackSession(["a", "b"])
    assert s.cursor == -1
    assert s.current_uri is None
    assert s.desired_state == State.PLAYING
    assert s.rate == 1.0
    assert s.trick_mode == TrickMode.NONE
    assert not s.buffering and not s.is_live


def test_playlist_is_an_immutable_copy():
    src = ["a", "b"]
    s = PlaybackSession(src)
    src.append("c")
    assert s.playlist == ("a", "b")


def test_rate_can_never_be_zero():
    s = PlaybackSession(["a"])
    with pytest.raises(ValueError):
        s.rate = 0
    assert s.rate == 1.0
    with pytest.raises(ValueError):
        PlaybackSession(["a"], rate=0.0)


def test_negative_rate_allowed():
    s = PlaybackSession(["a"], rate=-2.0)
    assert s.rate == -2.0


def test_toggle_desired_state_twice_restores():
    s = PlaybackSession(["a"])
    assert s.toggle_desired_state() == State.PAUSED
    assert s.toggle_desired_state() == State.PLAYING


def test_trick_mode_cycle_wraps_after_five():
    mode = TrickMode.NONE
    seen = []
    for _ in range(5):
        mode = mode.successor()
        seen.append(mode)
    assert seen == [TrickMode.DEFAULT, TrickMode.DEFAULT_NO_AUDIO,
                    TrickMode.KEY_UNITS, TrickMode.KEY_UNITS_NO_AUDIO,
                    TrickMode.NONE]
    assert mode.description == TrickMode.NONE.description


def test_has_next_and_previous():
    s = PlaybackSession(["a", "b"])
    assert s.has_next() and not s.has_previous()
    s.cursor = 1
    assert not s.has_next() and s.has_previous()
    single = PlaybackSession(["a"])
    single.cursor = 0
    assert not single.has_previous()


def test_reset_transient_clears_flags():
    s = PlaybackSession(["a"])
    s.buffering = s.is_live = True
    s.reset_transient()
    assert not s.buffering and not s.is_live


def test_collection_filters_by_type_bit():
    coll = StreamCollection((Stream("a1", StreamType.AUDIO),
                             Stream("v1", StreamType.VIDEO),
                             Stream("a2", StreamType.AUDIO)))
    assert [s.stream_id for s in coll.of_type(StreamType.AUDIO)] == ["a1", "a2"]
    assert len(coll) == 3


def test_selection_guard_is_a_real_lock():
    sel = Selection()
    assert isinstance(sel.lock, type(threading.Lock()))
    sel.audio_sid = "x"
    sel.clear_ids()
    assert sel.audio_sid is None
