"""
commands.py

Applies a Command to the running session.  The D-Bus listener, the video
window's keyboard and tests all go through CommandHandler.apply().

SIGNAL_COMMANDS is the remote protocol: D-Bus signal member name →
Command on interface config.INTERFACE_NAME.
"""

from __future__ import annotations

from typing import Callable, Optional

import config
import navigation
import seeking
import tracks
from console import error, say
from dispatcher import END_OF_PLAYLIST
from engine import MediaEngine
from events import Command
from session import PlaybackSession, State, TrackType

SIGNAL_COMMANDS = {
    "Quit":                    Command.QUIT,
    "TogglePaused":            Command.TOGGLE_PAUSED,
    "PlayNext":                Command.PLAY_NEXT,
    "PlayPrevious":            Command.PLAY_PREVIOUS,
    "IncreasePlaybackRate":    Command.INCREASE_RATE,
    "DecreasePlaybackRate":    Command.DECREASE_RATE,
    "ChangePlaybackDirection": Command.CHANGE_DIRECTION,
    "ToggleTrickMode":         Command.TOGGLE_TRICK_MODE,
    "ChangeAudioTrack":        Command.CHANGE_AUDIO_TRACK,
    "ChangeVideoTrack":        Command.CHANGE_VIDEO_TRACK,
    "ChangeSubtitleTrack":     Command.CHANGE_SUBTITLE_TRACK,
    "SeekToBeginning":         Command.SEEK_TO_BEGINNING,
    "ToggleAudioMute":         Command.TOGGLE_MUTE,
    "IncreaseAudioVolume":     Command.VOLUME_UP,
    "DecreaseAudioVolume":     Command.VOLUME_DOWN,
    "SeekRight":               Command.SEEK_FORWARD,
    "SeekLeft":                Command.SEEK_BACKWARD,
}


def command_for_signal(interface: Optional[str], member: Optional[str]) -> Optional[Command]:
    """Command for a signal on our interface, None for anything else."""
    if interface != config.INTERFACE_NAME or member is None:
        return None
    return SIGNAL_COMMANDS.get(member)


class CommandHandler:
    def __init__(self,
                 session: PlaybackSession,
                 engine: MediaEngine,
                 quit: Callable[[], None]) -> None:
        self.session = session
        self.engine = engine
        self._quit = quit
        self._table: dict[Command, Callable[[], None]] = {
            Command.QUIT:                  self._stop,
            Command.TOGGLE_PAUSED:         self.toggle_paused,
            Command.PLAY_NEXT:             self._play_next,
            Command.PLAY_PREVIOUS:         self._play_previous,
            Command.INCREASE_RATE:         lambda: self._step_rate(True),
            Command.DECREASE_RATE:         lambda: self._step_rate(False),
            Command.CHANGE_DIRECTION:      self._flip_direction,
            Command.TOGGLE_TRICK_MODE:     lambda: seeking.cycle_trick_mode(session, engine),
            Command.CHANGE_AUDIO_TRACK:    lambda: tracks.cycle_track(session, engine, TrackType.AUDIO),
            Command.CHANGE_VIDEO_TRACK:    lambda: tracks.cycle_track(session, engine, TrackType.VIDEO),
            Command.CHANGE_SUBTITLE_TRACK: lambda: tracks.cycle_track(session, engine, TrackType.SUBTITLE),
            Command.SEEK_TO_BEGINNING:     self._seek_to_beginning,
            Command.TOGGLE_MUTE:           lambda: seeking.toggle_mute(engine),
            Command.VOLUME_UP:             lambda: seeking.set_volume_relative(engine, +1.0 / config.VOLUME_STEPS),
            Command.VOLUME_DOWN:           lambda: seeking.set_volume_relative(engine, -1.0 / config.VOLUME_STEPS),
            Command.SEEK_FORWARD:          lambda: self._seek_relative(config.SEEK_RIGHT_FRACTION),
            Command.SEEK_BACKWARD:         lambda: self._seek_relative(config.SEEK_LEFT_FRACTION),
        }

    # ── entry points ──────────────────────────────────────────────────────
    def apply(self, command: Command) -> None:
        self._table[command]()

    def handle_signal(self, interface: Optional[str], member: Optional[str]) -> bool:
        """
        Apply a remote signal.  False ("unhandled") for signals that are not
        ours, so other listeners on the bus are unaffected.
        """
        command = command_for_signal(interface, member)
        if command is None:
            return False
        error(f"Got D-Bus request: {interface}.{member}")
        self.apply(command)
        return True

    # ── commands ──────────────────────────────────────────────────────────
    def _stop(self) -> None:
        error("Server exiting...")
        self._quit()

    def _end_of_playlist(self) -> None:
        say(f"\n{END_OF_PLAYLIST}")
        self._stop()

    def toggle_paused(self) -> None:
        s = self.session
        s.toggle_desired_state()
        if not s.buffering:
            self.engine.set_state(s.desired_state)
        elif s.desired_state == State.PLAYING:
            say("\nWill play as soon as buffering finishes")

    def _play_next(self) -> None:
        if not navigation.advance(self.session, self.engine):
            self._end_of_playlist()

    def _play_previous(self) -> None:
        navigation.retreat(self.session, self.engine)

    def _step_rate(self, increase: bool) -> None:
        delta, reverse = seeking.rate_step(self.session.rate, increase)
        seeking.change_rate_relative(self.session, self.engine, delta, reverse)

    def _flip_direction(self) -> None:
        seeking.change_rate_relative(self.session, self.engine, 0.0, True)

    def _seek_to_beginning(self) -> None:
        s = self.session
        if not seeking.seek_absolute(s, self.engine, 0, s.rate, s.trick_mode):
            say("\nCould not seek.")

    def _seek_relative(self, fraction: float) -> None:
        result = seeking.seek_relative(self.session, self.engine, fraction)
        if result is seeking.SeekResult.PAST_END:
            self._play_next()
