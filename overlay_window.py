"""
overlay_window.py – the window video sinks render into.

When a sink posts "prepare-window-handle" the dispatcher asks for a
native handle; we open a black pygame window and return its id.  Key
presses on that window become Commands on the EventManager queue,
drained by the control loop's status tick.
"""

from __future__ import annotations

from typing import Optional

import pygame
from pygame.locals import *

import config
from console import error
from events import Command, EventManager

_KEYMAP = {
    K_SPACE:        Command.TOGGLE_PAUSED,
    K_q:            Command.QUIT,
    K_ESCAPE:       Command.QUIT,
    K_n:            Command.PLAY_NEXT,
    K_b:            Command.PLAY_PREVIOUS,
    K_RIGHT:        Command.SEEK_FORWARD,
    K_LEFT:         Command.SEEK_BACKWARD,
    K_UP:           Command.VOLUME_UP,
    K_DOWN:         Command.VOLUME_DOWN,
    K_PLUS:         Command.INCREASE_RATE,
    K_EQUALS:       Command.INCREASE_RATE,
    K_MINUS:        Command.DECREASE_RATE,
    K_d:            Command.CHANGE_DIRECTION,
    K_t:            Command.TOGGLE_TRICK_MODE,
    K_a:            Command.CHANGE_AUDIO_TRACK,
    K_v:            Command.CHANGE_VIDEO_TRACK,
    K_s:            Command.CHANGE_SUBTITLE_TRACK,
    K_0:            Command.SEEK_TO_BEGINNING,
    K_m:            Command.TOGGLE_MUTE,
}


def translate(event) -> Command | None:
    """Translate one pygame event → Command (None if it means nothing)."""
    if event.type == QUIT:
        return Command.QUIT
    if event.type == KEYDOWN:
        return _KEYMAP.get(event.key)
    return None


class VideoWindow:
    """Black, optionally fullscreen window handed to the video sink."""

    def __init__(self) -> None:
        self.screen: Optional[pygame.Surface] = None

    @property
    def is_open(self) -> bool:
        return self.screen is not None

    def create(self) -> Optional[int]:
        """Open the window (once) and return its native handle."""
        if self.screen is None:
            pygame.display.init()
            pygame.display.set_caption(config.WINDOW_TITLE)
            self.screen = pygame.display.set_mode(
                (0, 0) if config.FULLSCREEN else config.WINDOWED_SIZE,
                pygame.FULLSCREEN if config.FULLSCREEN else 0,
            )
            self.screen.fill((0, 0, 0))
            pygame.display.flip()
            pygame.mouse.set_visible(not config.FULLSCREEN)

        handle = pygame.display.get_wm_info().get("window")
        if handle is None:
            error("[overlay_window] no native window handle on this platform")
        return handle

    def pump(self) -> int:
        """Queue Commands for pending window events; returns how many."""
        if self.screen is None:
            return 0
        n = 0
        for e in pygame.event.get():
            cmd = translate(e)
            if cmd is not None:
                EventManager.post(cmd)
                n += 1
        return n

    def close(self) -> None:
        if self.screen is not None:
            pygame.display.quit()
            self.screen = None
