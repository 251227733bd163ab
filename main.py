"""
main.py – command-line entry point.

    gst-remote-play [options] FILE1|URI1 [FILE2|URI2] ...
    gst-remote-play --emit PlayNext
"""
from __future__ import annotations

import argparse
import os
import sys

import config
from console import error, say
from playlist import build_playlist

EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=config.PROGRAM_NAME,
        usage="%(prog)s [options] FILE1|URI1 [FILE2|URI2] [FILE3|URI3] ...",
        description="Play media files or URIs, remote-controlled over D-Bus.")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Output status information and property notifications")
    ap.add_argument("--flags",
                    help="Control playback behaviour setting playbin 'flags' property")
    ap.add_argument("--version", action="store_true",
                    help="Print version information and exit")
    ap.add_argument("--videosink",
                    help="Video sink to use (default is autovideosink)")
    ap.add_argument("--audiosink",
                    help="Audio sink to use (default is autoaudiosink)")
    ap.add_argument("--gapless", action="store_true",
                    help="Enable gapless playback")
    ap.add_argument("--shuffle", action="store_true",
                    help="Shuffle playlist")
    ap.add_argument("--volume", type=float, help="Volume")
    ap.add_argument("--rate", type=float, help="Playback rate")
    ap.add_argument("--playlist", metavar="FILE",
                    help="Playlist file containing input media files")
    ap.add_argument("-q", "--quiet", action="store_true",
                    help="Do not print any output (apart from errors)")
    ap.add_argument("--emit", metavar="SIGNAL",
                    help="Emit a D-Bus signal (requires running player)")
    ap.add_argument("files", nargs="*", metavar="FILE|URI")
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    try:
        args = ap.parse_args(argv)
    except SystemExit as exc:          # argparse exits 2 on bad usage
        return 0 if exc.code == 0 else 1

    config.QUIET = args.quiet

    if args.version:
        from gst_engine import gst_version
        say(f"{config.PROGRAM_NAME} version {config.VERSION_STRING}")
        say(gst_version())
        return 0

    if args.emit is not None:
        import dbus_remote
        dbus_remote.send_signal(args.emit)
        return 0

    if args.rate is not None and args.rate == 0:
        error("Playback rate must be non-zero.")
        return 1

    uris = build_playlist(args.files, args.playlist, shuffle=args.shuffle)
    if not uris:
        error(f"Usage: {config.PROGRAM_NAME} FILE1|URI1 [FILE2|URI2] [FILE3|URI3] ...\n")
        error("You must provide at least one filename or URI to play.\n")
        return 1

    # Ensure XInitThreads() is called if/when needed
    os.environ["GST_GL_XINITTHREADS"] = "1"

    from app import Player
    from dbus_remote import RemoteError
    from engine import EngineError
    from gst_engine import GstEngine

    try:
        engine = GstEngine(args.audiosink, args.videosink, args.flags, args.verbose)
    except EngineError as exc:
        error(str(exc))
        return EXIT_FAILURE

    player = Player(uris, engine,
                    gapless=args.gapless,
                    rate=args.rate if args.rate is not None else config.DEFAULT_RATE,
                    volume=args.volume)
    try:
        player.run()
    except RemoteError as exc:
        error(str(exc))
        error("Failed to set up the DBus server.")
        return EXIT_FAILURE
    return 0


if __name__ == "__main__":
    sys.exit(main())
