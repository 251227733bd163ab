# config.py
"""
Configuration settings for the remote-controlled player.
"""

PROGRAM_NAME   = "gst-remote-play"
VERSION_STRING = "1.0"

# ── Runtime toggles (set once by main.py) ───────────────────────────────────

QUIET = False        # only errors are printed

# ── Remote control (D-Bus) ──────────────────────────────────────────────────

INTERFACE_NAME = "com.example.MediaPlayer"
OBJECT_PATH    = "/com/example/MediaPlayer"

# ── Control loop ────────────────────────────────────────────────────────────

STATUS_INTERVAL_MS = 100       # position/duration status tick

# Bounded wait for a freshly loaded item to leave NULL/READY
PREROLL_POLL_INTERVAL = 0.01   # seconds between state polls
PREROLL_POLL_LIMIT    = 500    # give up after ~5 s

# ── Playback knobs ──────────────────────────────────────────────────────────

VOLUME_STEPS = 20              # volume grid is 1/VOLUME_STEPS
VOLUME_MAX   = 10.0

DEFAULT_RATE = 1.0

# Relative seek distance as a fraction of the duration.  Both remote seek
# signals currently move forward; flip the sign of SEEK_LEFT_FRACTION to
# make SeekLeft rewind.
SEEK_RIGHT_FRACTION = +0.08
SEEK_LEFT_FRACTION  = +0.08

# Relative seeks never move less than this (nanoseconds)
MIN_SEEK_STEP_NS = 1_000_000_000

# ── Video window ────────────────────────────────────────────────────────────

FULLSCREEN    = True
WINDOWED_SIZE = (800, 600)
WINDOW_TITLE  = PROGRAM_NAME

# Dump pipeline graphs on preroll / warning / error (needs GST_DEBUG_DUMP_DOT_DIR)
DUMP_GRAPHS = True
