"""
playlist.py  – turns command-line inputs into an ordered list of URIs.

• URIs are kept verbatim.
• Directories are expanded recursively in natural filename order.
• Anything else is treated as a local file and made absolute.
"""
from __future__ import annotations
import os, re, random, pathlib, typing as _t

from console import error

# scheme of two or more characters, then ":" (a drive letter is not a scheme)
_URI_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]+:")


# ---------- natural sort --------------------------------------------------
def _nat_key(s: str) -> list[_t.Union[int, str]]:
    return [int(t) if t.isdigit() else t.lower()
            for t in re.split(r"(\d+)", s)]


# ---------- single entry --------------------------------------------------
def is_uri(entry: str) -> bool:
    return bool(_URI_RE.match(entry))


def add_to_playlist(playlist: list[str], entry: str) -> None:
    """Append *entry* (URI, directory or file) to *playlist* in place."""
    if is_uri(entry):
        playlist.append(entry)
        return

    if os.path.isdir(entry):
        try:
            names = os.listdir(entry)
        except OSError as exc:
            error(f"Could not read directory '{entry}': {exc}")
            return
        for name in sorted(names, key=_nat_key):
            add_to_playlist(playlist, os.path.join(entry, name))
        return

    try:
        playlist.append(pathlib.Path(entry).absolute().as_uri())
    except ValueError:
        error(f"Could not make URI out of filename '{entry}'")


# ---------- playlist file -------------------------------------------------
def read_playlist_file(path: str) -> list[str]:
    """One entry per line; blank lines skipped.  Unreadable → empty list."""
    try:
        text = pathlib.Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        error(f"Could not read playlist: {exc}")
        return []
    return [ln.rstrip("\r") for ln in text.split("\n") if ln.strip()]


# ---------- builder -------------------------------------------------------
def build_playlist(entries: _t.Iterable[str] = (),
                   playlist_file: str | None = None,
                   shuffle: bool = False,
                   rng: random.Random | None = None) -> list[str]:
    uris: list[str] = []

    if playlist_file is not None:
        for ln in read_playlist_file(playlist_file):
            add_to_playlist(uris, ln)

    for entry in entries:
        add_to_playlist(uris, entry)

    if shuffle:
        shuffle_uris(uris, rng)
    return uris


def shuffle_uris(uris: list[str], rng: random.Random | None = None) -> None:
    """In-place Fisher–Yates shuffle."""
    rng = rng or random
    for i in range(len(uris) - 1, 0, -1):
        j = rng.randint(0, i)
        uris[i], uris[j] = uris[j], uris[i]
