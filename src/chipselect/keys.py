"""Keyboard input parsing and matching for terminal applications.

Handles legacy terminal sequences, single control bytes, and the kitty
keyboard protocol (``CSI u`` and modified functional keys). ``parse_key``
turns raw terminal input into a key id such as ``"backspace"`` or
``"shift+tab"``; ``matches_key`` checks raw input against a key id.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

LOCK_MASK = 64 + 128

CODEPOINTS: dict[str, int] = {
    "escape": 27,
    "tab": 9,
    "enter": 13,
    "space": 32,
    "backspace": 127,
    "kp_enter": 57414,
}

_KEY_ALIASES: dict[str, str] = {
    "esc": "escape",
    "return": "enter",
}

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[Z": "shift+tab",
}

_ARROW_LETTERS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_FUNCTIONAL_NUMBERS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
}

# ---------------------------------------------------------------------------
# Kitty protocol parsing
# ---------------------------------------------------------------------------


@dataclass
class ParsedKittySequence:
    codepoint: int
    modifier: int
    event_type: int  # 1 = press, 2 = repeat, 3 = release


# CSI u: \x1b[<codepoint>(:<shifted>(:<base>))?(;<modifier>(:<event>))?u
_KITTY_CSI_U_RE = re.compile(
    r"^\x1b\[(\d+)(?::\d*(?::\d+)?)?(?:;(\d+)(?::(\d+))?)?u$"
)

# Arrows / home / end with modifier: \x1b[1;<modifier>(:<event>)?[ABCDHF]
_MODIFIED_ARROW_RE = re.compile(r"^\x1b\[1;(\d+)(?::(\d+))?([ABCDHF])$")

# Functional keys with modifier: \x1b[<number>;<modifier>(:<event>)?~
_MODIFIED_FUNCTIONAL_RE = re.compile(r"^\x1b\[(\d+);(\d+)(?::(\d+))?~$")

_BRACKETED_PASTE_RE = re.compile(r"\x1b\[200~")

_RELEASE_PATTERNS = re.compile(r"(?::3u|;[^:]*:3~|;[^:]*:3[ABCDHF])")


def is_key_release(data: str) -> bool:
    """Check if data contains a key release event pattern."""
    if _BRACKETED_PASTE_RE.search(data):
        return False
    return bool(_RELEASE_PATTERNS.search(data))


def parse_kitty_sequence(data: str) -> ParsedKittySequence | None:
    """Parse a kitty ``CSI u`` sequence, or ``None`` if *data* is not one."""
    m = _KITTY_CSI_U_RE.match(data)
    if not m:
        return None
    return ParsedKittySequence(
        codepoint=int(m.group(1)),
        modifier=int(m.group(2)) if m.group(2) else 1,
        event_type=int(m.group(3)) if m.group(3) else 1,
    )


def _modifier_prefix(modifier: int) -> str:
    mod = (modifier - 1) & ~LOCK_MASK
    prefix = ""
    if mod & MODIFIERS["ctrl"]:
        prefix += "ctrl+"
    if mod & MODIFIERS["shift"]:
        prefix += "shift+"
    if mod & MODIFIERS["alt"]:
        prefix += "alt+"
    return prefix


# ---------------------------------------------------------------------------
# Key ids
# ---------------------------------------------------------------------------


def normalize_key_id(key_id: str) -> str | None:
    """Canonicalize a key id: lower-case modifiers in ctrl, shift, alt order.

    Returns ``None`` for an empty or malformed id.
    """
    parts = key_id.split("+")
    # "ctrl++" style ids name the plus key itself
    if key_id.endswith("++"):
        parts = parts[:-2] + ["+"]
    key = parts[-1]
    if not key:
        return None

    modifiers = {part.lower() for part in parts[:-1]}
    if not modifiers <= set(MODIFIERS):
        return None

    if len(key) > 1:
        lowered = key.lower()
        key = _KEY_ALIASES.get(lowered, key if key in ("pageUp", "pageDown") else lowered)

    prefix = "".join(f"{name}+" for name in ("ctrl", "shift", "alt") if name in modifiers)
    return prefix + key


def parse_key(data: str) -> str | None:  # noqa: C901
    """Parse raw terminal input and return the key identifier, or ``None``.

    The returned string uses the same format as ``matches_key`` expects:
    e.g. ``"a"``, ``"ctrl+a"``, ``"shift+tab"``.
    """
    if not data:
        return None

    # --- Kitty protocol ---
    parsed = parse_kitty_sequence(data)
    if parsed is not None:
        prefix = _modifier_prefix(parsed.modifier)
        for name, code in CODEPOINTS.items():
            if parsed.codepoint == code:
                return prefix + ("enter" if name == "kp_enter" else name)
        if parsed.codepoint > 0:
            ch = chr(parsed.codepoint)
            if ch.isprintable():
                return prefix + ch.lower()
        return None

    m = _MODIFIED_ARROW_RE.match(data)
    if m:
        return _modifier_prefix(int(m.group(1))) + _ARROW_LETTERS[m.group(3)]

    m = _MODIFIED_FUNCTIONAL_RE.match(data)
    if m:
        name = _FUNCTIONAL_NUMBERS.get(int(m.group(1)))
        if name is None:
            return None
        return _modifier_prefix(int(m.group(2))) + name

    # --- Legacy escape sequences ---
    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return "escape"
    if data == "\r" or data == "\n":
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data == "\x7f" or data == "\x08":
        return "backspace"

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\x7f" or ch == "\x08":
            return "alt+backspace"
        if ch == "\r":
            return "alt+enter"
        if ch.isprintable():
            return "alt+" + ch.lower()

    # --- Plain printable character ---
    if len(data) == 1 and data.isprintable():
        return data

    return None


def matches_key(data: str, key_id: str) -> bool:
    """Return ``True`` if *data* (raw terminal input) matches the named *key_id*."""
    wanted = normalize_key_id(key_id)
    if wanted is None:
        return False
    return parse_key(data) == wanted
