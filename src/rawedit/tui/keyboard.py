import logging
from collections.abc import Callable
from typing import Literal, get_args

logger = logging.getLogger(__name__)

type NamedKey = Literal[
    "up", "down", "right", "left",
    "home", "end", "pageup", "pagedown",
    "delete", "backspace", "escape",
]  # fmt: skip

# A named key, "ctrl+<char>" or a single character
type Key = str

NAMED_KEYS: frozenset[str] = frozenset(get_args(NamedKey.__value__))

ESCAPE = 0x1B
BACKSPACE = 0x7F

# Transition table for escape sequences. Every node is a state, keyed by the
# next input byte: a nested table continues the sequence, a key completes it.
type KeyMap = dict[int, KeyMap] | Key

KEY_MAP: dict[int, KeyMap] = {}


def add_key(raw_key: bytes, key: Key) -> None:
    tree: dict[int, KeyMap] = KEY_MAP

    for char in raw_key[:-1]:
        subtree = tree.setdefault(char, {})
        assert isinstance(subtree, dict)
        tree = subtree

    assert raw_key[-1] not in tree
    tree[raw_key[-1]] = key


# Arrows
add_key(b"\x1b[A", "up")
add_key(b"\x1b[B", "down")
add_key(b"\x1b[C", "right")
add_key(b"\x1b[D", "left")

# Home/End
add_key(b"\x1b[H", "home")
add_key(b"\x1b[F", "end")
add_key(b"\x1bOH", "home")
add_key(b"\x1bOF", "end")
add_key(b"\x1b[1~", "home")
add_key(b"\x1b[7~", "home")
add_key(b"\x1b[2~", "end")
add_key(b"\x1b[4~", "end")
add_key(b"\x1b[8~", "end")

# Delete/PgUp/PgDn
add_key(b"\x1b[3~", "delete")
add_key(b"\x1b[5~", "pageup")
add_key(b"\x1b[6~", "pagedown")

# Every CSI digit waits for its final byte, even the ones without a key
CSI = KEY_MAP[ESCAPE][ord("[")]
assert isinstance(CSI, dict)
for digit in b"0123456789":
    CSI.setdefault(digit, {})


def ctrl_key(char: int) -> Key:
    return f"ctrl+{chr(char | 0x60)}"


def utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    elif lead >= 0xE0:
        return 3
    elif lead >= 0xC0:
        return 2
    else:
        return 1


class Keyboard:
    """Decodes the raw byte stream of a terminal into keys.

    `read_char` performs one timed read and returns `None` when nothing
    arrived in time. After ESC two lookahead bytes are read, plus the final
    byte of a numeric `ESC [ n ~` sequence, and resolved with `KEY_MAP`. A
    sequence that times out or has no transition resolves to "escape".
    """

    read_char: Callable[[], int | None]
    chars: list[int]

    def __init__(self, read_char: Callable[[], int | None]):
        self.read_char = read_char
        self.chars = []

    def read(self) -> int | None:
        if self.chars:
            return self.chars.pop(0)
        return self.read_char()

    def get(self) -> Key:
        while (char := self.read()) is None:
            pass

        key = self.decode(char)
        logger.debug("key %r", key)
        return key

    def decode(self, char: int) -> Key:
        if char == ESCAPE:
            return self.decode_escape()
        elif char < 0x20:
            return ctrl_key(char)
        elif char == BACKSPACE:
            return "backspace"
        elif char < 0x80:
            return chr(char)
        else:
            return self.decode_utf8(char)

    def decode_escape(self) -> Key:
        # Two bytes of lookahead are always read before deciding
        lookahead: list[int] = []
        for _ in range(2):
            char = self.read()
            if char is None:
                return "escape"
            lookahead.append(char)

        state: KeyMap | None = KEY_MAP[ESCAPE]
        for char in lookahead:
            if not isinstance(state, dict):
                return "escape"
            state = state.get(char)

        # Numeric sequences need their final byte
        while isinstance(state, dict):
            char = self.read()
            if char is None:
                return "escape"
            state = state.get(char)

        if state is None:
            return "escape"
        return state

    def decode_utf8(self, lead: int) -> Key:
        raw = bytearray([lead])

        for _ in range(utf8_length(lead) - 1):
            char = self.read()
            if char is None:
                break
            if char & 0xC0 != 0x80:
                # Not part of this character, leave it for the next key
                self.chars.append(char)
                break
            raw.append(char)

        return raw.decode("utf-8", errors="replace")[0]


def is_text_key(key: Key) -> bool:
    return len(key) == 1 and key.isprintable()


def is_valid_key(key: str) -> bool:
    if key in NAMED_KEYS or len(key) == 1:
        return True
    return key.startswith("ctrl+") and len(key) == 6 and 0x60 <= ord(key[-1]) <= 0x7F


def describe_key(key: Key) -> str:
    if key.startswith("ctrl+"):
        return f"Ctrl-{key[-1].upper()}"
    return key
