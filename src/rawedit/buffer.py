import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TAB_STOP = 8


@dataclass(frozen=True)
class Cursor:
    cy: int
    cx: int


def cx_to_rx(line: str, cx: int, tab_stop: int = DEFAULT_TAB_STOP) -> int:
    rx = 0
    for char in line[:cx]:
        if char == "\t":
            rx += tab_stop - rx % tab_stop
        else:
            rx += 1
    return rx


def expand_tabs(line: str, tab_stop: int = DEFAULT_TAB_STOP) -> str:
    parts: list[str] = []
    rx = 0

    for char in line:
        if char == "\t":
            width = tab_stop - rx % tab_stop
            parts.append(" " * width)
            rx += width
        else:
            parts.append(char)
            rx += 1

    return "".join(parts)


class TextBuffer:
    """The lines of the file being edited.

    Edit operations take the cursor they apply to and return where the cursor
    ends up, the buffer itself does not track a cursor.
    """

    lines: list[str]
    dirty: bool
    filename: Path | None

    def __init__(self, lines: Iterable[str] = (), filename: Path | None = None):
        self.lines = []
        self.dirty = False
        self.filename = None
        self.load(lines, filename)

    def __len__(self) -> int:
        return len(self.lines)

    def load(self, lines: Iterable[str], filename: Path | None = None) -> None:
        self.lines = list(lines)
        self.dirty = False
        self.filename = filename

    def line(self, cy: int) -> str:
        if cy < len(self.lines):
            return self.lines[cy]
        return ""

    def insert_char(self, cursor: Cursor, char: str) -> Cursor:
        cy, cx = cursor.cy, cursor.cx

        if cy == len(self.lines):
            self.lines.append("")

        line = self.lines[cy]
        cx = min(cx, len(line))
        self.lines[cy] = line[:cx] + char + line[cx:]
        self.dirty = True

        return Cursor(cy, cx + 1)

    def insert_newline(self, cursor: Cursor) -> Cursor:
        cy, cx = cursor.cy, cursor.cx

        if cy >= len(self.lines):
            self.lines.append("")
        else:
            line = self.lines[cy]
            self.lines[cy : cy + 1] = [line[:cx], line[cx:]]
        self.dirty = True

        return Cursor(cy + 1, 0)

    def delete_char(self, cursor: Cursor) -> Cursor:
        cy, cx = cursor.cy, cursor.cx

        if cy >= len(self.lines) or (cy == 0 and cx == 0):
            return cursor

        if cx > 0:
            line = self.lines[cy]
            self.lines[cy] = line[: cx - 1] + line[cx:]
            cursor = Cursor(cy, cx - 1)
        else:
            # Merge the line into the previous one
            prev_line = self.lines[cy - 1]
            self.lines[cy - 1] = prev_line + self.lines[cy]
            del self.lines[cy]
            cursor = Cursor(cy - 1, len(prev_line))

        self.dirty = True
        return cursor

    def serialize(self) -> str:
        return "\n".join(self.lines) + "\n"

    def open(self, path: Path) -> None:
        with path.open("r", encoding="utf-8", errors="replace", newline="") as f:
            content = f.read()

        lines = content.split("\n")
        # A trailing newline terminates the last line instead of starting one
        if lines[-1] == "":
            lines.pop()
        lines = [line.removesuffix("\r") for line in lines]

        self.load(lines, path)
        logger.info("opened %s (%d lines)", path, len(lines))

    def save(self, path: Path | None = None) -> int:
        if path is None:
            path = self.filename
        if path is None:
            raise ValueError("no filename to save to")

        data = self.serialize().encode("utf-8")
        with path.open("wb") as f:
            f.write(data)

        self.filename = path
        self.dirty = False
        logger.info("saved %s (%d bytes)", path, len(data))
        return len(data)
