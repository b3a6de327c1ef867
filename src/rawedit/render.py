import time
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version

from .buffer import TextBuffer, expand_tabs
from .tui.terminal import (
    ERASE_LINE,
    HIDE_CURSOR,
    HOME,
    RESET,
    REVERSE,
    SHOW_CURSOR,
    TerminalSession,
    move_to,
)
from .viewport import Viewport

try:
    VERSION = version("rawedit")
except PackageNotFoundError:
    VERSION = "dev"

WELCOME = f"rawedit -- version {VERSION}"
NO_NAME = "[No Name]"
FILENAME_WIDTH = 20
FILLER = "~"

# Rows taken by the status bar and the message bar
BAR_ROWS = 2


@dataclass
class StatusMessage:
    text: str
    created_at: float = field(default_factory=time.monotonic)

    def is_visible(self, now: float, timeout: float) -> bool:
        return now - self.created_at < timeout


def render_rows(buffer: TextBuffer, viewport: Viewport, height: int, width: int) -> str:
    parts: list[str] = []

    for y in range(height):
        row = y + viewport.row_offset

        if row < len(buffer):
            line = expand_tabs(buffer.lines[row], viewport.tab_stop)
            line = line[viewport.col_offset : viewport.col_offset + width]
            parts.append(render_line(line))
        elif len(buffer) == 0 and y == height // 3:
            parts.append(render_welcome(width))
        else:
            parts.append(FILLER)

        parts.append(ERASE_LINE)
        parts.append("\r\n")

    return "".join(parts)


def render_line(line: str) -> str:
    """Show control characters as reverse video letters, like `^[` without the caret."""
    if line.isprintable():
        return line

    parts: list[str] = []
    for char in line:
        if char == "\x7f":
            parts.append(f"{REVERSE}?{RESET}")
        elif char < " ":
            parts.append(f"{REVERSE}{chr(ord(char) + 0x40)}{RESET}")
        else:
            parts.append(char)

    return "".join(parts)


def render_welcome(width: int) -> str:
    welcome = WELCOME[:width]
    padding = (width - len(welcome)) // 2

    if padding:
        return FILLER + " " * (padding - 1) + welcome
    else:
        return welcome


def render_status_bar(buffer: TextBuffer, viewport: Viewport, width: int) -> str:
    if buffer.filename is None:
        name = NO_NAME
    else:
        name = str(buffer.filename)[:FILENAME_WIDTH]

    modified = " (modified)" if buffer.dirty else ""
    status = f"{name} - {len(buffer)} lines{modified}"[:width]
    position = f"{viewport.cy + 1}/{len(buffer)}"

    # Right-align the position when it fits
    if len(status) + len(position) <= width:
        status = status + " " * (width - len(status) - len(position)) + position
    else:
        status = status.ljust(width)

    return f"{REVERSE}{status}{RESET}\r\n"


def render_message_bar(
    message: StatusMessage | None,
    width: int,
    now: float,
    timeout: float,
) -> str:
    if message is not None and message.is_visible(now, timeout):
        return ERASE_LINE + message.text[:width]
    else:
        return ERASE_LINE


def render_frame(
    buffer: TextBuffer,
    viewport: Viewport,
    rows: int,
    cols: int,
    message: StatusMessage | None = None,
    now: float | None = None,
    timeout: float = 5.0,
) -> str:
    if now is None:
        now = time.monotonic()

    height = max(rows - BAR_ROWS, 1)

    cursor_row = viewport.cy - viewport.row_offset + 1
    cursor_col = viewport.rx - viewport.col_offset + 1

    return "".join(
        [
            HIDE_CURSOR,
            HOME,
            render_rows(buffer, viewport, height, cols),
            render_status_bar(buffer, viewport, cols),
            render_message_bar(message, cols, now, timeout),
            move_to(cursor_row, cursor_col),
            SHOW_CURSOR,
        ]
    )


class Renderer:
    session: TerminalSession
    buffer: TextBuffer
    viewport: Viewport
    timeout: float

    rows: int
    cols: int

    def __init__(
        self,
        session: TerminalSession,
        buffer: TextBuffer,
        viewport: Viewport,
        timeout: float = 5.0,
    ):
        self.session = session
        self.buffer = buffer
        self.viewport = viewport
        self.timeout = timeout
        self.rows, self.cols = session.query_size()

    @property
    def height(self) -> int:
        return max(self.rows - BAR_ROWS, 1)

    def refresh(self, message: StatusMessage | None = None) -> None:
        if self.session.resized:
            self.rows, self.cols = self.session.query_size()

        self.viewport.scroll(self.height, self.cols)
        frame = render_frame(
            self.buffer,
            self.viewport,
            self.rows,
            self.cols,
            message,
            timeout=self.timeout,
        )
        self.session.write(frame)
