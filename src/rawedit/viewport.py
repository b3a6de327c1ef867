from typing import Literal

from .buffer import DEFAULT_TAB_STOP, Cursor, TextBuffer, cx_to_rx

type Direction = Literal["up", "down", "left", "right"]


class Viewport:
    """Cursor position and scroll offsets over a `TextBuffer`.

    `cy` may equal the number of lines, which puts the cursor on the virtual
    empty line after the end of the buffer.
    """

    buffer: TextBuffer
    tab_stop: int

    cy: int
    cx: int
    rx: int
    row_offset: int
    col_offset: int

    def __init__(self, buffer: TextBuffer, tab_stop: int = DEFAULT_TAB_STOP):
        self.buffer = buffer
        self.tab_stop = tab_stop

        self.cy = 0
        self.cx = 0
        self.rx = 0
        self.row_offset = 0
        self.col_offset = 0

    @property
    def cursor(self) -> Cursor:
        return Cursor(self.cy, self.cx)

    @cursor.setter
    def cursor(self, cursor: Cursor) -> None:
        self.cy = cursor.cy
        self.cx = cursor.cx

    def move_cursor(self, direction: Direction) -> None:
        line_count = len(self.buffer)

        match direction:
            case "left":
                if self.cx > 0:
                    self.cx -= 1
                elif self.cy > 0:
                    self.cy -= 1
                    self.cx = len(self.buffer.line(self.cy))

            case "right":
                if self.cy < line_count:
                    if self.cx < len(self.buffer.line(self.cy)):
                        self.cx += 1
                    else:
                        self.cy += 1
                        self.cx = 0

            case "up":
                if self.cy > 0:
                    self.cy -= 1

            case "down":
                if self.cy < line_count:
                    self.cy += 1

        # The destination line might be shorter
        self.cx = min(self.cx, len(self.buffer.line(self.cy)))

    def page_move(self, direction: Literal["up", "down"], height: int) -> None:
        if direction == "up":
            self.cy = self.row_offset
        else:
            self.cy = min(self.row_offset + height - 1, len(self.buffer))

        for _ in range(height):
            self.move_cursor(direction)

        self.cx = min(self.cx, len(self.buffer.line(self.cy)))

    def line_start(self) -> None:
        self.cx = 0

    def line_end(self) -> None:
        self.cx = len(self.buffer.line(self.cy))

    def scroll(self, height: int, width: int) -> None:
        if self.cy < self.row_offset:
            self.row_offset = self.cy
        if self.cy >= self.row_offset + height:
            self.row_offset = self.cy - height + 1

        self.rx = cx_to_rx(self.buffer.line(self.cy), self.cx, self.tab_stop)

        if self.rx < self.col_offset:
            self.col_offset = self.rx
        if self.rx >= self.col_offset + width:
            self.col_offset = self.rx - width + 1
