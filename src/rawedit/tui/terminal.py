import logging
import os
import re
import signal
import sys
import termios
from contextlib import ExitStack
from types import FrameType, TracebackType
from typing import Self

logger = logging.getLogger(__name__)

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_SCREEN = "\x1b[2J"
HOME = "\x1b[H"
ERASE_LINE = "\x1b[K"
REVERSE = "\x1b[7m"
RESET = "\x1b[m"
MOVE_TO_EDGE = "\x1b[999C\x1b[999B"
REQUEST_POSITION = "\x1b[6n"

CURSOR_REPORT = re.compile(rb"\x1b\[(\d+);(\d+)")
MAX_REPORT_LENGTH = 32

# termios attribute indices
IFLAG, OFLAG, CFLAG, LFLAG, CC = 0, 1, 2, 3, 6


class TerminalError(Exception):
    pass


def move_to(row: int, col: int) -> str:
    return f"\x1b[{row};{col}H"


def make_raw(attrs: list) -> list:
    attrs = list(attrs)
    attrs[IFLAG] &= ~(
        termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
    )
    attrs[OFLAG] &= ~termios.OPOST
    attrs[CFLAG] |= termios.CS8
    attrs[LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)

    # Reads return after at most 100ms, with or without input
    cc = list(attrs[CC])
    cc[termios.VMIN] = 0
    cc[termios.VTIME] = 1
    attrs[CC] = cc

    return attrs


def parse_cursor_report(report: bytes) -> tuple[int, int]:
    match = CURSOR_REPORT.fullmatch(report)
    if match is None:
        raise TerminalError(f"invalid cursor position report: {report!r}")
    rows, cols = match.groups()
    return int(rows), int(cols)


class TerminalSession:
    """Owns the terminal while the editor runs.

    Entering the session switches the terminal to raw mode, leaving it
    restores the original attributes. Restoring happens exactly once, no
    matter how the session is left.
    """

    stdin: int
    stdout: int
    resized: bool
    stack: ExitStack

    def __init__(self, stdin: int | None = None, stdout: int | None = None):
        self.stdin = sys.stdin.fileno() if stdin is None else stdin
        self.stdout = sys.stdout.fileno() if stdout is None else stdout
        self.resized = False
        self.stack = ExitStack()

    def __enter__(self) -> Self:
        try:
            self.enter_raw_mode()
        except BaseException:
            self.restore()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()

    def enter_raw_mode(self) -> None:
        # setup raw mode
        try:
            attrs = termios.tcgetattr(self.stdin)
        except termios.error as e:
            raise TerminalError(f"cannot get terminal attributes: {e}") from e
        try:
            termios.tcsetattr(self.stdin, termios.TCSAFLUSH, make_raw(attrs))
        except termios.error as e:
            raise TerminalError(f"cannot enter raw mode: {e}") from e
        self.stack.callback(termios.tcsetattr, self.stdin, termios.TCSAFLUSH, attrs)

        # setup resize signal
        prev_resize_handler = signal.signal(signal.SIGWINCH, self.handle_resize)
        self.stack.callback(signal.signal, signal.SIGWINCH, prev_resize_handler)

        logger.debug("entered raw mode")

    def restore(self) -> None:
        # ExitStack runs its callbacks only once
        self.stack.close()

    def handle_resize(self, _signum: int, _frame: FrameType | None) -> None:
        self.resized = True

    def read_byte(self) -> int | None:
        try:
            data = os.read(self.stdin, 1)
        except InterruptedError:
            return None
        if not data:
            return None
        return data[0]

    def write(self, data: str) -> None:
        raw = data.encode("utf-8")
        while raw:
            written = os.write(self.stdout, raw)
            raw = raw[written:]

    def query_size(self) -> tuple[int, int]:
        self.resized = False

        try:
            size = os.get_terminal_size(self.stdout)
        except OSError:
            pass
        else:
            if size.columns > 0 and size.lines > 0:
                return size.lines, size.columns

        logger.debug("falling back to cursor position report for terminal size")
        try:
            self.write(MOVE_TO_EDGE)
            return self.get_cursor_position()
        except OSError as e:
            raise TerminalError(f"cannot determine terminal size: {e}") from e

    def get_cursor_position(self) -> tuple[int, int]:
        self.write(REQUEST_POSITION)

        report = bytearray()
        while len(report) < MAX_REPORT_LENGTH:
            char = self.read_byte()
            if char is None or char == ord("R"):
                break
            report.append(char)

        try:
            return parse_cursor_report(bytes(report))
        except TerminalError as e:
            raise TerminalError(f"cannot determine terminal size: {e}") from e
