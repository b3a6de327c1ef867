from pathlib import Path

from rawedit.buffer import Cursor, TextBuffer
from rawedit.render import (
    WELCOME,
    Renderer,
    StatusMessage,
    render_frame,
    render_message_bar,
    render_line,
    render_rows,
    render_status_bar,
)
from rawedit.viewport import Viewport

from .utils import FakeSession


def rows_of(rendered: str) -> list[str]:
    rows = rendered.split("\r\n")
    assert rows[-1] == ""
    return [row.removesuffix("\x1b[K") for row in rows[:-1]]


def test_render_rows_draws_lines_and_filler() -> None:
    buffer = TextBuffer(["one", "two"])
    rows = rows_of(render_rows(buffer, Viewport(buffer), 4, 80))
    assert rows == ["one", "two", "~", "~"]


def test_every_row_erases_to_end_of_line() -> None:
    buffer = TextBuffer(["one"])
    rendered = render_rows(buffer, Viewport(buffer), 3, 80)
    assert rendered.count("\x1b[K\r\n") == 3


def test_render_rows_expands_tabs_and_clips() -> None:
    buffer = TextBuffer(["\tabcdefgh"])
    viewport = Viewport(buffer)
    viewport.col_offset = 6

    rows = rows_of(render_rows(buffer, viewport, 1, 5))
    assert rows == ["  abc"]


def test_render_line_control_characters() -> None:
    assert render_line("plain") == "plain"
    assert render_line("a\x1bb") == "a\x1b[7m[\x1b[mb"
    assert render_line("\x00\x7f") == "\x1b[7m@\x1b[m\x1b[7m?\x1b[m"


def test_render_rows_shows_carriage_return_in_line() -> None:
    buffer = TextBuffer(["a\rb"])
    rows = rows_of(render_rows(buffer, Viewport(buffer), 1, 80))
    assert rows == ["a\x1b[7mM\x1b[mb"]


def test_render_rows_uses_row_offset() -> None:
    buffer = TextBuffer([str(i) for i in range(10)])
    viewport = Viewport(buffer)
    viewport.row_offset = 8

    rows = rows_of(render_rows(buffer, viewport, 3, 80))
    assert rows == ["8", "9", "~"]


def test_welcome_banner_on_empty_buffer() -> None:
    buffer = TextBuffer()
    rows = rows_of(render_rows(buffer, Viewport(buffer), 9, 80))

    assert rows[3].startswith("~ ")
    assert rows[3].endswith(WELCOME)
    assert len(rows[3]) == (80 - len(WELCOME)) // 2 + len(WELCOME)
    assert [row for i, row in enumerate(rows) if i != 3] == ["~"] * 8


def test_welcome_banner_truncated() -> None:
    buffer = TextBuffer()
    rows = rows_of(render_rows(buffer, Viewport(buffer), 3, 10))
    assert rows[1] == WELCOME[:10]


def test_no_welcome_banner_with_content() -> None:
    buffer = TextBuffer(["x"])
    rendered = render_rows(buffer, Viewport(buffer), 9, 80)
    assert WELCOME not in rendered


def test_status_bar() -> None:
    buffer = TextBuffer(["a", "b", "c"], Path("notes.txt"))
    viewport = Viewport(buffer)
    viewport.cursor = Cursor(1, 0)

    bar = render_status_bar(buffer, viewport, 40)

    assert bar.startswith("\x1b[7m")
    assert bar.endswith("\x1b[m\r\n")
    content = bar.removeprefix("\x1b[7m").removesuffix("\x1b[m\r\n")
    assert len(content) == 40
    assert content.startswith("notes.txt - 3 lines")
    assert content.endswith("2/3")


def test_status_bar_modified_and_unnamed() -> None:
    buffer = TextBuffer(["a"])
    buffer.insert_char(Cursor(0, 0), "b")

    bar = render_status_bar(buffer, Viewport(buffer), 80)
    assert "[No Name] - 1 lines (modified)" in bar


def test_status_bar_truncates_filename() -> None:
    buffer = TextBuffer([], Path("a" * 30 + ".txt"))
    bar = render_status_bar(buffer, Viewport(buffer), 80)
    assert "a" * 20 + " - 0 lines" in bar
    assert "a" * 21 not in bar


def test_status_bar_narrow_terminal() -> None:
    buffer = TextBuffer(["a"], Path("file.txt"))
    bar = render_status_bar(buffer, Viewport(buffer), 10)
    assert bar == "\x1b[7mfile.txt -\x1b[m\r\n"


def test_message_bar_respects_timeout() -> None:
    message = StatusMessage("hello", created_at=100.0)
    assert render_message_bar(message, 80, 104.9, 5.0) == "\x1b[Khello"
    assert render_message_bar(message, 80, 105.0, 5.0) == "\x1b[K"
    assert render_message_bar(None, 80, 0.0, 5.0) == "\x1b[K"


def test_message_bar_truncates() -> None:
    message = StatusMessage("hello world", created_at=0.0)
    assert render_message_bar(message, 5, 0.0, 5.0) == "\x1b[Khello"


def test_frame_layout() -> None:
    buffer = TextBuffer(["a\tb"])
    viewport = Viewport(buffer)
    viewport.cursor = Cursor(0, 2)
    viewport.scroll(22, 80)

    frame = render_frame(buffer, viewport, 24, 80, now=0.0)

    assert frame.startswith("\x1b[?25l\x1b[H")
    assert frame.endswith("\x1b[1;9H\x1b[?25h")
    # 22 text rows and the status bar
    assert frame.count("\r\n") == 23


def test_frame_cursor_relative_to_offsets() -> None:
    buffer = TextBuffer(["x" * 100] * 50)
    viewport = Viewport(buffer)
    viewport.cursor = Cursor(40, 90)
    viewport.scroll(10, 20)

    frame = render_frame(buffer, viewport, 12, 20, now=0.0)
    assert frame.endswith("\x1b[10;20H\x1b[?25h")


def test_renderer_writes_one_frame() -> None:
    session = FakeSession(rows=10, cols=30)
    buffer = TextBuffer([str(i) for i in range(20)])
    viewport = Viewport(buffer)
    viewport.cursor = Cursor(15, 0)
    renderer = Renderer(session, buffer, viewport)  # type: ignore[arg-type]

    renderer.refresh(StatusMessage("hi"))

    assert len(session.output) == 1
    assert viewport.row_offset == 8
    assert "\x1b[Khi" in session.output[0]


def test_renderer_requeries_size_after_resize() -> None:
    session = FakeSession(rows=10, cols=30)
    buffer = TextBuffer()
    renderer = Renderer(session, buffer, Viewport(buffer))  # type: ignore[arg-type]

    session.rows, session.cols = 20, 60
    renderer.refresh()
    assert renderer.height == 8

    session.resized = True
    renderer.refresh()
    assert renderer.height == 18
    assert renderer.cols == 60
