import logging
from dataclasses import dataclass
from pathlib import Path

from rawedit.config import get_config
from rawedit.tui.keyboard import Key, Keyboard, describe_key, is_text_key
from rawedit.tui.terminal import TerminalSession

from .buffer import TextBuffer
from .render import Renderer, StatusMessage
from .viewport import Viewport

logger = logging.getLogger(__name__)

SAVE_PROMPT = "Save as: {} (ESC to cancel)"


@dataclass(frozen=True)
class Running:
    pass


@dataclass(frozen=True)
class ConfirmingQuit:
    remaining: int


@dataclass(frozen=True)
class Terminated:
    exit_code: int


type State = Running | ConfirmingQuit | Terminated


class Editor:
    session: TerminalSession
    buffer: TextBuffer
    viewport: Viewport
    renderer: Renderer
    keyboard: Keyboard

    state: State
    quit_times: int
    message: StatusMessage | None

    def __init__(self, session: TerminalSession, buffer: TextBuffer):
        config = get_config()

        self.session = session
        self.buffer = buffer
        self.viewport = Viewport(buffer, config.format.tab_stop)
        self.renderer = Renderer(
            session, buffer, self.viewport, config.editor.message_timeout
        )
        self.keyboard = Keyboard(session.read_byte)

        self.state = Running()
        self.quit_times = config.editor.quit_times
        self.message = None

        save_key = self.describe_command("save")
        quit_key = self.describe_command("quit")
        self.set_message(f"HELP: {save_key} = save | {quit_key} = quit")

    def run(self) -> int:
        while True:
            match self.state:
                case Terminated(exit_code):
                    return exit_code
                case _:
                    self.renderer.refresh(self.message)
                    self.handle_key(self.keyboard.get())

    def handle_key(self, key: Key) -> None:
        command = get_config().keymap.get(key)

        # Any other key cancels a pending quit confirmation
        if command != "quit" and isinstance(self.state, ConfirmingQuit):
            self.state = Running()

        if command is not None:
            getattr(self, command)()
        elif is_text_key(key):
            self.insert_char(key)

    def set_message(self, text: str) -> None:
        self.message = StatusMessage(text)

    def describe_command(self, command: str) -> str:
        keys = getattr(get_config().keybindings, command)
        if keys:
            return describe_key(keys[0])
        return command

    def quit(self) -> None:
        match self.state:
            case ConfirmingQuit(remaining):
                pass
            case _:
                remaining = self.quit_times

        remaining -= 1

        if not self.buffer.dirty or remaining <= 0:
            self.state = Terminated(0)
            return

        self.state = ConfirmingQuit(remaining)
        plural = "" if remaining == 1 else "s"
        self.set_message(
            "WARNING!!! File has unsaved changes. "
            f"Press {self.describe_command('quit')} {remaining} more time{plural} to quit."
        )

    def save(self) -> None:
        path = self.buffer.filename

        if path is None:
            name = self.prompt(SAVE_PROMPT)
            if name is None:
                self.set_message("Save aborted")
                return
            path = Path(name)

        try:
            written = self.buffer.save(path)
        except OSError as e:
            logger.warning("saving %s failed: %s", path, e)
            self.set_message(f"Can't save! I/O error: {e.strerror or e}")
        else:
            self.set_message(f"{written} bytes written to disk")

    def prompt(self, template: str) -> str | None:
        text = ""

        while True:
            self.set_message(template.format(text))
            self.renderer.refresh(self.message)

            key = self.keyboard.get()

            # Escape always cancels, other editing keys follow the keymap
            if key == "escape":
                self.set_message("")
                return None

            match get_config().keymap.get(key):
                case "insert_newline":
                    if text:
                        self.set_message("")
                        return text
                case "delete_backward" | "delete_forward":
                    text = text[:-1]
                case None if is_text_key(key):
                    text += key
                case _:
                    pass

    def insert_char(self, char: str) -> None:
        self.viewport.cursor = self.buffer.insert_char(self.viewport.cursor, char)

    def insert_tab(self) -> None:
        self.insert_char("\t")

    def insert_newline(self) -> None:
        self.viewport.cursor = self.buffer.insert_newline(self.viewport.cursor)

    def delete_backward(self) -> None:
        self.viewport.cursor = self.buffer.delete_char(self.viewport.cursor)

    def delete_forward(self) -> None:
        self.viewport.move_cursor("right")
        self.delete_backward()

    def cursor_up(self) -> None:
        self.viewport.move_cursor("up")

    def cursor_down(self) -> None:
        self.viewport.move_cursor("down")

    def cursor_left(self) -> None:
        self.viewport.move_cursor("left")

    def cursor_right(self) -> None:
        self.viewport.move_cursor("right")

    def page_up(self) -> None:
        self.viewport.page_move("up", self.renderer.height)

    def page_down(self) -> None:
        self.viewport.page_move("down", self.renderer.height)

    def line_start(self) -> None:
        self.viewport.line_start()

    def line_end(self) -> None:
        self.viewport.line_end()

    def refresh(self) -> None:
        """Nothing to do, `run` repaints before reading every key."""
