import argparse
import logging
import sys
import tomllib
from pathlib import Path
from typing import cast

from pydantic import ValidationError

from .buffer import TextBuffer
from .config import get_config
from .editor import Editor
from .log import setup_logging
from .tui.terminal import CLEAR_SCREEN, HOME, TerminalError, TerminalSession

logger = logging.getLogger(__name__)

parser = argparse.ArgumentParser(prog="rawedit")
parser.add_argument("file", type=Path, nargs="?")


def main() -> int:
    args = parser.parse_args()
    filename = cast(Path | None, args.file)

    try:
        config = get_config()
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
        print(f"rawedit: invalid config: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging)

    buffer = TextBuffer()
    if filename is not None:
        try:
            buffer.open(filename)
        except FileNotFoundError:
            # Start a new file, it is created on save
            buffer.load([], filename)
        except OSError as e:
            logger.exception("cannot open %s", filename)
            print(f"rawedit: cannot open {filename}: {e.strerror or e}", file=sys.stderr)
            return 1

    try:
        with TerminalSession() as session:
            try:
                return Editor(session, buffer).run()
            finally:
                session.write(CLEAR_SCREEN + HOME)
    except TerminalError as e:
        logger.exception("terminal error")
        print(f"rawedit: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.exception("I/O error")
        print(f"rawedit: I/O error: {e.strerror or e}", file=sys.stderr)
        return 1
