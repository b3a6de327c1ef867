from rawedit.tui.keyboard import Keyboard

type Chunk = bytes | str | None


class ScriptedInput:
    """Stands in for timed terminal reads.

    Bytes and strings are returned one byte at a time, `None` is a read that
    timed out. Reading past the end of the script raises `EOFError` so a test
    can never hang waiting for input.
    """

    chars: list[int | None]

    def __init__(self, *chunks: Chunk):
        self.chars = []
        self.feed(*chunks)

    def feed(self, *chunks: Chunk) -> None:
        for chunk in chunks:
            match chunk:
                case None:
                    self.chars.append(None)
                case str():
                    self.chars.extend(chunk.encode("utf-8"))
                case bytes():
                    self.chars.extend(chunk)

    def __call__(self) -> int | None:
        try:
            return self.chars.pop(0)
        except IndexError:
            raise EOFError("input script exhausted") from None


class FakeSession:
    input: ScriptedInput
    output: list[str]
    rows: int
    cols: int
    resized: bool
    restored: bool

    def __init__(self, *chunks: Chunk, rows: int = 24, cols: int = 80):
        self.input = ScriptedInput(*chunks)
        self.output = []
        self.rows = rows
        self.cols = cols
        self.resized = False
        self.restored = False

    def __enter__(self) -> "FakeSession":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.restored = True

    def read_byte(self) -> int | None:
        return self.input()

    def write(self, data: str) -> None:
        self.output.append(data)

    def query_size(self) -> tuple[int, int]:
        self.resized = False
        return self.rows, self.cols


def keyboard(*chunks: Chunk) -> Keyboard:
    return Keyboard(ScriptedInput(*chunks))
