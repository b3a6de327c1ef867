from collections.abc import Iterator
from contextlib import ExitStack
from unittest.mock import patch

import pytest

from rawedit.config import Config

# Always use default config in tests


@pytest.fixture(autouse=True)
def config() -> Iterator[Config]:
    config = Config()
    with ExitStack() as stack:
        stack.enter_context(patch("rawedit.config.get_config", return_value=config))
        stack.enter_context(patch("rawedit.editor.get_config", return_value=config))
        stack.enter_context(patch("rawedit.get_config", return_value=config))
        yield config
