import os
import tomllib
from functools import cached_property, lru_cache
from pathlib import Path

from pydantic import (
    BaseModel,
    PositiveFloat,
    PositiveInt,
    computed_field,
    field_validator,
    model_validator,
)

from rawedit.tui.keyboard import Key, is_valid_key


class FormatConfig(BaseModel):
    tab_stop: PositiveInt = 8


class EditorConfig(BaseModel):
    quit_times: PositiveInt = 3
    message_timeout: PositiveFloat = 5.0


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    file: Path | None = None

    @field_validator("level")
    @classmethod
    def check_level(cls, level: str) -> str:
        level = level.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {level!r}")
        return level


class KeybindingsConfig(BaseModel):
    quit: list[Key] = ["ctrl+q"]
    save: list[Key] = ["ctrl+s"]
    cursor_up: list[Key] = ["up"]
    cursor_down: list[Key] = ["down"]
    cursor_left: list[Key] = ["left"]
    cursor_right: list[Key] = ["right"]
    page_up: list[Key] = ["pageup"]
    page_down: list[Key] = ["pagedown"]
    line_start: list[Key] = ["home"]
    line_end: list[Key] = ["end"]
    delete_backward: list[Key] = ["backspace", "ctrl+h"]
    delete_forward: list[Key] = ["delete"]
    insert_newline: list[Key] = ["ctrl+m"]
    insert_tab: list[Key] = ["ctrl+i"]
    refresh: list[Key] = ["ctrl+l", "escape"]

    @field_validator("*")
    @classmethod
    def check_keys(cls, keys: list[Key]) -> list[Key]:
        for key in keys:
            if not is_valid_key(key):
                raise ValueError(f"unknown key {key!r}")
        return keys


class Config(BaseModel):
    format: FormatConfig = FormatConfig()
    editor: EditorConfig = EditorConfig()
    logging: LoggingConfig = LoggingConfig()
    keybindings: KeybindingsConfig = KeybindingsConfig()

    @computed_field
    @cached_property
    def keymap(self) -> dict[Key, str]:
        keymap: dict[Key, str] = {}

        for command in KeybindingsConfig.model_fields:
            for key in getattr(self.keybindings, command):
                try:
                    prev_command = keymap[key]
                except KeyError:
                    pass
                else:
                    raise ValueError(
                        f"conflicting commands for key {key!r}: {prev_command} and {command}"
                    )
                keymap[key] = command

        return keymap

    @model_validator(mode="after")
    def check_keymap(self) -> "Config":
        # Raises on conflicting keybindings
        self.keymap
        return self


def get_config_path() -> Path:
    try:
        xdg_config_home = Path(os.environ["XDG_CONFIG_HOME"])
    except KeyError:
        xdg_config_home = Path.home() / ".config"
    return xdg_config_home / "rawedit" / "config.toml"


@lru_cache(1)
def get_config() -> Config:
    config_path = get_config_path()
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return Config()
    else:
        return Config.model_validate(data)
