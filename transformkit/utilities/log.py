from __future__ import annotations

import logging
from typing import Any

from transformkit.utility import TransformationUtility, require_identifier

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(value: Any) -> int:
    """Accept a `logging` level constant or one of the names in `LOG_LEVELS`."""

    if isinstance(value, bool):
        raise TypeError("Log level must be an int or a level name, got bool")
    if isinstance(value, int):
        if value not in set(LOG_LEVELS.values()):
            raise ValueError(f"Invalid log level: {value!r}")
        return value
    if isinstance(value, str):
        level = LOG_LEVELS.get(value.strip().lower())
        if level is None:
            allowed = ", ".join(sorted(LOG_LEVELS))
            raise ValueError(f"Invalid log level: {value!r} (expected one of: {allowed})")
        return level
    raise TypeError(f"Log level must be an int or a level name (type={type(value).__name__})")


class Log(TransformationUtility):
    """Writes a message to the transformation log when executed.

    The message may reference context attributes; the execution engine
    substitutes their values in `attribute_names` order.
    """

    def __init__(
        self,
        message: str | None = None,
        *attribute_names: str,
        level: int | str = logging.INFO,
        name: str | None = None,
    ) -> None:
        super().__init__(name=name)
        self.relative("")
        self.set_save_result(False)

        self._message: str | None = None
        self._level = parse_log_level(level)
        self._attribute_names: tuple[str, ...] = ()

        if message is not None:
            self.set_log_message(message)
        if attribute_names:
            self.set_attribute_names(*attribute_names)

    @property
    def log_message(self) -> str | None:
        return self._message

    @property
    def log_level(self) -> int:
        return self._level

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return self._attribute_names

    def set_log_message(self, message: str) -> "Log":
        if not isinstance(message, str):
            raise TypeError(f"Log message must be a string (type={type(message).__name__})")
        if not message.strip():
            raise ValueError("Log message cannot be empty")
        self._message = message
        return self

    def set_log_level(self, level: int | str) -> "Log":
        self._level = parse_log_level(level)
        return self

    def set_attribute_names(self, *attribute_names: str) -> "Log":
        self._attribute_names = tuple(
            require_identifier(attr, label=f"Log attribute name[{idx}]")
            for idx, attr in enumerate(attribute_names)
        )
        return self

    def get_description(self) -> str:
        return f"Log: {self._message or '<no message>'}"
