"""Utility kinds the template layer relies on directly."""

from transformkit.utilities.log import LOG_LEVELS, Log, parse_log_level
from transformkit.utilities.multiple import MultipleOperations

__all__ = [
    "LOG_LEVELS",
    "Log",
    "MultipleOperations",
    "parse_log_level",
]
