"""Utility modules for synthproxy."""

from ._exec import CommandResult, run_command, truncate_output
from ._io import read_text_or_empty, write_text_atomic
from ._logging import create_logger

__all__ = [
    "CommandResult",
    "create_logger",
    "read_text_or_empty",
    "run_command",
    "truncate_output",
    "write_text_atomic",
]
