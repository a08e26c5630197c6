"""
Chat command parsers.
"""

from parsers.command_parser import (
    BOT_TRIGGER,
    is_bot_message,
    strip_trigger,
    parse_message,
    format_help_response,
    format_task_created,
    format_task_list,
    format_unknown,
)

__all__ = [
    "BOT_TRIGGER",
    "is_bot_message",
    "strip_trigger",
    "parse_message",
    "format_help_response",
    "format_task_created",
    "format_task_list",
    "format_unknown",
]
