"""
Rule-based parser for WhatsApp bot commands.

Messages addressed to the bot contain "@bot" anywhere in the text. The
parser classifies them as help, list_tasks, create_task or unknown, in that
priority order, and extracts the assignee and task text for create_task.

Reply templates for each intent live here too, so the webhook only has to
pick one.

Examples:
    "@bot remind Jan to call Ponti"  -> create_task (Jan, "call Ponti")
    "@bot task for Oliver: check the order" -> create_task
    "@bot what are my tasks"          -> list_tasks
    "@bot ?"                          -> help
"""

import re
from typing import Any, Iterable, Mapping, Optional

from models.bot import Intent, ParsedMessage, TaskStatus

BOT_TRIGGER = "@bot"

_TRIGGER_RE = re.compile(re.escape(BOT_TRIGGER), re.IGNORECASE)

HELP_KEYWORDS = ("help", "what can you do")

LIST_TASKS_KEYWORDS = (
    "my tasks",
    "what are my tasks",
    "show tasks",
    "list tasks",
)

# Tried in order against the cleaned text; first match wins.
# Group 1 is the assignee, group 2 the task description.
TASK_PATTERNS = [
    re.compile(r"remind\s+(\w+)\s+to\s+(.+)", re.IGNORECASE),
    re.compile(r"task\s+for\s+(\w+)[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"tell\s+(\w+)\s+to\s+(.+)", re.IGNORECASE),
    re.compile(r"(\w+)\s+needs?\s+to\s+(.+)", re.IGNORECASE),
    re.compile(r"assign\s+(\w+)[:\s]+(.+)", re.IGNORECASE),
]

COMPLETED_ICON = "✓"
PENDING_ICON = "□"


def is_bot_message(text: Optional[str]) -> bool:
    """Check whether a message is addressed to the bot."""
    if not text:
        return False
    return BOT_TRIGGER in text.lower()


def strip_trigger(text: str) -> str:
    """Remove every occurrence of the trigger and trim."""
    return _TRIGGER_RE.sub("", text).strip()


def _is_help(lower_text: str) -> bool:
    return lower_text == "?" or any(k in lower_text for k in HELP_KEYWORDS)


def _is_list_tasks(lower_text: str) -> bool:
    return any(k in lower_text for k in LIST_TASKS_KEYWORDS)


def _match_task(clean_text: str) -> Optional[tuple[str, str]]:
    for pattern in TASK_PATTERNS:
        match = pattern.search(clean_text)
        if match:
            return match.group(1), match.group(2).strip()
    return None


def parse_message(text: Optional[str]) -> ParsedMessage:
    """
    Classify a bot message and extract task fields.

    The caller is expected to have checked is_bot_message() first; the
    trigger is stripped here but not required.

    Args:
        text: Raw inbound message

    Returns:
        ParsedMessage. Never raises; unrecognised input is intent unknown.
    """
    clean_text = strip_trigger(text or "")
    lower_text = clean_text.lower()

    if _is_help(lower_text):
        return ParsedMessage(intent=Intent.HELP, raw_text=clean_text)

    if _is_list_tasks(lower_text):
        return ParsedMessage(intent=Intent.LIST_TASKS, raw_text=clean_text)

    task = _match_task(clean_text)
    if task is not None:
        assignee, task_text = task
        return ParsedMessage(
            intent=Intent.CREATE_TASK,
            raw_text=clean_text,
            assignee=assignee,
            task_text=task_text,
        )

    return ParsedMessage(intent=Intent.UNKNOWN, raw_text=clean_text)


# ===================
# RESPONSE TEMPLATES
# ===================

def format_help_response() -> str:
    """List the commands the bot understands."""
    return (
        "Hi! I'm the PSE Trade Buddy. Here's what I can do:\n"
        "\n"
        "*Tasks*\n"
        '- "remind [name] to [task]"\n'
        '- "what are my tasks"\n'
        "\n"
        "More features coming soon!"
    )


def format_task_created(assignee: str, task: str) -> str:
    """Confirm a created task, echoing it verbatim."""
    return f'Got it! Task created for {assignee}:\n"{task}"'


def _task_field(task: Any, name: str) -> Any:
    if isinstance(task, Mapping):
        return task.get(name)
    return getattr(task, name, None)


def format_task_list(tasks: Iterable[Any]) -> str:
    """
    Render tasks one per line, in the given order.

    Accepts BotTask models or plain dicts with title and status.
    """
    lines = []
    for task in tasks:
        status = _task_field(task, "status")
        icon = COMPLETED_ICON if status == TaskStatus.COMPLETED else PENDING_ICON
        lines.append(f"{icon} {_task_field(task, 'title')}")

    if not lines:
        return "You have no pending tasks."

    return "Your tasks:\n" + "\n".join(lines)


def format_unknown() -> str:
    """Fallback for messages no rule matched."""
    return f'I didn\'t understand that. Try "{BOT_TRIGGER} help" to see what I can do.'


def format_task_failed() -> str:
    """Reply when the task could not be stored."""
    return "Sorry, I couldn't create that task. Please try again."


def format_task_unclear() -> str:
    """Reply when a create_task message is missing its assignee or text."""
    return 'I couldn\'t understand the task. Try: "remind [name] to [task]"'
