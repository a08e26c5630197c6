"""
Unit tests for the bot command parser.

Run: pytest tests/unit/test_command_parser.py -v
"""

import pytest
from pydantic import ValidationError

from models.bot import BotTask, Intent, ParsedMessage
from parsers.command_parser import (
    format_help_response,
    format_task_created,
    format_task_list,
    format_unknown,
    is_bot_message,
    parse_message,
    strip_trigger,
)


class TestIsBotMessage:
    """Tests for is_bot_message()"""

    @pytest.mark.parametrize("text", [
        "@bot help",
        "Hey @BOT help",
        "remind Jan please @Bot",
        "email me at team@botanics.nl",
    ])
    def test_contains_trigger(self, text):
        assert is_bot_message(text) is True

    @pytest.mark.parametrize("text", ["hello", "bot help", "", None])
    def test_no_trigger(self, text):
        assert is_bot_message(text) is False


class TestStripTrigger:
    """Tests for strip_trigger()"""

    def test_removes_every_occurrence(self):
        assert strip_trigger("@BOT remind Jan @bot ") == "remind Jan"

    def test_keeps_original_case(self):
        assert strip_trigger("@bot Tell OLIVER") == "Tell OLIVER"


class TestParseHelp:
    """Help intent."""

    @pytest.mark.parametrize("text", [
        "@bot help",
        "@bot ?",
        "@bot HELP please",
        "@bot what can you do",
        "@bot help me remind Jan to call Ponti",
    ])
    def test_help(self, text):
        result = parse_message(text)

        assert result.intent == Intent.HELP
        assert result.assignee is None
        assert result.task_text is None

    def test_question_mark_must_be_whole_message(self):
        assert parse_message("@bot is it ready?").intent == Intent.UNKNOWN


class TestParseListTasks:
    """List-tasks intent."""

    @pytest.mark.parametrize("text", [
        "@bot what are my tasks",
        "@bot my tasks",
        "@bot Show Tasks",
        "@bot list tasks for today",
    ])
    def test_list_tasks(self, text):
        assert parse_message(text).intent == Intent.LIST_TASKS

    def test_list_tasks_wins_over_create_task(self):
        result = parse_message("@bot remind me of my tasks")

        assert result.intent == Intent.LIST_TASKS
        assert result.assignee is None


class TestParseCreateTask:
    """Create-task patterns."""

    def test_remind(self):
        result = parse_message("@bot remind Jan to call Ponti")

        assert result.intent == Intent.CREATE_TASK
        assert result.assignee == "Jan"
        assert result.task_text == "call Ponti"
        assert result.raw_text == "remind Jan to call Ponti"

    @pytest.mark.parametrize("text,assignee,task", [
        ("@bot task for Jan: call Ponti", "Jan", "call Ponti"),
        ("@bot task for Jan call Ponti", "Jan", "call Ponti"),
        ("@bot tell Oliver to check the order", "Oliver", "check the order"),
        ("@bot Jan needs to call Ponti", "Jan", "call Ponti"),
        ("@bot Jan need to send the invoice", "Jan", "send the invoice"),
        ("@bot assign Piet: pack 20 pallets", "Piet", "pack 20 pallets"),
        ("@bot assign Piet book the truck", "Piet", "book the truck"),
        ("@bot REMIND jan TO Call Ponti", "jan", "Call Ponti"),
    ])
    def test_patterns(self, text, assignee, task):
        result = parse_message(text)

        assert result.intent == Intent.CREATE_TASK
        assert result.assignee == assignee
        assert result.task_text == task

    def test_first_pattern_wins(self):
        """remind is tried before tell."""
        result = parse_message("@bot remind Jan to tell Piet to call Ponti")

        assert result.assignee == "Jan"
        assert result.task_text == "tell Piet to call Ponti"

    def test_trigger_in_middle_is_removed(self):
        result = parse_message("remind Jan @bot to call Ponti")

        assert result.intent == Intent.CREATE_TASK
        assert result.assignee == "Jan"
        assert result.task_text == "call Ponti"

    def test_task_text_is_trimmed(self):
        result = parse_message("@bot task for Jan:   call Ponti   ")

        assert result.task_text == "call Ponti"


class TestParseUnknown:
    """Unknown intent."""

    def test_unknown_keeps_raw_text(self):
        result = parse_message("@bot xyz nonsense")

        assert result.intent == Intent.UNKNOWN
        assert result.raw_text == "xyz nonsense"
        assert result.assignee is None
        assert result.task_text is None

    @pytest.mark.parametrize("text", ["@bot", "", "   ", None])
    def test_empty_input(self, text):
        result = parse_message(text)

        assert result.intent == Intent.UNKNOWN
        assert result.raw_text == ""


class TestParsedMessageModel:
    """assignee/task_text present iff create_task."""

    def test_create_task_requires_fields(self):
        with pytest.raises(ValidationError):
            ParsedMessage(intent=Intent.CREATE_TASK, raw_text="remind Jan")

    def test_other_intents_reject_fields(self):
        with pytest.raises(ValidationError):
            ParsedMessage(intent=Intent.HELP, raw_text="help", assignee="Jan")


class TestResponses:
    """Reply templates."""

    def test_help_lists_commands(self):
        text = format_help_response()

        assert "remind [name] to [task]" in text
        assert "what are my tasks" in text

    def test_task_created_echoes_verbatim(self):
        assert format_task_created("Jan", "call Ponti") == 'Got it! Task created for Jan:\n"call Ponti"'

    def test_task_list(self):
        tasks = [
            {"title": "A", "status": "pending"},
            {"title": "B", "status": "completed"},
        ]

        assert format_task_list(tasks) == "Your tasks:\n□ A\n✓ B"

    def test_task_list_empty(self):
        assert format_task_list([]) == "You have no pending tasks."

    def test_task_list_accepts_models(self):
        tasks = [
            BotTask(
                id="t1",
                title="Call Ponti",
                assigned_to="Jan",
                created_by="Oliver",
                status="pending",
                created_at="2025-06-01T10:00:00Z",
            ),
            BotTask(
                id="t2",
                title="Send invoice",
                assigned_to="Jan",
                created_by="Oliver",
                status="cancelled",
                created_at="2025-06-01T11:00:00Z",
            ),
        ]

        assert format_task_list(tasks) == "Your tasks:\n□ Call Ponti\n□ Send invoice"

    def test_unknown_points_at_help(self):
        assert '"@bot help"' in format_unknown()
