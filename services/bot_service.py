"""
WhatsApp task bot service.

Takes inbound chat messages, classifies them with the command parser,
stores tasks and a message log in Supabase, and sends the reply.

Tables:
    bot_users     WhatsApp number -> display name
    bot_tasks     tasks created from chat
    bot_messages  inbound/outbound message log
"""

from typing import Any, Callable, Optional
from pydantic import ValidationError
import structlog

from config import get_admin_client, settings
from models.bot import (
    BotMessageCreate,
    BotTask,
    BotTaskCreate,
    BotTestResponse,
    BotWebhookResult,
    IncomingWhatsAppMessage,
    Intent,
    MessageDirection,
    ParsedMessage,
    TaskStatus,
)
from parsers.command_parser import (
    is_bot_message,
    parse_message,
    format_help_response,
    format_task_created,
    format_task_failed,
    format_task_list,
    format_task_unclear,
    format_unknown,
)
from integrations.twilio import send_whatsapp_message
from exceptions import TwilioError

logger = structlog.get_logger(__name__)

WHATSAPP_PREFIX = "whatsapp:"
TEST_USER_PREFIX = "test:"


class BotService:
    """
    Task bot orchestration.

    The Supabase client and the reply sender are injected so the service can
    run against mocks.
    """

    def __init__(
        self,
        db: Any = None,
        sender: Optional[Callable[[str, str], bool]] = None,
        task_list_limit: Optional[int] = None
    ):
        self.db = db if db is not None else get_admin_client()
        self.sender = sender or send_whatsapp_message
        self.task_list_limit = task_list_limit or settings.bot_task_list_limit
        self.users_table = "bot_users"
        self.tasks_table = "bot_tasks"
        self.messages_table = "bot_messages"

    # ===================
    # USERS
    # ===================

    def get_display_name(
        self,
        whatsapp_number: str,
        profile_name: Optional[str] = None
    ) -> str:
        """
        Resolve the sender's display name.

        Known numbers use their stored name. Unknown numbers with a WhatsApp
        profile name are registered under it. Otherwise the bare number is used.

        Args:
            whatsapp_number: Sender, e.g. whatsapp:+31612345678
            profile_name: Profile name reported by Twilio

        Returns:
            Display name
        """
        try:
            result = (
                self.db.table(self.users_table)
                .select("display_name")
                .eq("whatsapp_number", whatsapp_number)
                .limit(1)
                .execute()
            )
            if result.data:
                return result.data[0]["display_name"]
        except Exception as e:
            logger.error("bot_user_lookup_failed", whatsapp_number=whatsapp_number, error=str(e))

        if profile_name:
            try:
                self.db.table(self.users_table).insert({
                    "whatsapp_number": whatsapp_number,
                    "display_name": profile_name,
                }).execute()
                logger.info("bot_user_registered", whatsapp_number=whatsapp_number, display_name=profile_name)
            except Exception as e:
                logger.error("bot_user_register_failed", whatsapp_number=whatsapp_number, error=str(e))
            return profile_name

        return whatsapp_number.replace(WHATSAPP_PREFIX, "")

    # ===================
    # TASKS
    # ===================

    def create_task(
        self,
        assignee: str,
        task_text: str,
        created_by: str,
        raw_message: Optional[str] = None
    ) -> bool:
        """
        Store a pending task.

        Returns:
            True if stored, False if the insert failed (logged, not raised)
        """
        task = BotTaskCreate(
            title=task_text,
            assigned_to=assignee,
            created_by=created_by,
            status=TaskStatus.PENDING,
            raw_message=raw_message,
        )

        try:
            self.db.table(self.tasks_table).insert(
                task.model_dump(mode="json", exclude_none=True)
            ).execute()
        except Exception as e:
            logger.error("bot_task_create_failed", assignee=assignee, error=str(e))
            return False

        logger.info("bot_task_created", assignee=assignee, created_by=created_by)
        return True

    def get_tasks_for_user(
        self,
        display_name: str,
        limit: Optional[int] = None
    ) -> list[BotTask]:
        """
        Pending tasks assigned to a user, newest first.

        Matches assigned_to case-insensitively as a substring, so "Jan" finds
        tasks assigned to "Jan de Vries".
        Rows that do not validate are skipped and logged.

        Returns:
            Tasks, or an empty list if the query fails
        """
        try:
            result = (
                self.db.table(self.tasks_table)
                .select("*")
                .ilike("assigned_to", f"%{display_name}%")
                .eq("status", TaskStatus.PENDING.value)
                .order("created_at", desc=True)
                .limit(limit or self.task_list_limit)
                .execute()
            )
        except Exception as e:
            logger.error("bot_tasks_fetch_failed", display_name=display_name, error=str(e))
            return []

        tasks = []
        for row in result.data or []:
            try:
                tasks.append(BotTask(**row))
            except ValidationError as e:
                logger.warning(
                    "bot_task_row_invalid",
                    task_id=row.get("id"),
                    error_count=e.error_count()
                )
        return tasks

    # ===================
    # MESSAGE LOG
    # ===================

    def log_message(
        self,
        whatsapp_number: str,
        direction: MessageDirection,
        body: str,
        intent: Optional[Intent] = None,
        parsed_data: Optional[dict] = None
    ) -> None:
        """Append to the message log. Failures are logged, not raised."""
        message = BotMessageCreate(
            whatsapp_number=whatsapp_number,
            direction=direction,
            message_body=body,
            parsed_intent=intent,
            parsed_data=parsed_data,
        )

        try:
            self.db.table(self.messages_table).insert(
                message.model_dump(mode="json", exclude_none=True)
            ).execute()
        except Exception as e:
            logger.error(
                "bot_message_log_failed",
                whatsapp_number=whatsapp_number,
                direction=direction.value,
                error=str(e)
            )

    # ===================
    # REPLIES
    # ===================

    def build_reply(
        self,
        parsed: ParsedMessage,
        display_name: str,
        raw_message: Optional[str] = None
    ) -> str:
        """
        Carry out the parsed intent and return the reply text.

        create_task stores the task; list_tasks queries the sender's tasks.
        """
        if parsed.intent == Intent.HELP:
            return format_help_response()

        if parsed.intent == Intent.CREATE_TASK:
            if not (parsed.assignee and parsed.task_text):
                return format_task_unclear()
            created = self.create_task(
                parsed.assignee,
                parsed.task_text,
                display_name,
                raw_message=raw_message,
            )
            if not created:
                return format_task_failed()
            return format_task_created(parsed.assignee, parsed.task_text)

        if parsed.intent == Intent.LIST_TASKS:
            return format_task_list(self.get_tasks_for_user(display_name))

        return format_unknown()

    def _parsed_data(self, parsed: ParsedMessage) -> Optional[dict]:
        data = parsed.model_dump(include={"assignee", "task_text"}, exclude_none=True)
        return data or None

    def handle_incoming(self, message: IncomingWhatsAppMessage) -> BotWebhookResult:
        """
        Process one inbound WhatsApp message end to end.

        Messages without the bot trigger are acknowledged and ignored.
        A failed reply send is logged; the message still counts as handled.
        """
        logger.info("bot_message_received", from_number=message.from_number)

        if not is_bot_message(message.body):
            logger.debug("bot_message_ignored", from_number=message.from_number)
            return BotWebhookResult(success=True, ignored=True)

        display_name = self.get_display_name(message.from_number, message.profile_name)
        parsed = parse_message(message.body)

        self.log_message(
            message.from_number,
            MessageDirection.INBOUND,
            message.body,
            intent=parsed.intent,
            parsed_data=self._parsed_data(parsed),
        )

        reply = self.build_reply(parsed, display_name, raw_message=message.body)

        try:
            self.sender(message.from_number, reply)
        except TwilioError as e:
            logger.error("bot_reply_send_failed", from_number=message.from_number, error=e.message)

        self.log_message(message.from_number, MessageDirection.OUTBOUND, reply)

        logger.info("bot_message_handled", intent=parsed.intent.value, display_name=display_name)
        return BotWebhookResult(success=True, ignored=False, intent=parsed.intent)

    def handle_test_message(self, message: str, user: str) -> BotTestResponse:
        """
        Run a message through the bot without sending anything.

        The trigger is optional here; the message is logged under test:<user>.
        """
        log_number = f"{TEST_USER_PREFIX}{user}"
        parsed = parse_message(message)

        self.log_message(
            log_number,
            MessageDirection.INBOUND,
            message,
            intent=parsed.intent,
            parsed_data=self._parsed_data(parsed),
        )

        reply = self.build_reply(parsed, user, raw_message=message)

        self.log_message(log_number, MessageDirection.OUTBOUND, reply)

        return BotTestResponse(
            success=True,
            input=message,
            parsed=parsed,
            response=reply,
        )


# Singleton instance
_bot_service: Optional[BotService] = None


def get_bot_service() -> BotService:
    """Get or create BotService instance."""
    global _bot_service
    if _bot_service is None:
        _bot_service = BotService()
    return _bot_service
