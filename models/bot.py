"""
WhatsApp task bot models.

ParsedMessage is the parser's output; BotTask and BotMessage mirror the
bot_tasks and bot_messages tables.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import Field, model_validator

from models.base import BaseSchema


class Intent(str, Enum):
    """Classified purpose of an inbound chat message."""

    CREATE_TASK = "create_task"
    LIST_TASKS = "list_tasks"
    HELP = "help"
    UNKNOWN = "unknown"


class TaskStatus(str, Enum):
    """Bot task lifecycle."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MessageDirection(str, Enum):
    """Direction of a logged bot message."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


class ParsedMessage(BaseSchema):
    """
    Result of parsing a bot message.

    assignee and task_text are set if and only if intent is create_task.
    """

    intent: Intent
    raw_text: str = Field(..., description="Message with the trigger removed")
    assignee: Optional[str] = None
    task_text: Optional[str] = None

    @model_validator(mode="after")
    def check_task_fields(self) -> "ParsedMessage":
        has_fields = self.assignee is not None and self.task_text is not None
        if self.intent == Intent.CREATE_TASK and not has_fields:
            raise ValueError("create_task requires assignee and task_text")
        if self.intent != Intent.CREATE_TASK and (
            self.assignee is not None or self.task_text is not None
        ):
            raise ValueError(f"{self.intent.value} cannot carry assignee or task_text")
        return self


class BotTaskCreate(BaseSchema):
    """Row inserted into bot_tasks."""

    title: str = Field(..., min_length=1)
    assigned_to: str = Field(..., min_length=1, description="Assignee display name")
    created_by: str = Field(..., min_length=1)
    status: TaskStatus = TaskStatus.PENDING
    raw_message: Optional[str] = None


class BotTask(BaseSchema):
    """Task stored in bot_tasks."""

    id: str
    title: str
    assigned_to: str
    assigned_to_user_id: Optional[str] = None
    created_by: Optional[str] = None
    created_by_user_id: Optional[str] = None
    status: TaskStatus
    raw_message: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class BotMessageCreate(BaseSchema):
    """Row inserted into bot_messages."""

    whatsapp_number: str
    direction: MessageDirection
    message_body: str
    parsed_intent: Optional[Intent] = None
    parsed_data: Optional[dict[str, Any]] = None


class IncomingWhatsAppMessage(BaseSchema):
    """Form payload Twilio posts to the webhook."""

    from_number: str = Field(..., description="Sender, e.g. whatsapp:+31612345678")
    body: str = ""
    to_number: Optional[str] = None
    message_sid: Optional[str] = None
    account_sid: Optional[str] = None
    num_media: Optional[str] = None
    profile_name: Optional[str] = None


class BotWebhookResult(BaseSchema):
    """Webhook acknowledgement."""

    success: bool = True
    ignored: bool = False
    intent: Optional[Intent] = None


class BotTestRequest(BaseSchema):
    """Body for the bot test endpoint."""

    message: str = ""
    user: str = "TestUser"


class BotTestResponse(BaseSchema):
    """Parsed intent and reply for a test message."""

    success: bool = True
    input: str
    parsed: ParsedMessage
    response: str
