"""
WhatsApp bot routes.

Twilio posts inbound WhatsApp messages to /webhook as form data.
/test runs the same pipeline from JSON without sending a reply.
"""

from typing import Optional

from fastapi import APIRouter, Form
from fastapi.responses import JSONResponse
import structlog

from models.bot import (
    BotTestRequest,
    BotTestResponse,
    BotWebhookResult,
    IncomingWhatsAppMessage,
)
from services.bot_service import get_bot_service
from exceptions import AppError, EmptyBotMessageError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/bot", tags=["Bot"])


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("bot_route_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Internal server error"
            }
        }
    )


@router.post("/webhook", response_model=BotWebhookResult)
async def receive_whatsapp_message(
    from_number: str = Form(..., alias="From"),
    body: str = Form("", alias="Body"),
    to_number: Optional[str] = Form(None, alias="To"),
    message_sid: Optional[str] = Form(None, alias="MessageSid"),
    account_sid: Optional[str] = Form(None, alias="AccountSid"),
    num_media: Optional[str] = Form(None, alias="NumMedia"),
    profile_name: Optional[str] = Form(None, alias="ProfileName"),
):
    """
    Handle an inbound WhatsApp message from Twilio.

    Messages without "@bot" are acknowledged with ignored=true.
    """
    try:
        message = IncomingWhatsAppMessage(
            from_number=from_number,
            body=body,
            to_number=to_number,
            message_sid=message_sid,
            account_sid=account_sid,
            num_media=num_media,
            profile_name=profile_name or None,
        )
        return get_bot_service().handle_incoming(message)

    except Exception as e:
        return handle_error(e)


@router.get("/webhook")
async def webhook_status():
    """Twilio webhook validation."""
    return {"status": "Bot webhook is running"}


@router.post("/test", response_model=BotTestResponse)
async def test_bot_message(request: BotTestRequest):
    """
    Parse a message and build the reply without sending it.

    The @bot trigger is optional here.
    """
    try:
        if not request.message:
            raise EmptyBotMessageError()

        return get_bot_service().handle_test_message(request.message, request.user)

    except Exception as e:
        return handle_error(e)


@router.get("/test")
async def test_endpoint_usage():
    """Usage examples for the test endpoint."""
    return {
        "status": "Bot test endpoint ready",
        "usage": 'POST with { "message": "your message", "user": "YourName" }',
        "examples": [
            {"message": "help", "description": "Show help"},
            {"message": "remind Oliver to call the supplier", "description": "Create a task"},
            {"message": "what are my tasks", "description": "List your tasks"},
        ],
    }
