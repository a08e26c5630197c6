"""
Twilio WhatsApp integration for bot replies.

Sends plain-text WhatsApp messages through the Twilio Messages REST API.
"""

from typing import Optional
import requests
import structlog

from config import settings
from exceptions import TwilioError

logger = structlog.get_logger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"

REQUEST_TIMEOUT_SECONDS = 10


def get_twilio_config() -> tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Get Twilio configuration from settings.

    Returns:
        tuple: (account_sid, auth_token, from_number)
    """
    account_sid = settings.twilio_account_sid
    auth_token = settings.twilio_auth_token
    from_number = settings.twilio_whatsapp_number

    if not settings.twilio_configured:
        logger.warning(
            "twilio_not_configured",
            has_account_sid=bool(account_sid),
            has_auth_token=bool(auth_token),
            has_from_number=bool(from_number)
        )

    return account_sid, auth_token, from_number


def _as_whatsapp_address(number: str) -> str:
    """Twilio needs the whatsapp: prefix on both ends."""
    if number.startswith("whatsapp:"):
        return number
    return f"whatsapp:{number}"


def send_whatsapp_message(to: str, body: str) -> bool:
    """
    Send a WhatsApp message via Twilio.

    Args:
        to: Recipient, with or without the whatsapp: prefix
        body: Message text

    Returns:
        True if sent, False if Twilio is not configured

    Raises:
        TwilioError: If the request fails or Twilio rejects it
    """
    account_sid, auth_token, from_number = get_twilio_config()

    if not (account_sid and auth_token and from_number):
        logger.warning("twilio_not_configured_skipping_send", to=to)
        return False

    url = f"{TWILIO_API_BASE}/Accounts/{account_sid}/Messages.json"

    payload = {
        "From": _as_whatsapp_address(from_number),
        "To": _as_whatsapp_address(to),
        "Body": body,
    }

    try:
        logger.info("sending_whatsapp_message", to=to, length=len(body))

        response = requests.post(
            url,
            data=payload,
            auth=(account_sid, auth_token),
            timeout=REQUEST_TIMEOUT_SECONDS,
        )

        if response.status_code >= 400:
            try:
                error_msg = response.json().get("message", "Unknown error")
            except ValueError:
                error_msg = response.text or "Unknown error"
            logger.error(
                "twilio_api_error",
                status_code=response.status_code,
                error=error_msg
            )
            raise TwilioError(
                f"Twilio API error: {error_msg}",
                details={"status_code": response.status_code}
            )

        result = response.json()
        logger.info("whatsapp_message_sent", message_sid=result.get("sid"))
        return True

    except requests.exceptions.RequestException as e:
        logger.error("twilio_request_failed", error=str(e))
        raise TwilioError(f"Failed to send WhatsApp message: {str(e)}")
