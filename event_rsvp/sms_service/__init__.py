import logging

from event_rsvp.config.settings import settings
from event_rsvp.sms_service.base import SmsServiceBase
from event_rsvp.sms_service.templates import SmsTemplates
from event_rsvp.sms_service.twilio_service import TwilioSmsService
from event_rsvp.sms_service.webhook_service import WebhookSmsService

logger = logging.getLogger(__name__)


def get_sms_service() -> SmsServiceBase | None:
    """Configured SMS provider, or None when SMS is switched off."""
    provider = settings.sms_provider.lower()
    if provider == "twilio":
        return TwilioSmsService(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.sms_from,
        )
    if provider == "webhook":
        return WebhookSmsService(
            url=settings.sms_webhook_url,
            token=settings.sms_webhook_token,
            from_number=settings.sms_from,
        )
    if provider:
        logger.warning("Unknown SMS provider %r, SMS notifications disabled", provider)
    return None


__all__ = [
    "SmsServiceBase",
    "SmsTemplates",
    "get_sms_service",
]
