from event_rsvp.config.settings import settings
from event_rsvp.email_service.base import EmailServiceBase
from event_rsvp.email_service.resend_service import ResendEmailService
from event_rsvp.email_service.smtp_service import SMTPEmailService
from event_rsvp.email_service.templates import EmailTemplates


def get_email_service() -> EmailServiceBase:
    if settings.resend_api_key:
        return ResendEmailService(config=settings)
    return SMTPEmailService()


__all__ = [
    "EmailServiceBase",
    "EmailTemplates",
    "get_email_service",
]
