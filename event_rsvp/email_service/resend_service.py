import logging
from typing import Protocol
from uuid import UUID

import httpx

from event_rsvp.email_service.base import EmailServiceBase
from event_rsvp.email_service.templates import EmailTemplates

logger = logging.getLogger(__name__)

RESEND_EMAILS_URL = "https://api.resend.com/emails"


class ResendEmailConfig(Protocol):
    resend_api_key: str
    emails_from: str


class ResendEmailService(EmailServiceBase):
    def __init__(
        self,
        config: ResendEmailConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> str | None:
        """Send email via Resend, returning the Resend email id."""
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                RESEND_EMAILS_URL,
                headers={
                    "Authorization": f"Bearer {self._config.resend_api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self._config.emails_from,
                    "to": [to_address],
                    "subject": subject,
                    "html": html_body,
                    "text": text_body,
                },
            )
            response.raise_for_status()

        resend_email_id = response.json().get("id")
        logger.debug("Resend accepted email %s to %s", resend_email_id, to_address)
        return resend_email_id

    async def _deliver(self, to_address: str, templates: tuple[str, str, str], **context) -> None:
        subject, html_body, text_body = EmailTemplates.render(templates, **context)
        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
        )

    async def send_invitation(
        self,
        to_address: str,
        guest_name: str,
        event_title: str,
        event_date: str,
        event_location: str,
        rsvp_url: str,
        attending_url: str,
        not_attending_url: str,
        response_deadline: str,
        guest_id: UUID | None = None,
    ) -> None:
        await self._deliver(
            to_address,
            EmailTemplates.get_invitation_templates(),
            guest_name=guest_name,
            event_title=event_title,
            event_date=event_date,
            event_location=event_location,
            rsvp_url=rsvp_url,
            attending_url=attending_url,
            not_attending_url=not_attending_url,
            response_deadline=response_deadline,
        )

    async def send_reminder(
        self,
        to_address: str,
        guest_name: str,
        event_title: str,
        event_date: str,
        event_location: str,
        rsvp_url: str,
        attending_url: str,
        not_attending_url: str,
        response_deadline: str,
        guest_id: UUID | None = None,
    ) -> None:
        await self._deliver(
            to_address,
            EmailTemplates.get_reminder_templates(),
            guest_name=guest_name,
            event_title=event_title,
            event_date=event_date,
            event_location=event_location,
            rsvp_url=rsvp_url,
            attending_url=attending_url,
            not_attending_url=not_attending_url,
            response_deadline=response_deadline,
        )

    async def send_confirmation(
        self,
        to_address: str,
        guest_name: str,
        event_title: str,
        event_date: str,
        event_location: str,
        rsvp_url: str,
        status_label: str,
        party_summary: str,
        guest_id: UUID | None = None,
    ) -> None:
        await self._deliver(
            to_address,
            EmailTemplates.get_confirmation_templates(),
            guest_name=guest_name,
            event_title=event_title,
            event_date=event_date,
            event_location=event_location,
            rsvp_url=rsvp_url,
            status_label=status_label,
            party_summary=party_summary,
        )
