import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from uuid import UUID

from event_rsvp.config.settings import settings
from event_rsvp.email_service.base import EmailServiceBase
from event_rsvp.email_service.templates import EmailTemplates


class SMTPEmailService(EmailServiceBase):
    def __init__(self):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_user
        self.password = settings.smtp_password
        self.from_address = settings.emails_from
        self.timeout = settings.notification_timeout_seconds

    def _create_message(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to_address

        part1 = MIMEText(text_body, "plain")
        part2 = MIMEText(html_body, "html")
        msg.attach(part1)
        msg.attach(part2)

        return msg

    def _send(self, msg: MIMEMultipart) -> None:
        if self.username and self.password:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.send_message(msg)

    async def _deliver(self, to_address: str, templates: tuple[str, str, str], **context) -> None:
        subject, html_body, text_body = EmailTemplates.render(templates, **context)
        msg = self._create_message(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
        )
        # smtplib blocks, keep it off the event loop
        await asyncio.to_thread(self._send, msg)

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
