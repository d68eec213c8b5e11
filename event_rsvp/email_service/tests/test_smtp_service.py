import pytest

from event_rsvp.config.settings import settings
from event_rsvp.email_service import smtp_service
from event_rsvp.email_service.smtp_service import SMTPEmailService


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.sent = []
        self.logged_in = False
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        self.logged_in = True

    def send_message(self, msg):
        self.sent.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtp_service.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.mark.parametrize("with_credentials", [True, False])
def test_connection_uses_notification_timeout(fake_smtp, with_credentials):
    service = SMTPEmailService()
    service.username = "mailer" if with_credentials else None
    service.password = "secret" if with_credentials else None
    msg = service._create_message("ada@example.com", "Hello", "<p>Hi</p>", "Hi")

    service._send(msg)

    (server,) = fake_smtp.instances
    assert server.timeout == settings.notification_timeout_seconds
    assert server.logged_in is with_credentials
    assert server.sent == [msg]


@pytest.mark.asyncio
async def test_reminder_is_rendered_and_sent(fake_smtp):
    service = SMTPEmailService()
    service.username = service.password = None

    await service.send_reminder(
        to_address="ada@example.com",
        guest_name="Ada",
        event_title="Garden party",
        event_date="Saturday, September 12, 2026 at 4:30 PM",
        event_location="Old Mill",
        rsvp_url="http://localhost/rsvp/tok",
        attending_url="http://localhost/rsvp/tok?status=ATTENDING",
        not_attending_url="http://localhost/rsvp/tok?status=NOT_ATTENDING",
        response_deadline="September 1, 2026",
    )

    (server,) = fake_smtp.instances
    (msg,) = server.sent
    assert msg["To"] == "ada@example.com"
    assert "Garden party" in msg["Subject"]
