import html
from dataclasses import dataclass

_HTML_HEAD = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
"""

_HTML_FOOT = """
        <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">

        <p style="font-size: 12px; color: #888; text-align: center;">
            This link is personal to you. Please don't forward it.
        </p>
    </body>
    </html>
"""


@dataclass
class EmailTemplates:
    INVITATION_SUBJECT = "You're invited: {event_title}"
    INVITATION_HTML = (
        _HTML_HEAD
        + """
        <div style="text-align: center; margin-bottom: 30px;">
            <h1 style="color: #3d5a80;">You're Invited!</h1>
        </div>

        <p>Dear {guest_name},</p>

        <p>You are invited to <strong>{event_title}</strong>.</p>

        <div style="background-color: #e0fbfc; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <p><strong>Date:</strong> {event_date}</p>
            <p><strong>Location:</strong> {event_location}</p>
        </div>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{attending_url}" style="background-color: #3d5a80; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">I'll be there</a>
            <a href="{not_attending_url}" style="background-color: #98c1d9; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">Can't make it</a>
        </div>

        <p>To add companions or dietary notes, open your RSVP page:</p>
        <p style="word-break: break-all;"><a href="{rsvp_url}">{rsvp_url}</a></p>

        <p>{response_deadline}</p>
"""
        + _HTML_FOOT
    )
    INVITATION_TEXT = """
    Dear {guest_name},

    You are invited to {event_title}.

    - Date: {event_date}
    - Location: {event_location}

    Attending: {attending_url}
    Not attending: {not_attending_url}

    Manage your RSVP: {rsvp_url}

    {response_deadline}
    """

    REMINDER_SUBJECT = "Reminder: please RSVP for {event_title}"
    REMINDER_HTML = (
        _HTML_HEAD
        + """
        <p>Dear {guest_name},</p>

        <p>We haven't heard from you yet about <strong>{event_title}</strong> on {event_date}.</p>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{attending_url}" style="background-color: #3d5a80; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">I'll be there</a>
            <a href="{not_attending_url}" style="background-color: #98c1d9; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">Can't make it</a>
        </div>

        <p>Location: {event_location}</p>
        <p style="word-break: break-all;"><a href="{rsvp_url}">{rsvp_url}</a></p>

        <p>{response_deadline}</p>
"""
        + _HTML_FOOT
    )
    REMINDER_TEXT = """
    Dear {guest_name},

    We haven't heard from you yet about {event_title} on {event_date}.

    Attending: {attending_url}
    Not attending: {not_attending_url}

    Manage your RSVP: {rsvp_url}

    {response_deadline}
    """

    CONFIRMATION_SUBJECT = "Your RSVP for {event_title}"
    CONFIRMATION_HTML = (
        _HTML_HEAD
        + """
        <p>Dear {guest_name},</p>

        <p>Thank you for responding to the invitation to <strong>{event_title}</strong>.</p>

        <div style="background-color: #e0fbfc; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <p><strong>Your response:</strong> {status_label}</p>
            <p><strong>Party:</strong> {party_summary}</p>
            <p><strong>Date:</strong> {event_date}</p>
            <p><strong>Location:</strong> {event_location}</p>
        </div>

        <p>Changed your mind? <a href="{rsvp_url}">Update your RSVP</a>.</p>
"""
        + _HTML_FOOT
    )
    CONFIRMATION_TEXT = """
    Dear {guest_name},

    Thank you for responding to the invitation to {event_title}.

    - Your response: {status_label}
    - Party: {party_summary}
    - Date: {event_date}
    - Location: {event_location}

    Update your RSVP: {rsvp_url}
    """

    @classmethod
    def get_invitation_templates(cls) -> tuple[str, str, str]:
        return cls.INVITATION_SUBJECT, cls.INVITATION_HTML, cls.INVITATION_TEXT

    @classmethod
    def get_reminder_templates(cls) -> tuple[str, str, str]:
        return cls.REMINDER_SUBJECT, cls.REMINDER_HTML, cls.REMINDER_TEXT

    @classmethod
    def get_confirmation_templates(cls) -> tuple[str, str, str]:
        return cls.CONFIRMATION_SUBJECT, cls.CONFIRMATION_HTML, cls.CONFIRMATION_TEXT

    @classmethod
    def render(cls, templates: tuple[str, str, str], **context: str) -> tuple[str, str, str]:
        subject, html_template, text_template = templates
        escaped = {key: html.escape(value) for key, value in context.items()}
        return (
            subject.format(**context),
            html_template.format(**escaped),
            text_template.format(**context),
        )
