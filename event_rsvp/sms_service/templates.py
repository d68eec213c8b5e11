from dataclasses import dataclass


@dataclass
class SmsTemplates:
    INVITATION = "Hi {guest_name}, you're invited to {event_title} on {event_date}. RSVP: {rsvp_url}"
    REMINDER = "Hi {guest_name}, reminder: please RSVP for {event_title} on {event_date}: {rsvp_url}"
    CONFIRMATION = "Thanks {guest_name}! Your RSVP for {event_title}: {status_label}. Change it: {rsvp_url}"
