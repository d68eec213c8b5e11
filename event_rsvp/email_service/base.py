from abc import ABC, abstractmethod
from uuid import UUID


class EmailServiceBase(ABC):
    @abstractmethod
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
        pass

    @abstractmethod
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
        pass

    @abstractmethod
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
        pass
