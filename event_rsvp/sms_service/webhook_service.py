import httpx

from event_rsvp.sms_service.base import SmsServiceBase


class WebhookSmsService(SmsServiceBase):
    """Posts messages as JSON to a gateway that forwards them as SMS."""

    def __init__(
        self,
        url: str,
        token: str = "",
        from_number: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._token = token
        self._from_number = from_number
        self._transport = transport

    async def send_message(self, to_number: str, body: str) -> None:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                self._url,
                headers=headers,
                json={"from": self._from_number, "to": to_number, "message": body},
            )
            response.raise_for_status()
