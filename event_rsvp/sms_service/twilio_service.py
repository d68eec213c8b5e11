import httpx

from event_rsvp.sms_service.base import SmsServiceBase

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"


class TwilioSmsService(SmsServiceBase):
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._transport = transport

    async def send_message(self, to_number: str, body: str) -> None:
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                TWILIO_MESSAGES_URL.format(account_sid=self._account_sid),
                auth=(self._account_sid, self._auth_token),
                data={"From": self._from_number, "To": to_number, "Body": body},
            )
            response.raise_for_status()
