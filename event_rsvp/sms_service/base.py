from abc import ABC, abstractmethod


class SmsServiceBase(ABC):
    @abstractmethod
    async def send_message(self, to_number: str, body: str) -> None:
        """Deliver a single text message. Raises on provider errors."""
        pass
