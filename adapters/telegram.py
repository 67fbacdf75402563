#Description: Telegram Bot API notifier (sendMessage).

import httpx

from utils.errors import TransportError
from utils.logging import logger

class TelegramNotifier:
    BASE_URL = "https://api.telegram.org"

    def __init__(self, bot_token: str, base_url: str | None = None, timeout: float = 10.0,
                 client: httpx.Client | None = None):
        if not bot_token:
            raise ValueError("Telegram bot token cannot be empty")
        self._bot_token = bot_token
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def close(self):
        self.client.close()

    def send(self, text: str, chat_id: str | int) -> str:
        logger.debug(f"Sending Telegram message to chat {chat_id}: {text}")
        url = f"{self.base_url}/bot{self._bot_token}/sendMessage"
        try:
            r = self.client.post(url, data={"chat_id": str(chat_id), "text": text})
        except httpx.HTTPError as e:
            # the URL carries the bot token, keep it out of the message
            raise TransportError(f"Telegram sendMessage failed: {type(e).__name__}") from e
        if not r.is_success:
            raise TransportError(f"Telegram answered HTTP {r.status_code}", status_code=r.status_code,
                                 body=r.content)
        return r.text
