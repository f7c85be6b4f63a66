import logging
import sys
import threading
from typing import FrozenSet, Optional

import requests

from telegram_hook.api_client import TelegramApiClient
from telegram_hook.config import HookOptions
from telegram_hook.errors import TelegramHookError
from telegram_hook.formatting import format_message
from telegram_hook.levels import ELIGIBLE_LEVELS, Level

logger = logging.getLogger(__name__)


class TelegramHook(logging.Handler):
    """Logging handler that forwards ERROR, FATAL and PANIC records to a Telegram chat.

    The bot token is checked against the API before the constructor returns,
    so a bad token fails at startup instead of on the first error. After
    that the hook is read-only and can be shared between threads.

    In the default synchronous mode a failed delivery is reported on stderr
    and raised from ``fire``; ``emit`` passes it on to ``handleError``. With
    ``async_mode`` each send runs on its own daemon thread and its outcome is
    discarded.
    """

    def __init__(
        self,
        app_name: str,
        auth_token: str,
        target_id: str,
        options: Optional[HookOptions] = None,
    ):
        options = options or HookOptions()
        self._owns_client = options.http_client is None
        session = requests.Session() if self._owns_client else options.http_client

        self._app_name = app_name
        self._auth_token = auth_token
        self._target_id = target_id
        self._async_mode = options.async_mode
        self._client = TelegramApiClient(
            auth_token, session, timeout=options.timeout_seconds()
        )

        try:
            self._client.probe()
        except TelegramHookError:
            if self._owns_client:
                session.close()
            raise

        super().__init__(level=logging.ERROR)
        logger.info(
            "Telegram hook ready for %s (async=%s)",
            app_name or "<unnamed>",
            self._async_mode,
        )

    @property
    def app_name(self) -> str:
        return self._app_name

    @property
    def auth_token(self) -> str:
        return self._auth_token

    @property
    def target_id(self) -> str:
        return self._target_id

    @property
    def api_base(self) -> str:
        return self._client.api_base

    @property
    def http_client(self) -> requests.Session:
        return self._client.session

    @property
    def async_mode(self) -> bool:
        return self._async_mode

    @property
    def timeout(self) -> Optional[float]:
        return self._client.timeout

    def levels(self) -> FrozenSet[Level]:
        return ELIGIBLE_LEVELS

    def fire(self, record: logging.LogRecord) -> None:
        text = format_message(record, self._app_name)

        if self._async_mode:
            threading.Thread(
                target=self._send_detached,
                args=(text,),
                name="telegram-hook-send",
                daemon=True,
            ).start()
            return

        try:
            self._client.send(self._target_id, text)
        except TelegramHookError as e:
            sys.stderr.write(f"Unable to send message, {e}\n")
            raise

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.fire(record)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._owns_client:
            self._client.session.close()
        super().close()

    def _send_detached(self, text: str) -> None:
        try:
            self._client.send(self._target_id, text)
        except Exception as e:
            logger.debug("Detached Telegram send failed: %s", e)
