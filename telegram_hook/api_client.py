import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from telegram_hook.errors import ApiError, DecodeError, TransportError

logger = logging.getLogger(__name__)

API_ROOT = "https://api.telegram.org"

GET_ME = "getme"
SEND_MESSAGE = "sendmessage"
PARSE_MODE = "HTML"


def api_base_for(auth_token: str) -> str:
    return f"{API_ROOT}/bot{auth_token}"


@dataclass(frozen=True)
class ApiResponse:
    """The {ok, error_code, description, result} envelope every Bot API call returns."""

    ok: bool
    error_code: Optional[int] = None
    description: Optional[str] = None
    result: Any = None
    raw: Optional[Dict[str, Any]] = None

    @classmethod
    def from_json(cls, data: Any) -> "ApiResponse":
        if not isinstance(data, dict) or not isinstance(data.get("ok"), bool):
            raise DecodeError(f"Unexpected response from Telegram API: {data!r}")
        return cls(
            ok=data["ok"],
            error_code=data.get("error_code"),
            description=data.get("description"),
            result=data.get("result"),
            raw=data,
        )

    def to_error(self, with_dump: bool = False) -> ApiError:
        error = ApiError(self.error_code, self.description, self.raw)
        if with_dump:
            dump = json.dumps(self.raw, indent="\t")
            error = ApiError(
                self.error_code, self.description, self.raw, message=f"{error}\n{dump}"
            )
        return error


class TelegramApiClient:
    """Issues the credential probe and sendMessage calls against the Bot API.

    Only two endpoints are ever used: ``getme`` to check the token and
    ``sendmessage`` to deliver text. Every response is read inside a ``with``
    block so the pooled connection goes back to the session on all paths.
    """

    def __init__(
        self,
        auth_token: str,
        session: requests.Session,
        timeout: Optional[float] = None,
    ):
        self._api_base = api_base_for(auth_token)
        self._session = session
        self._timeout = timeout

    @property
    def api_base(self) -> str:
        return self._api_base

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def endpoint(self, method: str) -> str:
        return "/".join([self._api_base, method])

    def probe(self) -> None:
        """Validate the bot token. The ApiError message includes the envelope dump."""
        try:
            response = self._session.get(self.endpoint(GET_ME), timeout=self._timeout)
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        with response:
            envelope = self._decode(response)

        if not envelope.ok:
            raise envelope.to_error(with_dump=True)
        logger.debug("Telegram token verified against %s", GET_ME)

    def send(self, chat_id: str, text: str) -> None:
        payload = {"chat_id": chat_id, "text": text, "parse_mode": PARSE_MODE}
        try:
            response = self._session.post(
                self.endpoint(SEND_MESSAGE), json=payload, timeout=self._timeout
            )
        except requests.RequestException as e:
            sys.stderr.write(
                f"Encountered error when issuing request to Telegram API, {e}\n"
            )
            raise TransportError(str(e)) from e

        with response:
            envelope = self._decode(response)

        if not envelope.ok:
            raise envelope.to_error()
        logger.debug("Delivered %d characters to chat %s", len(text), chat_id)

    @staticmethod
    def _decode(response: requests.Response) -> ApiResponse:
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Unable to decode Telegram API response: {e}") from e
        return ApiResponse.from_json(data)
