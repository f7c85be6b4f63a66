import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

import requests
from dotenv import load_dotenv

Timeout = Union[float, timedelta]

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class HookOptions:
    """Optional hook configuration, fixed once the hook is built."""

    async_mode: bool = False
    request_timeout: Optional[Timeout] = None
    http_client: Optional[requests.Session] = None

    def timeout_seconds(self) -> Optional[float]:
        """Per-request deadline in seconds, or None for the transport default."""
        t = self.request_timeout
        if t is None:
            return None
        if isinstance(t, timedelta):
            t = t.total_seconds()
        return float(t) if t > 0 else None


@dataclass(frozen=True)
class Settings:
    telegram_token: str
    telegram_target: str
    app_name: str = "telegram-hook"
    async_mode: bool = False
    request_timeout: Optional[float] = None

    def hook_options(self) -> HookOptions:
        return HookOptions(
            async_mode=self.async_mode, request_timeout=self.request_timeout
        )


def load_settings() -> Settings:
    """Load settings from environment variables (and a .env file if present)."""
    load_dotenv()

    timeout = os.environ.get("TELEGRAM_TIMEOUT")
    return Settings(
        telegram_token=os.environ["TELEGRAM_TOKEN"],
        telegram_target=os.environ["TELEGRAM_TARGET"],
        app_name=os.environ.get("TELEGRAM_APP_NAME", "telegram-hook"),
        async_mode=os.environ.get("TELEGRAM_ASYNC", "").lower() in TRUTHY,
        request_timeout=float(timeout) if timeout else None,
    )
