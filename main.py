import logging
import sys

from telegram_hook.config import load_settings
from telegram_hook.errors import TelegramHookError
from telegram_hook.hook import TelegramHook

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> int:
    configure_logging()
    settings = load_settings()

    try:
        hook = TelegramHook(
            settings.app_name,
            settings.telegram_token,
            settings.telegram_target,
            settings.hook_options(),
        )
    except TelegramHookError as e:
        print(f"Telegram hook could not be created: {e}", file=sys.stderr)
        return 1

    logging.getLogger().addHandler(hook)
    logger.error(
        "A walrus appears", extra={"animal": "walrus", "number": 1, "size": 10}
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
