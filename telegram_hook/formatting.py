import html
import json
import logging
from typing import Any, Dict

from telegram_hook.levels import Level

PREFIXES = {
    Level.PANIC: "<b>PANIC</b>",
    Level.FATAL: "<b>FATAL</b>",
    Level.ERROR: "<b>ERROR</b>",
}

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime"}


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the structured fields attached to a record via ``extra=``."""
    return {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}


def render_fields(fields: Dict[str, Any]) -> str:
    return json.dumps(fields, indent="\t", sort_keys=True)


def _escape(text: str) -> str:
    return html.escape(text, quote=False)


def format_message(record: logging.LogRecord, app_name: str) -> str:
    """Build the HTML text sent to Telegram for one record.

    Layout is ``<b>LEVEL</b>@app - message`` followed by the record's fields
    as tab-indented JSON inside a ``<pre>`` block. Fields that cannot be
    rendered as JSON drop the block entirely.
    """
    prefix = PREFIXES.get(Level.from_levelno(record.levelno), "")
    msg = f"{prefix}@{_escape(app_name)} - {_escape(record.getMessage())}"

    try:
        fields = render_fields(record_fields(record))
    except (TypeError, ValueError):
        return msg
    return "\n".join([msg, "<pre>", _escape(fields), "</pre>"])
