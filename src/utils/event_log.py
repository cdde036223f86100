"""
Append-only raw webhook log.

Each entry is an ISO-8601 UTC timestamp line, a ``RAW:`` marker, the
envelope as indented JSON, and a blank line:

    2024-05-01T12:00:00.000Z
    RAW:
    {
      "type": "payment.updated",
      ...
    }

Entries are written with a single append so concurrent writers do not
interleave.
"""

import json
from datetime import datetime, timezone
from typing import Any, Iterator, Tuple

from utils.logger import get_logger

logger = get_logger("event_log")

RAW_MARKER = "RAW:"


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def format_entry(payload: Any, timestamp: str) -> str:
    return f"{timestamp}\n{RAW_MARKER}\n{json.dumps(payload, indent=2)}\n\n"


def append_event(payload: Any, path: str) -> bool:
    """
    Append one envelope to the log at ``path``.

    Returns False (after logging) if the file could not be written; the
    caller keeps processing the webhook either way.
    """
    entry = format_entry(payload, _utc_timestamp())
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(entry)
    except OSError as e:
        logger.error(
            "event_log.write_error",
            extra={"path": path, "error": str(e)},
        )
        return False
    return True


def read_events(path: str) -> Iterator[Tuple[str, Any]]:
    """
    Yield ``(timestamp, payload)`` for every entry in the log at ``path``.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    decoder = json.JSONDecoder()
    pos = 0
    while True:
        ts_end = content.find("\n", pos)
        if ts_end == -1:
            return
        timestamp = content[pos:ts_end]
        marker_end = content.find("\n", ts_end + 1)
        if marker_end == -1 or content[ts_end + 1:marker_end] != RAW_MARKER:
            raise ValueError(f"Malformed event log entry at offset {pos}")

        payload, end = decoder.raw_decode(content, marker_end + 1)
        yield timestamp, payload

        # Skip the entry's trailing blank line
        pos = end
        while pos < len(content) and content[pos] == "\n":
            pos += 1
        if pos >= len(content):
            return
