"""Wire-format helpers: backend dates and JSON bodies."""

import base64
import json
from datetime import datetime, timezone
from typing import Any

from .files import FileRef

# The backend always speaks UTC with millisecond precision.
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def format_date(value: datetime) -> str:
    """Render a datetime in the backend's fixed date format.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_date(text: str) -> datetime:
    """Parse a backend timestamp into an aware UTC datetime.

    Raises:
        TypeError: If ``text`` is not a string.
        ValueError: If ``text`` is not in the backend's date format.
    """
    if not isinstance(text, str):
        raise TypeError(f"expected a date string, got {type(text).__name__}")
    return datetime.strptime(text, DATE_FORMAT).replace(tzinfo=timezone.utc)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return {"__type": "Date", "iso": format_date(obj)}
    if isinstance(obj, (bytes, bytearray)):
        return {"__type": "Bytes", "base64": base64.b64encode(obj).decode("ascii")}
    if isinstance(obj, FileRef):
        return obj.to_wire()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps(payload: Any) -> str:
    """Serialize a wire payload to JSON, tagging dates and bytes."""
    return json.dumps(payload, default=_json_default)


def decode_value(value: Any) -> Any:
    """Turn a typed wire value back into its Python form."""
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    if not isinstance(value, dict):
        return value

    kind = value.get("__type")
    if kind == "Date" and "iso" in value:
        return parse_date(value["iso"])
    if kind == "Bytes" and "base64" in value:
        return base64.b64decode(value["base64"])
    if kind == "File" and "name" in value:
        return FileRef(name=value["name"], url=value.get("url"))

    return {k: decode_value(v) for k, v in value.items()}
