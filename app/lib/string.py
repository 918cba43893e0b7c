import re
import secrets
import string
from datetime import datetime, timezone

import const


def generate_download_token():
    return secrets.token_hex(const.DOWNLOAD_TOKEN_BYTES)


def generate_confirmation_token():
    return secrets.token_urlsafe(32)


def generate_order_number(now=None):
    now = now or datetime.utcnow()
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(6))
    return f"ORD-{now.strftime('%Y%m%d')}-{suffix}"


def normalize_code(code):
    return (code or "").strip().upper()


def parse_datetime(value):
    """ISO 8601 string to a naive UTC datetime. Empty values give None."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def slugify(value):
    value = re.sub(r"[^a-z0-9]+", "-", (value or "").strip().lower())
    return value.strip("-")
