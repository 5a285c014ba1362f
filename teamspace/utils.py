# teamspace/utils.py
# Small shared helpers: ids, codes, timestamps

import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Optional

_CODE_ALPHABET = string.ascii_lowercase + string.digits


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.utcnow().isoformat()


def to_utc_iso(value: Optional[datetime]) -> Optional[str]:
    """Normalize a datetime to the naive-UTC ISO format used for stored timestamps."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat()


def generate_invite_code() -> str:
    return uuid.uuid4().hex[:8]


def generate_task_code() -> str:
    return "task-" + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))
