"""Record id and timestamp generation.

Ids are a millisecond timestamp followed by a random base-36 suffix.
They are not checked against existing rows, so rapid bulk inserts can
in principle collide.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Callable

from core.constants import BASE36_ALPHABET, GENERATED_ID_SUFFIX_LENGTH

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_record_id(clock: Clock = utc_now) -> str:
    """Build a time-derived record id.

    Args:
        clock: Source of the current time.

    Returns:
        Millisecond epoch digits followed by random base-36 characters.
    """
    millis = int(clock().timestamp() * 1000)
    suffix = "".join(random.choices(BASE36_ALPHABET, k=GENERATED_ID_SUFFIX_LENGTH))
    return f"{millis}{suffix}"


def format_timestamp(moment: datetime) -> str:
    """Render an ISO-8601 UTC timestamp with millisecond precision and ``Z``."""
    utc_moment = moment.astimezone(timezone.utc)
    return utc_moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_moment.microsecond // 1000:03d}Z"
