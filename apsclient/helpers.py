"""Small conversion helpers shared by the client."""

from __future__ import annotations

import math
import re
from datetime import datetime

_INT_PATTERN = re.compile(r"[+-]?\d+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_SECONDS_PER_DAY = 86400
_OA_DATE_EPOCH_OFFSET = 25569


def from_str_to_int(text: str) -> int:
    """Parse a decimal 32-bit integer, returning -1 when the text is not one."""
    stripped = text.strip()
    if not _INT_PATTERN.fullmatch(stripped):
        return -1
    value = int(stripped)
    if not _INT32_MIN <= value <= _INT32_MAX:
        return -1
    return value


def to_oa_date(moment: datetime) -> float:
    """Convert a datetime to an OLE Automation date, at whole-second precision.

    Naive datetimes are taken as local time.
    """
    seconds = math.floor(moment.timestamp())
    return seconds / _SECONDS_PER_DAY + _OA_DATE_EPOCH_OFFSET


def current_oa_date() -> float:
    """Return the current time as an OLE Automation date."""
    return to_oa_date(datetime.now())