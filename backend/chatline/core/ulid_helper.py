"""ULID validation helpers."""

import re
from typing import Any, Optional

from ulid import ULID

ULID_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"
_ULID_RE = re.compile(ULID_PATTERN)


def parse_ulid(ulid_str: Any) -> Optional[ULID]:
    """Parse and validate a ULID string."""
    if not isinstance(ulid_str, str) or not _ULID_RE.match(ulid_str):
        return None
    try:
        return ULID.from_str(ulid_str)
    except ValueError:
        return None


def is_valid_ulid(ulid_str: Any) -> bool:
    """Check if a string is a valid ULID."""
    return parse_ulid(ulid_str) is not None
