"""24-character hex identifiers, time-ordered like Mongo ObjectIds."""

import itertools
import os
import re
import threading
import time

from quizhub.core.app_exceptions import ValidatorError

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")

_process_random = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
_lock = threading.Lock()


def new_object_id() -> str:
    """Generate a new id: 4-byte timestamp, 5 random bytes, 3-byte counter."""
    with _lock:
        count = next(_counter) & 0xFFFFFF
    raw = int(time.time()).to_bytes(4, "big") + _process_random + count.to_bytes(3, "big")
    return raw.hex()


def is_object_id(value: object) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.match(value))


def normalize_object_id(value: str, field: str = "id") -> str:
    """Validate an id string before it is used in a lookup.

    Raises:
        ValidatorError: If the value is not a 24-char hex string.
    """
    candidate = value.strip().lower() if isinstance(value, str) else value
    if not is_object_id(candidate):
        raise ValidatorError(f"{field} must be a 24-character hex id", details=[{"field": field, "value": str(value)}])
    return candidate
