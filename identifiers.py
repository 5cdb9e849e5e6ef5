"""Sortable 26-character list identifiers (ULID)."""
import secrets
import time
from typing import Optional

ENCODING = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"  # no I, L, O, U
TIME_LEN = 10
RANDOM_LEN = 16
ULID_LEN = TIME_LEN + RANDOM_LEN


def encode_time(timestamp_ms: int) -> str:
    chars = []
    for _ in range(TIME_LEN):
        timestamp_ms, mod = divmod(timestamp_ms, len(ENCODING))
        chars.append(ENCODING[mod])
    return "".join(reversed(chars))


def encode_random() -> str:
    return "".join(secrets.choice(ENCODING) for _ in range(RANDOM_LEN))


def generate_ulid(timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return encode_time(timestamp_ms) + encode_random()


def is_valid_ulid(value) -> bool:
    if not isinstance(value, str) or len(value) != ULID_LEN:
        return False
    return all(ch in ENCODING for ch in value.upper())


def normalize_ulid(value: str) -> str:
    return value.upper()


def extract_timestamp(ulid: str) -> int:
    if len(ulid) != ULID_LEN:
        raise ValueError("Invalid ULID: must be 26 characters")
    timestamp = 0
    for ch in ulid[:TIME_LEN].upper():
        index = ENCODING.find(ch)
        if index == -1:
            raise ValueError(f"Invalid ULID character: {ch}")
        timestamp = timestamp * len(ENCODING) + index
    return timestamp
