"""
Compact state codec for share links.

A state is shrunk to single-letter keys, dumped as JSON, and wrapped in
URL-safe base64 (UTF-8 bytes, ``-``/``_`` alphabet, no padding). Links made
by older versions (percent-encoded JSON in standard base64, full key names)
still decode.
"""
import base64
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, unquote

from pydantic import ValidationError

from config import DEFAULT_CURRENCY
from errors import DecodeFailure
from schemas import AppState, PaymentMethods

logger = logging.getLogger(__name__)

PAYMENT_KEYS = {
    "venmo": "v",
    "zelle": "z",
    "paypal": "p",
    "cashapp": "a",
    "other": "o",
}

# Characters encodeURIComponent leaves alone, besides letters and digits
URI_COMPONENT_SAFE = "-_.!~*'()"

FULL_SHAPE = "full"
COMPACT_SHAPE = "compact"


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _compact_payments(payments: Optional[PaymentMethods]) -> Optional[Dict[str, str]]:
    if payments is None:
        return None
    out = {}
    for key, short in PAYMENT_KEYS.items():
        value = getattr(payments, key)
        if value and value.strip():
            out[short] = value
    return out or None


def to_compact(state: AppState) -> Dict[str, Any]:
    people = []
    for person in state.people:
        compact_person = {
            "i": person.id,
            "n": person.name,
            "t": [{"i": item.id, "n": item.name, "a": item.amount_cents} for item in person.items],
        }
        methods = _compact_payments(person.payments)
        if methods:
            compact_person["m"] = methods
        people.append(compact_person)

    compact: Dict[str, Any] = {"p": people}
    if state.currency and state.currency != DEFAULT_CURRENCY:
        compact["c"] = state.currency
    if state.event_name:
        compact["e"] = state.event_name
    return compact


def from_compact(compact: Dict[str, Any]) -> AppState:
    """Expand a compact dict back into an AppState. Raises DecodeFailure."""
    try:
        people = []
        for cp in compact["p"]:
            person = {
                "id": cp["i"],
                "name": cp["n"],
                "items": [{"id": ct["i"], "name": ct["n"], "amountCents": ct["a"]} for ct in cp["t"]],
            }
            if cp.get("m"):
                person["payments"] = {key: cp["m"][short] for key, short in PAYMENT_KEYS.items() if short in cp["m"]}
            people.append(person)

        full = {"people": people}
        if "c" in compact:
            full["currency"] = compact["c"]
        if "e" in compact:
            full["eventName"] = compact["e"]
        return AppState.model_validate(full)
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise DecodeFailure(f"malformed compact state: {e}") from e


def encode_state(state: AppState) -> str:
    raw = _dumps(to_compact(state)).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def encode_state_legacy(state: AppState) -> str:
    """Old link format: full keys, percent-encoded, standard base64."""
    full = state.to_json_dict()
    if full.get("currency") == DEFAULT_CURRENCY:
        del full["currency"]
    escaped = quote(_dumps(full), safe=URI_COMPONENT_SAFE)
    return base64.b64encode(escaped.encode("ascii")).decode("ascii")


def _load_urlsafe(encoded: str) -> Any:
    text = encoded.replace("-", "+").replace("_", "/")
    text += "=" * (-len(text) % 4)
    raw = base64.b64decode(text, validate=True)
    return json.loads(raw.decode("utf-8"))


def _load_legacy(encoded: str) -> Any:
    raw = base64.b64decode(encoded, validate=True)
    return json.loads(unquote(raw.decode("ascii"), errors="strict"))


def load_payload(encoded: str) -> Any:
    """Undo the text wrapping, trying the current scheme before the legacy one."""
    try:
        return _load_urlsafe(encoded)
    except (ValueError, RecursionError):
        logger.debug("URL-safe decode failed, trying legacy format")
    try:
        return _load_legacy(encoded)
    except (ValueError, RecursionError) as e:
        raise DecodeFailure(f"not an encoded state: {e}") from e


def detect_shape(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    if isinstance(payload.get("people"), list):
        return FULL_SHAPE
    if isinstance(payload.get("p"), list):
        return COMPACT_SHAPE
    return None


def parse_payload(payload: Any) -> AppState:
    shape = detect_shape(payload)
    if shape == FULL_SHAPE:
        try:
            return AppState.model_validate(payload)
        except ValidationError as e:
            raise DecodeFailure(f"malformed state: {e}") from e
    if shape == COMPACT_SHAPE:
        return from_compact(payload)
    raise DecodeFailure("payload has neither 'people' nor 'p'")


def decode_state(encoded: Optional[str]) -> Optional[AppState]:
    """Decode a share-link payload. Returns None for anything unreadable."""
    if not encoded:
        return None
    try:
        return parse_payload(load_payload(encoded))
    except DecodeFailure as e:
        logger.debug("Discarding undecodable state: %s", e)
        return None
