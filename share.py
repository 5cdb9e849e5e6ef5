from typing import Mapping, Optional

from codec import decode_state, encode_state
from config import URL_LENGTH_BUDGET
from identifiers import is_valid_ulid, normalize_ulid
from schemas import AppState, ShareResponse
from state import create_default_state, has_user_data

DATA_PARAM = "data"
LIST_PARAM = "list"


def _with_query(origin: str, path: str, param: str, value: str) -> str:
    # "https://host/?data=" reads better as "https://host?data="
    base = origin.rstrip("/") + path.rstrip("/")
    return f"{base}?{param}={value}"


def estimate_url_length(origin: str, path: str, encoded: str) -> int:
    return len(origin) + len(path) + len(f"?{DATA_PARAM}=") + len(encoded)


def exceeds_url_budget(origin: str, path: str, encoded: str) -> bool:
    return estimate_url_length(origin, path, encoded) > URL_LENGTH_BUDGET


def build_share_url(origin: str, path: str, state: AppState) -> str:
    if not has_user_data(state):
        return origin.rstrip("/") + path
    return _with_query(origin, path, DATA_PARAM, encode_state(state))


def build_list_url(origin: str, path: str, list_id: str) -> str:
    return _with_query(origin, path, LIST_PARAM, normalize_ulid(list_id))


def share_link(origin: str, path: str, state: AppState) -> ShareResponse:
    encoded = encode_state(state) if has_user_data(state) else ""
    return ShareResponse(
        encoded=encoded,
        url=build_share_url(origin, path, state),
        length=estimate_url_length(origin, path, encoded),
        exceeds_budget=exceeds_url_budget(origin, path, encoded),
    )


def requested_list_id(params: Mapping[str, str]) -> Optional[str]:
    """The persisted list a link points at, if it names a well-formed one."""
    value = params.get(LIST_PARAM)
    if value and is_valid_ulid(value):
        return normalize_ulid(value)
    return None


def state_from_query(params: Mapping[str, str]) -> AppState:
    return decode_state(params.get(DATA_PARAM)) or create_default_state()
