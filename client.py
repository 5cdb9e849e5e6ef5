"""HTTP client for the settlement-list API."""
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from errors import NotFound, TransportFailure, Updated, UpdateResult, ValidationFailure, VersionConflict
from schemas import AppState, CreateListRequest, ListResponse, UpdateListRequest

API_BASE = "/api"


class ListClient:
    def __init__(self, base_url: str = "", http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self):
        self._http.close()

    def _request(self, method: str, path: str, body=None) -> httpx.Response:
        try:
            response = self._http.request(method, f"{API_BASE}{path}", json=body)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {path} failed: {e}") from e

        if response.status_code >= 500:
            raise TransportFailure(f"{method} {path} failed with status {response.status_code}")
        if response.status_code == 400:
            raise ValidationFailure(_detail(response, "Invalid request"))
        return response

    def create_list(self, data: AppState) -> ListResponse:
        response = self._request("POST", "/lists", CreateListRequest(data=data).to_json_dict())
        _expect_ok(response, "Failed to create list")
        return _record(response)

    def get_list(self, list_id: str) -> Optional[ListResponse]:
        """Fetch a list, or None when it does not exist."""
        response = self._request("GET", f"/lists/{list_id}")
        if response.status_code == 404:
            return None
        _expect_ok(response, "Failed to load list")
        return _record(response)

    def update_list(self, list_id: str, data: AppState, version: int) -> UpdateResult:
        """
        Save ``data`` over version ``version`` of a list.

        A missing list or a stale version comes back as a NotFound or
        VersionConflict value. Anything else that is not a saved record raises.
        """
        body = UpdateListRequest(data=data, version=version).to_json_dict()
        response = self._request("PUT", f"/lists/{list_id}", body)

        if response.status_code == 404:
            return NotFound(list_id)
        if response.status_code == 409:
            payload = _json(response)
            if isinstance(payload, dict) and payload.get("code") == "VERSION_CONFLICT":
                return VersionConflict(payload.get("expectedVersion", 0), payload.get("actualVersion", 0))
        _expect_ok(response, "Failed to save list")
        return Updated(_record(response))


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise TransportFailure(f"Unreadable response (status {response.status_code}): {e}") from e


def _record(response: httpx.Response) -> ListResponse:
    try:
        return ListResponse.model_validate(_json(response))
    except ValidationError as e:
        raise TransportFailure(f"Malformed list record: {e}") from e


def _detail(response: httpx.Response, default: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return default


def _expect_ok(response: httpx.Response, message: str):
    if not response.is_success:
        raise TransportFailure(f"{message}: {_detail(response, str(response.status_code))}")
