"""HTTP access to the API: requests, error mapping and pagination."""

from __future__ import annotations

import enum
import json
import uuid
from typing import Any

import requests

VERSION = "v2.0.0"
DEFAULT_BASE_URL = "https://cvedb.github.io/api"
DEFAULT_PAGE_SIZE = 500


class ApiError(Exception):
    """Raised when a request fails or the API answers with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class Service(enum.Enum):
    """API services and the path each one is served under."""

    HIVE = "/hive/v1"
    ORCHESTRATOR = "/orchestrator/v1"


def with_pagination(path: str, page: int) -> str:
    """Append the page size and, for a positive page, the page number to a path."""
    separator = "&" if "?" in path else "?"
    path += f"{separator}page_size={DEFAULT_PAGE_SIZE}"
    if page > 0:
        path += f"&page={page}"
    return path


def _to_json(body: Any) -> Any:
    if hasattr(body, "to_dict"):
        return body.to_dict()
    return body


def _json_default(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def _check_status(response: requests.Response) -> None:
    code = response.status_code
    if 200 <= code < 300:
        return
    try:
        payload = json.loads(response.content)
    except ValueError:
        payload = None
    details = payload.get("details") if isinstance(payload, dict) else None
    if isinstance(details, str) and details:
        raise ApiError(f"API error: {details}", code)
    if code == 404:
        raise ApiError("resource not found", code)
    raise ApiError(f"unexpected status code: {code}", code)


class BaseClient:
    """Authenticated JSON access to the API services."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        vault_id: uuid.UUID | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("token is required")
        self.token = token
        self.base_url = base_url.removesuffix("/")
        self.vault_id = vault_id
        self.session = session if session is not None else requests.Session()

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        service: Service = Service.HIVE,
    ) -> Any:
        """Send a request to a service and return the decoded JSON answer, or None if empty."""
        url = f"{self.base_url}{service.value}{path}"
        headers = {
            "Authorization": f"Token {self.token}",
            "Accept": "application/json",
            "User-Agent": f"cvedb-cli/{VERSION}",
        }
        data = None
        if body is not None:
            try:
                data = json.dumps(_to_json(body), default=_json_default).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise ApiError(f"failed to marshal request body: {exc}") from exc
            headers["Content-Type"] = "application/json"

        try:
            response = self.session.request(method, url, data=data, headers=headers)
        except requests.RequestException as exc:
            raise ApiError(f"failed to send request: {exc}") from exc

        with response:
            _check_status(response)
            if not response.content:
                return None
            try:
                return json.loads(response.content)
            except ValueError as exc:
                raise ApiError(f"failed to decode response: {exc}") from exc

    def paginate(
        self,
        path: str,
        limit: int = 0,
        service: Service = Service.HIVE,
    ) -> list[Any]:
        """Collect the results of a paginated endpoint; a limit of 0 means all of them."""
        results: list[Any] = []
        page = 1
        while True:
            try:
                response = self.request("GET", with_pagination(path, page), service=service)
            except ApiError as exc:
                raise ApiError(f"failed to get page {page}: {exc}", exc.status_code) from exc
            if not isinstance(response, dict):
                response = {}
            results.extend(response.get("results") or [])
            if limit > 0 and len(results) >= limit:
                return results[:limit]
            if not response.get("next"):
                return results
            page += 1