"""
HTTP client wrapper.

Issues JSON requests to the portal API through `httpx`, attaching
`Authorization: Bearer <token>` whenever the token provider returns one.

Error mapping
-------------
- transport failure (no response) → `ApiError(status=None, message="Network error")`
- HTTP status >= 400              → `ApiError(status, <server "message">)`
"""

import logging
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed API call; `status` is None when no response was received."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __repr__(self) -> str:
        return f"ApiError(status={self.status!r}, message={self.message!r})"


class ApiClient:
    """
    Thin JSON client for the portal REST API.

    Parameters
    ----------
    base_url : str
        API root including the `/api` prefix, e.g. `http://localhost:8000/api`.
    token_provider : Callable[[], Optional[str]] | None
        Returns the current bearer token (usually `AuthSession.get_token`).
    http : httpx.Client | None
        Pre-built client (tests pass a FastAPI `TestClient`).
    transport : httpx.BaseTransport | None
        Transport for the internally created client (tests pass `httpx.MockTransport`).
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        http: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.http = http or httpx.Client(transport=transport)

    def _headers(self) -> dict:
        token = self.token_provider() if self.token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    def request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and return the decoded JSON body (None for an empty body).

        Raises
        ------
        ApiError
            On transport failures and non-2xx responses.
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, headers=self._headers(), **kwargs)
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(None, "Network error") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.debug(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Invalid JSON response") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("message") or body.get("detail") or response.reason_phrase)
        return response.reason_phrase

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        return self.request("GET", path, params=params or None)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def upload(self, path: str, field: str, filename: str, content: bytes, content_type: str = "application/octet-stream", method: str = "POST") -> Any:
        """Send one file as `multipart/form-data` under the form field `field`."""
        return self.request(method, path, files={field: (filename, content, content_type)})

    def close(self) -> None:
        self.http.close()
