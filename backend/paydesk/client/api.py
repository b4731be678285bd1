"""
API Client — Thin httpx wrapper around the Paydesk REST surface.

Every network or backend failure surfaces as ApiError so the flow layer can
show it as a blocking alert. Nothing is retried here.
"""
import logging
from typing import Any, Optional

import httpx

from paydesk.client.settings import get_client_settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Backend rejected the request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, list):
        # pydantic validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail if item)
    if detail:
        return str(detail)
    return f"HTTP error! status: {response.status_code}"


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None,
                 token: Optional[str] = None):
        settings = get_client_settings()
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.client = client or httpx.Client(timeout=settings.API_TIMEOUT_SECONDS)
        self.token = token

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = self.client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("API request failed: %s %s: %s", method, path, e)
            raise ApiError(f"Could not reach the payment server: {e}") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning("API %s %s -> %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)
        return response

    def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params).json()

    def post_json(self, path: str, payload: Optional[dict] = None) -> Any:
        return self.request("POST", path, json=payload).json()

    def post_form(self, path: str, data: dict, files: dict) -> Any:
        return self.request("POST", path, data=data, files=files).json()

    def post_for_bytes(self, path: str, payload: dict) -> httpx.Response:
        return self.request("POST", path, json=payload)

    def get_bytes(self, path: str) -> httpx.Response:
        return self.request("GET", path)

    def close(self):
        self.client.close()
