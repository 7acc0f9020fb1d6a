"""Small HTTP client for the typerank API.

Used by Python front ends to fetch paragraphs and submit finished tests.
Requests are not retried and nothing is queued locally: if a submission
fails the result is lost and the caller gets a `ClientError`.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger("typerank.client")


class ClientError(Exception):
    """A request failed in transport or was rejected by the server."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TyperankClient:
    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = httpx.Client(base_url=base_url, headers=headers, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "TyperankClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs):
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("request %s %s failed: %s", method, path, exc)
            raise ClientError("network error, please try again later") from exc
        if response.is_error:
            try:
                message = response.json().get("error") or response.reason_phrase
            except ValueError:
                message = response.reason_phrase
            raise ClientError(message, status_code=response.status_code)
        return response.json()

    def daily_paragraph(self) -> str:
        return self._request("GET", "/daily-challenge")["paragraph"]

    def practice_paragraph(self, difficulty: str) -> str:
        return self._request("GET", "/paragraphs", params={"difficulty": difficulty})["paragraph"]

    def submit(self, payload: dict) -> dict:
        """POST a finished test (see `engine.submission`) and return `{id, rank}`."""
        return self._request("POST", "/scores", json=payload)

    def leaderboard(self, difficulty: Optional[str] = None) -> list:
        params = {"difficulty": difficulty} if difficulty else None
        return self._request("GET", "/leaderboard", params=params)

    def progress(self, name: str) -> list:
        return self._request("GET", "/user-progress", params={"name": name})
