from __future__ import annotations

from typing import Any, Optional

import pytest

from places_leads.config import Config
from places_leads.workers.google_places import PlacesApiError


def place_payload(place_id: str, name: Optional[str] = None, **extra: Any) -> dict:
    payload: dict[str, Any] = {"id": place_id, "displayName": {"text": name or f"Business {place_id}"}}
    payload.update(extra)
    return payload


class FakePlacesClient:
    """Stands in for PlacesClient: serves canned search pages and detail payloads."""

    def __init__(self, pages: Optional[list[dict]] = None, details: Optional[dict] = None) -> None:
        self.pages = list(pages or [])
        self.details = dict(details or {})
        self.search_calls: list[tuple[str, Optional[str]]] = []
        self.detail_calls: list[str] = []

    @property
    def calls_made(self) -> int:
        return len(self.search_calls) + len(self.detail_calls)

    def text_search(self, query: str, page_token: Optional[str] = None) -> dict:
        self.search_calls.append((query, page_token))
        if not self.pages:
            raise PlacesApiError("no more pages", status_code=500, body="exhausted")
        page = self.pages.pop(0)
        if isinstance(page, Exception):
            raise page
        return page

    def place_details(self, place_id: str) -> dict:
        self.detail_calls.append(place_id)
        payload = self.details.get(place_id)
        if payload is None:
            raise PlacesApiError("not found", status_code=404, body='{"error": "NOT_FOUND"}')
        if isinstance(payload, Exception):
            raise payload
        return payload


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Optional[dict] = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self) -> dict:
        return self._payload


class FakeSession:
    def __init__(self, responses: list[FakeResponse]) -> None:
        self.headers: dict[str, str] = {}
        self.responses = list(responses)
        self.requests: list[dict] = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"method": "POST", "url": url, "json": json, "headers": headers, "timeout": timeout})
        return self.responses.pop(0)

    def get(self, url, headers=None, timeout=None):
        self.requests.append({"method": "GET", "url": url, "headers": headers, "timeout": timeout})
        return self.responses.pop(0)


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        google_api_key="test-key",
        cache_dir=str(tmp_path / "cache"),
        max_places=60,
        language_code="en",
        detail_concurrency=2,
        http_timeout=5,
        log_level="INFO",
        google_sheets_credentials_file=None,
        google_sheets_client_email=None,
        google_sheets_private_key=None,
        google_sheets_spreadsheet_id="sheet-123",
    )
