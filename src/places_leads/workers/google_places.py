"""Google Places API (New) search and details worker.

Uses the Places API (New) to:
1. Page through Text Search results for "<category> in <city>" (collect_places)
2. Look up phone/website for each result via Place Details (fetch_details)

Search pages are merged into the per-query cache as they arrive, so an
aborted run still keeps everything fetched up to that point. Details are
cached per place id and never re-requested once stored.
"""
from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Optional

import requests

from ..cache import DetailCache, PageCache, merge_places
from ..config import DEFAULT_MAX_PLACES
from ..models import PageCacheEntry, PlaceDetail, RawPlace

logger = logging.getLogger(__name__)

PLACES_TEXT_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
PLACE_DETAILS_URL = "https://places.googleapis.com/v1/places"

# Field masks control pricing, request only what the sheet needs
SEARCH_FIELD_MASK = ",".join([
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.rating",
    "places.userRatingCount",
    "nextPageToken",
])

DETAILS_FIELD_MASK = ",".join([
    "id",
    "displayName",
    "formattedAddress",
    "internationalPhoneNumber",
    "websiteUri",
    "rating",
    "userRatingCount",
])

# Place ids end up in the request path
PLACE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class PlacesApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PlacesClient:
    """Google Places API (New) client with session pooling."""

    def __init__(
        self,
        api_key: str,
        timeout: int = 10,
        language_code: str = "en",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.language_code = language_code
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "X-Goog-Api-Key": api_key,
        })
        self._calls_made = 0
        self._lock = threading.Lock()

    @property
    def calls_made(self) -> int:
        return self._calls_made

    def _count_call(self) -> None:
        with self._lock:
            self._calls_made += 1

    def text_search(self, query: str, page_token: Optional[str] = None) -> dict[str, Any]:
        """Fetch one page of Text Search results.

        Raises PlacesApiError on a non-200 response.
        """
        body: dict[str, Any] = {
            "textQuery": query,
            "languageCode": self.language_code,
        }
        if page_token:
            body["pageToken"] = page_token

        resp = self.session.post(
            PLACES_TEXT_SEARCH_URL,
            json=body,
            headers={"X-Goog-FieldMask": SEARCH_FIELD_MASK},
            timeout=self.timeout,
        )
        self._count_call()

        if resp.status_code != 200:
            raise PlacesApiError(
                f"Google Places search failed with status {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp.json()

    def place_details(self, place_id: str) -> dict[str, Any]:
        resp = self.session.get(
            f"{PLACE_DETAILS_URL}/{place_id}",
            headers={"X-Goog-FieldMask": DETAILS_FIELD_MASK},
            timeout=self.timeout,
        )
        self._count_call()

        if resp.status_code != 200:
            raise PlacesApiError(
                f"Google Place Details failed with status {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp.json()


def build_text_query(city: str, category: str) -> str:
    return f"{category} in {city}"


def _fetch_and_merge(
    client: PlacesClient,
    page_cache: PageCache,
    city: str,
    category: str,
    page_token: Optional[str] = None,
) -> tuple[PageCacheEntry, PageCacheEntry]:
    """Returns (merged cache entry, the page this response carried)."""
    cached = page_cache.load(city, category)
    try:
        payload = client.text_search(build_text_query(city, category), page_token=page_token)
    except PlacesApiError as exc:
        logger.error(
            "Error fetching data from Google Places API: %s (status %s): %s",
            exc, exc.status_code, (exc.body or "")[:500],
        )
        raise
    except requests.RequestException as exc:
        logger.error("Error fetching data from Google Places API: %s", exc)
        raise

    page = PageCacheEntry.from_api(payload)
    merged = merge_places(cached, page)
    page_cache.save(city, category, merged)
    return merged, page


def fetch_page(
    client: PlacesClient,
    page_cache: PageCache,
    city: str,
    category: str,
    page_token: Optional[str] = None,
) -> PageCacheEntry:
    """Fetch one search page and fold it into the cached entry for this query.

    Returns the merged entry, whose token is the one from this response.
    """
    merged, _ = _fetch_and_merge(client, page_cache, city, category, page_token)
    return merged


def collect_places(
    client: PlacesClient,
    page_cache: PageCache,
    city: str,
    category: str,
    max_places: int = DEFAULT_MAX_PLACES,
) -> list[RawPlace]:
    """Page through search results until the token runs out or max_places is reached.

    Places returned by this run's responses come first; places known only from
    earlier runs fill the remaining slots.
    """
    fresh: dict[str, RawPlace] = {}
    collected: dict[str, RawPlace] = {}
    page_token: Optional[str] = None

    while True:
        entry, page = _fetch_and_merge(client, page_cache, city, category, page_token)

        for place in page.places:
            fresh[place.id] = place
        for place in entry.places:
            collected[place.id] = place

        page_token = entry.next_page_token
        logger.info("Fetched %d unique businesses so far...", len(collected))

        if not page_token or len(collected) >= max_places:
            logger.info("Reached maximum number of businesses or no more data to fetch.")
            break

    ranked = list(fresh.values()) + [place for pid, place in collected.items() if pid not in fresh]
    return ranked[:max_places]


def is_valid_place_id(place_id: Optional[str]) -> bool:
    return bool(place_id) and PLACE_ID_PATTERN.match(place_id) is not None


def fetch_detail(
    client: PlacesClient,
    detail_cache: DetailCache,
    place_id: str,
) -> Optional[PlaceDetail]:
    """Return details for one place, from cache when possible.

    Invalid ids and API failures yield None. Failures are not cached.
    """
    if not is_valid_place_id(place_id):
        logger.error("Invalid placeId: %r", place_id)
        return None

    cached = detail_cache.get(place_id)
    if cached is not None:
        return cached

    try:
        payload = client.place_details(place_id)
    except PlacesApiError as exc:
        logger.warning(
            "Error fetching details for place %s: status %s: %s",
            place_id, exc.status_code, (exc.body or "")[:200],
        )
        return None
    except requests.RequestException as exc:
        logger.warning("Error fetching details for place %s: %s", place_id, exc)
        return None

    # cached under the id that was asked for, whatever id the response carries
    detail = PlaceDetail.from_api({**payload, "id": place_id})
    detail_cache.put(detail)
    return detail


def fetch_details(
    client: PlacesClient,
    detail_cache: DetailCache,
    place_ids: Iterable[str],
    max_workers: int = 5,
) -> dict[str, Optional[PlaceDetail]]:
    """Look up details for a batch of places with at most max_workers in flight."""
    ids = list(dict.fromkeys(place_ids))
    if not ids:
        return {}

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(ids)))) as pool:
        results = pool.map(lambda pid: fetch_detail(client, detail_cache, pid), ids)
        return dict(zip(ids, results))
