"""JSON caches for search pages, place details and ranked results."""
from __future__ import annotations

import logging
from typing import Optional

from .models import NormalizedRecord, PageCacheEntry, PlaceDetail
from .store import KeyValueStore

logger = logging.getLogger(__name__)


def merge_places(cached: PageCacheEntry, incoming: PageCacheEntry) -> PageCacheEntry:
    """Merge a freshly fetched page into the cached entry for the same query.

    Incoming places overwrite cached ones with the same id. Order is cached
    first, then places only seen in `incoming`. The page token always comes
    from `incoming`.
    """
    merged = {place.id: place for place in cached.places}
    for place in incoming.places:
        merged[place.id] = place
    return PageCacheEntry(places=list(merged.values()), next_page_token=incoming.next_page_token)


def query_key(city: str, category: str, suffix: str) -> str:
    return f"{city}_{category}_{suffix}"


class PageCache:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self, city: str, category: str) -> PageCacheEntry:
        payload = self.store.get(query_key(city, category, "raw"))
        if payload is None:
            return PageCacheEntry()
        logger.info("Merging with cached data for %s / %s", city, category)
        return PageCacheEntry.from_api(payload)

    def save(self, city: str, category: str, entry: PageCacheEntry) -> None:
        self.store.put(query_key(city, category, "raw"), entry.to_api())


class DetailCache:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get(self, place_id: str) -> Optional[PlaceDetail]:
        payload = self.store.get(place_id)
        if not payload:
            return None
        return PlaceDetail.from_api(payload)

    def put(self, detail: PlaceDetail) -> None:
        self.store.put(detail.id, detail.to_api())


class ResultsCache:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self, city: str, category: str) -> list[NormalizedRecord]:
        payload = self.store.get(query_key(city, category, "cleaned")) or []
        return [NormalizedRecord.from_dict(item) for item in payload]

    def save(self, city: str, category: str, records: list[NormalizedRecord]) -> None:
        self.store.put(query_key(city, category, "cleaned"), [record.to_dict() for record in records])
