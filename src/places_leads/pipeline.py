from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from .cache import DetailCache, PageCache, ResultsCache
from .config import Config, load_config
from .store import FileStore, KeyValueStore
from .workers.google_places import PlacesClient, collect_places, fetch_details
from .workers.lead_scoring import rank_records
from .workers.normalize import normalize
from .workers.sheets_export import export_to_sheets

logger = logging.getLogger(__name__)


def build_caches(
    config: Config,
    store: Optional[KeyValueStore] = None,
    detail_store: Optional[KeyValueStore] = None,
) -> tuple[PageCache, DetailCache, ResultsCache]:
    """Page and results caches share the cache root; details live in place_details/."""
    cache_root = Path(config.cache_dir)
    store = store or FileStore(cache_root)
    detail_store = detail_store or FileStore(cache_root / "place_details")
    return PageCache(store), DetailCache(detail_store), ResultsCache(store)


def run_once(
    city: str,
    category: str,
    config: Optional[Config] = None,
    client: Optional[PlacesClient] = None,
    store: Optional[KeyValueStore] = None,
    detail_store: Optional[KeyValueStore] = None,
    exporter: Callable[..., dict] = export_to_sheets,
) -> dict:
    """Run search -> details -> score -> cache -> export for one query.

    Search failures propagate. Detail failures leave the affected records
    without phone/website. Export problems are reported in the result.
    """
    config = config or load_config()
    client = client or PlacesClient(
        config.google_api_key,
        timeout=config.http_timeout,
        language_code=config.language_code,
    )
    page_cache, detail_cache, results_cache = build_caches(config, store, detail_store)

    logger.info("Fetching business data...")
    places = collect_places(client, page_cache, city, category, max_places=config.max_places)

    logger.info("Processing business details...")
    details = fetch_details(
        client,
        detail_cache,
        [place.id for place in places],
        max_workers=config.detail_concurrency,
    )
    records = [normalize(place, details.get(place.id)) for place in places]

    logger.info("Scoring businesses...")
    ranked = rank_records(records)

    results_cache.save(city, category, ranked)

    logger.info("Exporting data to Google Sheets...")
    export_result = exporter(ranked, city, category, config)

    return {
        "city": city,
        "category": category,
        "fetched": len(places),
        "details_found": sum(1 for detail in details.values() if detail is not None),
        "records": ranked,
        "export": export_result,
        "api_calls": client.calls_made,
    }
