from __future__ import annotations

import argparse
import logging

from places_leads.config import load_config
from places_leads.pipeline import build_caches
from places_leads.workers.sheets_export import export_to_sheets


def main() -> None:
    parser = argparse.ArgumentParser(description="Re-export the last ranked results for a search to Google Sheets")
    parser.add_argument("--city", required=True)
    parser.add_argument("--category", required=True, help="Business type that was searched for")
    args = parser.parse_args()

    config = load_config()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO))

    _, _, results_cache = build_caches(config)
    records = results_cache.load(args.city, args.category)
    if not records:
        print(f"No cached results for {args.category} in {args.city}")
        return

    result = export_to_sheets(records, args.city, args.category, config)
    if result.get("error"):
        print(f"Export failed: {result['error']}")
    else:
        print(f"Exported {result['rows_written']} rows to {result['sheet_url']}")


if __name__ == "__main__":
    main()
