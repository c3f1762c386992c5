from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .config import ConfigError, load_config
from .pipeline import run_once
from .prompts import ConsoleInput, InputProvider, prompt_search
from .workers.google_places import PlacesApiError

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None, input_provider: Optional[InputProvider] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Search Google Places for businesses, score them as leads and export to Google Sheets",
    )
    parser.parse_args(argv)

    try:
        config = load_config()
    except ConfigError as exc:
        _configure_logging("INFO")
        logger.error("%s", exc)
        return 1

    _configure_logging(config.log_level)
    provider = input_provider or ConsoleInput()

    try:
        city, category = prompt_search(provider)
        result = run_once(city, category, config=config)
    except PlacesApiError as exc:
        logger.error("An error occurred: %s", exc)
        logger.error("Response status: %s", exc.status_code)
        logger.error("Response data: %s", exc.body)
        return 0
    except Exception as exc:
        logger.error("An error occurred: %s", exc)
        return 0

    export = result["export"]
    if export.get("error"):
        logger.warning("Export skipped: %s", export["error"])
    logger.info(
        "Ranked %d businesses for %s in %s (%d API calls)",
        len(result["records"]), category, city, result["api_calls"],
    )
    logger.info("Process completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
