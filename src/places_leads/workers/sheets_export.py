"""Google Sheets export worker.

Writes ranked leads to one tab per search ("<city> - <category>"), replacing
whatever the tab held before. Requires a Google Cloud service account.

Setup:
1. Enable the Google Sheets API in a GCP project
2. Create a Service Account and download its JSON key
3. Share the spreadsheet with the service account email
4. Set SPREADSHEET_ID and either GOOGLE_SHEETS_CREDENTIALS_FILE or
   GOOGLE_SHEETS_CLIENT_EMAIL + GOOGLE_SHEETS_PRIVATE_KEY in .env
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..config import Config
from ..models import NormalizedRecord

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]

HEADER = [
    "Name",
    "Address",
    "Phone",
    "Website",
    "Rating",
    "User Ratings Total",
    "Score",
]

MISSING = "N/A"


def _build_sheets_client(config: Config):
    """Build Google Sheets API client using service account credentials."""
    try:
        from google.oauth2.service_account import Credentials
        from googleapiclient.discovery import build
    except ImportError:
        logger.error(
            "Google API libraries not installed. Run: "
            "pip install google-auth google-api-python-client"
        )
        return None

    if config.google_sheets_credentials_file:
        creds = Credentials.from_service_account_file(config.google_sheets_credentials_file, scopes=SCOPES)
    else:
        creds = Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": config.google_sheets_client_email,
                # .env files usually carry the PEM with escaped newlines
                "private_key": (config.google_sheets_private_key or "").replace("\\n", "\n"),
                "token_uri": "https://oauth2.googleapis.com/token",
            },
            scopes=SCOPES,
        )
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def sheet_title(city: str, category: str) -> str:
    return f"{city} - {category}"


def _quote_title(title: str) -> str:
    return "'" + title.replace("'", "''") + "'"


def format_phone(phone: Optional[str]) -> str:
    if not phone:
        return MISSING
    if phone.startswith("+1"):
        return phone[2:].strip()
    return phone


def _cell(value: Any) -> str:
    if value is None:
        return MISSING
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_row(record: NormalizedRecord) -> list[str]:
    return [
        _cell(record.name),
        _cell(record.address),
        format_phone(record.phone),
        _cell(record.website),
        _cell(record.rating),
        _cell(record.user_ratings_total),
        _cell(record.score),
    ]


def _ensure_tab(sheets, spreadsheet_id: str, title: str) -> bool:
    """Create the tab if it doesn't exist. Returns True when it was created."""
    meta = sheets.get(spreadsheetId=spreadsheet_id, fields="sheets.properties.title").execute()
    titles = {sheet["properties"]["title"] for sheet in meta.get("sheets", [])}
    if title in titles:
        return False

    sheets.batchUpdate(
        spreadsheetId=spreadsheet_id,
        body={"requests": [{"addSheet": {"properties": {"title": title}}}]},
    ).execute()
    logger.info("Created sheet tab %r", title)
    return True


def export_to_sheets(
    records: Iterable[NormalizedRecord],
    city: str,
    category: str,
    config: Config,
    service=None,
) -> dict:
    """Export ranked leads to Google Sheets.

    Clears the "<city> - <category>" tab (creating it if needed) and writes a
    header plus one row per record. All cells are sent as text with
    valueInputOption=RAW. Errors are logged and reported in the returned dict,
    never raised.

    Returns:
        Dict with rows_written, spreadsheet_id, sheet_url, or error.
    """
    records = list(records)
    title = sheet_title(city, category)
    logger.info("Exporting %d records for %s businesses in %s", len(records), category, city)

    if not config.google_sheets_spreadsheet_id:
        logger.error("Error exporting to Google Sheets: SPREADSHEET_ID not configured")
        return {"error": "SPREADSHEET_ID not configured", "rows_written": 0}
    spreadsheet_id = config.google_sheets_spreadsheet_id

    try:
        if service is None:
            if not config.google_sheets_credentials_file and not (
                config.google_sheets_client_email and config.google_sheets_private_key
            ):
                logger.error("Error exporting to Google Sheets: service account credentials not configured")
                return {"error": "Google Sheets credentials not configured", "rows_written": 0}

            logger.info("Authenticating with Google Sheets...")
            service = _build_sheets_client(config)
            if not service:
                return {"error": "Failed to build Google Sheets client (missing dependencies?)", "rows_written": 0}

        sheets = service.spreadsheets()
        _ensure_tab(sheets, spreadsheet_id, title)

        quoted = _quote_title(title)
        sheets.values().clear(
            spreadsheetId=spreadsheet_id,
            range=quoted,
        ).execute()

        data_rows = [HEADER] + [format_row(record) for record in records]
        sheets.values().update(
            spreadsheetId=spreadsheet_id,
            range=f"{quoted}!A1",
            valueInputOption="RAW",
            body={"values": data_rows},
        ).execute()
    except Exception as exc:
        status = getattr(getattr(exc, "resp", None), "status", None)
        logger.exception("Error exporting to Google Sheets (status %s): %s", status, exc)
        return {"error": str(exc), "rows_written": 0}

    sheet_url = f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}"
    logger.info("Data exported successfully to Google Sheets")
    return {
        "rows_written": len(data_rows) - 1,
        "spreadsheet_id": spreadsheet_id,
        "sheet_title": title,
        "sheet_url": sheet_url,
    }
