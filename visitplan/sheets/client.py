"""Google Sheets API access for private spreadsheets.

Credentials come from a refresh token obtained once with
``scripts/get_token.py``. Without one, only publicly shared sheets can be
read (see ``visitplan.sheets.source``).

``read_sheet`` runs in worker threads, and the background check and a user's
sync can overlap. httplib2 connections are not thread-safe, so every request
gets its own authorized transport; only the credentials and the service
description are shared, behind a lock.
"""
import logging
import threading

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build

from visitplan.core.config import settings
from visitplan.planner.errors import SourceUnavailable

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

TOKEN_URI = "https://oauth2.googleapis.com/token"

_lock = threading.Lock()
_credentials: Credentials | None = None
_service = None


def has_valid_credentials() -> bool:
    """Check if a refresh token is configured."""
    return bool(settings.google_refresh_token)


def _refreshed_credentials() -> Credentials:
    # Caller holds _lock.
    global _credentials

    if _credentials is None:
        _credentials = Credentials(
            token=None,
            refresh_token=settings.google_refresh_token,
            token_uri=TOKEN_URI,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            scopes=SCOPES,
        )

    if not _credentials.valid:
        try:
            _credentials.refresh(Request())
        except GoogleAuthError as e:
            # Covers a rejected token as well as the token endpoint being
            # unreachable.
            _credentials = None
            logger.error(f"Failed to refresh Google credentials: {e}")
            raise SourceUnavailable(
                f"Google credentials could not be refreshed: {e}. "
                "Check the connection, or run 'python scripts/get_token.py' again."
            ) from e
        logger.info("Refreshed Google API credentials")

    return _credentials


def get_sheets_service():
    """Sheets API service and credentials with a currently valid access token.

    Returns:
        Tuple of (service, credentials). Execute requests with
        ``authorized_http(credentials)``; the service's own transport is
        never used.

    Raises:
        SourceUnavailable: If no refresh token is configured or it could not
            be refreshed.
    """
    global _service

    if not has_valid_credentials():
        raise SourceUnavailable("No Google credentials configured")

    with _lock:
        creds = _refreshed_credentials()
        if _service is None:
            _service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return _service, creds


def authorized_http(creds: Credentials) -> AuthorizedHttp:
    """A new transport for one request, bounded by the fetch timeout."""
    return AuthorizedHttp(creds, http=httplib2.Http(timeout=settings.sheet_fetch_timeout_seconds))


def _a1_sheet_range(sheet_name: str) -> str:
    # Whole-sheet range: quoted name, inner quotes doubled.
    return "'" + sheet_name.replace("'", "''") + "'"


def read_sheet(sheet_id: str, sheet_name: str = "") -> list[list[str]]:
    """
    Read every row of one sheet through the Sheets API.

    Args:
        sheet_id: Spreadsheet id from the sheet's URL.
        sheet_name: Sheet (tab) title; empty reads the first sheet.

    Returns:
        Rows of cell strings. Trailing empty cells are not included.
    """
    service, creds = get_sheets_service()
    spreadsheets = service.spreadsheets()

    if not sheet_name:
        meta = spreadsheets.get(spreadsheetId=sheet_id, fields="sheets.properties.title").execute(
            http=authorized_http(creds)
        )
        sheet_name = meta["sheets"][0]["properties"]["title"]

    result = spreadsheets.values().get(
        spreadsheetId=sheet_id, range=_a1_sheet_range(sheet_name)
    ).execute(http=authorized_http(creds))
    rows = result.get("values", [])
    logger.debug(f"Read {len(rows)} rows from sheet {sheet_name!r} of {sheet_id}")
    return [[str(cell) for cell in row] for row in rows]
