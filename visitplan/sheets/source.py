"""Fetch circle-list rows from a Google spreadsheet.

Two transports are supported. With a configured refresh token the Sheets API
is used, which also reaches private sheets. Without one, the sheet's public
CSV export is downloaded with httpx. Either way the result is a list of rows
of cell strings, header row included.
"""
import asyncio
import logging
import re
from urllib.parse import quote

import httplib2
import httpx
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from visitplan.core.config import settings
from visitplan.planner.errors import SourceUnavailable
from visitplan.sheets.client import has_valid_credentials, read_sheet
from visitplan.sheets.rows import split_csv

logger = logging.getLogger(__name__)

_SHEET_ID = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")


def parse_sheet_id(source_url: str) -> str:
    """Extract the spreadsheet id from a Google Sheets URL.

    Raises:
        SourceUnavailable: If the URL is not a spreadsheet URL.
    """
    match = _SHEET_ID.search(source_url or "")
    if not match:
        raise SourceUnavailable(f"Not a spreadsheet URL: {source_url}", source_url)
    return match.group(1)


def csv_export_url(sheet_id: str, sheet_name: str = "") -> str:
    """Public CSV export URL of a sheet. Empty sheet name means the first sheet."""
    url = f"https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv"
    if sheet_name:
        url += f"&sheet={quote(sheet_name)}"
    return url


async def _fetch_csv_export(sheet_id: str, sheet_name: str) -> list[list[str]]:
    url = csv_export_url(sheet_id, sheet_name)
    async with httpx.AsyncClient(
        timeout=settings.sheet_fetch_timeout_seconds, follow_redirects=True
    ) as client:
        response = await client.get(url)
    response.raise_for_status()

    # A sheet that is not shared publicly answers with a sign-in page.
    if "text/csv" not in response.headers.get("content-type", ""):
        raise SourceUnavailable("Spreadsheet is not publicly readable")
    return split_csv(response.text)


async def fetch_rows(source_url: str, sheet_name: str = "") -> list[list[str]]:
    """
    Fetch all rows of a spreadsheet sheet.

    Args:
        source_url: Google Sheets URL containing the spreadsheet id.
        sheet_name: Sheet (tab) name; empty for the first sheet.

    Returns:
        Rows of cell strings, header row first.

    Raises:
        SourceUnavailable: If the URL is unusable or the sheet cannot be read.
    """
    sheet_id = parse_sheet_id(source_url)

    try:
        if has_valid_credentials():
            rows = await asyncio.to_thread(read_sheet, sheet_id, sheet_name)
        else:
            rows = await _fetch_csv_export(sheet_id, sheet_name)
    except SourceUnavailable as e:
        e.source_url = source_url
        logger.warning(f"Spreadsheet fetch failed for {source_url}: {e}")
        raise
    except (HttpError, httplib2.HttpLib2Error, GoogleAuthError, httpx.HTTPError, OSError) as e:
        # OSError covers sockets and timeouts on the API transport.
        logger.error(f"Spreadsheet fetch failed for {source_url}: {e}")
        raise SourceUnavailable(f"Could not read spreadsheet: {e}", source_url) from e

    logger.info(f"Fetched {len(rows)} rows from spreadsheet {sheet_id}")
    return rows
