"""Authentication status routes."""
from fastapi import APIRouter

from visitplan.sheets.client import has_valid_credentials

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/status")
async def auth_status():
    """
    Check if Google Sheets credentials are configured.

    Without credentials only publicly shared spreadsheets can be read.
    """
    authenticated = has_valid_credentials()
    return {
        "authenticated": authenticated,
        "message": (
            "Credentials configured; private spreadsheets can be read"
            if authenticated
            else "No credentials; only public spreadsheets can be read. "
            "Run 'python scripts/get_token.py' to set up authentication"
        ),
    }
