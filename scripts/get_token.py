#!/usr/bin/env python3
"""
Obtain a Google refresh token for reading private spreadsheets.

Public spreadsheets are read through their CSV export and need no token.
For private ones, run this once, open the printed URL on any machine with a
browser, and paste the redirect URL back. The resulting token goes into
.env as GOOGLE_REFRESH_TOKEN.

Usage:
    python scripts/get_token.py [--client-id=XXX --client-secret=YYY]

Client id and secret default to GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET
from the environment or .env.
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from google_auth_oauthlib.flow import InstalledAppFlow

from visitplan.core.config import settings
from visitplan.sheets.client import SCOPES, TOKEN_URI

REDIRECT_URI = "http://localhost:8080/"


def build_flow(client_id: str, client_secret: str) -> InstalledAppFlow:
    flow = InstalledAppFlow.from_client_config(
        {
            "installed": {
                "client_id": client_id,
                "client_secret": client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": TOKEN_URI,
                "redirect_uris": [REDIRECT_URI],
            }
        },
        SCOPES,
    )
    flow.redirect_uri = REDIRECT_URI
    return flow


def main():
    parser = argparse.ArgumentParser(description="Get a Google Sheets refresh token")
    parser.add_argument("--client-id", default=settings.google_client_id)
    parser.add_argument("--client-secret", default=settings.google_client_secret)
    args = parser.parse_args()

    if not args.client_id or not args.client_secret:
        sys.exit(
            "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required, "
            "in .env or as --client-id/--client-secret."
        )

    # The redirect goes to plain-http localhost and is pasted back by hand.
    os.environ["OAUTHLIB_INSECURE_TRANSPORT"] = "1"
    flow = build_flow(args.client_id, args.client_secret)
    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

    print("Open this URL, allow read-only spreadsheet access, then copy the")
    print("localhost URL the browser is redirected to (it will not load):")
    print()
    print(auth_url)
    print()
    flow.fetch_token(authorization_response=input("Redirect URL: ").strip())

    print()
    print("Add this line to .env:")
    print(f"GOOGLE_REFRESH_TOKEN={flow.credentials.refresh_token}")


if __name__ == "__main__":
    main()
