"""Google ID-token verification for login."""

import os
from typing import Optional
from google.oauth2 import id_token
from google.auth.transport import requests
from dotenv import load_dotenv

load_dotenv()

GOOGLE_OAUTH_CLIENT_ID = os.getenv("GOOGLE_OAUTH_CLIENT_ID")

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def verify_google_token(id_token_str: str) -> Optional[str]:
    """Verify a Google ID token and return the verified email address.

    Returns:
        Email address, or None if the token is invalid or carries no verified email
    """
    try:
        idinfo = id_token.verify_oauth2_token(
            id_token_str,
            requests.Request(),
            GOOGLE_OAUTH_CLIENT_ID,
        )
    except ValueError:
        return None

    if idinfo.get("iss") not in GOOGLE_ISSUERS:
        return None
    if not idinfo.get("email") or not idinfo.get("email_verified", False):
        return None
    return idinfo["email"]
