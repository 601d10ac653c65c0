"""
Optional API key authentication for a single local user.

When ORACLE_API_KEY is set, every /api route requires a matching
X-API-Key header.  When it is unset the API is open, which is the normal
setup for a dashboard running on localhost.
"""

import os
import secrets
from typing import Optional

from dotenv import load_dotenv
from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

# Load .env file
load_dotenv()

# API Key header
API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)

LOCAL_USER = "local"
KEY_USER = "owner"


def get_configured_api_key() -> Optional[str]:
    """Read at request time so the key can be rotated without a restart."""
    return os.getenv("ORACLE_API_KEY") or None


async def verify_api_key(api_key: str = Security(API_KEY_HEADER)) -> str:
    """
    Verify API key and return user identifier

    Usage in FastAPI routes:
        @app.get("/api/bets")
        async def list_bets(user: str = Depends(verify_api_key)):
            ...
    """
    expected = get_configured_api_key()
    if expected is None:
        return LOCAL_USER

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Include 'X-API-Key' header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not secrets.compare_digest(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return KEY_USER
