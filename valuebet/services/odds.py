"""
The Odds API integration (thin pass-through).
https://the-odds-api.com/

Payloads are returned exactly as the provider sends them: a list of sports,
or a list of events with nested bookmakers → markets → outcomes.  Every
call is live; nothing is retried or cached.  Any transport error, non-2xx
status or non-JSON body is raised as :class:`OddsServiceError`.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from valuebet.exceptions import OddsServiceError

load_dotenv()

logger = logging.getLogger(__name__)

BASE_URL = "https://api.the-odds-api.com/v4"

DEFAULT_REGIONS = "us,eu"
DEFAULT_MARKETS = "h2h,totals"


class OddsAPIClient:
    """Client for The Odds API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = BASE_URL,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or float(os.getenv("ODDS_API_TIMEOUT", "10"))

    def get_sports(self) -> List[Dict[str, Any]]:
        """Fetch the list of sports the provider currently supports."""
        return self._get("/sports/")

    def get_odds(
        self,
        sport: str,
        regions: Optional[str] = None,
        markets: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch current odds for one sport.

        Returns list of events with decimal prices from every bookmaker
        in the requested regions.
        """
        if not sport or not sport.strip():
            raise ValueError("sport key is required")

        params = {
            "regions": regions or os.getenv("ODDS_API_REGIONS", DEFAULT_REGIONS),
            "markets": markets or os.getenv("ODDS_API_MARKETS", DEFAULT_MARKETS),
            "oddsFormat": "decimal",
        }
        return self._get(f"/sports/{sport.strip()}/odds/", params)

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        api_key = self.api_key or os.getenv("THE_ODDS_API_KEY")
        if not api_key:
            raise OddsServiceError("THE_ODDS_API_KEY not set in environment")

        url = f"{self.base_url}{path}"
        query = {"apiKey": api_key, **(params or {})}

        try:
            response = requests.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error("Odds API error %s on %s: %s", status, path, e)
            raise OddsServiceError(f"Odds provider returned {status}", status_code=status) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Odds API error on %s: %s", path, e)
            raise OddsServiceError(f"Odds provider request failed: {e}") from e

        logger.info(
            "Odds API %s: %d records. Quota: %s used, %s remaining",
            path,
            len(data) if isinstance(data, list) else 1,
            response.headers.get("x-requests-used"),
            response.headers.get("x-requests-remaining"),
        )
        return data


_client: Optional[OddsAPIClient] = None


def get_odds_client() -> OddsAPIClient:
    """Process-wide client; overridable as a FastAPI dependency in tests."""
    global _client
    if _client is None:
        _client = OddsAPIClient()
    return _client
