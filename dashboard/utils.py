"""Shared utilities for all dashboard pages."""

import os
from typing import Dict, List

import requests
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

_API_URL = os.getenv("API_URL", "http://localhost:8000")
_API_KEY = os.getenv("ORACLE_API_KEY", "")

RISK_MODELS = ["Safe", "Fractional Kelly", "Full Kelly"]
RISK_MULTIPLIERS = {"Safe": "0.1x", "Fractional Kelly": "0.25x", "Full Kelly": "1.0x"}


def _key() -> str:
    return st.session_state.get("api_key", _API_KEY)


def _headers() -> dict:
    key = _key()
    return {"X-API-Key": key} if key else {}


def api_get(endpoint: str, params: dict = None):
    try:
        r = requests.get(f"{_API_URL}{endpoint}", headers=_headers(), params=params, timeout=15)
        r.raise_for_status()
        return r.json()
    except Exception as exc:
        st.error(f"API error: {exc}")
        return None


def api_post(endpoint: str, payload: dict, timeout: int = 15):
    try:
        r = requests.post(
            f"{_API_URL}{endpoint}",
            headers={**_headers(), "Content-Type": "application/json"},
            json=payload,
            timeout=timeout,
        )
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as exc:
        detail = exc.response.json().get("detail", str(exc)) if exc.response is not None else str(exc)
        st.error(f"API {exc.response.status_code}: {detail}")
        return None
    except Exception as exc:
        st.error(f"Request failed: {exc}")
        return None


def sidebar_api_key() -> None:
    """Show API key input in sidebar if the key is not yet set."""
    if not _key():
        with st.sidebar:
            key_input = st.text_input("API Key (if the API requires one)", type="password", key="api_key_sidebar")
            if key_input:
                st.session_state["api_key"] = key_input
                st.rerun()


def risk_model() -> str:
    return st.session_state.setdefault("risk_model", "Fractional Kelly")


def placeable_stake(amount) -> float:
    """Stake as it will be posted (cents). 0.0 means there is nothing to place."""
    return max(round(amount or 0.0, 2), 0.0)


def flatten_outcomes(events: List[Dict]) -> List[Dict]:
    """
    Flatten The Odds API payload into one row per priced outcome.

    events → bookmakers → markets → outcomes becomes
    {event, market, event_id, commence_time, bookmaker, market_key, outcome, price, point}.
    """
    rows = []
    for ev in events or []:
        label = f"{ev.get('home_team')} vs {ev.get('away_team')}"
        for book in ev.get("bookmakers", []):
            for market in book.get("markets", []):
                for outcome in market.get("outcomes", []):
                    name = outcome.get("name")
                    if outcome.get("point") is not None:
                        name = f"{name} {outcome['point']}"
                    rows.append({
                        "event": label,
                        "market": f"{market.get('key')}: {name}",
                        "event_id": ev.get("id"),
                        "commence_time": ev.get("commence_time"),
                        "bookmaker": book.get("title"),
                        "market_key": market.get("key"),
                        "outcome": name,
                        "price": outcome.get("price"),
                        "point": outcome.get("point"),
                    })
    return rows


STATUS_ICONS = {
    "pending": "⏳",
    "win":     "🟢",
    "loss":    "🔴",
    "void":    "⚪",
}
