"""
HTTP tests for the FastAPI app.

The database is an in-memory SQLite engine and the odds provider and model
agent are mocked through ``app.dependency_overrides``.  The client is used
without its context manager so the lifespan (which touches the real DB
file) never runs.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from valuebet.exceptions import OddsServiceError
from valuebet.main import app
from valuebet.models import get_db
from valuebet.services.analysis import FairValueEstimate, FairValueEstimator, get_estimator
from valuebet.services.odds import get_odds_client


BET = {
    "event": "Arsenal vs Chelsea",
    "market": "h2h: Arsenal",
    "odds": 2.10,
    "fair_odds": 2.00,
    "edge": 5.0,
    "stake": 100.0,
}


@pytest.fixture
def odds_client():
    return MagicMock()


@pytest.fixture
def agent():
    agent = MagicMock()
    agent.run = AsyncMock(return_value=MagicMock(
        output=FairValueEstimate(fair_odd=2.0, probability=0.5, notes="Arsenal unbeaten at home.")
    ))
    return agent


@pytest.fixture
def client(session_factory, odds_client, agent, monkeypatch):
    monkeypatch.delenv("ORACLE_API_KEY", raising=False)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_odds_client] = lambda: odds_client
    app.dependency_overrides[get_estimator] = lambda: FairValueEstimator(agent=agent)
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def test_root(client):
    body = client.get("/").json()
    assert body["app"] == "ValueBet Oracle"
    assert body["status"] == "operational"
    assert body["timestamp"].endswith("+00:00")


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "database": "connected"}


# ---------------------------------------------------------------------------
# Bankroll
# ---------------------------------------------------------------------------

def test_get_bankroll(client):
    body = client.get("/api/bankroll").json()
    assert body == {"id": 1, "amount": 1000.0, "initial_amount": 1000.0}


def test_reset_bankroll(client):
    resp = client.post("/api/bankroll/reset", json={"amount": 500})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    body = client.get("/api/bankroll").json()
    assert body["amount"] == 500.0
    assert body["initial_amount"] == 500.0


@pytest.mark.parametrize("payload", [{}, {"amount": -1}, {"amount": "lots"}])
def test_reset_bankroll_validation(client, payload):
    assert client.post("/api/bankroll/reset", json=payload).status_code == 422


# ---------------------------------------------------------------------------
# Odds proxy
# ---------------------------------------------------------------------------

def test_odds_passthrough(client, odds_client):
    events = [{"id": "e1", "home_team": "Arsenal", "away_team": "Chelsea", "bookmakers": []}]
    odds_client.get_odds.return_value = events

    resp = client.get("/api/odds", params={"sport": "soccer_epl"})

    assert resp.status_code == 200
    assert resp.json() == events
    odds_client.get_odds.assert_called_once_with("soccer_epl")


def test_odds_without_sport_lists_sports(client, odds_client):
    odds_client.get_sports.return_value = [{"key": "soccer_epl", "active": True}]

    resp = client.get("/api/odds")

    assert resp.json() == [{"key": "soccer_epl", "active": True}]
    odds_client.get_odds.assert_not_called()


@pytest.mark.parametrize("sport", ["", " ", "  \t "])
def test_odds_blank_sport_lists_sports(client, odds_client, sport):
    odds_client.get_sports.return_value = [{"key": "soccer_epl", "active": True}]

    resp = TestClient(app, raise_server_exceptions=False).get("/api/odds", params={"sport": sport})

    assert resp.status_code == 200
    assert resp.json() == [{"key": "soccer_epl", "active": True}]
    odds_client.get_odds.assert_not_called()


def test_odds_sport_key_is_stripped(client, odds_client):
    odds_client.get_odds.return_value = []

    client.get("/api/odds", params={"sport": " soccer_epl "})

    odds_client.get_odds.assert_called_once_with("soccer_epl")


def test_odds_upstream_failure(client, odds_client):
    odds_client.get_odds.side_effect = OddsServiceError("down", status_code=500)

    resp = client.get("/api/odds", params={"sport": "soccer_epl"})

    assert resp.status_code == 503
    assert resp.json()["detail"] == "Failed to fetch odds"


def test_sports(client, odds_client):
    odds_client.get_sports.return_value = [{"key": "basketball_nba", "active": True}]
    assert client.get("/api/sports").json() == [{"key": "basketball_nba", "active": True}]


def test_sports_upstream_failure(client, odds_client):
    odds_client.get_sports.side_effect = OddsServiceError("no key")

    resp = client.get("/api/sports")

    assert resp.status_code == 503
    assert resp.json()["detail"] == "Failed to fetch sports"


# ---------------------------------------------------------------------------
# Analysis & staking
# ---------------------------------------------------------------------------

def test_analysis(client):
    resp = client.post("/api/analysis", json={
        "event": "Arsenal vs Chelsea", "market": "h2h: Arsenal", "odds": 2.10,
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["fairOdd"] == 2.0
    assert body["probability"] == 0.5
    assert body["source"] == "model"
    assert body["edge"] == pytest.approx(5.0)
    assert body["riskModel"] == "Fractional Kelly"
    assert body["stakeFraction"] == pytest.approx(0.01136, abs=1e-5)
    assert body["recommendedStake"] == pytest.approx(11.36, abs=0.01)


def test_analysis_risk_model_label_normalised(client):
    body = client.post("/api/analysis", json={
        "event": "A vs B", "market": "h2h: A", "odds": 2.10, "risk_model": "full kelly",
    }).json()
    assert body["riskModel"] == "Full Kelly"
    assert body["stakeFraction"] == pytest.approx(0.04545, abs=1e-5)


def test_analysis_fallback(client, agent):
    agent.run.side_effect = TimeoutError("model timed out")

    resp = client.post("/api/analysis", json={
        "event": "Arsenal vs Chelsea", "market": "h2h: Arsenal", "odds": 2.10,
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "fallback"
    assert body["fairOdd"] == 2.10
    assert body["edge"] == 0.0
    assert body["notes"] == "Analysis failed. Using market odds."
    assert body["stakeFraction"] == 0.0
    assert body["recommendedStake"] == 0.0


@pytest.mark.parametrize("odds", [1.03, 1.07, 1.09, 1.1, 1.37, 2.5, 3.33, 7.77, 9.99])
@pytest.mark.parametrize("risk_model", ["Safe", "Fractional Kelly", "Full Kelly"])
def test_analysis_fallback_never_stakes(client, agent, odds, risk_model):
    agent.run.side_effect = TimeoutError("model timed out")

    body = client.post("/api/analysis", json={
        "event": "A vs B", "market": "h2h: A", "odds": odds, "risk_model": risk_model,
    }).json()

    assert body["source"] == "fallback"
    assert body["edge"] == 0.0
    assert body["stakeFraction"] == 0.0
    assert body["recommendedStake"] == 0.0


@pytest.mark.parametrize("payload", [
    {"event": "A vs B", "market": "h2h: A", "odds": 1.0},
    {"event": "", "market": "h2h: A", "odds": 2.0},
    {"event": "A vs B", "market": "h2h: A", "odds": 2.0, "risk_model": "Martingale"},
])
def test_analysis_validation(client, agent, payload):
    assert client.post("/api/analysis", json=payload).status_code == 422
    agent.run.assert_not_called()


def test_stake(client):
    resp = client.post("/api/stake", json={"probability": 0.5, "odds": 2.10, "risk_model": "Safe"})

    body = resp.json()
    assert body["rawFraction"] == pytest.approx(0.04545, abs=1e-5)
    assert body["stakeFraction"] == pytest.approx(0.004545, abs=1e-6)
    assert body["stakeAmount"] == pytest.approx(4.55, abs=0.01)
    assert body["riskModel"] == "Safe"
    assert body["bankroll"] == 1000.0


def test_stake_no_edge(client):
    body = client.post("/api/stake", json={"probability": 0.4, "odds": 2.0}).json()
    assert body["rawFraction"] == pytest.approx(-0.2)
    assert body["stakeAmount"] == 0.0


# ---------------------------------------------------------------------------
# Bets
# ---------------------------------------------------------------------------

def test_place_and_list(client):
    resp = client.post("/api/bets", json=BET)
    assert resp.status_code == 200
    bet_id = resp.json()["id"]

    bets = client.get("/api/bets").json()
    assert [b["id"] for b in bets] == [bet_id]
    assert bets[0]["status"] == "pending"
    assert client.get("/api/bankroll").json()["amount"] == pytest.approx(900.0)


@pytest.mark.parametrize("field, value", [
    ("odds", 1.0),
    ("stake", 0),
    ("stake", -5),
    ("event", ""),
])
def test_place_validation(client, field, value):
    assert client.post("/api/bets", json={**BET, field: value}).status_code == 422


def test_place_over_balance(client):
    resp = client.post("/api/bets", json={**BET, "stake": 5000})
    assert resp.status_code == 400
    assert client.get("/api/bets").json() == []


def test_list_newest_first(client):
    first = client.post("/api/bets", json=BET).json()["id"]
    second = client.post("/api/bets", json={**BET, "market": "h2h: Chelsea"}).json()["id"]

    assert [b["id"] for b in client.get("/api/bets").json()] == [second, first]


@pytest.mark.parametrize("status, change, balance", [
    ("win",  210.0, 1110.0),
    ("loss",   0.0,  900.0),
    ("void", 100.0, 1000.0),
])
def test_resolve(client, status, change, balance):
    bet_id = client.post("/api/bets", json=BET).json()["id"]

    resp = client.post(f"/api/bets/{bet_id}/result", json={"status": status})

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["bankrollChange"] == pytest.approx(change)
    assert client.get("/api/bankroll").json()["amount"] == pytest.approx(balance)


def test_resolve_twice(client):
    bet_id = client.post("/api/bets", json=BET).json()["id"]
    client.post(f"/api/bets/{bet_id}/result", json={"status": "win"})

    resp = client.post(f"/api/bets/{bet_id}/result", json={"status": "loss"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid bet or already processed"
    assert client.get("/api/bankroll").json()["amount"] == pytest.approx(1110.0)


def test_resolve_missing(client):
    resp = client.post("/api/bets/999/result", json={"status": "win"})
    assert resp.status_code == 400


@pytest.mark.parametrize("status", ["pending", "push", ""])
def test_resolve_invalid_status(client, status):
    bet_id = client.post("/api/bets", json=BET).json()["id"]
    assert client.post(f"/api/bets/{bet_id}/result", json={"status": status}).status_code == 422


# ---------------------------------------------------------------------------
# Performance
# ---------------------------------------------------------------------------

def test_performance_summary(client):
    win_id = client.post("/api/bets", json=BET).json()["id"]
    client.post("/api/bets", json={**BET, "edge": 3.0})
    client.post(f"/api/bets/{win_id}/result", json={"status": "win"})

    body = client.get("/api/performance/summary").json()

    assert body["total_bets"] == 2
    assert body["wins"] == 1
    assert body["pending"] == 1
    assert body["avg_edge"] == pytest.approx(4.0)
    assert body["roi_pct"] == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Auth and errors
# ---------------------------------------------------------------------------

def test_api_key_required_when_configured(client, monkeypatch):
    monkeypatch.setenv("ORACLE_API_KEY", "secret")

    assert client.get("/api/bankroll").status_code == 401
    assert client.get("/api/bankroll", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/bankroll", headers={"X-API-Key": "secret"}).status_code == 200


def test_public_routes_open_when_key_configured(client, monkeypatch):
    monkeypatch.setenv("ORACLE_API_KEY", "secret")
    assert client.get("/health").status_code == 200


def test_unhandled_error_returns_500(client, odds_client):
    odds_client.get_sports.side_effect = RuntimeError("boom")

    resp = TestClient(app, raise_server_exceptions=False).get("/api/sports")

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error", "type": "RuntimeError"}
