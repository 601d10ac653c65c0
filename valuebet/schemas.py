"""
Pydantic request/response schemas for the ValueBet API.

Using explicit schemas instead of raw dicts rejects malformed client input
(missing fields, impossible prices, negative stakes) with a 422 before it
reaches the ledger, and generates accurate OpenAPI docs.

Field names are snake_case in Python; the handful of camelCase keys the
dashboard expects (``fairOdd``, ``bankrollChange`` ...) are field
aliases; responses are built by field name.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from valuebet.core.kelly import DEFAULT_RISK_MODEL, RISK_MODEL_LABELS, RiskModel


def _risk_model_label(v: str) -> str:
    # Validates and normalises case ("full kelly" → "Full Kelly")
    return RiskModel.from_label(v).label


# ---------------------------------------------------------------------------
# Bankroll
# ---------------------------------------------------------------------------

class BankrollResponse(BaseModel):
    """Singleton bankroll row."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float
    initial_amount: float


class BankrollReset(BaseModel):
    """Payload for POST /api/bankroll/reset."""
    amount: float = Field(..., ge=0, description="New balance and ROI baseline")


class SuccessResponse(BaseModel):
    success: bool = True


# ---------------------------------------------------------------------------
# Bets
# ---------------------------------------------------------------------------

class BetCreate(BaseModel):
    """
    Payload for POST /api/bets.

    ``edge`` is computed by the client from ``odds`` and ``fair_odds`` and
    stored as given.
    """

    event: str = Field(..., min_length=1, max_length=200, description='e.g. "Arsenal vs Chelsea"')
    market: str = Field(..., min_length=1, max_length=200, description='e.g. "h2h: Arsenal"')
    odds: float = Field(..., gt=1.0, description="Decimal odds taken")
    fair_odds: float = Field(..., gt=1.0, description="Estimated fair decimal odds")
    edge: float = Field(..., description="Percent: (odds / fair_odds - 1) * 100")
    stake: float = Field(..., gt=0, description="Amount risked")

    model_config = {
        "json_schema_extra": {
            "example": {
                "event": "Arsenal vs Chelsea",
                "market": "h2h: Arsenal",
                "odds": 2.10,
                "fair_odds": 2.00,
                "edge": 5.0,
                "stake": 11.36,
            }
        }
    }


class BetCreateResponse(BaseModel):
    id: int


class BetResponse(BaseModel):
    """A bet row as stored."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    event: str
    market: str
    odds: float
    fair_odds: float
    edge: float
    stake: float
    status: Literal["pending", "win", "loss", "void"]
    created_at: Optional[datetime]


class BetResult(BaseModel):
    """Payload for POST /api/bets/{bet_id}/result."""
    status: Literal["win", "loss", "void"]


class BetResultResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    bankroll_change: float = Field(..., alias="bankrollChange")


# ---------------------------------------------------------------------------
# Analysis and staking
# ---------------------------------------------------------------------------

class AnalysisRequest(BaseModel):
    """Payload for POST /api/analysis."""

    event: str = Field(..., min_length=1, max_length=200)
    market: str = Field(..., min_length=1, max_length=200)
    odds: float = Field(..., gt=1.0, description="Current (or manually entered) decimal price")
    context: str = Field("", max_length=2000, description="Optional free-text context")
    risk_model: str = Field(DEFAULT_RISK_MODEL.label, description=" | ".join(RISK_MODEL_LABELS))

    @field_validator("risk_model")
    @classmethod
    def validate_risk_model(cls, v: str) -> str:
        return _risk_model_label(v)


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fair_odd: float = Field(..., alias="fairOdd")
    probability: float
    notes: str
    source: Literal["model", "fallback"]
    edge: float = Field(..., description="Percent edge of odds over fairOdd")
    risk_model: str = Field(..., alias="riskModel")
    stake_fraction: float = Field(..., alias="stakeFraction")
    recommended_stake: float = Field(..., alias="recommendedStake")


class StakeRequest(BaseModel):
    """Payload for POST /api/stake."""

    probability: float = Field(..., ge=0.0, le=1.0)
    odds: float = Field(..., gt=1.0)
    risk_model: str = Field(DEFAULT_RISK_MODEL.label, description=" | ".join(RISK_MODEL_LABELS))

    @field_validator("risk_model")
    @classmethod
    def validate_risk_model(cls, v: str) -> str:
        return _risk_model_label(v)


class StakeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    raw_fraction: float = Field(..., alias="rawFraction")
    stake_fraction: float = Field(..., alias="stakeFraction")
    stake_amount: float = Field(..., alias="stakeAmount")
    risk_model: str = Field(..., alias="riskModel")
    bankroll: float


# ---------------------------------------------------------------------------
# Performance
# ---------------------------------------------------------------------------

class PerformanceSummary(BaseModel):
    amount: float
    initial_amount: float
    roi_pct: float
    total_bets: int
    pending: int
    wins: int
    losses: int
    voids: int
    win_rate: float
    avg_edge: float
    total_staked: float
    settled_profit: float
