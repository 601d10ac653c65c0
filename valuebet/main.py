"""
FastAPI application for the ValueBet Oracle
Odds proxy, fair-value analysis, stake sizing and the bet/bankroll ledger
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from valuebet import __version__
from valuebet.auth import verify_api_key
from valuebet.core.kelly import RiskModel, recommend_stake
from valuebet.core.odds_math import edge_pct
from valuebet.exceptions import (
    BetNotResolvableError,
    InsufficientBankrollError,
    OddsServiceError,
)
from valuebet.models import get_db, init_db
from valuebet.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    BankrollReset,
    BankrollResponse,
    BetCreate,
    BetCreateResponse,
    BetResponse,
    BetResult,
    BetResultResponse,
    PerformanceSummary,
    StakeRequest,
    StakeResponse,
    SuccessResponse,
)
from valuebet.services.analysis import FairValueEstimator, get_estimator
from valuebet.services.bets import BetBook
from valuebet.services.ledger import BankrollLedger
from valuebet.services.odds import OddsAPIClient, get_odds_client
from valuebet.services.performance import calculate_summary

load_dotenv()

# Logging setup
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting ValueBet Oracle %s", __version__)
    init_db()

    yield

    logger.info("Shutting down ValueBet Oracle")


app = FastAPI(
    title="ValueBet Oracle",
    description="Value betting dashboard API: odds, fair-value analysis and Kelly staking",
    version=__version__,
    lifespan=lifespan,
)

_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8501")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Service info"""
    return {
        "app": "ValueBet Oracle",
        "version": __version__,
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    health = {"status": "healthy", "database": "connected"}

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check database error: %s", e)
        health["status"] = "degraded"
        health["database"] = f"error: {e}"

    return health


# ============================================================================
# BANKROLL
# ============================================================================

@app.get("/api/bankroll", response_model=BankrollResponse)
def get_bankroll(
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Current balance and ROI baseline."""
    return BankrollLedger(db).read()


@app.post("/api/bankroll/reset", response_model=SuccessResponse)
def reset_bankroll(
    payload: BankrollReset,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Set balance and baseline to the same amount. Erases ROI history."""
    BankrollLedger(db).reset(payload.amount)
    logger.info("Bankroll reset to %.2f by %s", payload.amount, user)
    return SuccessResponse()


# ============================================================================
# ODDS PROXY
# ============================================================================

@app.get("/api/odds")
def get_odds(
    sport: Optional[str] = Query(default=None, description="The Odds API sport key"),
    user: str = Depends(verify_api_key),
    client: OddsAPIClient = Depends(get_odds_client),
):
    """Events with bookmaker prices for ``sport``, exactly as the provider returns them.

    Without a sport key (or with a blank one) the list of supported sports
    is returned instead.
    """
    sport = (sport or "").strip()
    try:
        if not sport:
            return client.get_sports()
        return client.get_odds(sport)
    except OddsServiceError as exc:
        logger.warning("Odds proxy failed (sport=%s): %s", sport, exc)
        raise HTTPException(status_code=503, detail="Failed to fetch odds")


@app.get("/api/sports")
def get_sports(
    user: str = Depends(verify_api_key),
    client: OddsAPIClient = Depends(get_odds_client),
):
    """Supported sports, exactly as the provider returns them."""
    try:
        return client.get_sports()
    except OddsServiceError as exc:
        logger.warning("Sports proxy failed: %s", exc)
        raise HTTPException(status_code=503, detail="Failed to fetch sports")


# ============================================================================
# ANALYSIS & STAKING
# ============================================================================

@app.post("/api/analysis", response_model=AnalysisResponse)
async def analyze_outcome(
    payload: AnalysisRequest,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
    estimator: FairValueEstimator = Depends(get_estimator),
):
    """
    Estimate the fair price of one outcome and size a stake for it.

    Never fails because of the reasoning service: when it is unavailable the
    market price is used (source = "fallback", edge = 0, stake = 0).
    """
    result = await estimator.estimate(
        payload.event, payload.market, payload.odds, payload.context
    )
    estimate = result.estimate

    bankroll = BankrollLedger(db).read()
    sizing = recommend_stake(
        estimate.probability,
        payload.odds,
        bankroll.amount,
        RiskModel.from_label(payload.risk_model),
    )

    # Market-implied estimate: no information, no stake
    if result.degraded:
        fraction, amount = 0.0, 0.0
    else:
        fraction, amount = sizing.stake_fraction, sizing.stake_amount

    return AnalysisResponse(
        fair_odd=estimate.fair_odd,
        probability=estimate.probability,
        notes=estimate.notes,
        source=result.source,
        edge=edge_pct(payload.odds, estimate.fair_odd),
        risk_model=sizing.risk_model.label,
        stake_fraction=fraction,
        recommended_stake=amount,
    )


@app.post("/api/stake", response_model=StakeResponse)
def size_stake(
    payload: StakeRequest,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Fractional Kelly stake against the current bankroll balance."""
    bankroll = BankrollLedger(db).read()
    sizing = recommend_stake(
        payload.probability,
        payload.odds,
        bankroll.amount,
        RiskModel.from_label(payload.risk_model),
    )
    return StakeResponse(
        raw_fraction=sizing.raw_fraction,
        stake_fraction=sizing.stake_fraction,
        stake_amount=sizing.stake_amount,
        risk_model=sizing.risk_model.label,
        bankroll=bankroll.amount,
    )


# ============================================================================
# BETS
# ============================================================================

@app.post("/api/bets", response_model=BetCreateResponse)
def place_bet(
    bet_data: BetCreate,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Record a pending bet and debit its stake from the bankroll."""
    try:
        bet = BetBook(db).create(
            event=bet_data.event,
            market=bet_data.market,
            odds=bet_data.odds,
            fair_odds=bet_data.fair_odds,
            edge=bet_data.edge,
            stake=bet_data.stake,
        )
    except InsufficientBankrollError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return BetCreateResponse(id=bet.id)


@app.get("/api/bets", response_model=List[BetResponse])
def list_bets(
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """All bets, newest first."""
    return BetBook(db).list()


@app.post("/api/bets/{bet_id}/result", response_model=BetResultResponse)
def resolve_bet(
    bet_id: int,
    payload: BetResult,
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """Settle a pending bet as win / loss / void and credit the bankroll."""
    try:
        _, bankroll_change = BetBook(db).resolve(bet_id, payload.status)
    except BetNotResolvableError:
        raise HTTPException(status_code=400, detail="Invalid bet or already processed")

    return BetResultResponse(success=True, bankroll_change=bankroll_change)


# ============================================================================
# PERFORMANCE
# ============================================================================

@app.get("/api/performance/summary", response_model=PerformanceSummary)
def get_performance_summary(
    user: str = Depends(verify_api_key),
    db: Session = Depends(get_db),
):
    """ROI, bet counts by status, average edge and settled profit."""
    return calculate_summary(db)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
