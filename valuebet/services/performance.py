"""
Performance summary computation.

Receives a SQLAlchemy Session and returns a plain dict so it can be
served directly from a FastAPI endpoint.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from valuebet.core.odds_math import roi_pct
from valuebet.models import Bet, BetStatus
from valuebet.services.bets import settlement_credit
from valuebet.services.ledger import BankrollLedger

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _win_rate(wins: int, total: int) -> float:
    return round(wins / total, 4) if total > 0 else 0.0


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def _settled_profit(bets: List[Bet]) -> float:
    """Returns minus stakes over settled bets (pending bets excluded)."""
    profit = 0.0
    for b in bets:
        if b.status == BetStatus.PENDING.value:
            continue
        profit += settlement_credit(b.stake, b.odds, BetStatus(b.status)) - b.stake
    return profit


# ---------------------------------------------------------------------------
# calculate_summary
# ---------------------------------------------------------------------------

def calculate_summary(db: Session) -> Dict:
    """
    Bankroll and bet-log summary:
      - roi_pct against the bankroll baseline
      - counts by status and win rate (voids excluded)
      - average edge across all bets
      - total staked and settled profit
    """
    bankroll = BankrollLedger(db).read()
    bets = db.query(Bet).all()

    counts = {status: 0 for status in BetStatus}
    for b in bets:
        counts[BetStatus(b.status)] += 1

    wins = counts[BetStatus.WIN]
    losses = counts[BetStatus.LOSS]
    avg_edge = _mean([b.edge for b in bets])

    return {
        "amount": round(bankroll.amount, 2),
        "initial_amount": round(bankroll.initial_amount, 2),
        "roi_pct": round(roi_pct(bankroll.amount, bankroll.initial_amount), 2),
        "total_bets": len(bets),
        "pending": counts[BetStatus.PENDING],
        "wins": wins,
        "losses": losses,
        "voids": counts[BetStatus.VOID],
        "win_rate": _win_rate(wins, wins + losses),
        "avg_edge": round(avg_edge, 2) if avg_edge is not None else 0.0,
        "total_staked": round(sum(b.stake for b in bets), 2),
        "settled_profit": round(_settled_profit(bets), 2),
    }
