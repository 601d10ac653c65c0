"""
Bet record store.

Placement and settlement each touch two tables (``bets`` and ``bankroll``).
Both run inside a single :meth:`BankrollLedger.unit_of_work`, so a failure
part-way leaves neither the bet log nor the balance changed.

Lifecycle::

    pending ──► win | loss | void      (terminal, no further transitions)
"""

import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from valuebet.exceptions import BetNotResolvableError, InsufficientBankrollError
from valuebet.models import Bet, BetStatus
from valuebet.services.ledger import BankrollLedger

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Settlement math (pure, no DB)
# ---------------------------------------------------------------------------

def settlement_credit(stake: float, odds: float, status: BetStatus) -> float:
    """
    Amount returned to the bankroll when a bet settles.

    The stake was already debited at placement, so:
      win  → stake × odds   (stake back plus profit)
      void → stake          (net neutral)
      loss → 0
    """
    status = BetStatus(status)
    if status is BetStatus.WIN:
        return stake * odds
    if status is BetStatus.VOID:
        return stake
    if status is BetStatus.LOSS:
        return 0.0
    raise ValueError(f"Cannot settle a bet as {status.value!r}")


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class BetBook:
    """Creates, settles and lists bets against the bankroll ledger."""

    def __init__(self, db: Session, ledger: BankrollLedger = None):
        self.db = db
        self.ledger = ledger or BankrollLedger(db)

    def create(
        self,
        event: str,
        market: str,
        odds: float,
        fair_odds: float,
        edge: float,
        stake: float,
    ) -> Bet:
        """Insert a pending bet and debit its stake in one unit of work.

        Raises:
            InsufficientBankrollError: If ``stake`` exceeds the current balance.
        """
        with self.ledger.unit_of_work():
            balance = self.ledger.read().amount
            if stake > balance:
                raise InsufficientBankrollError(stake, balance)

            bet = Bet(
                event=event,
                market=market,
                odds=odds,
                fair_odds=fair_odds,
                edge=edge,
                stake=stake,
                status=BetStatus.PENDING.value,
            )
            self.db.add(bet)
            self.ledger.debit(stake)
            self.db.flush()

        logger.info(
            "Bet %d placed: %s | %s @ %.2f, stake %.2f (edge %.2f%%)",
            bet.id, event, market, odds, stake, edge,
        )
        return bet

    def resolve(self, bet_id: int, status: BetStatus) -> Tuple[Bet, float]:
        """Settle bet ``bet_id`` and credit the bankroll.

        Returns:
            The updated bet and the amount credited to the bankroll.

        Raises:
            BetNotResolvableError: If the bet does not exist or is not pending.
                Nothing is changed in that case.
            ValueError: If ``status`` is not a terminal status.
        """
        status = BetStatus(status)
        if not status.is_terminal:
            raise ValueError("A bet can only be resolved to win, loss or void")

        with self.ledger.unit_of_work():
            bet = self.db.get(Bet, bet_id)
            if bet is None or bet.status != BetStatus.PENDING.value:
                raise BetNotResolvableError(bet_id)

            bankroll_change = settlement_credit(bet.stake, bet.odds, status)
            bet.status = status.value
            self.ledger.credit(bankroll_change)

        logger.info(
            "Bet %d settled: %s, bankroll change %+.2f",
            bet_id, status.value.upper(), bankroll_change,
        )
        return bet, bankroll_change

    def list(self) -> List[Bet]:
        """All bets, most recent first."""
        return (
            self.db.query(Bet)
            .order_by(Bet.created_at.desc(), Bet.id.desc())
            .all()
        )
