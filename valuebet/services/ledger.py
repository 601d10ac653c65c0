"""
Bankroll ledger: the one owned balance and its serialized mutation interface.

The bankroll is a single row (id 1).  Every mutation goes through
:meth:`BankrollLedger.unit_of_work`, which

    1. takes a process-wide lock so read-check-write sequences never
       interleave between requests, and
    2. wraps the work in one database transaction: commit on success,
       rollback on any exception.

``debit`` and ``credit`` only stage changes; they are meant to be called
inside a unit of work together with whatever else must succeed or fail
with them (see :class:`valuebet.services.bets.BetBook`).
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from valuebet.models import Bankroll, seed_bankroll

logger = logging.getLogger(__name__)

# Shared by every ledger instance in the process; sessions are per-request.
_LEDGER_LOCK = threading.RLock()


class BankrollLedger:
    """Owns reads and writes of the singleton bankroll row."""

    def __init__(self, db: Session, lock: threading.RLock = _LEDGER_LOCK):
        self.db = db
        self._lock = lock

    @contextmanager
    def unit_of_work(self) -> Iterator["BankrollLedger"]:
        """Serialize and commit a group of ledger/bet changes atomically."""
        with self._lock:
            try:
                yield self
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

    def read(self) -> Bankroll:
        """Current bankroll state; seeds the row if the table is empty."""
        return seed_bankroll(self.db)

    def reset(self, amount: float) -> Bankroll:
        """Set both balance and ROI baseline to ``amount``.

        This erases ROI history; it is a restart operation, not "add funds".
        """
        with self.unit_of_work():
            bankroll = self.read()
            bankroll.amount = amount
            bankroll.initial_amount = amount
        logger.info("Bankroll reset to %.2f", amount)
        return bankroll

    def debit(self, stake: float) -> Bankroll:
        """Subtract ``stake`` from the balance (staged, not committed)."""
        bankroll = self.read()
        bankroll.amount = bankroll.amount - stake
        return bankroll

    def credit(self, delta: float) -> Bankroll:
        """Add ``delta`` to the balance (staged, not committed)."""
        bankroll = self.read()
        bankroll.amount = bankroll.amount + delta
        return bankroll
