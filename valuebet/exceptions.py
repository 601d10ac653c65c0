"""Domain exceptions raised by ValueBet services and translated to HTTP errors in ``main``."""

from typing import Optional


class ValueBetError(Exception):
    """Base class for all ValueBet domain errors."""


class OddsServiceError(ValueBetError):
    """The odds provider could not be reached or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BetNotResolvableError(ValueBetError):
    """The bet does not exist or has already left the ``pending`` state."""

    def __init__(self, bet_id: int):
        super().__init__(f"Bet {bet_id} is invalid or already processed")
        self.bet_id = bet_id


class InsufficientBankrollError(ValueBetError):
    """A stake larger than the current bankroll balance was requested."""

    def __init__(self, stake: float, balance: float):
        super().__init__(
            f"Stake {stake:.2f} exceeds current bankroll balance {balance:.2f}"
        )
        self.stake = stake
        self.balance = balance
