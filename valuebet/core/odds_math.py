"""Decimal-odds mathematics: the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement locally in services or routes.

All prices in this system are **decimal odds**: the total payout per unit
staked, including the returned stake.  A winning 1.0 stake at 2.10 returns
2.10 (profit 1.10).  The Odds API is queried with ``oddsFormat=decimal`` so
no American-odds conversion is needed anywhere.
"""

from __future__ import annotations

from typing import Final

#: Smallest meaningful decimal price.  At exactly 1.0 a winning bet returns
#: only the stake, so profit per unit is zero and Kelly is undefined.
MIN_DECIMAL_ODDS: Final[float] = 1.0


def validate_decimal_odds(decimal_odds: float) -> float:
    """Return ``decimal_odds`` unchanged, or raise if it is not ``> 1``.

    Raises:
        ValueError: For prices ``<= 1.0`` (zero or negative profit per unit).
    """
    if decimal_odds <= MIN_DECIMAL_ODDS:
        raise ValueError(
            f"decimal_odds must be > {MIN_DECIMAL_ODDS}, got {decimal_odds!r}."
        )
    return decimal_odds


def implied_probability(decimal_odds: float) -> float:
    """Market-implied probability of a decimal price, ``1 / odds``.

    Examples::

        implied_probability(2.0)  → 0.5
        implied_probability(1.25) → 0.8
    """
    validate_decimal_odds(decimal_odds)
    return 1.0 / decimal_odds


def edge_pct(odds: float, fair_odds: float) -> float:
    """Percentage by which the offered price exceeds the fair price.

    ``edge = (odds / fair_odds − 1) × 100``.  Positive means the book is
    paying more than the estimated no-edge price.

    Examples::

        edge_pct(2.10, 2.00) → 5.0
        edge_pct(1.90, 2.00) → -5.0
        edge_pct(2.00, 2.00) → 0.0
    """
    if fair_odds <= 0:
        raise ValueError(f"fair_odds must be positive, got {fair_odds!r}.")
    return (odds / fair_odds - 1.0) * 100.0


def roi_pct(amount: float, initial_amount: float) -> float:
    """Return on the bankroll baseline, in percent.

    Returns 0.0 when the baseline is non-positive (nothing to measure
    against, e.g. a bankroll reset to zero).
    """
    if initial_amount <= 0:
        return 0.0
    return (amount / initial_amount - 1.0) * 100.0
