"""Kelly criterion sizing: the single source of truth for stake math.

All functions here are **pure**: no I/O, no database, no logging.
Import from this module; never reimplement Kelly locally in services.

Design decisions
----------------
* Outcomes are binary win/lose at a given decimal price.  There is no push
  handling: a voided bet simply returns its stake at settlement time and
  plays no part in sizing.
* The user picks one of three **risk models**, each a fixed multiplier on
  full Kelly.  Fractional Kelly at 0.25× is the default: full Kelly assumes
  the probability estimate is exact, and an LLM estimate is anything but.
* A non-positive raw Kelly fraction (no edge) always clamps to a zero
  stake.  The calculator must never recommend a bet without an edge.

Run tests with::

    pytest tests/test_kelly.py -v
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from valuebet.core.odds_math import validate_decimal_odds


class RiskModel(Enum):
    """Stake multipliers applied to the full Kelly fraction."""

    SAFE = 0.10
    FRACTIONAL_KELLY = 0.25
    FULL_KELLY = 1.0

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def multiplier(self) -> float:
        return self.value

    @classmethod
    def from_label(cls, label: str) -> "RiskModel":
        """Look up a risk model by its display label ("Safe", "Full Kelly", ...)."""
        for model, name in _LABELS.items():
            if name.lower() == label.strip().lower():
                return model
        raise ValueError(
            f"Unknown risk model {label!r}. Expected one of: {', '.join(RISK_MODEL_LABELS)}"
        )


_LABELS: Final[dict] = {
    RiskModel.SAFE: "Safe",
    RiskModel.FRACTIONAL_KELLY: "Fractional Kelly",
    RiskModel.FULL_KELLY: "Full Kelly",
}

#: Display labels in UI order.
RISK_MODEL_LABELS: Final[tuple] = tuple(_LABELS.values())

DEFAULT_RISK_MODEL: Final[RiskModel] = RiskModel.FRACTIONAL_KELLY

#: Expected returns this close to zero are treated as no edge (float noise).
EDGE_TOLERANCE: Final[float] = 1e-9


@dataclass(frozen=True)
class StakeRecommendation:
    """Output of :func:`recommend_stake` for a single outcome."""

    raw_fraction: float
    stake_fraction: float
    stake_amount: float
    risk_model: RiskModel


def _validate_probability(probability: float) -> None:
    if not (0.0 <= probability <= 1.0):
        raise ValueError(f"probability must be in [0, 1], got {probability!r}.")


def _coerce_risk_model(risk_model: RiskModel | float) -> RiskModel:
    if isinstance(risk_model, RiskModel):
        return risk_model
    try:
        return RiskModel(risk_model)
    except ValueError:
        raise ValueError(
            f"risk multiplier must be one of "
            f"{[m.multiplier for m in RiskModel]}, got {risk_model!r}."
        ) from None


def raw_kelly_fraction(probability: float, decimal_odds: float) -> float:
    """Full Kelly fraction for a binary bet, before clamping.

    With ``b = odds − 1`` the profit per unit staked and ``q = 1 − p``::

        f*  =  (p · b − q) / b

    The result is negative when the bet has no edge at this price, and
    exactly 0.0 when ``p · o`` is within ``EDGE_TOLERANCE`` of 1 (the
    market-implied probability of the price itself).

    Raises:
        ValueError: If ``probability`` is outside ``[0, 1]`` or
            ``decimal_odds <= 1`` (``b == 0`` makes the formula undefined).

    Examples::

        raw_kelly_fraction(0.5, 2.10)  →  0.04545
        raw_kelly_fraction(0.4, 2.00)  → -0.2
    """
    _validate_probability(probability)
    validate_decimal_odds(decimal_odds)

    # p·b − q simplifies to p·o − 1; ulp-level residue from p = 1/o means no edge
    expected_return = probability * decimal_odds - 1.0
    if abs(expected_return) <= EDGE_TOLERANCE:
        return 0.0
    return expected_return / (decimal_odds - 1.0)


def stake_fraction(
    probability: float,
    decimal_odds: float,
    risk_model: RiskModel | float = DEFAULT_RISK_MODEL,
) -> float:
    """Fraction of bankroll to stake: ``max(0, f*) · multiplier``.

    ``risk_model`` may be a :class:`RiskModel` or its bare multiplier
    (``0.10``, ``0.25`` or ``1.0``).

    Examples::

        stake_fraction(0.5, 2.10, RiskModel.FRACTIONAL_KELLY) → 0.01136
        stake_fraction(0.4, 2.00, RiskModel.FULL_KELLY)       → 0.0
    """
    model = _coerce_risk_model(risk_model)
    raw = raw_kelly_fraction(probability, decimal_odds)
    return max(0.0, raw) * model.multiplier


def recommend_stake(
    probability: float,
    decimal_odds: float,
    bankroll: float,
    risk_model: RiskModel | float = DEFAULT_RISK_MODEL,
) -> StakeRecommendation:
    """Size a stake against the current bankroll balance.

    A non-positive bankroll yields a zero stake amount rather than a
    negative one.
    """
    model = _coerce_risk_model(risk_model)
    raw = raw_kelly_fraction(probability, decimal_odds)
    fraction = max(0.0, raw) * model.multiplier
    amount = fraction * bankroll if bankroll > 0 else 0.0
    return StakeRecommendation(
        raw_fraction=raw,
        stake_fraction=fraction,
        stake_amount=amount,
        risk_model=model,
    )
