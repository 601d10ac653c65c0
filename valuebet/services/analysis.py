"""
Fair-value estimator.

Asks a reasoning model for the "true" probability and fair decimal price of
one outcome, constrained to a structured :class:`FairValueEstimate`.

The estimator is a total function.  If the model cannot be reached, fails
output validation or returns a nonsensical price, the caller still gets a
usable estimate: the market price itself (``fair_odd = odds``,
``probability = 1 / odds``).  Edge against that fallback is exactly 0%,
meaning "no information gained".  :class:`FairValueResult` carries a
``source`` so callers can tell an analyzed estimate from a defaulted one.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_ai import Agent

from valuebet.core.odds_math import implied_probability, validate_decimal_odds

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "google-gla:gemini-2.5-flash"

SOURCE_MODEL = "model"
SOURCE_FALLBACK = "fallback"

FALLBACK_NOTES = "Analysis failed. Using market odds."

SYSTEM_PROMPT = """\
You are a Professional ValueBet Oracle.
For the sports event and market you are given, calculate the "True Probability"
of the outcome and its "Fair Odds" (decimal, no bookmaker margin) based on team
form, injuries, historical matchups, and advanced metrics.
Provide a brief 2-sentence explanation.
"""


class FairValueEstimate(BaseModel):
    """Structured output requested from the reasoning model."""

    fair_odd: float = Field(..., description="The calculated fair decimal odd")
    probability: float = Field(..., description="The true probability (0-1)")
    notes: str = Field(..., description="2-sentence explanation")


@dataclass(frozen=True)
class FairValueResult:
    """An estimate plus where it came from ("model" or "fallback")."""

    estimate: FairValueEstimate
    source: str
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.source == SOURCE_FALLBACK


def build_prompt(event: str, market: str, odds: float, context: str = "") -> str:
    return (
        "Analyze the following sports event and market:\n"
        f"Event: {event}\n"
        f"Market: {market}\n"
        f"Current Market Odds: {odds}\n"
        f"Additional Context: {context}\n"
    )


def fallback_result(odds: float, error: Optional[str] = None) -> FairValueResult:
    """Market-implied estimate used whenever the model gives nothing usable."""
    estimate = FairValueEstimate(
        fair_odd=odds,
        probability=implied_probability(odds),
        notes=FALLBACK_NOTES,
    )
    return FairValueResult(estimate=estimate, source=SOURCE_FALLBACK, error=error)


def _validation_error(estimate: FairValueEstimate) -> Optional[str]:
    if not estimate.fair_odd > 1.0:
        return f"fair_odd must be > 1, got {estimate.fair_odd!r}"
    if not 0.0 <= estimate.probability <= 1.0:
        return f"probability must be in [0, 1], got {estimate.probability!r}"
    return None


class FairValueEstimator:
    """Wraps a pydantic-ai agent; one model request per estimate, no retries."""

    def __init__(self, agent: Optional[Agent] = None, model: Optional[str] = None):
        self._agent = agent
        self.model = model or os.getenv("ORACLE_LLM_MODEL", DEFAULT_MODEL)

    def get_agent(self) -> Agent:
        if self._agent is None:
            self._agent = Agent(
                model=self.model,
                output_type=FairValueEstimate,
                system_prompt=SYSTEM_PROMPT,
                retries=0,
            )
        return self._agent

    async def estimate(
        self,
        event: str,
        market: str,
        odds: float,
        context: str = "",
    ) -> FairValueResult:
        """Estimate the fair price of ``market`` at current price ``odds``.

        Raises:
            ValueError: If ``odds <= 1``.  Invalid input is rejected before any
                model call; every failure after that point returns the fallback.
        """
        validate_decimal_odds(odds)

        try:
            agent = self.get_agent()
            result = await agent.run(build_prompt(event, market, odds, context))
            estimate = result.output
        except Exception as exc:
            logger.warning("Fair-value analysis failed for %s / %s: %s", event, market, exc)
            return fallback_result(odds, error=str(exc))

        problem = _validation_error(estimate)
        if problem:
            logger.warning("Discarding model estimate for %s / %s: %s", event, market, problem)
            return fallback_result(odds, error=problem)

        logger.info(
            "Fair value for %s / %s: %.3f (p=%.3f) vs market %.3f",
            event, market, estimate.fair_odd, estimate.probability, odds,
        )
        return FairValueResult(estimate=estimate, source=SOURCE_MODEL)


_estimator: Optional[FairValueEstimator] = None


def get_estimator() -> FairValueEstimator:
    """Process-wide estimator; overridable as a FastAPI dependency in tests."""
    global _estimator
    if _estimator is None:
        _estimator = FairValueEstimator()
    return _estimator


async def estimate_fair_value(
    event: str,
    market: str,
    odds: float,
    context: str = "",
) -> FairValueResult:
    """Module-level shortcut for ``get_estimator().estimate(...)``."""
    return await get_estimator().estimate(event, market, odds, context)
