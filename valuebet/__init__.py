"""ValueBet Oracle: odds proxy, LLM fair-value estimates and Kelly staking over a local bankroll ledger."""

__version__ = "1.0.0"
