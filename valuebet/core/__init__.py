"""Core mathematics for the ValueBet Oracle.

This package contains pure building blocks:

- ``odds_math``: implied probability, edge and ROI percentages
- ``kelly``: risk models and fractional Kelly stake sizing

Nothing in this package imports from ``valuebet.services`` or ``valuebet.models``.
All modules are side-effect-free and unit-testable in isolation.
"""
