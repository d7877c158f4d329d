"""
errors.py — Domain errors raised by the valuation engine.

Both subclass ValueError so the API layer can map them to 400 responses
without knowing every concrete type.
"""


class InvalidRiskProfileError(ValueError):
    """Raised when a capital structure cannot be weighted (D/E <= -1)."""


class InvalidQuickValuationInput(ValueError):
    """Raised when a quick-valuation form cannot produce a projection."""
