"""basketctl — pricing and stock reconciliation engine for a grocery storefront."""

__version__ = "0.1.0"
