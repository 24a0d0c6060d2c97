"""Domain layer — pricing rules, quantities, and cart aggregation.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
