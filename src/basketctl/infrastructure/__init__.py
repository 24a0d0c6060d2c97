"""Infrastructure layer — SQL catalog backend, local cart storage, stock cache.

This layer depends on stdlib, pydantic, and SQLAlchemy. It may import
domain models to hand back validated records, but never services,
commands, or output.
"""
