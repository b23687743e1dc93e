"""Domain models and entities.

Pure, strict data structures (Pydantic v2) describing blocks, ranges and
divergence reports.
"""
