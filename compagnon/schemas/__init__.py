"""
schemas/ — Pydantic request/response models

Provides input validation, OpenAPI docs, and the in-memory shape of
tenders passed between connector, scorer, cache and dashboard.
"""
