"""Per-user tender payload cache."""

from .tender_cache import TenderCache  # noqa: F401
