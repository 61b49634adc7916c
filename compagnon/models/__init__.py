"""Database models — re-exports all models.

Import from here:  from compagnon.models import UserProfile, UserInteraction, ...
Or from submodules: from compagnon.models.interactions import SAVED
"""

from .base import Base  # noqa: F401

# Accounts
from .profiles import UserProfile  # noqa: F401

# Triage state
from .interactions import UserInteraction  # noqa: F401

# Per-user tender storage
from .tenders import CachedTender, NotificationRead, VisitedTender  # noqa: F401
