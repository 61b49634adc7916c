"""Tagged outcomes for calls that cross a network or storage boundary.

A failed BOAMP fetch and an empty one are different things to the
dashboard; so are a persisted and a dropped triage write.
"""

from dataclasses import dataclass, field


class _Unset:
    """Marker for 'argument not provided' where None is a meaningful value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass
class FetchResult:
    ok: bool
    tenders: list = field(default_factory=list)
    fetched: int = 0  # page length before the triage filter, drives has_more
    error: str | None = None

    @classmethod
    def success(cls, tenders: list, fetched: int | None = None) -> "FetchResult":
        return cls(ok=True, tenders=tenders, fetched=len(tenders) if fetched is None else fetched)

    @classmethod
    def failure(cls, error: str) -> "FetchResult":
        return cls(ok=False, error=error)


@dataclass
class WriteResult:
    ok: bool
    interaction: object | None = None
    error: str | None = None
