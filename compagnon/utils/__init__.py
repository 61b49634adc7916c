"""Shared helpers for comma-separated profile fields and BOAMP multi-valued fields."""


def split_csv(value: str | None) -> list[str]:
    """'33, 40,,64' → ['33', '40', '64'] (trimmed, empties dropped, order kept)."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def as_list(value) -> list:
    """BOAMP multi-valued fields come back as a list, a scalar or null."""
    if value is None:
        return []
    if isinstance(value, list):
        return [v for v in value if v is not None]
    return [value]
