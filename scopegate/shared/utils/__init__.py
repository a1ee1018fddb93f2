"""Shared utilities: datetime and id generators."""

from scopegate.shared.utils.datetime import ensure_utc, utc_now
from scopegate.shared.utils.generators import generate_cuid

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "utc_now",
]
