"""Leaderboard service client."""

from .client import (
    Rank,
    RankingClient,
    RankingError,
    RankingErrorKind,
    RankingType,
)

__all__ = [
    "Rank",
    "RankingClient",
    "RankingError",
    "RankingErrorKind",
    "RankingType",
]
