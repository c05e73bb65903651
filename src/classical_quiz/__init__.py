"""Classical music quiz engine and terminal client."""

from .catalog import CatalogCache, CatalogFetcher, Piece
from .quiz import ALL_QUESTIONS, QuizEngine, QuizFormat, QuizState
from .ranking import RankingClient

__all__ = [
    "CatalogCache",
    "CatalogFetcher",
    "Piece",
    "ALL_QUESTIONS",
    "QuizEngine",
    "QuizFormat",
    "QuizState",
    "RankingClient",
]
