"""Shared testing fixtures for the classical_quiz test suite."""

from .catalog import build_catalog, make_piece, make_pieces, sample_pieces  # noqa: F401
from .clock import FakeClock  # noqa: F401
from .http import FakeResponse, FakeSession  # noqa: F401

__all__ = [
    "FakeClock",
    "FakeResponse",
    "FakeSession",
    "build_catalog",
    "make_piece",
    "make_pieces",
    "sample_pieces",
]
