from __future__ import annotations

import logging
import random
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    FakeClock,
    FakeSession,
    build_catalog,
    make_pieces,
    sample_pieces,
)


@pytest.fixture
def http_session() -> FakeSession:
    """Scripted stand-in for ``requests`` used by catalog and ranking."""

    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def pieces():
    return sample_pieces()


@pytest.fixture
def catalog_factory(http_session: FakeSession):
    """Build a loaded :class:`CatalogCache` from a list of pieces."""

    def _factory(items=None, **kwargs):
        return build_catalog(
            items if items is not None else make_pieces(10),
            session=http_session,
            **kwargs,
        )

    return _factory


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    logger = logging.getLogger("classical_quiz")
    handlers = list(logger.handlers)
    propagate = logger.propagate
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.propagate = propagate
    logger.setLevel(level)
