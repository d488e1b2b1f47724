"""
Shared fixtures for the scorer tests.
"""
import pytest

from app.engine.session import MatchSession

CATALOG = {
    "teamA": ["A1", "A2", "A3", "A4"],
    "teamB": ["B1", "B2", "B3", "B4"],
}


def fake_catalog():
    return {key: list(names) for key, names in CATALOG.items()}


@pytest.fixture
def session():
    """Fresh session with a fixed catalog and the default roster of 11"""
    return MatchSession(catalog_loader=fake_catalog, history_limit=50, roster_size=11)
