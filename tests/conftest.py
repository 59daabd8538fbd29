"""
Shared pytest fixtures for competition engine tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the long statistical runs
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from competition.models import Team
from competition.simulation import MatchSimulator


class ScriptedSimulator(MatchSimulator):
    """
    Simulator returning scripted scores in order, then ``default`` once the
    script runs out. Shootouts and draws still use the seeded rng.
    """

    def __init__(self, scores=None, default=(1, 0), seed=0):
        super().__init__(rng=random.Random(seed))
        self.scores = list(scores or [])
        self.default = default
        self.calls = []

    def simulate(self, home_team, away_team, neutral=False):
        self.calls.append((home_team, away_team, neutral))
        if self.scores:
            return self.scores.pop(0)
        return self.default


@pytest.fixture
def make_teams():
    """Factory building ``count`` distinct teams named Team 1..N."""
    def _make(count, prefix="Team"):
        return [Team(name=f"{prefix} {i + 1}") for i in range(count)]
    return _make


@pytest.fixture
def seeded_simulator():
    """Simulator with a fixed seed so results are reproducible."""
    return MatchSimulator(rng=random.Random(1234))


@pytest.fixture
def scripted_simulator():
    """Factory for ScriptedSimulator."""
    def _make(scores=None, default=(1, 0), seed=0):
        return ScriptedSimulator(scores, default, seed)
    return _make


@pytest.fixture
def client():
    """Flask test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
