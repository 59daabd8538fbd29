"""
Statistical match outcome simulator.

The outcome category (home win, draw, away win) is drawn first from a line
split in three zones weighted by team levels and home advantage. A total goal
count consistent with that category is then drawn from a normal distribution
and split between the two sides.
"""
import logging
import random
from enum import Enum
from typing import Callable, Optional, Tuple

from competition.settings import SimulationSettings

logger = logging.getLogger(__name__)


class Outcome(Enum):
    HOME_WIN = "home_win"
    DRAW = "draw"
    AWAY_WIN = "away_win"


def outcome_thresholds(home_level: float, away_level: float,
                       home_advantage: float, draw_rate: float) -> Tuple[float, float, float]:
    """
    Split ``[0, total)`` into home win ``[0, n_start)``, draw ``[n_start, n_end)``
    and away win ``[n_end, total)`` zones.

    Returns (n_start, n_end, total).
    """
    weighted_home = home_level * home_advantage
    total = weighted_home + away_level
    n_start = weighted_home * (1 - draw_rate)
    n_end = weighted_home + away_level * draw_rate
    return n_start, n_end, total


def classify(x: float, n_start: float, n_end: float) -> Outcome:
    if x < n_start:
        return Outcome.HOME_WIN
    if x >= n_end:
        return Outcome.AWAY_WIN
    return Outcome.DRAW


def is_consistent(goals: int, outcome: Outcome) -> bool:
    """An odd total cannot be a draw and a goalless match cannot have a winner."""
    if outcome is Outcome.DRAW:
        return goals % 2 == 0
    return goals > 0


def split_goals(goals: int, x: float, n_start: float, n_end: float, total: float) -> Tuple[int, int]:
    """
    Share ``goals`` between home and away sides.

    For a decisive result the winning zone is cut in ``ceil(goals / 2)`` slices;
    the further ``x`` lies from the winner's end of the line, the closer the
    margin gets. The winner always keeps strictly more goals, so a decisive
    ``x`` needs ``goals > 0``.
    """
    outcome = classify(x, n_start, n_end)
    if outcome is Outcome.DRAW:
        return goals // 2, goals // 2
    if goals <= 0:
        raise ValueError(f"A {outcome.value} needs at least one goal, got {goals}")

    slices = (goals + 1) // 2
    if outcome is Outcome.HOME_WIN:
        step = n_start / slices
        position = 0.0
        home, away = goals + 1, -1
        for _ in range(slices):
            home -= 1
            away += 1
            position += step
            if position >= x:
                break
        return home, away

    step = (total - n_end) / slices
    position = total
    home, away = -1, goals + 1
    for _ in range(slices):
        home += 1
        away -= 1
        position -= step
        if position <= x:
            break
    return home, away


class MatchSimulator:
    """
    Produces match scores from team strengths.

    ``rng`` is the only source of randomness; pass a seeded ``random.Random`` to
    make a whole tournament reproducible. ``strengths`` maps a team to its
    (offense, defense) levels; every team gets the default levels when omitted.
    """

    def __init__(self, settings: Optional[SimulationSettings] = None,
                 rng: Optional[random.Random] = None,
                 strengths: Optional[Callable] = None):
        self.settings = settings or SimulationSettings()
        self.rng = rng if rng is not None else random.Random(self.settings.seed)
        self.strengths = strengths or self._default_strength

    def _default_strength(self, team):
        return self.settings.default_offense, self.settings.default_defense

    def expected_goals(self, home_offense, home_defense, away_offense, away_defense):
        adjustment = ((home_offense - away_defense) + (away_offense - home_defense)) / 100
        return self.settings.goals_avg * (1 + adjustment)

    def sample_total_goals(self, mean: float, outcome: Outcome) -> int:
        """Draw a goal total consistent with ``outcome``, resampling as needed."""
        while True:
            r = self.rng.gauss(mean, self.settings.goals_std_dev)
            if r < 0:
                continue
            goals = int(r)
            if is_consistent(goals, outcome):
                return goals

    def simulate(self, home_team, away_team, neutral=False) -> Tuple[int, int]:
        """Return (home_goals, away_goals)."""
        home_offense, home_defense = self.strengths(home_team)
        away_offense, away_defense = self.strengths(away_team)
        advantage = 1.0 if neutral else self.settings.home_advantage

        n_start, n_end, total = outcome_thresholds(
            home_offense + home_defense,
            away_offense + away_defense,
            advantage,
            self.settings.draw_rate,
        )
        x = self.rng.random() * total
        outcome = classify(x, n_start, n_end)
        mean = self.expected_goals(home_offense, home_defense, away_offense, away_defense)
        goals = self.sample_total_goals(mean, outcome)
        return split_goals(goals, x, n_start, n_end, total)

    def coin_flip(self, first, second):
        """Penalty shootout: each side wins with probability 1/2."""
        winner = first if self.rng.random() < 0.5 else second
        logger.debug("Shootout between %s and %s won by %s", first, second, winner)
        return winner

    def shuffle(self, items):
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        return shuffled
