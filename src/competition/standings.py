"""
Group standings derived from played matches.
"""
from dataclasses import dataclass
from typing import Iterable, List

from competition.models import Team

POINTS_PER_WIN = 3
POINTS_PER_DRAW = 1


@dataclass(frozen=True)
class GroupRanking:
    """Standings row for one team; built from its played, non-bye matches."""

    team: Team
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0

    @property
    def points(self) -> int:
        return POINTS_PER_WIN * self.wins + POINTS_PER_DRAW * self.draws

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    @classmethod
    def from_matches(cls, team, matches) -> "GroupRanking":
        matches = list(matches)
        for match in matches:
            if match is None or not match.includes(team) or match.is_bye or not match.played:
                raise ValueError(f"Invalid match for {team} standings: {match!r}")

        wins = sum(1 for m in matches if m.winner() is team)
        losses = sum(1 for m in matches if m.loser() is team)
        return cls(
            team=team,
            played=len(matches),
            wins=wins,
            draws=len(matches) - wins - losses,
            losses=losses,
            goals_for=sum(m.goals_for(team) for m in matches),
            goals_against=sum(m.goals_against(team) for m in matches),
        )

    def to_dict(self):
        return {
            'team': str(self.team),
            'played': self.played,
            'wins': self.wins,
            'draws': self.draws,
            'losses': self.losses,
            'goals_for': self.goals_for,
            'goals_against': self.goals_against,
            'goal_difference': self.goal_difference,
            'points': self.points,
        }


def rank_rows(rows: Iterable[GroupRanking]) -> List[GroupRanking]:
    """
    Sort by points, goal difference, then goals scored (all descending).
    Remaining ties keep their input order.
    """
    return sorted(rows, key=lambda r: (-r.points, -r.goal_difference, -r.goals_for))
