"""
A round-robin group: teams, their schedule and their standings.
"""
import logging
from typing import List, Optional, Tuple

from competition.errors import InvalidEntrantError, NoRoundsLeftError
from competition.models import Match, MatchDay, Team
from competition.round_robin import build_match_days
from competition.simulation import MatchSimulator
from competition.standings import GroupRanking, rank_rows

logger = logging.getLogger(__name__)


class Group:
    def __init__(self, teams, one_leg: bool = False,
                 simulator: Optional[MatchSimulator] = None, name: Optional[str] = None):
        teams = list(teams) if teams is not None else None
        self.match_days: List[MatchDay] = build_match_days(teams, one_leg)
        self.teams: List[Team] = teams
        self.one_leg = one_leg
        self.simulator = simulator or MatchSimulator()
        self.name = name or "Group"

    def __repr__(self):
        return f"Group(name={self.name}, teams={[str(t) for t in self.teams]})"

    @property
    def is_complete(self) -> bool:
        return all(md.is_complete for md in self.match_days)

    def next_match_day(self) -> Optional[MatchDay]:
        """First match day not fully played, or None once the group is over."""
        for match_day in self.match_days:
            if not match_day.is_complete:
                return match_day
        return None

    def play_next(self):
        """Play the next match day in schedule order."""
        match_day = self.next_match_day()
        if match_day is None:
            raise NoRoundsLeftError(f"{self.name}: every match day has been played")
        match_day.play(self.simulator)
        logger.debug("%s: played %s", self.name, match_day)

    def play_all(self):
        while self.next_match_day() is not None:
            self.play_next()

    def matches_for(self, team, played: Optional[bool] = None, exclude_byes: bool = False) -> List[Match]:
        """
        Every match of ``team`` in schedule order.

        ``played`` filters on played (True) or unplayed (False) matches;
        ``exclude_byes`` drops the team's exemptions.
        """
        if team is None:
            raise InvalidEntrantError("Team is missing")
        if not any(t is team for t in self.teams):
            raise InvalidEntrantError(f"{team} is not in {self.name}")
        return [
            m
            for md in self.match_days
            for m in md.matches
            if m.includes(team)
            and (played is None or m.played == played)
            and not (exclude_byes and m.is_bye)
        ]

    def standings(self) -> List[GroupRanking]:
        return [
            GroupRanking.from_matches(team, self.matches_for(team, played=True, exclude_byes=True))
            for team in self.teams
        ]

    def ranking(self) -> List[Tuple[int, GroupRanking]]:
        """Ranked standings as (rank, row) pairs, rank starting at 1."""
        return [(rank, row) for rank, row in enumerate(rank_rows(self.standings()), start=1)]
