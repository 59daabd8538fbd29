"""
Core data models: teams, matches and match days.
"""
from enum import Enum

from competition.errors import AlreadyPlayedError, InvalidEntrantError, NotPlayedError


class Team:
    """A competing team. Two teams are only equal if they are the same object."""

    def __init__(self, name, attributes=None):
        self.name = name
        self.attributes = attributes if attributes else {}

    def __repr__(self):
        return f"Team(name={self.name}, attributes={self.attributes})"

    def __str__(self):
        return str(self.name)


class Bye:
    """Opponent slot of a match where the other side is exempted."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "BYE"


BYE = Bye()


class MatchStatus(Enum):
    UNPLAYED = "unplayed"
    PLAYED = "played"


class MatchDayStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class Match:
    """
    A single fixture between a home and an away team, or a bye when the
    away side is ``BYE``.
    """

    def __init__(self, home_team, away_team=BYE, neutral=False):
        if not isinstance(home_team, Team):
            raise InvalidEntrantError(f"Home side must be a Team, got {home_team!r}")
        if away_team is not BYE and not isinstance(away_team, Team):
            raise InvalidEntrantError(f"Away side must be a Team or BYE, got {away_team!r}")
        if home_team is away_team:
            raise InvalidEntrantError(f"{home_team} cannot play against itself")
        self.home_team = home_team
        self.away_team = away_team
        self.neutral = neutral
        self.status = MatchStatus.UNPLAYED
        self.home_score = 0
        self.away_score = 0

    @property
    def is_bye(self):
        return self.away_team is BYE

    @property
    def played(self):
        return self.status is MatchStatus.PLAYED

    @property
    def teams(self):
        """Real teams taking part (one for a bye)."""
        if self.is_bye:
            return [self.home_team]
        return [self.home_team, self.away_team]

    def includes(self, team):
        return any(t is team for t in self.teams)

    def play(self, simulator):
        """Play the match with ``simulator``; a bye is resolved without a score."""
        if self.played:
            raise AlreadyPlayedError(f"{self} has already been played")
        if not self.is_bye:
            self.home_score, self.away_score = simulator.simulate(
                self.home_team, self.away_team, self.neutral
            )
        self.status = MatchStatus.PLAYED

    def record(self, home_score, away_score):
        """Set a known result instead of simulating one."""
        if self.played:
            raise AlreadyPlayedError(f"{self} has already been played")
        if self.is_bye:
            raise ValueError("Cannot record a score for a bye")
        if home_score < 0 or away_score < 0:
            raise ValueError("Scores cannot be negative")
        self.home_score = int(home_score)
        self.away_score = int(away_score)
        self.status = MatchStatus.PLAYED

    def winner(self):
        """Winning team, or None on a draw or a bye."""
        if not self.played:
            raise NotPlayedError(f"{self} has not been played yet")
        if self.is_bye:
            return None
        if self.home_score > self.away_score:
            return self.home_team
        if self.away_score > self.home_score:
            return self.away_team
        return None

    def loser(self):
        winner = self.winner()
        if winner is None:
            return None
        return self.away_team if winner is self.home_team else self.home_team

    def goals_for(self, team):
        return self.home_score if team is self.home_team else self.away_score

    def goals_against(self, team):
        return self.away_score if team is self.home_team else self.home_score

    def reversed(self):
        """Unplayed return fixture with sides swapped; a bye stays a bye."""
        if self.is_bye:
            return Match(self.home_team)
        return Match(self.away_team, self.home_team, neutral=self.neutral)

    def __repr__(self):
        if self.is_bye:
            return f"{self.home_team} exempt"
        if self.played:
            return f"{self.home_team} - {self.away_team} ({self.home_score}-{self.away_score})"
        return f"{self.home_team} - {self.away_team}"


class MatchDay:
    """A set of matches played together; each team appears at most once."""

    def __init__(self, matches):
        matches = list(matches)
        if not matches:
            raise ValueError("A match day needs at least one match")
        seen = set()
        for match in matches:
            for team in match.teams:
                if id(team) in seen:
                    raise InvalidEntrantError(f"{team} appears twice in the same match day")
                seen.add(id(team))
        self.matches = matches

    @property
    def status(self):
        played = sum(1 for m in self.matches if m.played)
        if played == 0:
            return MatchDayStatus.PENDING
        if played == len(self.matches):
            return MatchDayStatus.COMPLETE
        return MatchDayStatus.IN_PROGRESS

    @property
    def is_complete(self):
        return self.status is MatchDayStatus.COMPLETE

    def play(self, simulator):
        """Play every match not played yet."""
        if self.is_complete:
            raise AlreadyPlayedError("Match day already played")
        for match in self.matches:
            if not match.played:
                match.play(simulator)

    def reversed(self):
        return MatchDay(m.reversed() for m in self.matches)

    def __iter__(self):
        return iter(self.matches)

    def __len__(self):
        return len(self.matches)

    def __repr__(self):
        return " || ".join(repr(m) for m in self.matches)
