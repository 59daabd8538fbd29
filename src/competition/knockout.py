"""
Knockout stage generation and progression.

Rounds are sized ``places * 2**k`` (powers of two for a single champion).
When the entrant count does not fit, the first round is a partial round: only
the tail of the list plays, enough to bring the field down to the next size,
and the head of the list goes straight to the second round.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from competition.errors import (
    InvalidEntrantError,
    InvalidQualifiedCountError,
    NoRoundsLeftError,
    NotPlayedError,
    TooFewEntrantsError,
)
from competition.models import Match, MatchDay, Team
from competition.simulation import MatchSimulator

logger = logging.getLogger(__name__)


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_round_size(num_teams: int, places: int = 1) -> int:
    """Smallest ``places * 2**k`` (k >= 1) holding ``num_teams``."""
    size = places * 2
    while size < num_teams:
        size *= 2
    return size


def split_partial_round(teams: List[Team], places: int = 1):
    """
    Split ``teams`` into (playing, exempt) for the first round.

    With 23 teams the round size is 32, so the 2 * (23 - 16) = 14 last teams
    play and the 9 first ones are exempted.
    """
    size = calculate_round_size(len(teams), places)
    if size == len(teams):
        return list(teams), []
    previous = size // 2
    playing_count = (len(teams) - previous) * 2
    cut = len(teams) - playing_count
    return list(teams[cut:]), list(teams[:cut])


@dataclass
class Tie:
    """A knockout pairing over one or two legs."""

    first_leg: Match
    second_leg: Optional[Match] = None

    @property
    def legs(self) -> List[Match]:
        return [self.first_leg] if self.second_leg is None else [self.first_leg, self.second_leg]

    @property
    def played(self) -> bool:
        return all(leg.played for leg in self.legs)

    def aggregate(self):
        """Goals over both legs as (first leg home team, first leg away team)."""
        first, second = self.first_leg, self.second_leg
        if second is None:
            return first.home_score, first.away_score
        return first.home_score + second.away_score, first.away_score + second.home_score

    def away_goals(self):
        """Goals scored away over both legs, same orientation as ``aggregate``."""
        first, second = self.first_leg, self.second_leg
        if second is None:
            return 0, 0
        return second.away_score, first.away_score

    def qualified(self, simulator: MatchSimulator) -> Team:
        """
        The team going through: better single-match score or aggregate, then
        away goals for two-leg ties, then a penalty shootout.
        """
        if not self.played:
            raise NotPlayedError(f"Tie {self.first_leg} is not finished")

        home, away = self.first_leg.home_team, self.first_leg.away_team
        home_total, away_total = self.aggregate()
        if home_total != away_total:
            return home if home_total > away_total else away

        if self.second_leg is not None:
            home_away_goals, away_away_goals = self.away_goals()
            if home_away_goals != away_away_goals:
                return home if home_away_goals > away_away_goals else away

        return simulator.coin_flip(home, away)


@dataclass
class KnockoutRound:
    name: str
    ties: List[Tie]
    exempt: List[Team] = field(default_factory=list)
    match_days: List[MatchDay] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return all(md.is_complete for md in self.match_days)


class KnockoutStage:
    """
    Elimination ladder played round by round.

    ``teams`` is ordered by likelihood of being exempted from a partial first
    round (first teams are exempted first). ``one_leg`` applies to every round
    but the final, ``one_leg_final`` to the final. The stage ends when
    ``places`` teams are left.
    """

    def __init__(self, teams, one_leg: bool = False, one_leg_final: bool = False,
                 simulator: Optional[MatchSimulator] = None, places: int = 1):
        if teams is None:
            raise InvalidEntrantError("Teams list is missing")
        teams = list(teams)
        for team in teams:
            if team is None or not isinstance(team, Team):
                raise InvalidEntrantError(f"Invalid team in list: {team!r}")
        if len({id(t) for t in teams}) != len(teams):
            raise InvalidEntrantError("Teams list contains duplicates")
        if places < 1:
            raise InvalidQualifiedCountError(f"At least one place is required, got {places}")
        if len(teams) < 2 or len(teams) <= places:
            raise TooFewEntrantsError(
                f"At least {max(2, places + 1)} teams required, got {len(teams)}"
            )

        self.teams: List[Team] = teams
        self.one_leg = one_leg
        self.one_leg_final = one_leg_final
        self.places = places
        self.simulator = simulator or MatchSimulator()
        self.rounds: List[KnockoutRound] = []
        self.match_days: List[MatchDay] = []
        self._alive: List[Team] = list(teams)
        self._next_index = 0

        playing, exempt = split_partial_round(teams, places)
        self._build_round(playing, exempt)

    def _is_two_leg(self, alive_count: int) -> bool:
        if alive_count == self.places * 2:
            return not self.one_leg_final
        return not self.one_leg

    def _round_name(self, alive_count: int) -> str:
        size = calculate_round_size(alive_count, self.places)
        if self.places == 1:
            return get_round_name(size)
        return f"Round {len(self.rounds) + 1}"

    def _build_round(self, playing: List[Team], exempt: List[Team]):
        alive_count = len(playing) + len(exempt)
        two_legs = self._is_two_leg(alive_count)
        drawn = self.simulator.shuffle(playing)

        first_legs = [Match(drawn[i], drawn[i + 1], neutral=not two_legs) for i in range(0, len(drawn), 2)]
        first_day = MatchDay(first_legs)
        match_days = [first_day]
        if two_legs:
            second_day = first_day.reversed()
            match_days.append(second_day)
            ties = [Tie(first, second) for first, second in zip(first_day.matches, second_day.matches)]
        else:
            ties = [Tie(first) for first in first_legs]

        knockout_round = KnockoutRound(
            name=self._round_name(alive_count),
            ties=ties,
            exempt=list(exempt),
            match_days=match_days,
        )
        self.rounds.append(knockout_round)
        self.match_days.extend(match_days)
        logger.info(
            "Built %s: %d ties, %d exempt, %s",
            knockout_round.name, len(ties), len(exempt), "two legs" if two_legs else "one leg",
        )

    @property
    def current_round(self) -> KnockoutRound:
        return self.rounds[-1]

    @property
    def survivors(self) -> List[Team]:
        """Teams still in the competition."""
        return list(self._alive)

    @property
    def is_complete(self) -> bool:
        return len(self._alive) == self.places and self.current_round.is_complete

    @property
    def qualified(self) -> List[Team]:
        """The remaining ``places`` teams once the stage is complete."""
        return list(self._alive) if self.is_complete else []

    @property
    def winner(self) -> Optional[Team]:
        if self.places == 1 and self.is_complete:
            return self._alive[0]
        return None

    def next_match_day(self) -> Optional[MatchDay]:
        """Next match day to play, or None once the stage is over."""
        match_day = self.match_days[self._next_index]
        return None if match_day.is_complete else match_day

    def play_next(self):
        """Play the next match day; builds the following round after a round's last leg."""
        match_day = self.next_match_day()
        if match_day is None:
            raise NoRoundsLeftError("No more matches to play")

        match_day.play(self.simulator)
        logger.debug("Played %s", match_day)

        if self._next_index < len(self.match_days) - 1:
            self._next_index += 1
            return

        finished = self.current_round
        self._alive = [tie.qualified(self.simulator) for tie in finished.ties] + finished.exempt
        if len(self._alive) > self.places:
            self._build_round(self._alive, [])
            self._next_index += 1
        else:
            logger.info("Knockout stage complete: %s", ", ".join(str(t) for t in self._alive))

    def play_all(self):
        while self.next_match_day() is not None:
            self.play_next()
