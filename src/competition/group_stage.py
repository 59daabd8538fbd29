"""
Group stage: several round-robin groups feeding a fixed number of qualifiers.

Teams ranked above the cut line in every group qualify directly. When the
qualified count does not divide evenly by the group count, the remaining
places go to the teams ranked just below (one per group), split according to
the configured ``TieType``.
"""
import logging
import string
from enum import Enum
from typing import List, Optional, Set

from competition.errors import (
    AlreadyCompleteError,
    InvalidEntrantError,
    InvalidGroupCountError,
    InvalidQualifiedCountError,
    UnevenSeedTierError,
)
from competition.group import Group
from competition.knockout import KnockoutStage
from competition.models import Team
from competition.round_robin import MIN_TEAMS
from competition.simulation import MatchSimulator
from competition.standings import GroupRanking, rank_rows

logger = logging.getLogger(__name__)


class TieType(Enum):
    """
    How the places left after direct qualification are shared.

    RANKING: overall ranking comparison between the tied teams.
    KNOCKOUT: every tied team enters a knockout stage, exemptions going to the
    best ranked.
    MIXED: only the best ranked tied teams enter a single-leg knockout stage
    without exemptions; the others are eliminated.
    """

    RANKING = "ranking"
    KNOCKOUT = "knockout"
    MIXED = "mixed"


class StageStatus(Enum):
    PLAYING = "playing"
    RESOLVING_TIES = "resolving_ties"
    COMPLETE = "complete"


def group_name(index: int) -> str:
    letters = string.ascii_uppercase
    if index < len(letters):
        return f"Group {letters[index]}"
    return f"Group {index + 1}"


def mixed_bracket_size(tied_count: int, places: int) -> int:
    """Largest ``places * 2**k`` (k >= 1) not above ``tied_count``; 0 if none fits."""
    size = places * 2
    if size > tied_count:
        return 0
    while size * 2 <= tied_count:
        size *= 2
    return size


class GroupStage:
    """
    ``tiers`` are lists of teams by seed level; each tier is shuffled and dealt
    across the groups in turn. Every tier but the last must divide evenly by
    ``group_count``.
    """

    def __init__(self, group_count: int, one_leg: bool, qualified_count: int,
                 tie_type: TieType, *tiers, simulator: Optional[MatchSimulator] = None):
        tiers = [list(tier) for tier in tiers]
        teams = [team for tier in tiers for team in tier]
        for team in teams:
            if team is None or not isinstance(team, Team):
                raise InvalidEntrantError(f"Invalid team in list: {team!r}")
        if len({id(t) for t in teams}) != len(teams):
            raise InvalidEntrantError("Teams list contains duplicates")

        if group_count < 1 or len(teams) // group_count < MIN_TEAMS:
            raise InvalidGroupCountError(
                f"Cannot build {group_count} groups of at least {MIN_TEAMS} teams from {len(teams)} teams"
            )
        for index, tier in enumerate(tiers[:-1]):
            if len(tier) % group_count != 0:
                raise UnevenSeedTierError(
                    f"Seed tier {index + 1} has {len(tier)} teams, not a multiple of {group_count}"
                )

        smallest_group = len(teams) // group_count
        per_group, remainder = divmod(qualified_count, group_count)
        cut_rank = per_group + (1 if remainder else 0)
        if qualified_count < 1 or cut_rank > smallest_group:
            raise InvalidQualifiedCountError(
                f"Cannot qualify {qualified_count} teams from {group_count} groups of {smallest_group}+ teams"
            )

        self.group_count = group_count
        self.one_leg = one_leg
        self.qualified_count = qualified_count
        self.tie_type = TieType(tie_type)
        self.simulator = simulator or MatchSimulator()
        self.status = StageStatus.PLAYING
        self.tie_stage: Optional[KnockoutStage] = None
        self.tied: List[GroupRanking] = []
        self._qualified: List[Team] = []

        self.groups: List[Group] = [
            Group(members, one_leg, self.simulator, name=group_name(i))
            for i, members in enumerate(self._draw(tiers))
        ]
        logger.info(
            "Group stage drawn: %d groups, %d teams, %d to qualify (%s)",
            group_count, len(teams), qualified_count, self.tie_type.value,
        )

    def _draw(self, tiers):
        groups = [[] for _ in range(self.group_count)]
        dealt = 0
        for tier in tiers:
            for team in self.simulator.shuffle(tier):
                groups[dealt % self.group_count].append(team)
                dealt += 1
        return groups

    @property
    def teams(self) -> List[Team]:
        return [team for group in self.groups for team in group.teams]

    @property
    def qualified_teams(self) -> Set[Team]:
        return set(self._qualified)

    @property
    def is_complete(self) -> bool:
        return len(self._qualified) == self.qualified_count

    def play_next(self):
        """
        Play one match day in every unfinished group, or one knockout match
        day once the groups are over and ties remain.
        """
        if self.status is StageStatus.COMPLETE:
            raise AlreadyCompleteError("Group stage is already complete")

        if self.status is StageStatus.PLAYING:
            for group in self.groups:
                if not group.is_complete:
                    group.play_next()
            if all(group.is_complete for group in self.groups):
                self._resolve_qualification()
            return

        self.tie_stage.play_next()
        if self.tie_stage.is_complete:
            self._qualify(self.tie_stage.qualified)
            self._complete()

    def play_all(self):
        while self.status is not StageStatus.COMPLETE:
            self.play_next()

    def _qualify(self, teams):
        for team in teams:
            self._qualified.append(team)
            logger.debug("%s qualified", team)

    def _complete(self):
        self.status = StageStatus.COMPLETE
        logger.info("Group stage complete: %d teams qualified", len(self._qualified))

    def _resolve_qualification(self):
        per_group, remainder = divmod(self.qualified_count, self.group_count)
        rankings = [group.ranking() for group in self.groups]

        for ranking in rankings:
            self._qualify(row.team for rank, row in ranking if rank <= per_group)

        if remainder == 0:
            self._complete()
            return

        cut_rank = per_group + 1
        self.tied = rank_rows(row for ranking in rankings for rank, row in ranking if rank == cut_rank)
        logger.info(
            "%d places left for %d teams ranked #%d (%s)",
            remainder, len(self.tied), cut_rank, self.tie_type.value,
        )

        if self.tie_type is TieType.KNOCKOUT:
            self.tie_stage = KnockoutStage(
                [row.team for row in self.tied],
                one_leg=self.one_leg,
                one_leg_final=self.one_leg,
                simulator=self.simulator,
                places=remainder,
            )
        elif self.tie_type is TieType.MIXED and mixed_bracket_size(len(self.tied), remainder):
            size = mixed_bracket_size(len(self.tied), remainder)
            self.tie_stage = KnockoutStage(
                [row.team for row in self.tied[:size]],
                one_leg=True,
                one_leg_final=True,
                simulator=self.simulator,
                places=remainder,
            )
        else:
            self._qualify(row.team for row in self.tied[:remainder])
            self._complete()
            return

        self.status = StageStatus.RESOLVING_TIES
