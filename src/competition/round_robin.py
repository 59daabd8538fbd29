"""
Round-robin schedule generation (circle method).

One team stays fixed while every other slot rotates around a ring, giving
``n - 1`` match days for ``n`` teams (a ``BYE`` pads odd counts). The second
leg mirrors the first, then every other match day is reversed so teams
alternate between home and away as much as the rotation allows.

The schedule only depends on the order of the teams given; no randomness is
involved.
"""
import logging
from typing import List

from competition.errors import InvalidEntrantError, TooFewEntrantsError
from competition.models import BYE, Match, MatchDay, Team

logger = logging.getLogger(__name__)

MIN_TEAMS = 3


def validate_teams(teams) -> List[Team]:
    """Reject too-short lists, missing entries, non-teams and duplicates."""
    if teams is None:
        raise InvalidEntrantError("Teams list is missing")
    teams = list(teams)
    for team in teams:
        if team is None or not isinstance(team, Team):
            raise InvalidEntrantError(f"Invalid team in list: {team!r}")
    if len({id(t) for t in teams}) != len(teams):
        raise InvalidEntrantError("Teams list contains duplicates")
    if len(teams) < MIN_TEAMS:
        raise TooFewEntrantsError(f"At least {MIN_TEAMS} teams required, got {len(teams)}")
    return teams


def build_match_days(teams, one_leg: bool = False) -> List[MatchDay]:
    """
    Build the full schedule for ``teams``.

    With ``one_leg`` only the first half is kept: every pair meets once.
    Otherwise every pair meets twice with home and away swapped.
    """
    teams = validate_teams(teams)

    if len(teams) == 3:
        match_days = _three_teams_match_days(teams)
    elif len(teams) == 4:
        match_days = _four_teams_match_days(teams)
    else:
        slots = list(teams)
        if len(slots) % 2 == 1:
            slots.append(BYE)

        ordered = [_first_match_day(slots)]
        inversed_bye = False
        for _ in range(1, len(slots) - 1):
            next_day, inversed_bye = _next_match_day(slots, ordered[-1], inversed_bye)
            ordered.append(next_day)

        ordered.extend(md.reversed() for md in list(ordered))
        match_days = _alternate(ordered)

    if one_leg:
        match_days = match_days[:len(match_days) // 2]

    logger.debug("Built %d match days for %d teams (one_leg=%s)", len(match_days), len(teams), one_leg)
    return match_days


def _three_teams_match_days(teams):
    a, b, c = teams
    days = [
        MatchDay([Match(a, b), Match(c)]),
        MatchDay([Match(b, c), Match(a)]),
        MatchDay([Match(c, a), Match(b)]),
    ]
    days.extend(md.reversed() for md in list(days))
    return days


def _four_teams_match_days(teams):
    a, b, c, d = teams
    first = MatchDay([Match(a, b), Match(c, d)])
    second = MatchDay([Match(d, a), Match(b, c)])
    third = MatchDay([Match(b, d), Match(a, c)])
    return [first, second, third, third.reversed(), first.reversed(), second.reversed()]


def _first_match_day(slots):
    return MatchDay(_match_for(slots[i], slots[i + 1]) for i in range(0, len(slots), 2))


def _match_for(home, away):
    if home is BYE:
        return Match(away)
    if away is BYE:
        return Match(home)
    return Match(home, away)


def _next_match_day(slots, previous, inversed_bye):
    """
    Rotate every slot except the first one by one position around the ring.

    A bye is stored as ``Match(team)``, which loses the side the bye slot was
    on; ``inversed_bye`` carries that side from one match day to the next.
    Returns the new match day and the updated flag.
    """
    half = len(slots) // 2

    old = []
    for match in previous.matches:
        if match.is_bye:
            old.append([BYE, match.home_team] if inversed_bye else [match.home_team, BYE])
        else:
            old.append([match.home_team, match.away_team])

    new = [[None, None] for _ in range(half)]
    for k in range(half):
        for side in (0, 1):
            occupant = old[k][side]
            is_home = False
            if k == 0 and side == 0:
                new[0][0] = occupant
                is_home = True
            elif side == 1 and k < half - 1:
                new[k + 1][1] = occupant
            elif side == 1:
                new[half - 1][0] = occupant
                is_home = True
            elif k > 1:
                new[k - 1][0] = occupant
                is_home = True
            else:
                new[0][1] = occupant
            if occupant is BYE:
                inversed_bye = is_home

    return MatchDay(_match_for(home, away) for home, away in new), inversed_bye


def _alternate(ordered):
    """
    Reverse every other match day. The toggle is not flipped when crossing
    the middle of the schedule, so the second leg continues the pattern of
    the first.
    """
    alternated = []
    switch = False
    for i, match_day in enumerate(ordered):
        alternated.append(match_day.reversed() if switch else match_day)
        if i + 1 != len(ordered) // 2:
            switch = not switch
    return alternated
