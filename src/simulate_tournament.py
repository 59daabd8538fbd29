#!/usr/bin/env python3
"""
Simulate a group, a knockout stage or a full group stage from a teams file.

Usage:
    python src/simulate_tournament.py group --teams data/teams.yaml
    python src/simulate_tournament.py knockout --teams data/teams.yaml --one-leg
    python src/simulate_tournament.py group-stage --groups 4 --qualified 6 --tie-type knockout

The teams file maps a seed tier name to a list of team names. Tiers are kept in
file order; group and knockout commands use every team, in file order.

Exit codes:
    0: Success
    1: Invalid input (teams file, settings or tournament parameters)
"""
import argparse
import logging
import os
import sys

import yaml

from competition.errors import CompetitionError
from competition.group import Group
from competition.group_stage import GroupStage, TieType
from competition.knockout import KnockoutStage
from competition.models import Team
from competition.settings import load_settings
from competition.simulation import MatchSimulator

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_TEAMS_FILE = os.path.join(BASE_DIR, 'data', 'teams.yaml')
DEFAULT_SETTINGS_FILE = os.path.join(BASE_DIR, 'data', 'settings.yaml')


def load_tiers(file_path):
    """Read ``{tier: [team names]}`` and return a list of Team lists, in file order."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        tiers_data = yaml.safe_load(file) or {}
    if not isinstance(tiers_data, dict):
        raise ValueError(f"{file_path} must map tier names to team lists")
    tiers = []
    for tier_name, team_names in tiers_data.items():
        tiers.append([Team(name=name, attributes={'tier': tier_name}) for name in team_names or []])
    return tiers


def load_teams(file_path):
    return [team for tier in load_tiers(file_path) for team in tier]


def print_match_days(match_days):
    for number, match_day in enumerate(match_days, start=1):
        print(f"# Match day {number}")
        for match in match_day:
            print(f"  {match!r}")


def print_ranking(ranking):
    print(f"{'#':>3} {'Team':<24} {'P':>3} {'W':>3} {'D':>3} {'L':>3} {'GF':>4} {'GA':>4} {'GD':>4} {'Pts':>4}")
    for rank, row in ranking:
        print(
            f"{rank:>3} {str(row.team):<24} {row.played:>3} {row.wins:>3} {row.draws:>3} {row.losses:>3} "
            f"{row.goals_for:>4} {row.goals_against:>4} {row.goal_difference:>4} {row.points:>4}"
        )


def run_group(args, simulator):
    group = Group(load_teams(args.teams), one_leg=args.one_leg, simulator=simulator)
    group.play_all()
    print_match_days(group.match_days)
    print()
    print_ranking(group.ranking())


def run_knockout(args, simulator):
    stage = KnockoutStage(load_teams(args.teams), args.one_leg, args.one_leg_final, simulator)
    stage.play_all()
    for knockout_round in stage.rounds:
        print(f"# {knockout_round.name}")
        for tie in knockout_round.ties:
            legs = " / ".join(repr(leg) for leg in tie.legs)
            print(f"  {legs}")
        if knockout_round.exempt:
            print(f"  Exempt: {', '.join(str(t) for t in knockout_round.exempt)}")
    print()
    print(f"Winner: {stage.winner}")


def run_group_stage(args, simulator):
    stage = GroupStage(
        args.groups, args.one_leg, args.qualified, TieType(args.tie_type),
        *load_tiers(args.teams), simulator=simulator,
    )
    stage.play_all()
    for group in stage.groups:
        print(f"# {group.name}")
        print_ranking(group.ranking())
        print()
    if stage.tie_stage is not None:
        print("# Tie-break knockout")
        for knockout_round in stage.tie_stage.rounds:
            for tie in knockout_round.ties:
                print(f"  {' / '.join(repr(leg) for leg in tie.legs)}")
        print()
    print("Qualified: " + ", ".join(sorted(str(t) for t in stage.qualified_teams)))


def build_parser():
    # Shared options are given after the subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--teams', default=DEFAULT_TEAMS_FILE, help="YAML file of seed tiers")
    common.add_argument('--settings', default=DEFAULT_SETTINGS_FILE, help="YAML simulation settings")
    common.add_argument('--seed', type=int, default=None, help="Random seed (overrides settings)")
    common.add_argument('--one-leg', action='store_true', help="Single leg instead of home and away")
    common.add_argument('--verbose', '-v', action='store_true', help="Debug logging")

    parser = argparse.ArgumentParser(description="Simulate tournament structures")
    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('group', parents=[common], help="Single round-robin group")
    knockout = subparsers.add_parser('knockout', parents=[common], help="Knockout stage")
    knockout.add_argument('--one-leg-final', action='store_true', help="Single-leg final")
    group_stage = subparsers.add_parser('group-stage', parents=[common], help="Groups feeding qualifiers")
    group_stage.add_argument('--groups', type=int, required=True, help="Number of groups")
    group_stage.add_argument('--qualified', type=int, required=True, help="Number of qualified teams")
    group_stage.add_argument(
        '--tie-type', choices=[t.value for t in TieType], default=TieType.RANKING.value,
        help="How remaining places are decided",
    )
    return parser


COMMANDS = {
    'group': run_group,
    'knockout': run_knockout,
    'group-stage': run_group_stage,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        settings = load_settings(args.settings)
        if args.seed is not None:
            settings = settings.with_seed(args.seed)
        COMMANDS[args.command](args, MatchSimulator(settings))
    except (CompetitionError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
