"""
Tests for Group play and standings.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from competition.errors import InvalidEntrantError, NoRoundsLeftError, TooFewEntrantsError
from competition.group import Group
from competition.models import Match, Team
from competition.standings import GroupRanking, rank_rows


@pytest.fixture
def three_team_group(make_teams, scripted_simulator):
    """One-leg group of three: A beats B 2-0, B and C draw 1-1, A wins 3-0 at C."""
    teams = make_teams(3)
    simulator = scripted_simulator([(2, 0), (1, 1), (0, 3)])
    return Group(teams, one_leg=True, simulator=simulator), teams


class TestGroupConstruction:
    """Tests for building a group."""

    def test_schedule_built_from_teams(self, make_teams):
        group = Group(make_teams(6))
        assert len(group.match_days) == 10
        assert not group.is_complete

    def test_teams_from_generator(self, make_teams):
        teams = make_teams(5)
        group = Group(t for t in teams)
        assert group.teams == teams
        assert len(group.match_days) == 10

    def test_too_few_teams(self, make_teams):
        with pytest.raises(TooFewEntrantsError):
            Group(make_teams(2))

    def test_missing_teams(self):
        with pytest.raises(InvalidEntrantError):
            Group(None)

    def test_default_name(self, make_teams):
        assert Group(make_teams(3)).name == "Group"
        assert Group(make_teams(3), name="Group B").name == "Group B"


class TestGroupPlay:
    """Tests for playing match days in order."""

    def test_play_next_in_order(self, three_team_group):
        group, teams = three_team_group
        first = group.next_match_day()
        assert first is group.match_days[0]
        group.play_next()
        assert first.is_complete
        assert group.next_match_day() is group.match_days[1]

    def test_play_all_then_no_rounds_left(self, three_team_group):
        group, _ = three_team_group
        group.play_all()
        assert group.is_complete
        assert group.next_match_day() is None
        with pytest.raises(NoRoundsLeftError):
            group.play_next()

    def test_partly_played_match_day_is_next(self, make_teams, scripted_simulator):
        group = Group(make_teams(4), simulator=scripted_simulator())
        group.match_days[0].matches[0].record(1, 1)
        assert group.next_match_day() is group.match_days[0]
        group.play_next()
        assert group.match_days[0].matches[0].home_score == 1
        assert group.next_match_day() is group.match_days[1]

    def test_seeded_play_reproducible(self, make_teams):
        import random
        from competition.simulation import MatchSimulator

        def scores(seed):
            group = Group(make_teams(6), simulator=MatchSimulator(rng=random.Random(seed)))
            group.play_all()
            return [(m.home_score, m.away_score) for md in group.match_days for m in md]

        assert scores(11) == scores(11)


class TestMatchesFor:
    """Tests for filtering one team's matches."""

    def test_all_matches_include_byes(self, make_teams):
        teams = make_teams(5)
        group = Group(teams)
        matches = group.matches_for(teams[0])
        assert len(matches) == 10
        assert sum(1 for m in matches if m.is_bye) == 2

    def test_exclude_byes(self, make_teams):
        teams = make_teams(5)
        group = Group(teams)
        matches = group.matches_for(teams[0], exclude_byes=True)
        assert len(matches) == 8
        assert not any(m.is_bye for m in matches)

    def test_played_filter(self, three_team_group):
        group, teams = three_team_group
        group.play_next()
        assert len(group.matches_for(teams[0], played=True)) == 1
        assert len(group.matches_for(teams[0], played=False)) == 2
        assert len(group.matches_for(teams[0], played=False, exclude_byes=True)) == 1
        assert len(group.matches_for(teams[2], played=True)) == 1
        assert group.matches_for(teams[2], played=True)[0].is_bye

    def test_matches_in_schedule_order(self, make_teams):
        teams = make_teams(6)
        group = Group(teams)
        matches = group.matches_for(teams[1])
        expected = [m for md in group.match_days for m in md.matches if m.includes(teams[1])]
        assert matches == expected

    def test_unknown_team_rejected(self, make_teams):
        group = Group(make_teams(4))
        with pytest.raises(InvalidEntrantError):
            group.matches_for(Team(name="Team 1"))

    def test_missing_team_rejected(self, make_teams):
        group = Group(make_teams(4))
        with pytest.raises(InvalidEntrantError):
            group.matches_for(None)


class TestStandings:
    """Tests for standings rows and ranking."""

    def test_standings_rows(self, three_team_group):
        group, (a, b, c) = three_team_group
        group.play_all()
        rows = {id(row.team): row for row in group.standings()}

        assert rows[id(a)].points == 6
        assert (rows[id(a)].goals_for, rows[id(a)].goals_against) == (5, 0)
        assert rows[id(b)].draws == 1 and rows[id(b)].losses == 1
        assert rows[id(c)].goal_difference == -3

    def test_standings_ignore_unplayed_and_byes(self, three_team_group):
        group, (a, b, c) = three_team_group
        group.play_next()
        rows = {id(row.team): row for row in group.standings()}
        assert rows[id(a)].played == 1
        assert rows[id(c)].played == 0

    def test_ranking_order(self, three_team_group):
        group, (a, b, c) = three_team_group
        group.play_all()
        ranking = group.ranking()
        assert [rank for rank, _ in ranking] == [1, 2, 3]
        assert [row.team for _, row in ranking] == [a, b, c]

    def test_ranking_before_any_play_keeps_team_order(self, make_teams):
        teams = make_teams(4)
        group = Group(teams)
        assert [row.team for _, row in group.ranking()] == teams

    def test_full_tie_keeps_team_order(self, make_teams, scripted_simulator):
        teams = make_teams(3)
        group = Group(teams, one_leg=True, simulator=scripted_simulator(default=(1, 1)))
        group.play_all()
        assert [row.team for _, row in group.ranking()] == teams

    def test_rank_rows_tie_breaks(self):
        a, b, c, d = (Team(name=n) for n in "ABCD")
        rows = [
            GroupRanking(team=a, played=3, wins=1, draws=1, losses=1, goals_for=3, goals_against=3),
            GroupRanking(team=b, played=3, wins=1, draws=1, losses=1, goals_for=5, goals_against=5),
            GroupRanking(team=c, played=3, wins=1, draws=1, losses=1, goals_for=4, goals_against=2),
            GroupRanking(team=d, played=3, wins=2, draws=0, losses=1, goals_for=2, goals_against=4),
        ]
        assert [r.team for r in rank_rows(rows)] == [d, c, b, a]

    def test_from_matches_rejects_unplayed(self):
        a, b = Team(name="A"), Team(name="B")
        with pytest.raises(ValueError):
            GroupRanking.from_matches(a, [Match(a, b)])

    def test_from_matches_rejects_foreign_match(self):
        a, b, c = Team(name="A"), Team(name="B"), Team(name="C")
        match = Match(b, c)
        match.record(1, 0)
        with pytest.raises(ValueError):
            GroupRanking.from_matches(a, [match])

    def test_to_dict(self):
        row = GroupRanking(team=Team(name="A"), played=2, wins=1, draws=1, goals_for=3, goals_against=1)
        data = row.to_dict()
        assert data['team'] == "A"
        assert data['points'] == 4
        assert data['goal_difference'] == 2
