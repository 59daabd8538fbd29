"""
Flask JSON API for the competition engine.

Every endpoint builds a structure from team names, plays it to the end with a
(optionally seeded) simulator and returns the full result.
"""
import os
import logging
from flask import Flask, request, jsonify
from competition.errors import CompetitionError
from competition.group import Group
from competition.group_stage import GroupStage, TieType
from competition.knockout import KnockoutStage
from competition.models import Team
from competition.settings import load_settings
from competition.simulation import MatchSimulator

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SETTINGS_FILE = os.environ.get('COMPETITION_SETTINGS', os.path.join(BASE_DIR, 'data', 'settings.yaml'))

logging.basicConfig(level=logging.INFO)


def build_simulator(seed=None):
    settings = load_settings(SETTINGS_FILE)
    if seed is not None:
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError('seed must be an integer')
        settings = settings.with_seed(seed)
    return MatchSimulator(settings)


def teams_from_names(names):
    """Create one Team per name; names must be unique non-empty strings."""
    if not isinstance(names, list):
        raise ValueError('teams must be a list of names')
    cleaned = []
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f'Invalid team name: {name!r}')
        cleaned.append(name.strip())
    if len(set(cleaned)) != len(cleaned):
        raise ValueError('Team names must be unique')
    return [Team(name=name) for name in cleaned]


def match_to_dict(match):
    if match.is_bye:
        return {'home': str(match.home_team), 'away': None, 'bye': True}
    return {
        'home': str(match.home_team),
        'away': str(match.away_team),
        'bye': False,
        'neutral': match.neutral,
        'played': match.played,
        'home_score': match.home_score,
        'away_score': match.away_score,
    }


def ranking_to_list(ranking):
    return [dict(rank=rank, **row.to_dict()) for rank, row in ranking]


def knockout_to_dict(stage):
    return {
        'rounds': [
            {
                'name': knockout_round.name,
                'ties': [[match_to_dict(leg) for leg in tie.legs] for tie in knockout_round.ties],
                'exempt': [str(t) for t in knockout_round.exempt],
            }
            for knockout_round in stage.rounds
        ],
        'qualified': [str(t) for t in stage.qualified],
    }


def _error(message, status=400):
    return jsonify({'success': False, 'error': message}), status


@app.route('/api/group', methods=['POST'])
def api_group():
    """Play a full round-robin group."""
    data = request.get_json(silent=True) or {}
    try:
        teams = teams_from_names(data.get('teams'))
        group = Group(teams, bool(data.get('one_leg', False)), build_simulator(data.get('seed')))
        group.play_all()
    except (CompetitionError, ValueError) as e:
        app.logger.warning(f'Group request rejected: {e}')
        return _error(str(e))

    return jsonify({
        'success': True,
        'match_days': [[match_to_dict(m) for m in md] for md in group.match_days],
        'ranking': ranking_to_list(group.ranking()),
    })


@app.route('/api/knockout', methods=['POST'])
def api_knockout():
    """Play a knockout stage; teams are listed from most to least likely to be exempted."""
    data = request.get_json(silent=True) or {}
    try:
        teams = teams_from_names(data.get('teams'))
        stage = KnockoutStage(
            teams,
            one_leg=bool(data.get('one_leg', False)),
            one_leg_final=bool(data.get('one_leg_final', False)),
            simulator=build_simulator(data.get('seed')),
        )
        stage.play_all()
    except (CompetitionError, ValueError) as e:
        app.logger.warning(f'Knockout request rejected: {e}')
        return _error(str(e))

    result = knockout_to_dict(stage)
    result['success'] = True
    result['winner'] = str(stage.winner)
    return jsonify(result)


@app.route('/api/group-stage', methods=['POST'])
def api_group_stage():
    """Play a group stage; ``tiers`` is a list of lists of team names."""
    data = request.get_json(silent=True) or {}
    try:
        tiers_data = data.get('tiers')
        if not isinstance(tiers_data, list) or not tiers_data:
            raise ValueError('tiers must be a non-empty list of team name lists')
        all_teams = teams_from_names([name for tier in tiers_data for name in (tier or [])])
        tiers = []
        offset = 0
        for tier in tiers_data:
            size = len(tier or [])
            tiers.append(all_teams[offset:offset + size])
            offset += size
        stage = GroupStage(
            int(data.get('group_count', 0)),
            bool(data.get('one_leg', False)),
            int(data.get('qualified_count', 0)),
            TieType(data.get('tie_type', TieType.RANKING.value)),
            *tiers,
            simulator=build_simulator(data.get('seed')),
        )
        stage.play_all()
    except (CompetitionError, ValueError, TypeError) as e:
        app.logger.warning(f'Group stage request rejected: {e}')
        return _error(str(e))

    app.logger.info(f'Group stage played: {len(stage.qualified_teams)} qualified')
    return jsonify({
        'success': True,
        'groups': [
            {'name': group.name, 'ranking': ranking_to_list(group.ranking())}
            for group in stage.groups
        ],
        'tie_break': knockout_to_dict(stage.tie_stage) if stage.tie_stage else None,
        'qualified': sorted(str(t) for t in stage.qualified_teams),
    })


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
