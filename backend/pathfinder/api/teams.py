from flask import Blueprint, jsonify, request
from pathfinder import db
from pathfinder.api import respond
from pathfinder.models import HOUSES, GameSettings, Team
from pathfinder.services.hunt import presence, registration, session, submissions
from pathfinder.services.hunt.notify import publish_team, team_snapshot


teams = Blueprint('teams', __name__)


def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@teams.route('/register', methods=['POST'])
def register_team():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    house = data.get('house')
    members = [str(m).strip() for m in (data.get('members') or []) if str(m).strip()]
    if not name or not members:
        return jsonify({'error': 'Team name and at least one member are required'}), 400
    if house not in HOUSES:
        return jsonify({'error': f'House must be one of {", ".join(HOUSES)}'}), 400
    if len(set(members)) != len(members):
        return jsonify({'error': 'Member names must be unique'}), 400
    return respond(registration.register_team(name, house, members), status=201)


@teams.route('/login', methods=['POST'])
def login_team():
    data = request.get_json(silent=True) or {}
    code = (data.get('secret_code') or '').strip().lower()
    if not code:
        return jsonify({'error': 'secret_code is required'}), 400
    team = db.session.get(Team, code)
    if not team:
        return jsonify({'error': 'Team not found. Please check your secret code.'}), 404
    settings = GameSettings.current()
    return jsonify({
        'team': {
            'id': team.id,
            'name': team.name,
            'house': team.house,
            'members': team.member_names,
        },
        # The first member to log in after the hunt goes live starts the clock
        'needs_arming': settings.is_started and team.game_start_time is None,
    })


@teams.route('/<string:team_id>/state', methods=['GET'])
def get_team_state(team_id):
    return jsonify(team_snapshot(session.load_team(team_id)))


@teams.route('/<string:team_id>/arm', methods=['POST'])
def arm_team(team_id):
    member = (request.get_json(silent=True) or {}).get('member')
    if not member:
        return jsonify({'error': 'member is required'}), 400
    outcome = session.arm(team_id, member)
    if not outcome.ok:
        # A heartbeat was still recorded for the member
        publish_team(team_id)
    return respond(outcome, team_id)


@teams.route('/<string:team_id>/hint', methods=['POST'])
def request_hint(team_id):
    data = request.get_json(silent=True) or {}
    puzzle_id = _as_int(data.get('puzzle_id'))
    if puzzle_id is None:
        return jsonify({'error': 'puzzle_id is required'}), 400
    return respond(session.request_hint(team_id, puzzle_id, bool(data.get('immediate'))), team_id)


@teams.route('/<string:team_id>/skip', methods=['POST'])
def skip_puzzle(team_id):
    return respond(session.skip_puzzle(team_id), team_id)


@teams.route('/<string:team_id>/submissions', methods=['POST'])
def submit_answer(team_id):
    data = request.get_json(silent=True) or {}
    puzzle_id = _as_int(data.get('puzzle_id'))
    answer = (data.get('answer') or '').strip()
    if puzzle_id is None or not answer:
        return jsonify({'error': 'puzzle_id and answer are required'}), 400
    outcome = submissions.submit(
        team_id,
        puzzle_id,
        answer,
        image_ref=data.get('image_ref') or None,
        member=data.get('member') or None,
    )
    return respond(outcome, team_id, status=201)


@teams.route('/<string:team_id>/heartbeat', methods=['POST'])
def heartbeat(team_id):
    member = (request.get_json(silent=True) or {}).get('member')
    if not member:
        return jsonify({'error': 'member is required'}), 400
    at = presence.heartbeat(team_id, member)
    publish_team(team_id)
    return jsonify({'ok': True, 'last_heartbeat': at})


@teams.route('/<string:team_id>/leave', methods=['POST'])
def leave(team_id):
    member = (request.get_json(silent=True) or {}).get('member')
    if not member:
        return jsonify({'error': 'member is required'}), 400
    presence.leave(team_id, member)
    publish_team(team_id)
    return jsonify({'ok': True})
