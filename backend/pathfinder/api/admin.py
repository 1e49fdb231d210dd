from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from pathfinder import db, socketio
from pathfinder.api import respond
from pathfinder.models import GameSettings, Team, User, SUBMISSION_PENDING
from pathfinder.services.hunt import registration, session, submissions
from pathfinder.services.hunt.notify import NAMESPACE, publish_team_removed
from pathfinder.services.hunt.scoring import rank_teams


admin = Blueprint('admin', __name__)


@admin.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({'success': True, 'user': user.to_dict()})
    return jsonify({'success': False, 'error': 'Invalid username or password'}), 401


@admin.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@admin.route('/check_login', methods=['GET'])
@login_required
def check_login():
    return jsonify({'success': True, 'user': current_user.to_dict()})


@admin.route('/submissions', methods=['GET'])
@login_required
def list_submissions():
    status = request.args.get('status', SUBMISSION_PENDING)
    if status == 'all':
        status = None
    return jsonify([s.to_dict() for s in submissions.list_submissions(status)])


@admin.route('/submissions/<int:submission_id>/resolve', methods=['POST'])
@login_required
def resolve_submission(submission_id):
    verdict = (request.get_json(silent=True) or {}).get('verdict')
    try:
        outcome = submissions.resolve_submission(submission_id, verdict, grader=current_user.username)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    return respond(outcome, outcome.value.get('team_id'))


@admin.route('/settings', methods=['GET'])
@login_required
def get_settings():
    return jsonify(GameSettings.current().to_dict())


@admin.route('/settings', methods=['PUT'])
@login_required
def update_settings():
    data = request.get_json(silent=True) or {}
    settings = GameSettings.current()
    if 'is_started' in data:
        settings.is_started = bool(data['is_started'])
    if 'registration_open' in data:
        settings.registration_open = bool(data['registration_open'])
    db.session.add(settings)
    db.session.commit()
    payload = settings.to_dict()
    socketio.emit('settings_update', payload, namespace=NAMESPACE)
    return jsonify(payload)


@admin.route('/teams', methods=['GET'])
@login_required
def list_teams():
    return jsonify([t.to_dict() for t in rank_teams(Team.query.all())])


@admin.route('/teams/<string:team_id>/puzzle-index', methods=['PUT'])
@login_required
def override_puzzle_index(team_id):
    index = (request.get_json(silent=True) or {}).get('index')
    if not isinstance(index, int) or isinstance(index, bool):
        return jsonify({'error': 'index must be an integer'}), 400
    try:
        outcome = session.override_puzzle_index(team_id, index, actor=current_user.username)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    return respond(outcome, team_id)


@admin.route('/teams/<string:team_id>', methods=['DELETE'])
@login_required
def delete_team(team_id):
    registration.remove_team(team_id)
    publish_team_removed(team_id)
    return jsonify({'success': True})
