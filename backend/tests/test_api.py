from conftest import T0, make_team, start_hunt


def _register(client, name='Sweet Solvers', house='Halwa', members=('Asha', 'Ravi')):
    return client.post('/api/teams/register', json={'name': name, 'house': house, 'members': list(members)})


def test_register_team(client, puzzles):
    res = _register(client)
    assert res.status_code == 201
    data = res.get_json()
    assert data['ok']
    assert data['secret_code'].startswith('halwa-')
    assert data['team']['members'] == ['Asha', 'Ravi']
    assert data['team']['score'] == 0
    assert data['team']['path_id'] == 1


def test_register_validates_input(client):
    assert _register(client, name='').status_code == 400
    assert _register(client, members=()).status_code == 400
    assert _register(client, house='Gryffindor').status_code == 400
    assert _register(client, members=('Asha', 'Asha')).status_code == 400


def test_register_closed(client, admin_client):
    admin_client.put('/api/admin/settings', json={'registration_open': False})
    res = _register(client)
    assert res.status_code == 403
    assert res.get_json()['error'] == 'registration-closed'


def test_early_bird_bonus(flask_app, client):
    flask_app.config['EARLY_BIRD_BONUSES'] = [(2, 10), (3, 5)]
    bonuses = [_register(client, name=f'Team {n}').get_json()['bonus'] for n in range(4)]
    assert bonuses == [10, 10, 5, 0]


def test_login_with_secret_code(client, puzzles):
    code = _register(client).get_json()['secret_code']
    res = client.post('/api/teams/login', json={'secret_code': f'  {code.upper()} '})
    assert res.status_code == 200
    data = res.get_json()
    assert data['team']['id'] == code
    assert data['needs_arming'] is False

    start_hunt()
    assert client.post('/api/teams/login', json={'secret_code': code}).get_json()['needs_arming'] is True
    assert client.post('/api/teams/login', json={'secret_code': 'halwa-xxxxxx'}).status_code == 404


def test_state_reports_derived_fields(client, team_id, clock):
    start_hunt()
    client.post(f'/api/teams/{team_id}/arm', json={'member': 'Asha'})
    clock.advance(100)
    state = client.get(f'/api/teams/{team_id}/state').get_json()
    assert state['state'] == 'active'
    assert state['path_length'] == 4
    assert state['timers']['overall_remaining'] == 3500
    assert state['timers']['hint_remaining'] == 200
    assert state['online'] == []
    assert state['current_puzzle']['title'] == 'Riddle 1'
    assert 'hint' not in state['current_puzzle']
    assert 'answer' not in state['current_puzzle']
    assert state['server_time'] == T0 + 100


def test_unknown_team_is_404(client, flask_app):
    res = client.get('/api/teams/halwa-nope00/state')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'not-found'
    assert client.post('/api/teams/halwa-nope00/skip').status_code == 404


def test_rejections_are_409_with_reason(client, team_id):
    res = client.post(f'/api/teams/{team_id}/arm', json={'member': 'Asha'})
    assert res.status_code == 409
    assert res.get_json() == {
        'ok': False,
        'error': 'not-started',
        'message': 'The hunt has not started yet.',
    }
    start_hunt()
    assert client.post(f'/api/teams/{team_id}/arm', json={'member': 'Asha'}).status_code == 200
    res = client.post(f'/api/teams/{team_id}/arm', json={'member': 'Ravi'})
    assert res.status_code == 409
    assert res.get_json()['error'] == 'already-armed'
    res = client.post(f'/api/teams/{team_id}/skip')
    assert res.get_json()['error'] == 'too-early'


def test_action_payloads_are_validated(client, team_id):
    assert client.post(f'/api/teams/{team_id}/arm', json={}).status_code == 400
    assert client.post(f'/api/teams/{team_id}/hint', json={'puzzle_id': 'first'}).status_code == 400
    assert client.post(f'/api/teams/{team_id}/submissions', json={'puzzle_id': 1}).status_code == 400
    assert client.post(f'/api/teams/{team_id}/heartbeat', json={}).status_code == 400


def test_full_round_over_http(client, admin_client, team_id, puzzles, clock):
    start_hunt()
    assert client.post(f'/api/teams/{team_id}/arm', json={'member': 'Asha'}).status_code == 200

    clock.advance(45)
    res = client.post(f'/api/teams/{team_id}/hint', json={'puzzle_id': puzzles[0], 'immediate': True})
    assert res.status_code == 200
    assert res.get_json()['hint'] == 'Hint 1'
    assert res.get_json()['score'] == -10

    res = client.post(f'/api/teams/{team_id}/submissions', json={
        'puzzle_id': puzzles[0], 'answer': 'A river', 'image_ref': 'uploads/1.jpg', 'member': 'Ravi',
    })
    assert res.status_code == 201
    submission_id = res.get_json()['submission_id']
    assert client.get(f'/api/teams/{team_id}/state').get_json()['state'] == 'paused_for_review'

    queue = admin_client.get('/api/admin/submissions').get_json()
    assert [s['id'] for s in queue] == [submission_id]
    assert queue[0]['puzzle_title'] == 'Riddle 1'
    assert queue[0]['submitted_by'] == 'Ravi'

    clock.advance(30)
    res = admin_client.post(f'/api/admin/submissions/{submission_id}/resolve', json={'verdict': 'approved'})
    assert res.status_code == 200
    assert res.get_json()['verdict'] == 'approved'
    res = admin_client.post(f'/api/admin/submissions/{submission_id}/resolve', json={'verdict': 'rejected'})
    assert res.status_code == 409
    assert res.get_json()['error'] == 'already-resolved'

    state = client.get(f'/api/teams/{team_id}/state').get_json()
    assert state['score'] == 10
    assert state['current_puzzle_index'] == 1
    assert state['riddles_solved'] == 1
    assert state['revealed_hints'] == [puzzles[0]]
    assert state['current_puzzle']['title'] == 'Riddle 2'
    assert state['timers']['skip_remaining'] == 600
    assert admin_client.get('/api/admin/submissions').get_json() == []
    assert len(admin_client.get('/api/admin/submissions?status=all').get_json()) == 1


def test_resolve_rejects_bad_verdict(admin_client, armed_team, puzzles, client):
    submission_id = client.post(f'/api/teams/{armed_team}/submissions', json={
        'puzzle_id': puzzles[0], 'answer': 'A river',
    }).get_json()['submission_id']
    res = admin_client.post(f'/api/admin/submissions/{submission_id}/resolve', json={'verdict': 'maybe'})
    assert res.status_code == 400
    assert admin_client.post('/api/admin/submissions/999/resolve', json={'verdict': 'approved'}).status_code == 404


def test_heartbeat_and_leave(client, team_id):
    res = client.post(f'/api/teams/{team_id}/heartbeat', json={'member': 'Ravi'})
    assert res.status_code == 200
    assert res.get_json()['last_heartbeat'] == T0
    assert client.get(f'/api/teams/{team_id}/state').get_json()['online'] == ['Ravi']
    assert client.post(f'/api/teams/{team_id}/leave', json={'member': 'Ravi'}).status_code == 200
    assert client.get(f'/api/teams/{team_id}/state').get_json()['online'] == []
    assert client.post(f'/api/teams/{team_id}/heartbeat', json={'member': 'Mallory'}).status_code == 404


def test_scoreboard_order_and_house_points(client, puzzles, clock):
    start_hunt()
    first = make_team(name='Sweet Solvers', house='Halwa')
    second = make_team(name='Jalebi Giants', house='Jalebi', members=('Meera',))
    third = make_team(name='Ladoo Legends', house='Ladoo', members=('Kabir',))
    for code, member in ((first, 'Asha'), (second, 'Meera'), (third, 'Kabir')):
        assert client.post(f'/api/teams/{code}/arm', json={'member': member}).status_code == 200

    # Both lose ten points; the later one ranks lower on the tie
    clock.advance(10)
    client.post(f'/api/teams/{third}/hint', json={'puzzle_id': puzzles[0], 'immediate': True})
    clock.advance(10)
    client.post(f'/api/teams/{first}/hint', json={'puzzle_id': puzzles[0], 'immediate': True})

    board = client.get('/api/scoreboard').get_json()
    assert [row['name'] for row in board['teams']] == ['Jalebi Giants', 'Ladoo Legends', 'Sweet Solvers']
    assert [row['rank'] for row in board['teams']] == [1, 2, 3]
    assert board['house_points'] == {'Halwa': -10, 'Chamcham': 0, 'Jalebi': 0, 'Ladoo': -10}
    assert all('id' not in row for row in board['teams'])


def test_clock_endpoint(client, flask_app):
    data = client.get('/api/clock').get_json()
    assert data['server_time'] == T0
    assert data['durations'] == {'hunt': 3600, 'hint_delay': 300, 'skip_delay': 600}
    assert data['heartbeat_interval'] == 20


def test_admin_routes_require_login(client, flask_app):
    assert client.get('/api/admin/submissions').status_code == 401
    assert client.put('/api/admin/settings', json={'is_started': True}).status_code == 401
    assert client.delete('/api/admin/teams/halwa-abc123').status_code == 401
    res = client.post('/api/admin/login', json={'username': 'admin', 'password': 'wrong'})
    assert res.status_code == 401


def test_admin_session(admin_client):
    assert admin_client.get('/api/admin/check_login').get_json()['user']['username'] == 'admin'
    assert admin_client.post('/api/admin/logout').status_code == 200
    assert admin_client.get('/api/admin/check_login').status_code == 401


def test_admin_settings_start_the_hunt(admin_client, client, team_id):
    assert client.get('/api/settings').get_json() == {'is_started': False, 'registration_open': True}
    res = admin_client.put('/api/admin/settings', json={'is_started': True})
    assert res.get_json()['is_started'] is True
    assert admin_client.get('/api/admin/settings').get_json()['is_started'] is True
    assert client.post(f'/api/teams/{team_id}/arm', json={'member': 'Asha'}).status_code == 200


def test_admin_override_puzzle_index(admin_client, client, armed_team):
    res = admin_client.put(f'/api/admin/teams/{armed_team}/puzzle-index', json={'index': 3})
    assert res.status_code == 200
    assert client.get(f'/api/teams/{armed_team}/state').get_json()['current_puzzle_index'] == 3
    assert admin_client.put(f'/api/admin/teams/{armed_team}/puzzle-index', json={'index': 9}).status_code == 400
    assert admin_client.put(f'/api/admin/teams/{armed_team}/puzzle-index', json={'index': '1'}).status_code == 400
    assert admin_client.put(f'/api/admin/teams/{armed_team}/puzzle-index', json={'index': True}).status_code == 400


def test_admin_lists_teams_ranked(admin_client, armed_team, puzzles, client):
    other = make_team(name='Ladoo Legends', house='Ladoo', members=('Kabir',))
    client.post(f'/api/teams/{armed_team}/hint', json={'puzzle_id': puzzles[0], 'immediate': True})
    teams = admin_client.get('/api/admin/teams').get_json()
    assert [t['id'] for t in teams] == [other, armed_team]


def test_admin_delete_team(admin_client, client, armed_team, puzzles):
    client.post(f'/api/teams/{armed_team}/hint', json={'puzzle_id': puzzles[0], 'immediate': True})
    client.post(f'/api/teams/{armed_team}/submissions', json={'puzzle_id': puzzles[0], 'answer': 'A river'})
    assert admin_client.delete(f'/api/admin/teams/{armed_team}').status_code == 200
    assert client.get(f'/api/teams/{armed_team}/state').status_code == 404
    assert admin_client.get('/api/admin/submissions?status=all').get_json() == []
    assert admin_client.delete(f'/api/admin/teams/{armed_team}').status_code == 404


def test_gallery_lists_photos_newest_first(client, admin_client, armed_team, puzzles, clock):
    submission_id = client.post(f'/api/teams/{armed_team}/submissions', json={
        'puzzle_id': puzzles[0], 'answer': 'A river', 'image_ref': 'uploads/river.jpg',
    }).get_json()['submission_id']
    admin_client.post(f'/api/admin/submissions/{submission_id}/resolve', json={'verdict': 'approved'})
    clock.advance(10)
    # Answers without a photo stay out of the gallery
    client.post(f'/api/teams/{armed_team}/submissions', json={'puzzle_id': puzzles[1], 'answer': 'A clock'})
    clock.advance(10)
    other = make_team(members=('Meera',), house='Jalebi', name='Jalebi Giants')
    client.post(f'/api/teams/{other}/arm', json={'member': 'Meera'})
    client.post(f'/api/teams/{other}/submissions', json={
        'puzzle_id': puzzles[0], 'answer': 'A stream', 'image_ref': 'uploads/stream.jpg',
    })

    photos = client.get('/api/gallery').get_json()
    assert [p['image_ref'] for p in photos] == ['uploads/stream.jpg', 'uploads/river.jpg']
    assert photos[0]['team_name'] == 'Jalebi Giants'
    assert photos[1]['puzzle_title'] == 'Riddle 1'
    assert all('team_id' not in p for p in photos)
    assert len(client.get('/api/gallery?limit=1').get_json()) == 1
