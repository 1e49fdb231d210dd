from flask import Blueprint, current_app, jsonify, request
from pathfinder.models import GameSettings
from pathfinder.services.hunt import clock
from pathfinder.services.hunt.scoring import scoreboard
from pathfinder.services.hunt.submissions import gallery

GALLERY_LIMIT = 100

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Pathfinder puzzle hunt server!'})

@main.route('/api/clock')
def server_clock():
    cfg = current_app.config
    return jsonify({
        'server_time': clock.now(),
        'durations': {
            'hunt': int(cfg.get('HUNT_DURATION_SEC', 3600)),
            'hint_delay': int(cfg.get('HINT_DELAY_SEC', 300)),
            'skip_delay': int(cfg.get('SKIP_DELAY_SEC', 600)),
        },
        'heartbeat_interval': int(cfg.get('HEARTBEAT_INTERVAL_SEC', 20)),
    })

@main.route('/api/settings')
def public_settings():
    return jsonify(GameSettings.current().to_dict())

@main.route('/api/scoreboard')
def get_scoreboard():
    return jsonify(scoreboard())

@main.route('/api/gallery')
def photo_gallery():
    limit = request.args.get('limit', GALLERY_LIMIT, type=int)
    return jsonify(gallery(max(1, min(limit, GALLERY_LIMIT))))
