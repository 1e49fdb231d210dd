from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from sqlalchemy.exc import OperationalError
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:9002",
    "http://127.0.0.1:9002",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from pathfinder.main import main
    flask_app.register_blueprint(main)

    from pathfinder.api.teams import teams
    flask_app.register_blueprint(teams, url_prefix='/api/teams')

    from pathfinder.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    from pathfinder.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from pathfinder.services.hunt.outcomes import NotFoundError

    @flask_app.errorhandler(NotFoundError)
    def handle_not_found(exc):
        return jsonify({'error': 'not-found', 'message': str(exc)}), 404

    @flask_app.errorhandler(OperationalError)
    def handle_store_unavailable(exc):
        # Transient store failure; every write is precondition-guarded so the
        # client may retry blindly.
        db.session.rollback()
        flask_app.logger.error(f"[store-unavailable] {exc}")
        return jsonify({'error': 'store-unavailable', 'message': 'Please retry shortly.'}), 503, {'Retry-After': '2'}

    from pathfinder.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'unauthorized', 'message': 'Organizer login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from pathfinder.seed import seed_database
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_database(flask_app)
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
