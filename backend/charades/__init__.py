import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def create_app(config_class=Config):
    public_dir = os.path.abspath(getattr(config_class, 'PUBLIC_DIR', None) or 'public')
    flask_app = Flask(__name__, static_folder=public_dir, static_url_path='')
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db, directory=os.path.join(os.path.dirname(os.path.dirname(__file__)), 'migrations'))
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Bind the process-wide room registry and turn state machine
    from charades.services.game import registry, turns
    registry.configure(code_length=flask_app.config.get('ROOM_CODE_LENGTH', 4))
    turns.init_app(flask_app, socketio, clock=registry.clock)

    from charades.main import main
    flask_app.register_blueprint(main)

    from charades.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from charades.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from charades.models import AdminUser

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(AdminUser, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from charades.models import ensure_admin_user
        from charades.services.game.words import seed_default_words
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            ensure_admin_user(flask_app.config['ADMIN_USERNAME'], flask_app.config['ADMIN_PASSWORD'])
            count = seed_default_words()
            print(f'Database has been reset and seeded with {count} words!')

    @click.command('seed-words')
    def seed_words_command():
        """Adds the default word list to an empty word table."""
        from charades.services.game.words import seed_default_words
        with flask_app.app_context():
            count = seed_default_words()
            print(f'Seeded {count} words.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_words_command)

    return flask_app
