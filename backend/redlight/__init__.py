from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import secrets
import click
from redlight.config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
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

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from redlight.main import main
    flask_app.register_blueprint(main)

    from redlight.api.player import player_api
    flask_app.register_blueprint(player_api, url_prefix='/api/redlight')

    from redlight.api.host import host_api
    flask_app.register_blueprint(host_api, url_prefix='/api/host/redlight')

    from redlight.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from redlight.models import HostUser

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(HostUser, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from redlight.models import Player
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            host = HostUser(username=flask_app.config['HOST_USERNAME'])
            host.set_password(flask_app.config['HOST_PASSWORD'])
            db.session.add(host)

            # Seed demo players; registration lives outside this service
            for idx, name in enumerate(['Ana', 'Bruno', 'Carla'], start=1):
                db.session.add(Player(
                    display_name=name,
                    public_code=f'P{idx:03d}',
                    player_token=secrets.token_hex(16),
                ))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
