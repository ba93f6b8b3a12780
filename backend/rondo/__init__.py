from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import json
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    if not raw or raw.strip() == '*':
        return '*'
    return [o.strip() for o in raw.split(',') if o.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS', '*'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from rondo.main import main
    flask_app.register_blueprint(main)

    from rondo.api.catalog import catalog
    flask_app.register_blueprint(catalog, url_prefix='/api')

    # Register Socket.IO event handlers against a fresh room registry
    from rondo.socketio_events import register_socketio_handlers
    register_socketio_handlers(flask_app)

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the catalog tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('seed-questions')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def seed_questions_command(path):
        """Loads question sets from a JSON file shaped {pool: {set_name: {letter: entry}}}."""
        from rondo.services.catalog.store import add_question_set
        with open(path, encoding='utf-8') as fh:
            pools = json.load(fh)
        count = 0
        with flask_app.app_context():
            db.create_all()
            for pool, sets in pools.items():
                for name, letters in sets.items():
                    add_question_set(pool, name, letters)
                    count += 1
        print(f'Seeded {count} question set(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_questions_command)

    return flask_app
