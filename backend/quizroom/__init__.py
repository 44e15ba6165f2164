from flask import Flask, g
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from quizroom.config import Config
from quizroom.errors import WorkflowError, Unauthenticated, render_workflow_error

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    # Import and register blueprints here
    from quizroom.main import main
    flask_app.register_blueprint(main)

    from quizroom.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    flask_app.register_error_handler(WorkflowError, render_workflow_error)

    # Flask-Login resolves the caller from a bearer token or the session cookie.
    # The resolved SessionContext is kept on `g` for the workflow calls.
    from quizroom.services.sessions import resolve_session, token_from_request

    @login_manager.request_loader
    def load_user_from_request(req):
        ctx = resolve_session(token_from_request(req))
        g.quiz_session = ctx
        return ctx.user if ctx else None

    @login_manager.unauthorized_handler
    def unauthorized():
        raise Unauthenticated()

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with a demo room."""
        from quizroom.services.workflow import join_room, add_question, set_room_active
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            joined = join_room('host', 'demo', as_admin=True)
            ctx = resolve_session(joined['token'])
            add_question(ctx, joined['room_id'], 'What is 2 + 2?', [
                {'text': '3', 'is_correct': False},
                {'text': '4', 'is_correct': True},
                {'text': '5', 'is_correct': False},
            ])
            set_room_active(ctx, joined['room_id'], True)
            click.echo("Database has been reset and seeded! Join room 'demo'.")

    flask_app.cli.add_command(db_reset_command)

    @click.command('purge-sessions')
    def purge_sessions_command():
        """Deletes expired and revoked session tokens."""
        from quizroom.services.sessions import purge_expired_sessions
        from quizroom.services.transactions import unit_of_work
        with flask_app.app_context():
            with unit_of_work('purge_sessions'):
                purged = purge_expired_sessions()
            click.echo(f'Purged {purged} session tokens.')

    flask_app.cli.add_command(purge_sessions_command)

    return flask_app
