import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config, store=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    logging.getLogger(__name__).setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Explicit wiring; transports look the components up on the app
    from coupon_leaderboard.services.leaderboard import build_leaderboard
    leaderboard = build_leaderboard(flask_app.config, store=store, socketio=socketio)
    flask_app.extensions['leaderboard'] = leaderboard

    from coupon_leaderboard.main import main
    flask_app.register_blueprint(main)

    from coupon_leaderboard.api.leaderboard import leaderboard_api
    flask_app.register_blueprint(leaderboard_api, url_prefix='/api/leaderboard')

    # Register Socket.IO event handlers
    from coupon_leaderboard.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('leaderboard-clear')
    @click.argument('category')
    def leaderboard_clear_command(category):
        """Empties a category's winner queue and resyncs its leaderboard."""
        result = leaderboard.queue.clear_queue(category)
        if not result.ok:
            raise click.ClickException(f"Could not clear '{category}': {result.error}")
        click.echo(f"Cleared {result.value} entries from '{category}'.")

    flask_app.cli.add_command(leaderboard_clear_command)

    flask_app.logger.info(
        f"[startup] projection={flask_app.config.get('LEADERBOARD_PROJECTION_MODE')} "
        f"queue_prefix='{leaderboard.queue.key_prefix}'"
    )
    return flask_app
