from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from redlight import db
from redlight.services.game.errors import GameError, INFRASTRUCTURE


def register_error_handlers(blueprint):
    """Render service errors as JSON with their machine-readable kind."""

    @blueprint.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify(exc.to_dict()), exc.status

    @blueprint.errorhandler(SQLAlchemyError)
    def handle_db_error(exc):
        db.session.rollback()
        current_app.logger.exception(f"[db-error] {exc.__class__.__name__}")
        return jsonify({'ok': False, 'error': 'Server error', 'kind': INFRASTRUCTURE}), 500
