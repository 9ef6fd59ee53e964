"""Player identity resolution.

Players are registered and issued tokens elsewhere; this only maps the
credential a device presents to a player row.
"""

from redlight.models import Player
from redlight.services.game.errors import ValidationError, NotFoundError


def resolve_player(payload):
    data = payload or {}
    token = str(data.get('player_token') or '').strip()
    if not token:
        raise ValidationError('PLAYER_REQUIRED', 'player_token is required')
    player = Player.query.filter_by(player_token=token).first()
    if not player or not player.is_active:
        raise NotFoundError('PLAYER_NOT_FOUND', 'Player not found')
    claimed_id = data.get('player_id')
    try:
        claimed_id = int(claimed_id) if claimed_id not in (None, '', 0) else None
    except (TypeError, ValueError):
        raise ValidationError('PLAYER_REQUIRED', 'player_id must be an integer')
    if claimed_id is not None and claimed_id != player.id:
        raise NotFoundError('PLAYER_NOT_FOUND', 'Player not found')
    return player
