import time

from redlight import db
from redlight.models import Participant


def participant_of(session_id, player):
    return Participant.query.filter_by(session_id=session_id, player_id=player.id).first()


def go_silent(session_id, player, seconds_ago=10.0):
    """Backdate a participant's last heartbeat."""
    p = participant_of(session_id, player)
    p.last_seen_at = time.time() - seconds_ago
    db.session.commit()


def ident(player):
    return {'player_token': player.player_token, 'player_id': player.id}
