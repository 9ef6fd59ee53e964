"""Participant roster: join, heartbeat and liveness bookkeeping."""

import time
from typing import Optional, Tuple

from flask import current_app

from redlight import db
from redlight.models import GameSession, Participant, Player


def get_participant(gs: GameSession, player_id: int) -> Optional[Participant]:
    return Participant.query.filter_by(session_id=gs.id, player_id=player_id).first()


def join(gs: GameSession, player: Player, now: Optional[float] = None) -> Tuple[Participant, bool]:
    """Add the player to the session. Re-joining returns the existing row untouched.

    Returns (participant, created).
    """
    existing = get_participant(gs, player.id)
    if existing:
        return existing, False
    now = now if now is not None else time.time()
    participant = Participant(
        session_id=gs.id,
        player_id=player.id,
        joined_at=now,
        armed=False,
        last_seen_at=now,
    )
    db.session.add(participant)
    db.session.flush()
    current_app.logger.info(f"[join] session={gs.id} player={player.id}")
    return participant, True


def heartbeat(participant: Participant, sensor_ok: bool, now: Optional[float] = None) -> bool:
    """Record liveness; arm the participant the first time sensors report OK.

    Arming is one-way. Returns True when this call armed the participant.
    """
    now = now if now is not None else time.time()
    participant.last_seen_at = now
    if not participant.armed and sensor_ok:
        participant.armed = True
        participant.armed_at = now
        current_app.logger.info(f"[armed] session={participant.session_id} player={participant.player_id}")
        return True
    return False


def alive_query(gs: GameSession):
    return Participant.query.filter(
        Participant.session_id == gs.id,
        Participant.armed.is_(True),
        Participant.eliminated_at.is_(None),
    )


def alive_count(gs: GameSession) -> int:
    return alive_query(gs).count()


def counts(gs: GameSession) -> dict:
    participants = Participant.query.filter_by(session_id=gs.id).all()
    alive = sum(1 for p in participants if p.is_alive)
    eliminated = sum(1 for p in participants if p.is_eliminated)
    return {
        'total': len(participants),
        'alive': alive,
        'eliminated': eliminated,
        'not_ready': sum(1 for p in participants if not p.armed and not p.is_eliminated),
    }
