"""Elimination orderer.

The only operation that writes a participant and the owning session's round
counters together. Callers must hold the session lock (store.locked_session):
the next rank is read as max + 1 and the round-close decision reads the counter
it just incremented, so both are only correct when linearized per session.
"""

import time
from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy import func

from redlight import db
from redlight.models import GameSession, Participant, ACTIVE
from . import director

IGNORED_ROUND_NOT_ACTIVE = 'ROUND_NOT_ACTIVE'
IGNORED_ALREADY_ELIMINATED = 'ALREADY_ELIMINATED'


@dataclass
class EliminationResult:
    """Outcome of one eliminate() call."""
    applied: bool
    ignored_reason: Optional[str] = None
    order: Optional[int] = None
    round_closed: bool = False
    finished: bool = False

    def to_dict(self):
        data = {
            'eliminated': self.applied,
            'eliminated_order': self.order,
            'round_closed': self.round_closed,
            'finished': self.finished,
        }
        if not self.applied:
            data['ignored'] = True
            data['reason'] = self.ignored_reason
        return data


def next_order(gs: GameSession) -> int:
    current = db.session.query(func.max(Participant.eliminated_order)).filter(
        Participant.session_id == gs.id
    ).scalar()
    return (current or 0) + 1


def eliminate(gs: GameSession, participant: Participant, round_no: int, reason: str,
              motion_score: Optional[float] = None, now: Optional[float] = None) -> EliminationResult:
    if participant.eliminated_at is not None:
        return EliminationResult(applied=False, ignored_reason=IGNORED_ALREADY_ELIMINATED,
                                 order=participant.eliminated_order)
    if gs.state != ACTIVE:
        return EliminationResult(applied=False, ignored_reason=IGNORED_ROUND_NOT_ACTIVE)

    now = now if now is not None else time.time()
    order = next_order(gs)
    participant.eliminated_order = order
    participant.eliminated_at = now
    participant.eliminated_round = round_no
    participant.eliminated_reason = reason
    if motion_score is not None:
        participant.last_motion_score = motion_score
    gs.round_eliminated_count = (gs.round_eliminated_count or 0) + 1
    db.session.flush()

    current_app.logger.info(
        f"[eliminate] session={gs.id} player={participant.player_id} order={order} "
        f"round={round_no} reason={reason} count={gs.round_eliminated_count}/{gs.round_alive_start}"
    )

    result = EliminationResult(applied=True, order=order)
    target = director.round_target(gs.round_alive_start or 0)
    if target > 0 and gs.round_eliminated_count >= target:
        director.enter_rest(gs, now)
        result.round_closed = True
    else:
        result.finished = director.maybe_auto_finish(gs, now)
    return result
