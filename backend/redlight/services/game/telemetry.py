"""Player-facing operations: join, heartbeat and motion submission.

Each one opens the session lock, runs the offline sweep first, then applies
its own change inside the same transaction. Late or duplicate telemetry is
answered with ``ignored=True`` rather than an error.
"""

import math
import time
from typing import Optional

from redlight.models import Player, ACTIVE, FINISHED, REASON_MOTION
from . import roster, store, threshold
from .elimination import eliminate
from .errors import NotFoundError, StateConflictError, ValidationError
from .reaper import sweep

IGNORED_NO_SESSION = 'NO_ACTIVE_SESSION'
IGNORED_NOT_PARTICIPANT = 'NOT_PARTICIPANT'
IGNORED_NOT_ARMED = 'NOT_ARMED'
IGNORED_ROUND_NOT_ACTIVE = 'ROUND_NOT_ACTIVE'
IGNORED_ALREADY_ELIMINATED = 'ALREADY_ELIMINATED'


def _participant_payload(participant) -> dict:
    return {
        'armed': bool(participant.armed),
        'eliminated': participant.is_eliminated,
        'eliminated_reason': participant.eliminated_reason,
    }


def parse_motion_score(raw) -> float:
    if raw is None or isinstance(raw, bool):
        raise ValidationError('INVALID_MOTION_SCORE', 'motion_score is required')
    try:
        score = float(raw)
    except (TypeError, ValueError):
        raise ValidationError('INVALID_MOTION_SCORE', 'motion_score must be a number')
    if not math.isfinite(score) or score < 0:
        raise ValidationError('INVALID_MOTION_SCORE', 'motion_score must be a finite, non-negative number')
    return score


def join(player: Player, now: Optional[float] = None) -> dict:
    now = now if now is not None else time.time()
    with store.locked_session() as gs:
        if gs is None:
            raise NotFoundError('NO_ACTIVE_SESSION', 'No active session')
        sweep(gs, now)
        participant = roster.get_participant(gs, player.id)
        if participant is None and gs.state == FINISHED:
            raise StateConflictError('INVALID_STATE', 'Game is over; wait for the host to reset')
        participant, created = roster.join(gs, player, now)
        payload = {'ok': True, 'joined': created, 'session': gs.to_dict()}
        payload.update(_participant_payload(participant))
    return payload


def heartbeat(player: Player, sensor_ok: bool, now: Optional[float] = None) -> dict:
    now = now if now is not None else time.time()
    with store.locked_session() as gs:
        if gs is None:
            return {'ok': True, 'ignored': True, 'reason': IGNORED_NO_SESSION, 'armed': False, 'eliminated': False}
        swept = sweep(gs, now)
        participant = roster.get_participant(gs, player.id)
        if participant is None:
            return {'ok': True, 'ignored': True, 'reason': IGNORED_NOT_PARTICIPANT, 'armed': False, 'eliminated': False}
        armed_now = roster.heartbeat(participant, bool(sensor_ok), now)
        payload = {
            'ok': True,
            'armed_now': armed_now,
            'state': gs.state,
            'state_changed': bool(swept.eliminated) or swept.finished,
        }
        payload.update(_participant_payload(participant))
    return payload


def submit_motion(player: Player, motion_score, now: Optional[float] = None) -> dict:
    score = parse_motion_score(motion_score)
    now = now if now is not None else time.time()
    with store.locked_session() as gs:
        if gs is None:
            raise NotFoundError('NO_ACTIVE_SESSION', 'No active session')
        swept = sweep(gs, now)
        participant = roster.get_participant(gs, player.id)
        if participant is None:
            raise NotFoundError('NOT_PARTICIPANT', 'Player has not joined this game')
        participant.last_seen_at = now
        payload = {'ok': True, 'state': gs.state, 'state_changed': bool(swept.eliminated) or swept.finished}

        ignored = None
        if participant.is_eliminated:
            ignored = IGNORED_ALREADY_ELIMINATED
        elif gs.state != ACTIVE:
            ignored = IGNORED_ROUND_NOT_ACTIVE
        elif not participant.armed:
            ignored = IGNORED_NOT_ARMED
        if ignored:
            payload.update({'ignored': True, 'reason': ignored})
            payload.update(_participant_payload(participant))
            return payload

        participant.last_motion_score = score
        level = gs.current_sensitivity
        payload['cutoff'] = threshold.cutoff(level)
        if threshold.is_unsafe(score, level):
            outcome = eliminate(gs, participant, gs.round_no, REASON_MOTION, motion_score=score, now=now)
            payload.update(outcome.to_dict())
            payload['state'] = gs.state
            payload['state_changed'] = True
        payload.update(_participant_payload(participant))
    return payload
