"""Status snapshots for player devices and the host console."""

import time
from typing import Optional

from redlight.models import Participant, Player, WAITING, ACTIVE, REST, FINISHED, REASON_SENSOR_OFFLINE
from . import roster, store, threshold
from .reaper import sweep


def status_message(gs, participant: Optional[Participant]) -> str:
    if gs is None:
        return 'waiting for an active session'
    if gs.state == FINISHED:
        winner = gs.winner.display_name if gs.winner else 'none'
        return f'game over, winner={winner}'
    if participant is not None and participant.is_eliminated:
        if participant.eliminated_reason == REASON_SENSOR_OFFLINE:
            return 'eliminated: sensors went offline'
        return 'eliminated: you moved'
    if gs.state == WAITING:
        return 'waiting to start'
    if gs.state == REST:
        return 'resting'
    if gs.state == ACTIVE:
        if participant is None or not participant.armed:
            return 'not ready'
        return 'in play'
    return ''


def _me(gs, participant: Optional[Participant]) -> Optional[dict]:
    if participant is None:
        return None
    return {
        'joined': True,
        'armed': bool(participant.armed),
        'status': 'eliminated' if participant.is_eliminated else 'alive',
        'eliminated_reason': participant.eliminated_reason,
        'eliminated_round': participant.eliminated_round,
        'eliminated_order': participant.eliminated_order,
        'danger_level': threshold.danger_level(participant.last_motion_score, gs.current_sensitivity)
        if participant.is_alive and gs.state == ACTIVE else 0.0,
    }


def _rest_seconds_left(gs, now: float) -> Optional[int]:
    if gs.state != REST or gs.rest_ends_at is None:
        return None
    return max(0, int(round(gs.rest_ends_at - now)))


def player_status(player: Player, now: Optional[float] = None) -> dict:
    now = now if now is not None else time.time()
    with store.locked_session() as gs:
        if gs is None:
            return {'ok': True, 'session': None, 'me': None, 'message': status_message(None, None)}
        swept = sweep(gs, now)
        participant = roster.get_participant(gs, player.id)
        payload = {
            'ok': True,
            'session': gs.to_dict(),
            'totals': roster.counts(gs),
            'me': _me(gs, participant),
            'message': status_message(gs, participant),
            'state_changed': bool(swept.eliminated) or swept.finished,
        }
    return payload


def host_snapshot(now: Optional[float] = None) -> dict:
    now = now if now is not None else time.time()
    with store.locked_session() as gs:
        if gs is None:
            return {'ok': True, 'session': None, 'totals': {'total': 0, 'alive': 0, 'eliminated': 0, 'not_ready': 0},
                    'participants': [], 'eliminated_this_round': [], 'survivors': []}
        swept = sweep(gs, now)
        participants = (
            Participant.query
            .filter_by(session_id=gs.id)
            .order_by(Participant.joined_at.asc(), Participant.id.asc())
            .all()
        )
        session_data = gs.to_dict()
        session_data['cutoff'] = threshold.cutoff(gs.current_sensitivity)
        session_data['rest_seconds_left'] = _rest_seconds_left(gs, now)
        this_round = [
            p for p in participants
            if p.is_eliminated and p.eliminated_round == gs.round_no
        ]
        payload = {
            'ok': True,
            'session': session_data,
            'totals': roster.counts(gs),
            'participants': [p.to_dict() for p in participants],
            'eliminated_this_round': [p.to_dict() for p in sorted(this_round, key=lambda p: p.eliminated_order)],
            'survivors': [p.to_dict() for p in participants if p.is_alive],
            'swept': swept.eliminated,
            'state_changed': bool(swept.eliminated) or swept.finished,
        }
    return payload
