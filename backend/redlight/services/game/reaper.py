"""Offline reaper.

There is no background timer: every session-touching request sweeps first,
under the session lock, and eliminates armed participants whose last heartbeat
is older than LIVENESS_TIMEOUT_SEC. A resting session with a single alive
participant is auto-finished by the next sweep.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from flask import current_app

from redlight.models import GameSession, Participant, ACTIVE, REST, REASON_SENSOR_OFFLINE
from . import director
from .elimination import eliminate


@dataclass
class SweepResult:
    eliminated: List[int] = field(default_factory=list)  # player ids, in elimination order
    round_closed: bool = False
    finished: bool = False


def liveness_timeout() -> float:
    return float(current_app.config.get('LIVENESS_TIMEOUT_SEC', 2.5))


def stale_candidates(gs: GameSession, now: float) -> List[Participant]:
    cutoff_ts = now - liveness_timeout()
    return (
        Participant.query
        .filter(
            Participant.session_id == gs.id,
            Participant.armed.is_(True),
            Participant.eliminated_at.is_(None),
            Participant.last_seen_at < cutoff_ts,
        )
        .order_by(Participant.last_seen_at.asc(), Participant.id.asc())
        .all()
    )


def sweep(gs: Optional[GameSession], now: Optional[float] = None) -> SweepResult:
    result = SweepResult()
    if gs is None:
        return result
    now = now if now is not None else time.time()

    if gs.state == REST:
        # Lone survivor of the round that just closed
        result.finished = director.maybe_auto_finish(gs, now)
        return result
    if gs.state != ACTIVE:
        return result

    for participant in stale_candidates(gs, now):
        outcome = eliminate(gs, participant, gs.round_no, REASON_SENSOR_OFFLINE, now=now)
        if outcome.applied:
            result.eliminated.append(participant.player_id)
        if gs.state != ACTIVE:
            # Round closed (or game finished); the rest wait for the next sweep
            result.round_closed = outcome.round_closed
            result.finished = outcome.finished
            break

    if result.eliminated:
        current_app.logger.info(
            f"[reaper] session={gs.id} round={gs.round_no} offline={result.eliminated} state={gs.state}"
        )

    if gs.state == ACTIVE and director.maybe_auto_finish(gs, now):
        result.finished = True
    return result
