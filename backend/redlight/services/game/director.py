"""Round director: host-driven and automatic session transitions.

    WAITING|REST --start_round--> ACTIVE
    ACTIVE --end_round (host or round target reached)--> REST
    any --finish_game (host) / auto_finish (last survivor)--> FINISHED
    reset: any --> new WAITING session; the old one is kept for history

Callers hold the session lock (see store.locked_session) except for reset,
which takes the pointer lock itself.
"""

import time
from typing import Optional

from flask import current_app

from redlight import db
from redlight.models import GameSession, Participant, WAITING, ACTIVE, REST, FINISHED
from . import roster, scoring, store
from .errors import NotFoundError, StateConflictError


def _require_session(gs: Optional[GameSession]) -> GameSession:
    if gs is None:
        raise NotFoundError('NO_ACTIVE_SESSION', 'No active session')
    return gs


def start_round(gs: Optional[GameSession], now: Optional[float] = None) -> GameSession:
    gs = _require_session(gs)
    if gs.state not in (WAITING, REST):
        raise StateConflictError('INVALID_STATE', f'Cannot start a round while {gs.state}')
    alive = roster.alive_count(gs)
    if alive < 2:
        raise StateConflictError('NOT_ENOUGH_PLAYERS', 'Need at least 2 alive players to start a round')
    gs.state = ACTIVE
    gs.round_no = (gs.round_no or 0) + 1
    gs.round_alive_start = alive
    gs.round_eliminated_count = 0
    gs.rest_ends_at = None
    current_app.logger.info(
        f"[round-start] session={gs.id} round={gs.round_no} alive={alive} "
        f"target={round_target(alive)} sensitivity={gs.current_sensitivity}"
    )
    return gs


def round_target(alive_start: int) -> int:
    """Eliminations that close a round: half the entrants, at least one."""
    if alive_start < 2:
        return 0
    return max(1, alive_start // 2)


def enter_rest(gs: GameSession, now: Optional[float] = None) -> None:
    now = now if now is not None else time.time()
    gs.state = REST
    gs.rest_ends_at = now + gs.rest_seconds
    current_app.logger.info(
        f"[round-rest] session={gs.id} round={gs.round_no} eliminated={gs.round_eliminated_count}/{gs.round_alive_start}"
    )


def end_round(gs: Optional[GameSession], now: Optional[float] = None) -> GameSession:
    gs = _require_session(gs)
    if gs.state != ACTIVE:
        raise StateConflictError('INVALID_STATE', f'Cannot end a round while {gs.state}')
    enter_rest(gs, now)
    return gs


def _mark_finished(gs: GameSession, winner: Participant, now: Optional[float]) -> None:
    gs.state = FINISHED
    gs.is_active = False
    gs.rest_ends_at = None
    gs.winner_player_id = winner.player_id
    gs.finished_at = now if now is not None else time.time()


def finish_game(gs: Optional[GameSession], now: Optional[float] = None) -> list:
    """Host-forced finish with full position-based scoring.

    Requires exactly one alive armed participant. Returns the ranking rows.
    """
    gs = _require_session(gs)
    if gs.state == FINISHED:
        raise StateConflictError('INVALID_STATE', 'Game already finished')
    alive = roster.alive_query(gs).all()
    if len(alive) != 1:
        raise StateConflictError('INVALID_WINNER_COUNT', f'Need exactly 1 alive player to finish, found {len(alive)}')
    winner = alive[0]
    rows = scoring.award_final_positions(gs, winner)
    _mark_finished(gs, winner, now)
    current_app.logger.info(f"[finish] session={gs.id} round={gs.round_no} winner={winner.player_id}")
    return rows


def auto_finish(gs: GameSession, winner: Participant, now: Optional[float] = None) -> None:
    """Automatic finish for a lone survivor; credits only the winner."""
    scoring.award_auto_winner(gs, winner)
    _mark_finished(gs, winner, now)
    current_app.logger.info(f"[auto-finish] session={gs.id} round={gs.round_no} winner={winner.player_id}")


def maybe_auto_finish(gs: GameSession, now: Optional[float] = None) -> bool:
    """Finish an ACTIVE or resting session left with a single alive participant."""
    if gs.state not in (ACTIVE, REST):
        return False
    alive = roster.alive_query(gs).limit(2).all()
    if len(alive) != 1:
        return False
    auto_finish(gs, alive[0], now)
    return True


def reset(config: Optional[dict] = None, now: Optional[float] = None) -> GameSession:
    """Deactivate the current session and open a fresh WAITING one."""
    values = store.clamp_config(config, store.default_config())
    with store.pointer_locked() as pointer:
        previous = None
        if pointer.session_id is not None:
            previous = db.session.get(GameSession, pointer.session_id)
            if previous is not None:
                previous.is_active = False
        gs = store.create_session(values, now)
        pointer.session_id = gs.id
        current_app.logger.info(
            f"[reset] session={gs.id} previous={previous.id if previous else None} config={values}"
        )
    if previous is not None:
        store.discard_lock(previous.id)
    return gs


def update_config(gs: Optional[GameSession], config: Optional[dict]) -> GameSession:
    gs = _require_session(gs)
    if gs.state == FINISHED:
        raise StateConflictError('INVALID_STATE', 'Cannot change configuration of a finished game')
    values = store.clamp_config(config)
    store.apply_config(gs, values)
    current_app.logger.info(f"[config] session={gs.id} values={values}")
    return gs
