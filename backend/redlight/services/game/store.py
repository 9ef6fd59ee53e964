"""Session store: the current-session pointer, configuration and locking.

Every operation that reads and then writes session counters runs inside
``locked_session()``. The lock is a process-local re-entrant lock keyed by
session id, combined with ``SELECT ... FOR UPDATE`` on the session row so that
several server processes sharing one PostgreSQL database are linearized too.
"""

import threading
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from flask import current_app
from sqlalchemy import select

from redlight import db
from redlight.models import GameSession, CurrentSession, WAITING, POINTER_ID
from .errors import ValidationError

# (min, max) per configuration field
CONFIG_LIMITS = {
    'sensitivity_level': (1, 40),
    'base_points': (1, 10000),
    'rest_seconds': (5, 600),
    'difficulty_step': (0, 10),
    'difficulty_cap': (1, 40),
}

_session_locks: Dict[int, threading.RLock] = {}
_session_locks_guard = threading.Lock()
_pointer_lock = threading.RLock()


def _lock_for(session_id: int) -> threading.RLock:
    with _session_locks_guard:
        lock = _session_locks.get(session_id)
        if lock is None:
            lock = threading.RLock()
            _session_locks[session_id] = lock
        return lock


def discard_lock(session_id: Optional[int]) -> None:
    """Forget the lock of a session that is no longer current."""
    with _session_locks_guard:
        _session_locks.pop(session_id, None)


def clamp_config(data: Optional[dict], defaults: Optional[dict] = None) -> dict:
    """Validate and clamp host-supplied configuration.

    Missing fields fall back to ``defaults``; fields absent from both are left
    out of the result. Non-integer values raise ValidationError.
    """
    data = data or {}
    defaults = defaults or {}
    out = {}
    for field, (lo, hi) in CONFIG_LIMITS.items():
        raw = data.get(field)
        if raw is None:
            raw = defaults.get(field)
        if raw is None:
            continue
        if isinstance(raw, bool):
            raise ValidationError('INVALID_CONFIG', f'{field} must be an integer')
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ValidationError('INVALID_CONFIG', f'{field} must be an integer')
        out[field] = max(lo, min(hi, value))
    return out


def default_config() -> dict:
    cfg = current_app.config
    return {
        'sensitivity_level': cfg.get('DEFAULT_SENSITIVITY_LEVEL', 15),
        'base_points': cfg.get('DEFAULT_BASE_POINTS', 10),
        'rest_seconds': cfg.get('DEFAULT_REST_SECONDS', 60),
        'difficulty_step': 0,
        'difficulty_cap': 40,
    }


def current_session_id() -> Optional[int]:
    return db.session.execute(
        select(CurrentSession.session_id).where(CurrentSession.id == POINTER_ID)
    ).scalar()


def get_current_session() -> Optional[GameSession]:
    """Unlocked read of the current session, for display-only paths."""
    session_id = current_session_id()
    if session_id is None:
        return None
    return db.session.get(GameSession, session_id)


def _load_for_update(session_id: int) -> Optional[GameSession]:
    return db.session.execute(
        select(GameSession)
        .where(GameSession.id == session_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


@contextmanager
def transaction() -> Iterator[None]:
    """Commit on success; roll the whole unit of work back on any error."""
    try:
        yield
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


@contextmanager
def locked_session() -> Iterator[Optional[GameSession]]:
    """Yield the current session under its exclusive lock, or None.

    The transaction commits when the block exits. If a reset replaced the
    session while we waited for its lock, retry against the new one.
    """
    while True:
        session_id = current_session_id()
        if session_id is None:
            with transaction():
                yield None
            return
        with _lock_for(session_id):
            gs = _load_for_update(session_id)
            if current_session_id() != session_id:
                db.session.rollback()
                continue
            with transaction():
                yield gs
            return


@contextmanager
def pointer_locked() -> Iterator[CurrentSession]:
    """Yield the pointer row, creating it on first use. Used by reset."""
    with _pointer_lock:
        pointer = db.session.execute(
            select(CurrentSession)
            .where(CurrentSession.id == POINTER_ID)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if pointer is None:
            pointer = CurrentSession(id=POINTER_ID, session_id=None)
            db.session.add(pointer)
            db.session.flush()
        if pointer.session_id is None:
            with transaction():
                yield pointer
            return
        with _lock_for(pointer.session_id):
            _load_for_update(pointer.session_id)
            with transaction():
                yield pointer


def create_session(config: dict, now: Optional[float] = None) -> GameSession:
    gs = GameSession(
        is_active=True,
        state=WAITING,
        round_no=0,
        round_alive_start=0,
        round_eliminated_count=0,
        created_at=now if now is not None else time.time(),
        **config,
    )
    db.session.add(gs)
    db.session.flush()
    return gs


def apply_config(gs: GameSession, config: dict) -> None:
    for field, value in config.items():
        setattr(gs, field, value)
