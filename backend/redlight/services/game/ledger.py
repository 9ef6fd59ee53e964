"""Scoring ledger append. Entries are immutable once written."""

import time
from typing import Optional

from redlight import db
from redlight.models import ScoreEvent

EVENT_FINISH_POSITION = 'REDLIGHT_POSITION'
EVENT_AUTO_WIN = 'REDLIGHT_AUTO_WIN'


def append(player_id: int, points_delta: int, note: str,
           session_id: Optional[int] = None, event_type: str = EVENT_FINISH_POSITION) -> ScoreEvent:
    event = ScoreEvent(
        player_id=player_id,
        session_id=session_id,
        event_type=event_type,
        points_delta=int(points_delta),
        note=note,
        created_at=time.time(),
    )
    db.session.add(event)
    return event
