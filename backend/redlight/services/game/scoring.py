from typing import List

from flask import current_app

from redlight.models import GameSession, Participant
from . import ledger


def final_positions(winner: Participant, eliminated: List[Participant]) -> List[dict]:
    """Rank the winner first and eliminated participants latest-out first.

    position = total - (eliminated_order - 1), so the first one out finishes last.
    """
    total = len(eliminated) + 1
    rows = [{'participant': winner, 'position': 1}]
    for p in sorted(eliminated, key=lambda p: p.eliminated_order, reverse=True):
        rows.append({'participant': p, 'position': total - (p.eliminated_order - 1)})
    for row in rows:
        row['points'] = 0
        row['total'] = total
    return rows


def award_final_positions(gs: GameSession, winner: Participant) -> List[dict]:
    """Full position-based distribution used when the host finishes the game.

    Points are base_points * (total - position): the winner gets the most, the
    first participant eliminated gets nothing. Zero awards are not written.
    """
    eliminated = (
        Participant.query
        .filter(Participant.session_id == gs.id, Participant.eliminated_at.isnot(None))
        .all()
    )
    rows = final_positions(winner, eliminated)
    for row in rows:
        p = row['participant']
        row['points'] = gs.base_points * (row['total'] - row['position'])
        if row['points'] <= 0:
            continue
        if p is winner:
            note = f"Red Light: position 1 of {row['total']} (winner)"
        else:
            note = f"Red Light: position {row['position']} of {row['total']} (eliminated round {p.eliminated_round})"
        ledger.append(p.player_id, row['points'], note, session_id=gs.id)
    current_app.logger.info(
        f"[scoring] session={gs.id} ranked={len(rows)} awarded={sum(1 for r in rows if r['points'] > 0)}"
    )
    return rows


def award_auto_winner(gs: GameSession, winner: Participant) -> int:
    """Simplified path for automatic finishes: only the winner is credited."""
    ledger.append(
        winner.player_id,
        gs.base_points,
        'Red Light: last survivor (automatic finish)',
        session_id=gs.id,
        event_type=ledger.EVENT_AUTO_WIN,
    )
    return gs.base_points
