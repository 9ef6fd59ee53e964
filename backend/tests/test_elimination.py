import pytest
from sqlalchemy.exc import IntegrityError

from redlight import db
from redlight.models import GameSession, Participant, ACTIVE, REST, REASON_MOTION
from redlight.services.game import director, store, telemetry
from redlight.services.game.elimination import eliminate

from helpers import participant_of


def _start(sid):
    with store.locked_session() as gs:
        director.start_round(gs)


def _eliminate(sid, player, reason=REASON_MOTION):
    with store.locked_session() as gs:
        p = participant_of(sid, player)
        result = eliminate(gs, p, gs.round_no, reason)
    return result


@pytest.mark.parametrize('alive_start,target', [(1, 0), (2, 1), (3, 1), (4, 2), (5, 2), (9, 4)])
def test_round_target(alive_start, target):
    assert director.round_target(alive_start) == target


def test_first_elimination_closes_three_player_round(flask_app, session_with):
    sid, players = session_with(['A', 'B', 'C'])
    _start(sid)
    gs = db.session.get(GameSession, sid)
    assert gs.state == ACTIVE
    assert gs.round_no == 1
    assert gs.round_alive_start == 3

    result = _eliminate(sid, players['B'])
    assert result.applied
    assert result.round_closed

    gs = db.session.get(GameSession, sid)
    assert gs.state == REST
    assert gs.rest_ends_at is not None
    assert gs.round_eliminated_count == 1
    b = participant_of(sid, players['B'])
    assert b.eliminated_order == 1
    assert b.eliminated_round == 1
    assert b.eliminated_reason == REASON_MOTION


def test_eliminate_twice_is_a_noop(flask_app, session_with):
    sid, players = session_with(['A', 'B', 'C', 'D', 'E'])
    _start(sid)

    first = _eliminate(sid, players['A'])
    assert first.applied and not first.round_closed
    second = _eliminate(sid, players['A'])
    assert not second.applied
    assert second.ignored_reason == 'ALREADY_ELIMINATED'

    gs = db.session.get(GameSession, sid)
    assert gs.round_eliminated_count == 1
    assert gs.state == ACTIVE
    assert participant_of(sid, players['A']).eliminated_order == 1


def test_eliminate_outside_active_round_is_not_applicable(flask_app, session_with):
    sid, players = session_with(['A', 'B'])
    result = _eliminate(sid, players['A'])
    assert not result.applied
    assert result.ignored_reason == 'ROUND_NOT_ACTIVE'
    assert participant_of(sid, players['A']).eliminated_at is None


def test_orders_stay_gapless_across_rounds(flask_app, session_with):
    names = ['A', 'B', 'C', 'D', 'E', 'F']
    sid, players = session_with(names)

    _start(sid)  # 6 alive, target 3
    for name in ['C', 'A', 'F']:
        _eliminate(sid, players[name])
    assert db.session.get(GameSession, sid).state == REST

    _start(sid)  # 3 alive, target 1
    assert db.session.get(GameSession, sid).round_alive_start == 3
    _eliminate(sid, players['B'])

    orders = {
        name: participant_of(sid, players[name]).eliminated_order
        for name in ['C', 'A', 'F', 'B']
    }
    assert orders == {'C': 1, 'A': 2, 'F': 3, 'B': 4}
    assert participant_of(sid, players['B']).eliminated_round == 2


def test_round_counter_never_exceeds_alive_start(flask_app, session_with):
    sid, players = session_with(['A', 'B', 'C', 'D'])
    _start(sid)  # target 2
    for name in ['A', 'B', 'C']:
        _eliminate(sid, players[name])
        gs = db.session.get(GameSession, sid)
        assert gs.round_eliminated_count <= gs.round_alive_start
    # third one arrived after the round closed
    assert participant_of(sid, players['C']).eliminated_at is None


def test_motion_above_cutoff_eliminates(flask_app, session_with):
    sid, players = session_with(['A', 'B', 'C'], config={'sensitivity_level': 40})
    _start(sid)

    safe = telemetry.submit_motion(players['A'], 0.3)
    assert safe['eliminated'] is False
    assert 'ignored' not in safe

    res = telemetry.submit_motion(players['A'], 0.31)
    assert res['eliminated'] is True
    assert res['eliminated_reason'] == REASON_MOTION
    assert res['round_closed'] is True
    assert participant_of(sid, players['A']).last_motion_score == pytest.approx(0.31)


def test_late_motion_after_round_close_is_ignored(flask_app, session_with):
    sid, players = session_with(['A', 'B', 'C'])
    _start(sid)
    telemetry.submit_motion(players['A'], 99.0)

    late = telemetry.submit_motion(players['B'], 99.0)
    assert late['ok'] is True
    assert late['ignored'] is True
    assert late['reason'] == 'ROUND_NOT_ACTIVE'
    assert late['eliminated'] is False


def test_duplicate_order_is_rejected_by_storage(flask_app, session_with):
    sid, players = session_with(['A', 'B'])
    a = participant_of(sid, players['A'])
    b = participant_of(sid, players['B'])
    a.eliminated_order = 1
    b.eliminated_order = 1
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()
    assert Participant.query.filter(Participant.eliminated_order.isnot(None)).count() == 0
