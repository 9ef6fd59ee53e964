from flask_socketio import join_room, leave_room, emit
from redlight import socketio
from redlight.services.game import store

ROOM = 'redlight'
NAMESPACE = '/ws'


def broadcast_state(cause: str) -> None:
    """Tell subscribed consoles and devices that the session changed."""
    gs = store.get_current_session()
    payload = {
        'cause': cause,
        'session_id': gs.id if gs else None,
        'state': gs.state if gs else None,
        'round_no': gs.round_no if gs else 0,
    }
    socketio.emit('state_update', payload, to=ROOM, namespace=NAMESPACE)


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_game(data):
    join_room(ROOM)
    role = (data or {}).get('role') or 'player'
    emit('joined', {'room': ROOM, 'role': role})


def handle_leave_game(data):
    leave_room(ROOM)
    emit('left', {'room': ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('join_game', handle_join_game, namespace=NAMESPACE)
    socketio.on_event('leave_game', handle_leave_game, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_game', handle_join_game, namespace='/')
        socketio.on_event('leave_game', handle_leave_game, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
