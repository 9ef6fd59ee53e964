from flask import Blueprint, jsonify, request
from flask_login import login_required
from redlight.services.game import director, status, store
from redlight.socketio_events import broadcast_state
from .errors import register_error_handlers


host_api = Blueprint('host_api', __name__)
register_error_handlers(host_api)


@host_api.route('/state', methods=['GET'])
@login_required
def get_state():
    snapshot = status.host_snapshot()
    if snapshot.get('state_changed'):
        broadcast_state('reaper')
    return jsonify(snapshot)


@host_api.route('/start_round', methods=['POST'])
@login_required
def start_round():
    with store.locked_session() as gs:
        director.start_round(gs)
        payload = {'ok': True, 'session': gs.to_dict()}
    broadcast_state('start_round')
    return jsonify(payload)


@host_api.route('/end_round', methods=['POST'])
@login_required
def end_round():
    with store.locked_session() as gs:
        director.end_round(gs)
        payload = {'ok': True, 'session': gs.to_dict()}
    broadcast_state('end_round')
    return jsonify(payload)


@host_api.route('/finish_game', methods=['POST'])
@login_required
def finish_game():
    with store.locked_session() as gs:
        rows = director.finish_game(gs)
        standings = [{
            'player_id': row['participant'].player_id,
            'position': row['position'],
            'points': row['points'],
        } for row in rows]
        payload = {'ok': True, 'session': gs.to_dict(), 'standings': standings}
    broadcast_state('finish_game')
    return jsonify(payload)


@host_api.route('/reset', methods=['POST'])
@login_required
def reset():
    data = request.get_json(silent=True) or {}
    gs = director.reset(data)
    broadcast_state('reset')
    return jsonify({'ok': True, 'session': gs.to_dict()}), 201


@host_api.route('/config', methods=['POST'])
@login_required
def update_config():
    data = request.get_json(silent=True) or {}
    with store.locked_session() as gs:
        director.update_config(gs, data)
        payload = {'ok': True, 'session': gs.to_dict()}
    broadcast_state('config')
    return jsonify(payload)
