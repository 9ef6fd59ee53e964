from flask import Blueprint, jsonify, request
from redlight.identity import resolve_player
from redlight.services.game import status, telemetry
from redlight.socketio_events import broadcast_state
from .errors import register_error_handlers


player_api = Blueprint('player_api', __name__)
register_error_handlers(player_api)


@player_api.route('/join', methods=['POST'])
def join():
    data = request.get_json(silent=True) or {}
    player = resolve_player(data)
    result = telemetry.join(player)
    if result.get('joined'):
        broadcast_state('join')
    return jsonify(result)


@player_api.route('/heartbeat', methods=['POST'])
def heartbeat():
    data = request.get_json(silent=True) or {}
    player = resolve_player(data)
    result = telemetry.heartbeat(player, data.get('sensor_ok') is True)
    if result.get('armed_now') or result.get('state_changed'):
        broadcast_state('heartbeat')
    return jsonify(result)


@player_api.route('/motion', methods=['POST'])
def motion():
    data = request.get_json(silent=True) or {}
    player = resolve_player(data)
    result = telemetry.submit_motion(player, data.get('motion_score'))
    if result.get('state_changed'):
        broadcast_state('motion')
    return jsonify(result)


@player_api.route('/status', methods=['POST'])
def player_status():
    data = request.get_json(silent=True) or {}
    player = resolve_player(data)
    result = status.player_status(player)
    if result.get('state_changed'):
        broadcast_state('status')
    return jsonify(result)
