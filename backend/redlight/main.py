from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from redlight.models import HostUser

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Red Light game server!'})

@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = HostUser.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({'ok': True, 'user': user.to_dict()})
    return jsonify({'ok': False, 'error': 'Invalid username or password'}), 401

@main.route('/check_login', methods=['GET'])
@login_required
def check_login():
    return jsonify({'ok': True, 'user': current_user.to_dict()})

@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'ok': True})
