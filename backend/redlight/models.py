from redlight import db, bcrypt
from flask_login import UserMixin
import time

# Session states
WAITING = 'WAITING'
ACTIVE = 'ACTIVE'
REST = 'REST'
FINISHED = 'FINISHED'

# Elimination reasons
REASON_MOTION = 'MOTION'
REASON_SENSOR_OFFLINE = 'SENSOR_OFFLINE'

POINTER_ID = 1


class HostUser(UserMixin, db.Model):
    __tablename__ = 'host_user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Player(db.Model):
    """A registered player. Issued and managed by the registration service."""
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    display_name = db.Column(db.String(64), nullable=False)
    public_code = db.Column(db.String(16), unique=True, nullable=False)
    player_token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.Float, default=time.time, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'display_name': self.display_name,
            'public_code': self.public_code,
        }


class GameSession(db.Model):
    __tablename__ = 'game_session'
    __table_args__ = (
        db.CheckConstraint('round_eliminated_count <= round_alive_start', name='ck_round_eliminated_le_alive_start'),
    )
    id = db.Column(db.Integer, primary_key=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    state = db.Column(db.String(16), default=WAITING, nullable=False)  # WAITING, ACTIVE, REST, FINISHED
    round_no = db.Column(db.Integer, default=0, nullable=False)
    sensitivity_level = db.Column(db.Integer, nullable=False)
    base_points = db.Column(db.Integer, nullable=False)
    rest_seconds = db.Column(db.Integer, nullable=False)
    # Per-round sensitivity ramp; step 0 keeps sensitivity_level for every round
    difficulty_step = db.Column(db.Integer, default=0, nullable=False)
    difficulty_cap = db.Column(db.Integer, default=40, nullable=False)
    rest_ends_at = db.Column(db.Float, nullable=True)
    round_alive_start = db.Column(db.Integer, default=0, nullable=False)
    round_eliminated_count = db.Column(db.Integer, default=0, nullable=False)
    winner_player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    created_at = db.Column(db.Float, default=time.time, nullable=False)
    finished_at = db.Column(db.Float, nullable=True)

    participants = db.relationship('Participant', back_populates='session', lazy='dynamic')
    winner = db.relationship('Player', foreign_keys=[winner_player_id])

    @property
    def current_sensitivity(self):
        ramp = (self.difficulty_step or 0) * max(0, (self.round_no or 0) - 1)
        level = min(self.difficulty_cap or 40, self.sensitivity_level + ramp)
        return max(1, min(40, level))

    def to_dict(self):
        return {
            'id': self.id,
            'is_active': self.is_active,
            'state': self.state,
            'round_no': self.round_no,
            'sensitivity_level': self.sensitivity_level,
            'current_sensitivity': self.current_sensitivity,
            'base_points': self.base_points,
            'rest_seconds': self.rest_seconds,
            'difficulty_step': self.difficulty_step,
            'difficulty_cap': self.difficulty_cap,
            'rest_ends_at': self.rest_ends_at,
            'round_alive_start': self.round_alive_start,
            'round_eliminated_count': self.round_eliminated_count,
            'winner_player_id': self.winner_player_id,
            'winner_name': self.winner.display_name if self.winner else None,
        }


class CurrentSession(db.Model):
    """Single-row pointer to the session every request operates on."""
    __tablename__ = 'current_session'
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('game_session.id'), nullable=True)


class Participant(db.Model):
    __tablename__ = 'participant'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'player_id', name='uq_participant_session_player'),
        db.UniqueConstraint('session_id', 'eliminated_order', name='uq_participant_session_order'),
    )
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('game_session.id'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    joined_at = db.Column(db.Float, nullable=False)
    armed = db.Column(db.Boolean, default=False, nullable=False)
    armed_at = db.Column(db.Float, nullable=True)
    last_seen_at = db.Column(db.Float, nullable=True)
    last_motion_score = db.Column(db.Float, nullable=True)
    eliminated_at = db.Column(db.Float, nullable=True)
    eliminated_order = db.Column(db.Integer, nullable=True)
    eliminated_round = db.Column(db.Integer, nullable=True)
    eliminated_reason = db.Column(db.String(32), nullable=True)  # MOTION, SENSOR_OFFLINE

    session = db.relationship('GameSession', back_populates='participants')
    player = db.relationship('Player')

    @property
    def is_eliminated(self):
        return self.eliminated_at is not None

    @property
    def is_alive(self):
        return bool(self.armed) and self.eliminated_at is None

    def label(self):
        if not self.armed and not self.is_eliminated:
            return 'not ready'
        if not self.is_eliminated:
            return 'alive'
        if self.eliminated_reason == REASON_SENSOR_OFFLINE:
            return 'eliminated (offline)'
        return 'eliminated (motion)'

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'display_name': self.player.display_name if self.player else None,
            'public_code': self.player.public_code if self.player else None,
            'armed': self.armed,
            'last_seen_at': self.last_seen_at,
            'last_motion_score': self.last_motion_score,
            'eliminated_at': self.eliminated_at,
            'eliminated_order': self.eliminated_order,
            'eliminated_round': self.eliminated_round,
            'eliminated_reason': self.eliminated_reason,
            'label': self.label(),
        }


class ScoreEvent(db.Model):
    """Append-only scoring ledger entry."""
    __tablename__ = 'score_event'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    session_id = db.Column(db.Integer, db.ForeignKey('game_session.id'), nullable=True)
    event_type = db.Column(db.String(32), nullable=False)
    points_delta = db.Column(db.Integer, nullable=False)
    note = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.Float, default=time.time, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'session_id': self.session_id,
            'event_type': self.event_type,
            'points_delta': self.points_delta,
            'note': self.note,
            'created_at': self.created_at,
        }
