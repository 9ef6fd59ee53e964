"""Errors raised by the game services.

Each error carries a machine-readable ``kind`` and ``code`` so transport layers
can render it without inspecting messages. Legitimate races (late telemetry
after a round closed, duplicate eliminations) are not errors: services report
them as ``ignored`` results instead.
"""

VALIDATION = 'VALIDATION'
STATE_CONFLICT = 'STATE_CONFLICT'
NOT_FOUND = 'NOT_FOUND'
INFRASTRUCTURE = 'INFRASTRUCTURE'


class GameError(Exception):
    """Base exception for game service errors."""
    kind = INFRASTRUCTURE
    status = 500

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self):
        return {'ok': False, 'error': self.message, 'kind': self.kind, 'code': self.code}


class ValidationError(GameError):
    """Raised for malformed or out-of-range input."""
    kind = VALIDATION
    status = 400


class NotFoundError(GameError):
    """Raised when there is no current session or the caller is not part of it."""
    kind = NOT_FOUND
    status = 404


class StateConflictError(GameError):
    """Raised when a command is illegal for the current session state."""
    kind = STATE_CONFLICT
    status = 409
