"""Error types raised by the PredictXI engine.

Every error carries enough detail for the caller to correct the request.
Store I/O failures are not wrapped; they propagate as the underlying
OSError or JSONDecodeError.
"""

from typing import Optional


class PredictXIError(Exception):
    """Base class for all recoverable, reportable engine errors."""


class NotFoundError(PredictXIError):
    """A match, squad, league or player does not exist."""

    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f'{entity} not found: {key}')


class MatchNotFoundError(NotFoundError):
    def __init__(self, match_id: str):
        super().__init__('Match', match_id)


class LineupValidationError(PredictXIError):
    """A lineup, substitution list or MOTM pick breaks a lineup rule.

    Attributes:
        rule: Short machine-readable name of the violated rule
        player_id: Offending player id, when the rule concerns one player
    """

    def __init__(self, message: str, rule: str, player_id: Optional[str] = None):
        self.rule = rule
        self.player_id = player_id
        super().__init__(message)


class InvalidTeamError(LineupValidationError):
    def __init__(self, team: str):
        self.team = team
        super().__init__(f"Invalid team '{team}': must be 'home' or 'away'", rule='team')


class LifecycleError(PredictXIError):
    """A write was attempted outside the state that allows it."""

    def __init__(self, message: str, status: str):
        self.status = status
        super().__init__(message)


class PredictionsClosedError(LifecycleError):
    def __init__(self, match_id: str, status: str):
        self.match_id = match_id
        super().__init__(f'Predictions are closed for match {match_id} (status: {status})', status)


class MatchLockedError(LifecycleError):
    def __init__(self, match_id: str, status: str):
        self.match_id = match_id
        super().__init__(f'Match {match_id} is {status}; official data is locked', status)


class AuthorizationError(PredictXIError):
    """The acting role may not perform the operation."""

    def __init__(self, role: str, operation: str):
        self.role = role
        self.operation = operation
        super().__init__(f"Role '{role}' is not permitted to {operation}")


class ConflictError(PredictXIError):
    """A unique key is already taken, or a compare-and-swap lost a race."""
