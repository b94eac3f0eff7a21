from .errors import (
    AuthorizationError,
    ConflictError,
    InvalidTeamError,
    LifecycleError,
    LineupValidationError,
    MatchLockedError,
    MatchNotFoundError,
    NotFoundError,
    PredictionsClosedError,
    PredictXIError,
)
from .models import MotmResult, PickResult, ScoreResult, SectionResult
from .schemas import (
    Actor,
    CreateMatchRequest,
    FinalizeMatchRequest,
    GameConfig,
    LineupEntry,
    Match,
    Player,
    Prediction,
    PredictionRequest,
    ScoringRules,
    SubEntry,
    TeamSquad,
)
from .validators import validate_lineup, validate_subs
from .scoring import score_starters, score_subs, score_motm
from .scorer import MatchScorer
from .store import EntityStore
from .registry import SquadRegistry
from .lifecycle import MatchLifecycle
from .predictions import PredictionBook
from .game import PredictionGame

__all__ = [
    # Errors
    'PredictXIError',
    'NotFoundError',
    'MatchNotFoundError',
    'LineupValidationError',
    'InvalidTeamError',
    'LifecycleError',
    'PredictionsClosedError',
    'MatchLockedError',
    'AuthorizationError',
    'ConflictError',
    # Result models
    'PickResult',
    'SectionResult',
    'MotmResult',
    'ScoreResult',
    # Schemas
    'Actor',
    'CreateMatchRequest',
    'FinalizeMatchRequest',
    'GameConfig',
    'LineupEntry',
    'Match',
    'Player',
    'Prediction',
    'PredictionRequest',
    'ScoringRules',
    'SubEntry',
    'TeamSquad',
    # Validation and scoring
    'validate_lineup',
    'validate_subs',
    'score_starters',
    'score_subs',
    'score_motm',
    'MatchScorer',
    # Services
    'EntityStore',
    'SquadRegistry',
    'MatchLifecycle',
    'PredictionBook',
    'PredictionGame',
]
