"""Boundary operations of the lineup game.

`PredictionGame` wires the registry, lifecycle and prediction book around a
store handle it is given, and checks the caller's role before delegating.
The process entry point owns the store; nothing here opens one implicitly
except `from_config`.
"""

import logging
from typing import Any, Optional, Sequence

from .constants import PREDICTING_ROLES, ROLE_ADMIN
from .errors import AuthorizationError
from .lifecycle import MatchLifecycle
from .models import ScoreResult
from .predictions import PredictionBook
from .registry import SquadRegistry
from .schemas import (
    Actor,
    CreateMatchRequest,
    FinalizeMatchRequest,
    GameConfig,
    LineupEntry,
    Match,
    OfficialLineupRequest,
    OfficialSubsRequest,
    Prediction,
    PredictionRequest,
    SubEntry,
)
from .store import EntityStore

logger = logging.getLogger('predictxi.game')


def require_admin(actor: Actor, operation: str) -> None:
    if actor.role != ROLE_ADMIN:
        raise AuthorizationError(actor.role, operation)


class PredictionGame:
    """Entry point for the operations exposed to transports and the CLI."""

    def __init__(self, store: EntityStore, config: Optional[GameConfig] = None):
        """
        Initialize the game around an explicit store.

        Args:
            store: Entity store shared by every component
            config: Game configuration (default: built-in defaults)
        """
        self.config = config or GameConfig(season='default')
        self.store = store
        self.registry = SquadRegistry(store)
        self.lifecycle = MatchLifecycle(store, self.registry, max_subs=self.config.max_subs)
        self.predictions = PredictionBook(
            store,
            self.lifecycle,
            self.registry,
            rules=self.config.scoring,
            max_subs=self.config.max_subs,
            allow_preview=self.config.allow_preview_scoring,
        )

    @classmethod
    def from_config(cls, config: GameConfig) -> 'PredictionGame':
        """Build a game backed by the JSON store in `config.data_dir`."""
        return cls(EntityStore(config.data_dir), config)

    # Administrator operations

    def create_match(self, actor: Actor, request: CreateMatchRequest) -> Match:
        require_admin(actor, 'create matches')
        return self.lifecycle.create_match(request)

    def record_official_lineup(
        self, actor: Actor, match_id: str, side: str, players: Sequence[LineupEntry | dict]
    ) -> Match:
        require_admin(actor, 'record official lineups')
        request = OfficialLineupRequest(match_id=match_id, side=side, players=list(players))
        return self.lifecycle.record_official_lineup(request.match_id, request.side, request.players)

    def record_substitutions(
        self, actor: Actor, match_id: str, side: str, subs: Sequence[SubEntry | dict]
    ) -> Match:
        require_admin(actor, 'record substitutions')
        request = OfficialSubsRequest(match_id=match_id, side=side, subs=list(subs))
        return self.lifecycle.record_substitutions(request.match_id, request.side, request.subs)

    def finalize_match(self, actor: Actor, request: FinalizeMatchRequest) -> Match:
        require_admin(actor, 'finalize matches')
        return self.lifecycle.finalize_match(request)

    # Participant operations

    def submit_prediction(
        self,
        actor: Actor,
        match_id: str,
        side: str,
        players: Sequence[LineupEntry | dict],
        subs: Sequence[SubEntry | dict] = (),
        motm: Optional[str] = None,
    ) -> Prediction:
        if actor.role not in PREDICTING_ROLES:
            raise AuthorizationError(actor.role, 'submit predictions')
        request = PredictionRequest(
            match_id=match_id, team=side, players=list(players), subs=list(subs), motm=motm
        )
        return self.predictions.submit(actor.participant_id, request)

    # Reads and scoring

    def get_match(self, match_id: str) -> Match:
        return self.lifecycle.get_match(match_id)

    def list_predictions(
        self, match_id: str, side: Optional[str] = None, with_players: bool = False
    ) -> list[Prediction] | list[dict[str, Any]]:
        return self.predictions.list_predictions(match_id, side, with_players)

    def compare_and_score(self, match_id: str, side: str) -> list[ScoreResult]:
        return self.predictions.compare_and_score(match_id, side)
