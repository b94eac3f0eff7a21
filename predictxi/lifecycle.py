"""Match lifecycle: creation, official data writes and status transitions.

    draft ──> confirmed ──> finished
      └────────────────────────^

Official lineups, subs and events may be written until the match is
finished. Recording an official lineup moves a draft match to confirmed,
which closes predictions. Finalizing freezes the official record.
"""

import logging
from typing import Optional, Sequence

from .constants import (
    ALLOWED_TRANSITIONS,
    MATCHES,
    MAX_SUBS,
    STATUS_CONFIRMED,
    STATUS_DRAFT,
    STATUS_FINISHED,
)
from .errors import LifecycleError, MatchLockedError, MatchNotFoundError, PredictionsClosedError
from .registry import SquadRegistry
from .schemas import (
    CreateMatchRequest,
    FinalizeMatchRequest,
    LineupEntry,
    Match,
    SubEntry,
)
from .store import EntityStore
from .validators import validate_lineup, validate_match_events, validate_side, validate_subs

logger = logging.getLogger('predictxi.lifecycle')


def advance_status(match: Match, target: str) -> Match:
    """
    Move a match to `target`, enforcing forward-only transitions.

    Staying in the current state is a no-op.

    Raises:
        LifecycleError: If the transition is not allowed
    """
    if match.status == target:
        return match
    if target not in ALLOWED_TRANSITIONS.get(match.status, ()):
        raise LifecycleError(
            f'Cannot move match {match.id} from {match.status} to {target}', match.status
        )
    logger.info(f'Match {match.id}: {match.status} -> {target}')
    match.status = target
    return match


def assert_predictions_open(match: Match) -> None:
    """Raise PredictionsClosedError unless the match is still a draft."""
    if match.status != STATUS_DRAFT:
        raise PredictionsClosedError(match.id, match.status)


def assert_official_writable(match: Match) -> None:
    """Raise MatchLockedError once the match is finished."""
    if match.status == STATUS_FINISHED:
        raise MatchLockedError(match.id, match.status)


class MatchLifecycle:
    """Administrative writes to the match record."""

    def __init__(self, store: EntityStore, registry: SquadRegistry, max_subs: int = MAX_SUBS):
        self.store = store
        self.registry = registry
        self.max_subs = max_subs

    def get_match(self, match_id: str) -> Match:
        doc = self.store.get(MATCHES, match_id)
        if doc is None:
            raise MatchNotFoundError(match_id)
        return Match.model_validate(doc)

    def list_matches(self, league: Optional[str] = None) -> list[Match]:
        docs = self.store.find(MATCHES, league=league) if league else self.store.find(MATCHES)
        matches = [Match.model_validate(doc) for doc in docs]
        return sorted(matches, key=lambda m: (m.matchday, m.home_team, m.away_team))

    def create_match(self, request: CreateMatchRequest) -> Match:
        """
        Create a draft match.

        Raises:
            NotFoundError: If the league doesn't exist
            ConflictError: If the league already has this fixture on this matchday
        """
        self.registry.get_league(request.league)
        match = Match(
            id='',
            league=request.league,
            matchday=request.matchday,
            home_team=request.home_team,
            away_team=request.away_team,
            played_at=request.played_at,
        )
        doc = self.store.insert(
            MATCHES,
            match.model_dump(),
            unique=('league', 'matchday', 'home_team', 'away_team'),
        )
        logger.info(
            f'Created match {doc["id"]}: {match.home_team} v {match.away_team} '
            f'(matchday {match.matchday})'
        )
        return Match.model_validate(doc)

    def _write(self, match_id: str, apply) -> Match:
        """Run `apply(match)` and commit it under the match's entity lock."""

        def mutate(doc):
            match = Match.model_validate(doc)
            return apply(match).model_dump()

        with self.store.locked(MATCHES, match_id):
            if self.store.get(MATCHES, match_id) is None:
                raise MatchNotFoundError(match_id)
            return Match.model_validate(self.store.update(MATCHES, match_id, mutate))

    def record_official_lineup(
        self, match_id: str, side: str, players: Sequence[LineupEntry]
    ) -> Match:
        """
        Record the official starting eleven for one side.

        The squad is resolved from the match's own team name for `side`.
        A draft match becomes confirmed.

        Raises:
            MatchNotFoundError: If the match doesn't exist
            InvalidTeamError: If `side` is not 'home' or 'away'
            MatchLockedError: If the match is finished
            NotFoundError: If the team has no squad
            LineupValidationError: If the lineup breaks a lineup rule
        """
        validate_side(side)

        def apply(match: Match) -> Match:
            assert_official_writable(match)
            squad = self.registry.get_squad(match.team_name(side))
            validate_lineup(players, squad)
            setattr(
                match.lineups,
                side,
                [
                    LineupEntry(player=p.player, position=p.position, from_minute=0)
                    for p in players
                ],
            )
            if match.status == STATUS_DRAFT:
                advance_status(match, STATUS_CONFIRMED)
            return match

        match = self._write(match_id, apply)
        logger.info(f'Official {side} lineup saved for match {match_id}')
        return match

    def record_substitutions(self, match_id: str, side: str, subs: Sequence[SubEntry]) -> Match:
        """
        Record the players who came on for one side.

        Raises:
            MatchNotFoundError, InvalidTeamError, MatchLockedError,
            NotFoundError, LineupValidationError: as for record_official_lineup
        """
        validate_side(side)

        def apply(match: Match) -> Match:
            assert_official_writable(match)
            squad = self.registry.get_squad(match.team_name(side))
            validate_subs(subs, squad, max_subs=self.max_subs)
            setattr(match.subs_in, side, [SubEntry(player=s.player, minute=s.minute) for s in subs])
            return match

        match = self._write(match_id, apply)
        logger.info(f'Official {side} subs saved for match {match_id}')
        return match

    def finalize_match(self, request: FinalizeMatchRequest) -> Match:
        """
        Record score, goals and MOTM, and finish the match.

        After this the official record is frozen and authoritative scoring
        may run.

        Raises:
            MatchNotFoundError: If the match doesn't exist
            MatchLockedError: If the match is already finished
            LineupValidationError: If a scorer, assister or MOTM is in neither squad
        """

        def apply(match: Match) -> Match:
            assert_official_writable(match)
            squads = [
                self.registry.get_squad(match.home_team),
                self.registry.get_squad(match.away_team),
            ]
            validate_match_events(request.goals, request.motm, squads)
            match.score = request.score.model_copy()
            match.events.goals = [goal.model_copy() for goal in request.goals]
            match.events.motm = request.motm
            return advance_status(match, STATUS_FINISHED)

        match = self._write(request.match_id, apply)
        logger.info(
            f'Match {match.id} finished {match.score.home}-{match.score.away}, '
            f'MOTM: {match.events.motm or "none"}'
        )
        return match
