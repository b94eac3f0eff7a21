"""Prediction submission, listing and the compare-and-score pass."""

import logging
from typing import Any, Optional

from .constants import MATCHES, MAX_SUBS, PREDICTIONS, STATUS_FINISHED
from .errors import LifecycleError
from .lifecycle import MatchLifecycle, assert_predictions_open
from .models import ScoreResult
from .registry import SquadRegistry
from .schemas import Prediction, PredictionRequest, ScoringRules
from .scorer import MatchScorer
from .store import EntityStore
from .utils import utc_now_iso
from .validators import validate_lineup, validate_side

logger = logging.getLogger('predictxi.predictions')


class PredictionBook:
    """
    Stores at most one prediction per (participant, match, team).

    Submissions are gated on the match still being a draft; the status
    check and the upsert both run under the match's entity lock, so a
    prediction cannot land after the match has been confirmed or finished.
    """

    def __init__(
        self,
        store: EntityStore,
        lifecycle: MatchLifecycle,
        registry: SquadRegistry,
        rules: Optional[ScoringRules] = None,
        max_subs: int = MAX_SUBS,
        allow_preview: bool = True,
    ):
        self.store = store
        self.lifecycle = lifecycle
        self.registry = registry
        self.rules = rules or ScoringRules()
        self.max_subs = max_subs
        self.allow_preview = allow_preview

    def submit(self, participant_id: str, request: PredictionRequest) -> Prediction:
        """
        Create or replace a participant's prediction for one side of a match.

        A resubmission replaces players, subs and MOTM entirely and resets
        points to 0.

        Args:
            participant_id: Authenticated participant
            request: Prediction payload

        Returns:
            The stored Prediction

        Raises:
            InvalidTeamError: If team is not 'home' or 'away'
            MatchNotFoundError: If the match doesn't exist
            PredictionsClosedError: If the match is no longer a draft
            NotFoundError: If the team has no squad
            LineupValidationError: If the lineup breaks a lineup rule
        """
        validate_side(request.team)

        with self.store.locked(MATCHES, request.match_id):
            match = self.lifecycle.get_match(request.match_id)
            assert_predictions_open(match)

            squad = self.registry.get_squad(match.team_name(request.team))
            validate_lineup(
                request.players,
                squad,
                subs=request.subs,
                motm=request.motm,
                max_subs=self.max_subs,
            )

            key = {'participant': participant_id, 'match': match.id, 'team': request.team}
            prediction = Prediction(
                id='',
                **key,
                players=[entry.model_copy() for entry in request.players],
                subs=[sub.model_copy() for sub in request.subs],
                motm=request.motm,
                points=0,
                submitted_at=utc_now_iso(),
            )
            doc = prediction.model_dump(exclude={'id', 'version'})
            stored, created = self.store.upsert(PREDICTIONS, key, doc)

        logger.info(
            f'{"Saved" if created else "Replaced"} {request.team} prediction '
            f'for {participant_id} on match {match.id}'
        )
        return Prediction.model_validate(stored)

    def get_prediction(self, participant_id: str, match_id: str, team: str) -> Optional[Prediction]:
        doc = self.store.find_one(PREDICTIONS, participant=participant_id, match=match_id, team=team)
        return Prediction.model_validate(doc) if doc else None

    def _predictions_for(self, match_id: str, side: Optional[str] = None) -> list[Prediction]:
        fields = {'match': match_id}
        if side is not None:
            fields['team'] = validate_side(side)
        docs = self.store.find(PREDICTIONS, **fields)
        predictions = [Prediction.model_validate(doc) for doc in docs]
        return sorted(predictions, key=lambda p: (p.team, p.participant))

    def list_predictions(
        self, match_id: str, side: Optional[str] = None, with_players: bool = False
    ) -> list[Prediction] | list[dict[str, Any]]:
        """
        List stored predictions for a match.

        Args:
            match_id: Match to list
            side: Optional 'home' or 'away' filter
            with_players: If True, return dicts where every player reference
                carries the player's name and rating

        Raises:
            MatchNotFoundError: If the match doesn't exist
        """
        self.lifecycle.get_match(match_id)
        predictions = self._predictions_for(match_id, side)
        if not with_players:
            return predictions

        ids = set()
        for prediction in predictions:
            ids.update(entry.player for entry in prediction.players)
            ids.update(sub.player for sub in prediction.subs)
            if prediction.motm:
                ids.add(prediction.motm)
        players = self.registry.players_by_id(ids)

        def describe(player_id: Optional[str]) -> Optional[dict[str, Any]]:
            if player_id is None:
                return None
            player = players.get(player_id)
            return {
                'id': player_id,
                'name': player.name if player else None,
                'rating': player.rating if player else None,
            }

        joined = []
        for prediction in predictions:
            data = prediction.model_dump()
            for entry in data['players']:
                entry['player'] = describe(entry['player'])
            for sub in data['subs']:
                sub['player'] = describe(sub['player'])
            data['motm'] = describe(data['motm'])
            joined.append(data)
        return joined

    def compare_and_score(self, match_id: str, side: str) -> list[ScoreResult]:
        """
        Score every prediction for one side of a match.

        On a finished match each prediction's `points` is written once with
        its fresh total. On an unfinished match the results are provisional
        and nothing is written; this preview is refused when disabled.

        The whole pass holds the match lock, so two passes for the same
        match cannot interleave their writes.

        Raises:
            MatchNotFoundError: If the match doesn't exist
            InvalidTeamError: If side is not 'home' or 'away'
            LifecycleError: If the match is unfinished and preview is disabled
        """
        validate_side(side)

        with self.store.locked(MATCHES, match_id):
            match = self.lifecycle.get_match(match_id)
            if match.status != STATUS_FINISHED and not self.allow_preview:
                raise LifecycleError(
                    f'Match {match_id} is {match.status}; scoring requires a finished match',
                    match.status,
                )

            scorer = MatchScorer(match, self.rules)
            results = scorer.score_predictions(self._predictions_for(match_id, side), side)

            players = self.registry.players_by_id(
                pick.player for r in results for pick in r.starters.picks + r.subs.picks
            )
            for result in results:
                for pick in result.starters.picks + result.subs.picks:
                    if pick.player in players:
                        pick.name = players[pick.player].name

            if not scorer.provisional:
                for result in results:
                    total = result.total_points
                    self.store.update(
                        PREDICTIONS,
                        result.prediction_id,
                        lambda doc, total=total: {**doc, 'points': total},
                    )
                logger.info(f'Wrote points for {len(results)} {side} predictions on match {match_id}')

        return results
