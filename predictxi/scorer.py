"""Scoring engine that turns a match result and its predictions into ranked scores."""

import logging
from typing import Iterable, Optional

from .constants import STATUS_FINISHED
from .errors import LineupValidationError
from .models import ScoreResult
from .schemas import Match, Prediction, ScoringRules
from .scoring import DEFAULT_RULES, score_motm, score_starters, score_subs
from .validators import validate_score_result, validate_side

logger = logging.getLogger('predictxi.scorer')


class MatchScorer:
    """
    Scores predictions for one match against its official record.

    Scoring is a pure function of the match's official data and the
    prediction contents: stored `points` are never read, so repeated runs
    give identical output. A match that is not finished can still be
    scored, but every result is marked provisional.
    """

    def __init__(self, match: Match, rules: Optional[ScoringRules] = None):
        """
        Initialize scorer.

        Args:
            match: Match whose official lineups, subs and MOTM are the truth
            rules: Point values (default: standard rules)
        """
        self.match = match
        self.rules = rules or DEFAULT_RULES

    @property
    def provisional(self) -> bool:
        return self.match.status != STATUS_FINISHED

    def score_prediction(self, prediction: Prediction) -> ScoreResult:
        """
        Score a single prediction against the official record for its side.

        Returns:
            ScoreResult with per-pick flags, bonuses and breakdown
        """
        side = prediction.team
        official_starters = [entry.player for entry in self.match.lineup(side)]
        official_subs = [sub.player for sub in self.match.subs(side)]

        starters = score_starters(prediction.players, official_starters, self.rules)
        subs = score_subs(prediction.subs, official_subs, self.rules)
        motm = score_motm(prediction.motm, self.match.events.motm, self.rules)

        breakdown = {}
        for key, value in (
            ('starters', starters.points - starters.bonus),
            ('starters_bonus', starters.bonus),
            ('subs', subs.points - subs.bonus),
            ('subs_bonus', subs.bonus),
            ('motm', motm.points),
        ):
            if value:
                breakdown[key] = value

        return ScoreResult(
            participant=prediction.participant,
            prediction_id=prediction.id,
            team=side,
            starters=starters,
            subs=subs,
            motm=motm,
            total_points=starters.points + subs.points + motm.points,
            breakdown=breakdown,
            provisional=self.provisional,
        )

    def score_predictions(self, predictions: Iterable[Prediction], side: str) -> list[ScoreResult]:
        """
        Score and rank every prediction for one side.

        Results are ordered by total points (highest first), then by
        participant id; equal totals share a rank.

        Args:
            predictions: Predictions for `side` of this match
            side: 'home' or 'away'

        Returns:
            Ranked list of ScoreResult, one per prediction

        Raises:
            InvalidTeamError: If `side` is not a side
            LineupValidationError: If a prediction is for the other side
        """
        validate_side(side)

        results = []
        for prediction in predictions:
            if prediction.team != side:
                raise LineupValidationError(
                    f'Prediction {prediction.id} is for the {prediction.team} side, expected {side}',
                    rule='team',
                )
            result = self.score_prediction(prediction)
            for warning in validate_score_result(result):
                logger.warning(warning)
            results.append(result)

        results.sort(key=lambda r: (-r.total_points, r.participant, r.prediction_id))

        previous_total = None
        for position, result in enumerate(results, 1):
            if result.total_points != previous_total:
                rank = position
                previous_total = result.total_points
            result.rank = rank

        logger.info(
            f'Scored {len(results)} {side} predictions for match {self.match.id}'
            f'{" (provisional)" if self.provisional else ""}'
        )
        return results
