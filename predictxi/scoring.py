"""Scoring functions for each part of a lineup prediction."""

from typing import Collection, Optional, Sequence

from .constants import LINEUP_SIZE
from .models import MotmResult, PickResult, SectionResult
from .schemas import LineupEntry, ScoringRules, SubEntry

DEFAULT_RULES = ScoringRules()


def score_starters(
    predicted: Sequence[LineupEntry],
    official: Collection[str],
    rules: ScoringRules = DEFAULT_RULES,
) -> SectionResult:
    """
    Score predicted starters against the official starting eleven.

    Scoring:
        - Each predicted starter in the official eleven: 1 point
        - All 11 correct (order and position label ignored): +3 bonus

    Args:
        predicted: Predicted starting eleven
        official: Player ids of the official starters
        rules: Point values (default: standard rules)
    """
    official_ids = set(official)
    section = SectionResult()

    for entry in predicted:
        is_correct = entry.player in official_ids
        if is_correct:
            section.correct += 1
        section.picks.append(
            PickResult(
                player=entry.player,
                position=entry.position,
                is_correct=is_correct,
                points=rules.starter_points if is_correct else 0,
            )
        )

    if section.correct == LINEUP_SIZE:
        section.bonus = rules.starters_bonus

    return section


def score_subs(
    predicted: Sequence[SubEntry],
    official: Collection[str],
    rules: ScoringRules = DEFAULT_RULES,
) -> SectionResult:
    """
    Score predicted substitutes against the players who officially came on.

    Scoring:
        - Each predicted sub who came on: 1 point (a repeated id counts once)
        - +3 bonus only if subs were made, the predicted count equals the
          official count, and every official sub was predicted

    Args:
        predicted: Predicted substitutes
        official: Player ids of the official substitutes
        rules: Point values (default: standard rules)
    """
    official_ids = set(official)
    section = SectionResult()
    counted = set()

    for sub in predicted:
        is_correct = sub.player in official_ids and sub.player not in counted
        counted.add(sub.player)
        if is_correct:
            section.correct += 1
        section.picks.append(
            PickResult(
                player=sub.player,
                is_correct=is_correct,
                points=rules.sub_points if is_correct else 0,
            )
        )

    if (
        official_ids
        and len(predicted) == len(official_ids)
        and section.correct == len(official_ids)
    ):
        section.bonus = rules.subs_bonus

    return section


def score_motm(
    predicted: Optional[str],
    official: Optional[str],
    rules: ScoringRules = DEFAULT_RULES,
) -> MotmResult:
    """
    Score the man-of-the-match pick.

    Scoring:
        - Predicted MOTM equals the official MOTM: 3 points
        - Either side missing: 0 points
    """
    is_correct = bool(predicted) and bool(official) and predicted == official
    return MotmResult(
        predicted=predicted,
        actual=official,
        is_correct=is_correct,
        points=rules.motm_points if is_correct else 0,
    )
