"""Validation functions for lineups, substitutions and scoring results."""

from typing import Iterable, Optional, Sequence

from .constants import GOALKEEPER, LINEUP_SIZE, MAX_SUBS, POSITIONS, SIDES
from .errors import InvalidTeamError, LineupValidationError
from .models import ScoreResult
from .schemas import LineupEntry, SubEntry, TeamSquad


def validate_side(team: str) -> str:
    """Return `team` if it names a side, otherwise raise InvalidTeamError."""
    if team not in SIDES:
        raise InvalidTeamError(team)
    return team


def _check_membership(player_ids: Iterable[str], squad: TeamSquad, label: str) -> None:
    for player_id in player_ids:
        if not squad.has_player(player_id):
            raise LineupValidationError(
                f'{label} {player_id} is not in the {squad.team} squad',
                rule='squad_membership',
                player_id=player_id,
            )


def validate_lineup(
    players: Sequence[LineupEntry],
    squad: TeamSquad,
    subs: Optional[Sequence[SubEntry]] = None,
    motm: Optional[str] = None,
    max_subs: int = MAX_SUBS,
) -> None:
    """
    Validate a starting eleven (and optional subs / MOTM) against a squad.

    Checks, in order, stopping at the first violation:
    - Exactly 11 starters
    - Every starter has a player id and a known position
    - No starter listed twice
    - Exactly one goalkeeper
    - Every starter, then every sub, then the MOTM pick is in the squad
    - No substitute listed twice
    - At most `max_subs` substitutes

    A substitute may also appear among the starters.

    Args:
        players: Candidate starting eleven
        squad: Squad of the team the lineup is for
        subs: Optional substitutes
        motm: Optional man-of-the-match pick
        max_subs: Substitute limit (default: 5)

    Raises:
        LineupValidationError: Naming the broken rule and, where relevant,
            the offending player id
    """
    if not isinstance(players, (list, tuple)) or len(players) != LINEUP_SIZE:
        count = len(players) if isinstance(players, (list, tuple)) else 'no'
        raise LineupValidationError(
            f'Lineup must contain exactly {LINEUP_SIZE} players, got {count}',
            rule='lineup_size',
        )

    for entry in players:
        if not entry.player or not entry.player.strip():
            raise LineupValidationError('Each player must have a player id', rule='player_id')
        if entry.position not in POSITIONS:
            raise LineupValidationError(
                f"Invalid position '{entry.position}' for {entry.player}. "
                f"Allowed: {', '.join(POSITIONS)}",
                rule='position',
                player_id=entry.player,
            )

    seen = set()
    for entry in players:
        if entry.player in seen:
            raise LineupValidationError(
                f'Duplicate player in lineup: {entry.player}',
                rule='duplicate_player',
                player_id=entry.player,
            )
        seen.add(entry.player)

    gk_count = sum(1 for entry in players if entry.position == GOALKEEPER)
    if gk_count != 1:
        raise LineupValidationError(
            f'Exactly one goalkeeper is required, got {gk_count}', rule='goalkeeper'
        )

    _check_membership((entry.player for entry in players), squad, 'Player')
    if subs:
        _check_membership((sub.player for sub in subs), squad, 'Sub')
    if motm:
        _check_membership([motm], squad, 'MOTM')

    if subs:
        seen_subs = set()
        for sub in subs:
            if sub.player in seen_subs:
                raise LineupValidationError(
                    f'Duplicate sub: {sub.player}', rule='duplicate_player', player_id=sub.player
                )
            seen_subs.add(sub.player)

    if subs is not None and len(subs) > max_subs:
        raise LineupValidationError(
            f'At most {max_subs} subs allowed, got {len(subs)}', rule='subs_size'
        )


def validate_subs(subs: Sequence[SubEntry], squad: TeamSquad, max_subs: int = MAX_SUBS) -> None:
    """
    Validate an official substitution list.

    Checks:
    - Every sub has a player id and is in the squad
    - At most `max_subs` substitutes
    - No player comes on twice

    Raises:
        LineupValidationError: On the first violation
    """
    for sub in subs:
        if not sub.player or not sub.player.strip():
            raise LineupValidationError('Each sub must have a player id', rule='player_id')
    _check_membership((sub.player for sub in subs), squad, 'Sub')

    if len(subs) > max_subs:
        raise LineupValidationError(
            f'At most {max_subs} subs allowed, got {len(subs)}', rule='subs_size'
        )

    seen = set()
    for sub in subs:
        if sub.player in seen:
            raise LineupValidationError(
                f'Duplicate sub: {sub.player}', rule='duplicate_player', player_id=sub.player
            )
        seen.add(sub.player)


def validate_match_events(
    goals: Sequence, motm: Optional[str], squads: Sequence[TeamSquad]
) -> None:
    """
    Check that every goal scorer, assister and the MOTM played for one of the two squads.

    Raises:
        LineupValidationError: Naming the first unknown player id
    """
    eligible = set()
    for squad in squads:
        eligible.update(squad.players)

    for goal in goals:
        for player_id, label in ((goal.scorer, 'Scorer'), (goal.assist, 'Assist')):
            if player_id and player_id not in eligible:
                raise LineupValidationError(
                    f'{label} {player_id} is not in either squad',
                    rule='squad_membership',
                    player_id=player_id,
                )

    if motm and motm not in eligible:
        raise LineupValidationError(
            f'MOTM {motm} is not in either squad', rule='squad_membership', player_id=motm
        )


def validate_score_result(result: ScoreResult) -> list[str]:
    """
    Check that a score result is internally consistent.

    Sanity checks:
    - Breakdown sums to the total
    - Section points match the per-pick flags
    - No negative total

    Args:
        result: ScoreResult to check

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    if result.total_points < 0:
        warnings.append(f'{result.participant} scored {result.total_points} pts (negative total)')

    breakdown_sum = sum(result.breakdown.values())
    if breakdown_sum != result.total_points:
        warnings.append(
            f'{result.participant} breakdown sum ({breakdown_sum}) != total '
            f'({result.total_points}) - difference: {result.total_points - breakdown_sum}'
        )

    for label, section in (('starters', result.starters), ('subs', result.subs)):
        flagged = sum(1 for pick in section.picks if pick.is_correct)
        if flagged != section.correct:
            warnings.append(
                f'{result.participant} {label}: {flagged} picks flagged correct '
                f'but correct count is {section.correct}'
            )

    return warnings
