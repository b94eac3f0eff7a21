"""
PredictXI command line

Shows a match's official record or runs a compare-and-score pass for one
side, reading the JSON store configured in data/game_config.json.

Usage:
    predictxi show --match-id 3f2a...
    predictxi score --match-id 3f2a... --side home
    predictxi score --match-id 3f2a... --side away --output out/away.json --quiet
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from .config import get_config, load_config
from .errors import PredictXIError
from .game import PredictionGame
from .logging_config import setup_logging
from .utils import save_json, utc_now_iso

logger = logging.getLogger('predictxi.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='PredictXI lineup prediction game')
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Path to game config JSON (defaults to data/game_config.json)',
    )
    parser.add_argument(
        '--data-dir', '-d',
        default=None,
        help='Store directory (overrides data_dir from config)',
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress detailed output',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    show = subparsers.add_parser('show', help='Show a match and its official record')
    show.add_argument('--match-id', '-m', required=True, help='Match id')

    score = subparsers.add_parser('score', help='Score all predictions for one side of a match')
    score.add_argument('--match-id', '-m', required=True, help='Match id')
    score.add_argument('--side', '-s', required=True, choices=['home', 'away'], help='Side to score')
    score.add_argument('--output', '-o', default=None, help='Write results to this JSON file')

    return parser


def print_match(game: PredictionGame, match_id: str) -> None:
    match = game.get_match(match_id)
    print(f'Matchday {match.matchday}: {match.home_team} v {match.away_team} [{match.status}]')
    print(f'Score: {match.score.home}-{match.score.away}')
    for side in ('home', 'away'):
        lineup = match.lineup(side)
        subs = match.subs(side)
        print(f'\n  {match.team_name(side)} ({side}): {len(lineup)} starters, {len(subs)} subs')
        for entry in lineup:
            print(f'    {entry.position:<4} {entry.player}')
        for sub in subs:
            minute = f"{sub.minute}'" if sub.minute is not None else ''
            print(f'    sub  {sub.player} {minute}')
    print(f'\n  MOTM: {match.events.motm or "-"}')


def print_results(results, verbose: bool = True) -> None:
    print('\n' + '=' * 60)
    print('RESULTS')
    print('=' * 60)
    for result in results:
        flag = ' (provisional)' if result.provisional else ''
        print(f'{result.rank:>3}. {result.participant}: {result.total_points} pts{flag}')
        if verbose:
            for key, value in result.breakdown.items():
                print(f'      {key}: {value}')


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config) if args.config else get_config()
    setup_logging(level=config.log_level, log_to_file=False, log_to_console=not args.quiet)

    if args.data_dir:
        config = config.model_copy(update={'data_dir': args.data_dir})
    game = PredictionGame.from_config(config)
    logger.debug(f'Using store at {config.data_dir}')

    try:
        if args.command == 'show':
            print_match(game, args.match_id)
            return 0

        results = game.compare_and_score(args.match_id, args.side)
    except PredictXIError as e:
        print(f'❌ {e}', file=sys.stderr)
        return 1

    print_results(results, verbose=not args.quiet)

    if args.output:
        save_json(
            args.output,
            {
                'match': args.match_id,
                'side': args.side,
                'scored_at': utc_now_iso(),
                'results': [r.to_dict() for r in results],
            },
        )
        print(f'Results saved to {args.output}')

    return 0


if __name__ == '__main__':
    sys.exit(main())
