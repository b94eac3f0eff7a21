"""Shared fixtures: an in-memory game with two squads and a draft match."""

import pytest

from predictxi.game import PredictionGame
from predictxi.schemas import Actor, CreateMatchRequest, GameConfig, LineupEntry, SubEntry
from predictxi.store import EntityStore

OUTFIELD = ['def', 'def', 'def', 'def', 'mid', 'mid', 'mid', 'mid', 'fw', 'fw']


def build_lineup(player_ids, gk_index=0):
    """Eleven LineupEntry objects with exactly one goalkeeper."""
    positions = iter(OUTFIELD)
    return [
        LineupEntry(player=pid, position='gk' if i == gk_index else next(positions))
        for i, pid in enumerate(player_ids)
    ]


def build_subs(player_ids, minute=60):
    return [SubEntry(player=pid, minute=minute) for pid in player_ids]


@pytest.fixture
def make_lineup():
    return build_lineup


@pytest.fixture
def make_subs():
    return build_subs


@pytest.fixture
def config():
    return GameConfig(season='2025/26')


@pytest.fixture
def store():
    return EntityStore()


@pytest.fixture
def game(store, config):
    return PredictionGame(store, config)


@pytest.fixture
def admin():
    return Actor(participant_id='admin-1', role='admin')


@pytest.fixture
def alice():
    return Actor(participant_id='alice', role='user')


@pytest.fixture
def bob():
    return Actor(participant_id='bob', role='user')


@pytest.fixture
def league(game):
    return game.registry.create_league('Premier League', owner='admin-1')


@pytest.fixture
def squads(game, league):
    """Liverpool and Arsenal squads of 16 players each; the first player is a keeper."""
    rosters = {}
    for team in ('Liverpool', 'Arsenal'):
        game.registry.create_squad(team)
        ids = []
        for n in range(1, 17):
            position = 'gk' if n == 1 else 'mid'
            player = game.registry.add_player(f'{team} Player {n}', league.id, position, team=team)
            game.registry.add_to_squad(team, player.id)
            ids.append(player.id)
        rosters[team] = ids
    return rosters


@pytest.fixture
def match(game, admin, league, squads):
    return game.create_match(
        admin,
        CreateMatchRequest(
            league=league.id, matchday=1, home_team='Liverpool', away_team='Arsenal'
        ),
    )
