"""Reference data: leagues, players and team squads.

The lineup engine only needs `get_squad`; the rest is the minimal roster
administration needed to populate it.
"""

import logging
from typing import Iterable, Optional

from .constants import LEAGUES, PLAYERS, SQUADS
from .errors import ConflictError, NotFoundError
from .schemas import League, Player, TeamSquad
from .store import EntityStore

logger = logging.getLogger('predictxi.registry')


class SquadRegistry:
    """Lookup and maintenance of leagues, players and squads."""

    def __init__(self, store: EntityStore):
        self.store = store

    # Leagues

    def create_league(self, name: str, owner: Optional[str] = None) -> League:
        """Create a league. League names are unique."""
        league = League(id='', name=name.strip(), owner=owner, admins=[owner] if owner else [])
        doc = self.store.insert(LEAGUES, league.model_dump(), unique=('name',))
        logger.info(f'Created league {name} ({doc["id"]})')
        return League.model_validate(doc)

    def get_league(self, league_id: str) -> League:
        doc = self.store.get(LEAGUES, league_id)
        if doc is None:
            raise NotFoundError('League', league_id)
        return League.model_validate(doc)

    # Players

    def add_player(
        self, name: str, league: str, position: str, team: str = '', image: str = ''
    ) -> Player:
        """
        Register a player in a league.

        Raises:
            NotFoundError: If the league doesn't exist
            ConflictError: If the league already has a player with this name
        """
        self.get_league(league)
        player = Player(
            id='', name=name.strip(), league=league, position=position, team=team, image=image
        )
        doc = self.store.insert(PLAYERS, player.model_dump(), unique=('name', 'league'))
        return Player.model_validate(doc)

    def get_player(self, player_id: str) -> Player:
        doc = self.store.get(PLAYERS, player_id)
        if doc is None:
            raise NotFoundError('Player', player_id)
        return Player.model_validate(doc)

    def list_players(self, league: str) -> list[Player]:
        players = [Player.model_validate(doc) for doc in self.store.find(PLAYERS, league=league)]
        return sorted(players, key=lambda p: p.name)

    def players_by_id(self, player_ids: Iterable[str]) -> dict[str, Player]:
        """Resolve ids to players, skipping ids that no longer exist."""
        found = {}
        for player_id in set(player_ids):
            doc = self.store.get(PLAYERS, player_id)
            if doc is not None:
                found[player_id] = Player.model_validate(doc)
        return found

    # Squads

    def create_squad(self, team: str) -> TeamSquad:
        """Create an empty squad. One squad per team name."""
        squad = TeamSquad(id='', team=team.strip())
        doc = self.store.insert(SQUADS, squad.model_dump(), unique=('team',))
        return TeamSquad.model_validate(doc)

    def get_squad(self, team: str) -> TeamSquad:
        """
        Get the current squad for a team name.

        Raises:
            NotFoundError: If no squad exists for the team
        """
        doc = self.store.find_one(SQUADS, team=team)
        if doc is None:
            raise NotFoundError('Team squad', team)
        return TeamSquad.model_validate(doc)

    def add_to_squad(self, team: str, player_id: str) -> TeamSquad:
        """
        Add an existing player to a team's squad.

        Raises:
            NotFoundError: If the squad or player doesn't exist
            ConflictError: If the player is already in the squad
        """
        self.get_player(player_id)
        squad = self.get_squad(team)

        def add(doc):
            if player_id in doc['players']:
                raise ConflictError(f'Player {player_id} already in {team} squad')
            doc['players'].append(player_id)
            return doc

        return TeamSquad.model_validate(self.store.update(SQUADS, squad.id, add))

    def remove_from_squad(self, team: str, player_id: str) -> TeamSquad:
        squad = self.get_squad(team)

        def remove(doc):
            if player_id not in doc['players']:
                raise NotFoundError(f'{team} squad member', player_id)
            doc['players'] = [p for p in doc['players'] if p != player_id]
            return doc

        return TeamSquad.model_validate(self.store.update(SQUADS, squad.id, remove))
