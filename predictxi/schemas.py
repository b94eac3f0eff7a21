"""Pydantic schemas for stored entities, request payloads and configuration."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    MAX_MATCHDAY,
    MAX_MINUTE,
    MAX_SUBS,
    MIN_MATCHDAY,
    MOTM_POINTS,
    RATING_WEIGHTS,
    STARTER_POINTS,
    STARTERS_BONUS,
    STATUS_DRAFT,
    SUB_POINTS,
    SUBS_BONUS,
)


class League(BaseModel):
    """A league owning players and matches."""

    id: str
    name: str = Field(..., min_length=1)
    owner: Optional[str] = None
    admins: list[str] = Field(default_factory=list)
    version: int = 0

    class Config:
        extra = 'forbid'


class Player(BaseModel):
    """Player metadata plus cumulative match counters.

    Counters are written by match finalization tooling only; `rating` is
    always derived from them on read.
    """

    id: str
    name: str = Field(..., min_length=1)
    team: str = ''
    league: str
    position: str = Field(..., pattern=r'^(gk|def|mid|fw)$')

    games: int = 0
    goals: int = 0
    assists: int = 0
    blocks: int = 0
    saves: int = 0
    cleansheets: int = 0
    goalsconceded: int = 0
    penalty_earned: int = 0
    penalty_missed: int = 0
    penalty_saved: int = 0
    yellowcards: int = 0
    redcards: int = 0
    bonus: int = 0

    image: str = ''
    version: int = 0

    @property
    def rating(self) -> int:
        return sum(getattr(self, counter) * weight for counter, weight in RATING_WEIGHTS.items())

    class Config:
        extra = 'forbid'


class TeamSquad(BaseModel):
    """Players currently eligible to represent a team."""

    id: str
    team: str = Field(..., min_length=1)
    players: list[str] = Field(default_factory=list)
    version: int = 0

    def has_player(self, player_id: str) -> bool:
        return player_id in self.players

    class Config:
        extra = 'forbid'


class LineupEntry(BaseModel):
    """A starter slot. Position is checked by validate_lineup, not here."""

    player: str = ''
    position: str = ''
    from_minute: Optional[int] = Field(None, ge=0, le=MAX_MINUTE)

    class Config:
        extra = 'forbid'


class SubEntry(BaseModel):
    """A substitute and the minute they came on (if known)."""

    player: str = ''
    minute: Optional[int] = Field(None, ge=0, le=MAX_MINUTE)

    class Config:
        extra = 'forbid'


class Goal(BaseModel):
    scorer: str = Field(..., min_length=1)
    assist: Optional[str] = None
    minute: Optional[int] = Field(None, ge=0, le=MAX_MINUTE)

    class Config:
        extra = 'forbid'


class MatchEvents(BaseModel):
    goals: list[Goal] = Field(default_factory=list)
    motm: Optional[str] = None

    class Config:
        extra = 'forbid'


class MatchScore(BaseModel):
    home: int = Field(0, ge=0)
    away: int = Field(0, ge=0)

    class Config:
        extra = 'forbid'


class SideLineups(BaseModel):
    home: list[LineupEntry] = Field(default_factory=list)
    away: list[LineupEntry] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class SideSubs(BaseModel):
    home: list[SubEntry] = Field(default_factory=list)
    away: list[SubEntry] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class Match(BaseModel):
    """A single fixture and, once recorded, its official result."""

    id: str
    league: str
    matchday: int = Field(..., ge=MIN_MATCHDAY, le=MAX_MATCHDAY)
    home_team: str = Field(..., min_length=1)
    away_team: str = Field(..., min_length=1)
    status: str = Field(default=STATUS_DRAFT, pattern=r'^(draft|confirmed|finished)$')
    score: MatchScore = Field(default_factory=MatchScore)
    lineups: SideLineups = Field(default_factory=SideLineups)
    subs_in: SideSubs = Field(default_factory=SideSubs)
    events: MatchEvents = Field(default_factory=MatchEvents)
    played_at: Optional[str] = None
    version: int = 0

    @field_validator('home_team', 'away_team')
    @classmethod
    def strip_team_name(cls, v):
        """Team names are matched against squads, so surrounding spaces are dropped."""
        return v.strip()

    def team_name(self, side: str) -> str:
        return self.home_team if side == 'home' else self.away_team

    def lineup(self, side: str) -> list[LineupEntry]:
        return getattr(self.lineups, side)

    def subs(self, side: str) -> list[SubEntry]:
        return getattr(self.subs_in, side)

    class Config:
        extra = 'forbid'


class Prediction(BaseModel):
    """One participant's prediction for one side of one match."""

    id: str
    participant: str
    match: str
    team: str = Field(..., pattern=r'^(home|away)$')
    players: list[LineupEntry]
    subs: list[SubEntry] = Field(default_factory=list)
    motm: Optional[str] = None
    points: int = 0
    submitted_at: Optional[str] = None
    version: int = 0

    class Config:
        extra = 'forbid'


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class Actor(BaseModel):
    """Authenticated caller, as supplied by the identity provider."""

    participant_id: str = Field(..., min_length=1)
    role: str = Field(..., pattern=r'^(user|admin)$')

    class Config:
        extra = 'forbid'


class CreateMatchRequest(BaseModel):
    league: str = Field(..., min_length=1)
    matchday: int = Field(..., ge=MIN_MATCHDAY, le=MAX_MATCHDAY)
    home_team: str = Field(..., min_length=1)
    away_team: str = Field(..., min_length=1)
    played_at: Optional[str] = None

    @field_validator('away_team')
    @classmethod
    def validate_distinct_teams(cls, v, info):
        """A team cannot play itself."""
        home = info.data.get('home_team')
        if home is not None and home.strip() == v.strip():
            raise ValueError(f'Home and away team must differ, got {v} twice')
        return v

    class Config:
        extra = 'forbid'


class OfficialLineupRequest(BaseModel):
    match_id: str
    side: str
    players: list[LineupEntry]

    class Config:
        extra = 'forbid'


class OfficialSubsRequest(BaseModel):
    match_id: str
    side: str
    subs: list[SubEntry]

    class Config:
        extra = 'forbid'


class FinalizeMatchRequest(BaseModel):
    match_id: str
    score: MatchScore = Field(default_factory=MatchScore)
    goals: list[Goal] = Field(default_factory=list)
    motm: Optional[str] = None

    class Config:
        extra = 'forbid'


class PredictionRequest(BaseModel):
    match_id: str
    team: str
    players: list[LineupEntry]
    subs: list[SubEntry] = Field(default_factory=list)
    motm: Optional[str] = None

    @field_validator('motm')
    @classmethod
    def blank_motm_is_none(cls, v):
        """Clients send '' for 'no pick'."""
        if v is not None and not v.strip():
            return None
        return v

    class Config:
        extra = 'forbid'


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ScoringRules(BaseModel):
    """Point values used by the scoring engine."""

    starter_points: int = Field(default=STARTER_POINTS, ge=0)
    sub_points: int = Field(default=SUB_POINTS, ge=0)
    starters_bonus: int = Field(default=STARTERS_BONUS, ge=0)
    subs_bonus: int = Field(default=SUBS_BONUS, ge=0)
    motm_points: int = Field(default=MOTM_POINTS, ge=0)

    class Config:
        extra = 'forbid'


class GameConfig(BaseModel):
    """Game configuration settings."""

    season: str = Field(..., min_length=1)
    data_dir: str = 'data/store'
    max_subs: int = Field(default=MAX_SUBS, ge=0, le=MAX_SUBS)
    allow_preview_scoring: bool = True
    log_level: str = Field(default='INFO', pattern=r'^(DEBUG|INFO|WARNING|ERROR)$')
    scoring: ScoringRules = Field(default_factory=ScoringRules)

    class Config:
        extra = 'forbid'
