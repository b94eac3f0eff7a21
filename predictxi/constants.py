"""Constants and mappings for the PredictXI lineup game."""

# Pitch positions a lineup entry may carry
POSITIONS = ('gk', 'def', 'mid', 'fw')
GOALKEEPER = 'gk'

# Sides of a match
SIDES = ('home', 'away')

# Match lifecycle
STATUS_DRAFT = 'draft'
STATUS_CONFIRMED = 'confirmed'
STATUS_FINISHED = 'finished'

# Forward-only transitions; confirmed may be skipped
ALLOWED_TRANSITIONS = {
    STATUS_DRAFT: (STATUS_CONFIRMED, STATUS_FINISHED),
    STATUS_CONFIRMED: (STATUS_FINISHED,),
    STATUS_FINISHED: (),
}

# Lineup shape
LINEUP_SIZE = 11
MAX_SUBS = 5

# Season and match bounds
MIN_MATCHDAY = 1
MAX_MATCHDAY = 38
MAX_MINUTE = 130

# Actor roles
ROLE_ADMIN = 'admin'
ROLE_USER = 'user'
PREDICTING_ROLES = (ROLE_USER, ROLE_ADMIN)

# Default scoring values
STARTER_POINTS = 1
SUB_POINTS = 1
STARTERS_BONUS = 3
SUBS_BONUS = 3
MOTM_POINTS = 3

# Player rating weights (negative weights are deductions)
RATING_WEIGHTS = {
    'games': 2,
    'goals': 4,
    'assists': 3,
    'cleansheets': 4,
    'saves': 1,
    'blocks': 1,
    'penalty_earned': 2,
    'penalty_saved': 4,
    'bonus': 3,
    'goalsconceded': -1,
    'penalty_missed': -2,
    'yellowcards': -1,
    'redcards': -2,
}

# Store collection names
LEAGUES = 'leagues'
PLAYERS = 'players'
SQUADS = 'squads'
MATCHES = 'matches'
PREDICTIONS = 'predictions'
COLLECTIONS = (LEAGUES, PLAYERS, SQUADS, MATCHES, PREDICTIONS)
