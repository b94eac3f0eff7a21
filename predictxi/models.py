"""Result models for the PredictXI scoring engine."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PickResult:
    """Correctness of one predicted starter or substitute."""
    player: str
    is_correct: bool
    points: int = 0
    position: Optional[str] = None  # starters only
    name: Optional[str] = None  # display name, filled by joins


@dataclass
class SectionResult:
    """Container for the starters or subs part of a prediction's score."""
    picks: List[PickResult] = field(default_factory=list)
    correct: int = 0
    bonus: int = 0

    @property
    def has_bonus(self) -> bool:
        return self.bonus > 0

    @property
    def points(self) -> int:
        return sum(p.points for p in self.picks) + self.bonus


@dataclass
class MotmResult:
    predicted: Optional[str]
    actual: Optional[str]
    is_correct: bool = False
    points: int = 0


@dataclass
class ScoreResult:
    """Container for a single prediction's score breakdown."""
    participant: str
    prediction_id: str
    team: str
    starters: SectionResult
    subs: SectionResult
    motm: MotmResult
    total_points: int = 0
    breakdown: Dict[str, int] = field(default_factory=dict)
    provisional: bool = False  # scored against a match that is not finished
    rank: int = 0

    @property
    def starters_bonus(self) -> bool:
        return self.starters.has_bonus

    @property
    def subs_bonus(self) -> bool:
        return self.subs.has_bonus

    @property
    def motm_bonus(self) -> bool:
        return self.motm.is_correct

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['starters']['bonus_awarded'] = self.starters_bonus
        data['subs']['bonus_awarded'] = self.subs_bonus
        return data
