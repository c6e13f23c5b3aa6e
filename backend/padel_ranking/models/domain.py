"""
Ranking domain objects: divisions, matches, pairs, scores.

These are plain pydantic models (not tables). A whole ranking is stored as one
JSON payload on RankingRecord; engines receive and return lists of Division.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

BYE = "BYE"
CONSOLATION_SUFFIX = "(Cons.)"


def new_id() -> str:
    return str(uuid4())


class MatchStatus(str, Enum):
    PENDING = "pendiente"
    FINISHED = "finalizado"
    RESTING = "descanso"
    NOT_PLAYED = "no_disputado"


class DivisionType(str, Enum):
    MAIN = "main"
    CONSOLATION = "consolation"
    LEAGUE_CONSOLATION_MAIN = "league-consolation-main"


class DivisionStage(str, Enum):
    GROUP = "group"
    PLAYOFF = "playoff"


class MatchPair(BaseModel):
    p1_id: str = ""
    p2_id: str = ""
    placeholder: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.p1_id and not self.p2_id

    def is_bye(self) -> bool:
        return self.p1_id == BYE

    def is_real(self) -> bool:
        """True when the slot holds an actual participant (not empty, not BYE)."""
        return bool(self.p1_id) and self.p1_id != BYE

    def same_as(self, other: "MatchPair") -> bool:
        return self.p1_id == other.p1_id and self.p2_id == other.p2_id

    def player_ids(self) -> List[str]:
        return [pid for pid in (self.p1_id, self.p2_id) if pid and pid != BYE]

    def assign(self, p1_id: str, p2_id: str = "") -> None:
        self.p1_id = p1_id
        self.p2_id = p2_id or ""
        self.placeholder = None

    def clear(self, placeholder: Optional[str] = None) -> None:
        self.p1_id = ""
        self.p2_id = ""
        self.placeholder = placeholder

    @property
    def key(self) -> str:
        """Canonical "p1::p2" key used for pair standings."""
        if self.p2_id:
            return f"{self.p1_id}::{self.p2_id}"
        return self.p1_id


class SetScore(BaseModel):
    p1: int = 0
    p2: int = 0


class MatchScore(BaseModel):
    set1: Optional[SetScore] = None
    set2: Optional[SetScore] = None
    set3: Optional[SetScore] = None
    is_incomplete: bool = False
    finalization_type: Optional[str] = None
    points_scored: Optional[SetScore] = None
    description: Optional[str] = None

    def sets(self) -> List[SetScore]:
        return [s for s in (self.set1, self.set2, self.set3) if s is not None]


class MatchPoints(BaseModel):
    p1: float = 0
    p2: float = 0


class Match(BaseModel):
    id: str = Field(default_factory=new_id)
    jornada: int
    pair1: MatchPair = Field(default_factory=MatchPair)
    pair2: MatchPair = Field(default_factory=MatchPair)
    status: MatchStatus = MatchStatus.PENDING
    score: Optional[MatchScore] = None
    points: MatchPoints = Field(default_factory=MatchPoints)
    round_name: Optional[str] = None
    next_match_id: Optional[str] = None
    consolation_match_id: Optional[str] = None
    start_time: Optional[datetime] = None
    court: Optional[int] = None

    @property
    def is_consolation(self) -> bool:
        return bool(self.round_name) and self.round_name.endswith(CONSOLATION_SUFFIX)

    @property
    def is_bye_result(self) -> bool:
        return (
            self.status == MatchStatus.FINISHED
            and self.score is not None
            and self.score.description == BYE
        )

    def has_pair(self, pair: MatchPair) -> bool:
        return self.pair1.same_as(pair) or self.pair2.same_as(pair)

    def player_ids(self) -> List[str]:
        return self.pair1.player_ids() + self.pair2.player_ids()


class Division(BaseModel):
    id: str = Field(default_factory=new_id)
    numero: int
    name: Optional[str] = None
    category: Optional[str] = None
    status: str = "activa"
    players: List[str] = Field(default_factory=list)
    retired_players: List[str] = Field(default_factory=list)
    matches: List[Match] = Field(default_factory=list)
    type: Optional[DivisionType] = None
    stage: Optional[DivisionStage] = None

    @property
    def is_consolation(self) -> bool:
        return self.type == DivisionType.CONSOLATION


class ManualStatsAdjustment(BaseModel):
    """Admin correction added on top of computed standings for one player."""

    pts: float = 0
    pj: int = 0
    pg: int = 0
    sets_won: int = 0
    sets_diff: int = 0
    games_won: int = 0
    games_diff: int = 0


class DivisionOverride(BaseModel):
    player_id: str
    force_div: int


class StandingRow(BaseModel):
    player_id: str
    pos: int = 0
    pj: int = 0
    pg: int = 0
    pts: float = 0
    sets_diff: int = 0
    games_diff: int = 0
    sets_won: int = 0
    games_won: int = 0


ManualStatsAdjustments = Dict[str, ManualStatsAdjustment]
