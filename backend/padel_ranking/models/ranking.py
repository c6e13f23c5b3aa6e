from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from padel_ranking.models.domain import (
    Division,
    DivisionOverride,
    ManualStatsAdjustment,
    Match,
)
from padel_ranking.models.formats import ClassicFormat, TournamentFormat
from padel_ranking.models.scheduling import PlayerAvailability, SchedulerConfig


class Ranking(BaseModel):
    """Full tournament state handed to the engines."""

    id: Optional[int] = None
    name: str = ""
    format: TournamentFormat = Field(default_factory=ClassicFormat)
    divisions: List[Division] = Field(default_factory=list)
    scheduler_config: Optional[SchedulerConfig] = None
    player_constraints: Dict[str, PlayerAvailability] = Field(default_factory=dict)
    history: List[Match] = Field(default_factory=list)
    overrides: List[DivisionOverride] = Field(default_factory=list)
    manual_stats_adjustments: Dict[str, ManualStatsAdjustment] = Field(default_factory=dict)

    def find_division(self, division_id: str) -> Optional[Division]:
        for division in self.divisions:
            if division.id == division_id:
                return division
        return None
