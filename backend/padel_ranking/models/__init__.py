from padel_ranking.models.domain import (
    BYE,
    CONSOLATION_SUFFIX,
    Division,
    DivisionOverride,
    DivisionStage,
    DivisionType,
    ManualStatsAdjustment,
    Match,
    MatchPair,
    MatchPoints,
    MatchScore,
    MatchStatus,
    SetScore,
    StandingRow,
)
from padel_ranking.models.formats import (
    AmericanoFormat,
    ClassicFormat,
    EliminationFormat,
    HybridFormat,
    IndividualFormat,
    MexicanoFormat,
    PairsFormat,
    PointsConfig,
    PozoFormat,
    TournamentFormat,
)
from padel_ranking.models.ranking import Ranking
from padel_ranking.models.ranking_record import RankingRecord
from padel_ranking.models.scheduling import PlayerAvailability, SchedulerConfig, TimeRange, TimeWindow

__all__ = [
    "BYE",
    "CONSOLATION_SUFFIX",
    "Division",
    "DivisionOverride",
    "DivisionStage",
    "DivisionType",
    "ManualStatsAdjustment",
    "Match",
    "MatchPair",
    "MatchPoints",
    "MatchScore",
    "MatchStatus",
    "SetScore",
    "StandingRow",
    "AmericanoFormat",
    "ClassicFormat",
    "EliminationFormat",
    "HybridFormat",
    "IndividualFormat",
    "MexicanoFormat",
    "PairsFormat",
    "PointsConfig",
    "PozoFormat",
    "TournamentFormat",
    "Ranking",
    "RankingRecord",
    "PlayerAvailability",
    "SchedulerConfig",
    "TimeRange",
    "TimeWindow",
]
