"""
Tournament formats as a closed tagged union.

Each variant carries only its own settings; `kind` is the discriminator.
Code that behaves differently per format dispatches on the variant class
(see services/format_handlers.py) instead of comparing format strings.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

ScoringMode = Literal["16", "21", "24", "31", "32", "per-game", "custom"]


class PointsConfig(BaseModel):
    points_per_win_2_0: float = 4
    points_per_win_2_1: float = 3
    points_draw: float = 2
    points_per_loss_2_1: float = 1
    points_per_loss_2_0: float = 0


class ClassicFormat(BaseModel):
    kind: Literal["classic"] = "classic"
    points: PointsConfig = Field(default_factory=PointsConfig)
    max_players_per_division: int = 4
    promotion_count: int = 2
    relegation_count: int = 2


class IndividualFormat(BaseModel):
    kind: Literal["individual"] = "individual"
    points: PointsConfig = Field(default_factory=PointsConfig)
    promotion_count: int = 2
    relegation_count: int = 2


class PairsFormat(BaseModel):
    kind: Literal["pairs"] = "pairs"
    points: PointsConfig = Field(default_factory=PointsConfig)


class PointBasedFormat(BaseModel):
    scoring_mode: ScoringMode = "32"
    total_points: Optional[int] = None


class AmericanoFormat(PointBasedFormat):
    kind: Literal["americano"] = "americano"
    courts: int = 2


class MexicanoFormat(PointBasedFormat):
    kind: Literal["mexicano"] = "mexicano"
    courts: int = 2


class PozoFormat(PointBasedFormat):
    kind: Literal["pozo"] = "pozo"
    variant: Literal["individual", "pairs"] = "individual"
    num_courts: int = 4


class EliminationFormat(BaseModel):
    kind: Literal["elimination"] = "elimination"
    consolation: bool = False
    third_place_match: bool = False
    participant_type: Literal["individual", "pairs"] = "pairs"
    legacy_hyphen_pairs: bool = False


class HybridFormat(BaseModel):
    kind: Literal["hybrid"] = "hybrid"
    points: PointsConfig = Field(default_factory=PointsConfig)
    pairs_per_group: int = 4
    qualifiers_per_group: int = 2
    consolation_qualifiers_per_group: int = 0


TournamentFormat = Annotated[
    Union[
        ClassicFormat,
        IndividualFormat,
        PairsFormat,
        AmericanoFormat,
        MexicanoFormat,
        PozoFormat,
        EliminationFormat,
        HybridFormat,
    ],
    Field(discriminator="kind"),
]

FORMAT_VARIANTS = (
    ClassicFormat,
    IndividualFormat,
    PairsFormat,
    AmericanoFormat,
    MexicanoFormat,
    PozoFormat,
    EliminationFormat,
    HybridFormat,
)

LEAGUE_FORMATS = (ClassicFormat, IndividualFormat)
