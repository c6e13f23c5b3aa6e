"""
Match scoring per tournament format.

SCORING_HANDLERS maps every TournamentFormat variant to exactly one handler.
A handler turns the submitted score into league points for that format.
"""
from typing import Callable, Dict, Type

from padel_ranking.exceptions import ScoreValidationError
from padel_ranking.models.domain import MatchScore
from padel_ranking.models.formats import (
    FORMAT_VARIANTS,
    AmericanoFormat,
    ClassicFormat,
    EliminationFormat,
    HybridFormat,
    IndividualFormat,
    MexicanoFormat,
    PairsFormat,
    PozoFormat,
)
from padel_ranking.services.points import (
    MatchPointsResult,
    calculate_elimination_points,
    calculate_match_points,
    calculate_point_based_points,
)

ScoringHandler = Callable[[object, MatchScore], MatchPointsResult]


def _require_set1(score: MatchScore) -> None:
    if score.set1 is None:
        raise ScoreValidationError("Set 1 is required")


def score_set_based(fmt, score: MatchScore) -> MatchPointsResult:
    _require_set1(score)
    return calculate_match_points(
        score.set1,
        score.set2,
        score.set3,
        is_incomplete=score.is_incomplete,
        points_config=fmt.points,
    )


def score_individual(fmt: IndividualFormat, score: MatchScore) -> MatchPointsResult:
    _require_set1(score)
    return calculate_match_points(score.set1, score.set2, points_config=fmt.points, is_individual=True)


def score_point_based(fmt, score: MatchScore) -> MatchPointsResult:
    if score.points_scored is None:
        raise ScoreValidationError("points_scored is required for point-based formats")
    return calculate_point_based_points(score.points_scored, fmt)


def score_elimination(fmt: EliminationFormat, score: MatchScore) -> MatchPointsResult:
    _require_set1(score)
    return calculate_elimination_points(score)


SCORING_HANDLERS: Dict[Type, ScoringHandler] = {
    ClassicFormat: score_set_based,
    IndividualFormat: score_individual,
    PairsFormat: score_set_based,
    AmericanoFormat: score_point_based,
    MexicanoFormat: score_point_based,
    PozoFormat: score_point_based,
    EliminationFormat: score_elimination,
    HybridFormat: score_set_based,
}


def score_match(fmt, score: MatchScore, playoff: bool = False) -> MatchPointsResult:
    """Points for one result. Playoff brackets of a hybrid ranking score like elimination matches."""
    if playoff:
        _require_set1(score)
        return calculate_elimination_points(score)
    handler = SCORING_HANDLERS.get(type(fmt))
    if handler is None:
        raise ScoreValidationError(f"No scoring handler for format '{getattr(fmt, 'kind', fmt)}'")
    return handler(fmt, score)


def missing_handlers():
    """Format variants without a handler (empty when the table is exhaustive)."""
    return [variant for variant in FORMAT_VARIANTS if variant not in SCORING_HANDLERS]
