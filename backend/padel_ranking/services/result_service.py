"""
Result recording.

Applies one match result to a ranking: points through the format's scoring
handler, bracket advancement (winner forward, loser to consolation or the
3rd place match) and reactive scheduling of the bracket matches that
became ready.
Returns the new divisions; the ranking passed in is not modified.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel

from padel_ranking.exceptions import RankingNotFoundError, ScoreValidationError
from padel_ranking.models.domain import (
    Division,
    DivisionStage,
    DivisionType,
    Match,
    MatchPair,
    MatchPoints,
    MatchScore,
    MatchStatus,
    SetScore,
)
from padel_ranking.models.formats import EliminationFormat, PointBasedFormat
from padel_ranking.models.ranking import Ranking
from padel_ranking.services.bracket_engine import (
    advance_winner,
    find_third_place_match,
    get_loser_pair,
    get_winner_pair,
    move_loser_to_consolation,
    move_loser_to_third_place,
)
from padel_ranking.services.bracket_seeding import get_round_name
from padel_ranking.services.format_handlers import score_match
from padel_ranking.services.points import auto_complete_points, calculate_match_points
from padel_ranking.services.scheduler_engine import schedule_next_matches
from padel_ranking.utils.match_index import MatchIndex, copy_divisions

logger = logging.getLogger(__name__)

BRACKET_TYPES = (DivisionType.MAIN, DivisionType.CONSOLATION, DivisionType.LEAGUE_CONSOLATION_MAIN)


class MatchResultUpdate(BaseModel):
    """Result submitted for one match."""

    score: Optional[MatchScore] = None
    force_draw: bool = False
    not_played: bool = False
    # Fill the opponent's points from the format total (point-based formats)
    auto_complete: bool = False


def _is_bracket_division(ranking: Ranking, division: Division) -> bool:
    return (
        isinstance(ranking.format, EliminationFormat)
        or division.stage == DivisionStage.PLAYOFF
        or division.type in BRACKET_TYPES
    )


def _complete_point_score(ranking: Ranking, score: MatchScore) -> None:
    if not isinstance(ranking.format, PointBasedFormat) or score.points_scored is None:
        raise ScoreValidationError("Only point-based scores can be auto-completed")
    score.points_scored.p2 = auto_complete_points(score.points_scored.p1, ranking.format)


def _apply_score(ranking: Ranking, division: Division, match: Match, update: MatchResultUpdate) -> None:
    if update.not_played:
        match.status = MatchStatus.NOT_PLAYED
        match.score = None
        match.points = MatchPoints()
        return

    if update.force_draw:
        result = calculate_match_points(
            SetScore(),
            force_draw=True,
            points_config=getattr(ranking.format, "points", None),
        )
        score = update.score.model_copy(deep=True) if update.score else MatchScore()
    else:
        if update.score is None:
            raise ScoreValidationError("A score is required to finish a match")
        score = update.score.model_copy(deep=True)
        if update.auto_complete:
            _complete_point_score(ranking, score)
        result = score_match(ranking.format, score, playoff=division.stage == DivisionStage.PLAYOFF)

    score.finalization_type = result.finalization_type
    score.description = result.description
    match.score = score
    match.points = result.points
    match.status = MatchStatus.FINISHED


def _is_first_real_match(division: Division, match: Match, pair: MatchPair) -> bool:
    """True when every earlier match of `pair` in this bracket was a BYE result."""
    earlier = [
        m for m in division.matches if m.jornada < match.jornada and not m.is_consolation and m.has_pair(pair)
    ]
    return bool(earlier) and all(m.is_bye_result for m in earlier)


def _has_consolation_bracket(divisions: List[Division]) -> bool:
    return any(d.type == DivisionType.CONSOLATION and d.matches for d in divisions)


def _advance_bracket(ranking: Ranking, division: Division, match: Match) -> List[Division]:
    working = ranking
    winner = get_winner_pair(match)
    loser = get_loser_pair(match)

    if winner is not None and winner.is_real():
        working = working.model_copy(update={"divisions": advance_winner(match, working, winner)})

    if loser is None or not loser.is_real():
        return working.divisions

    if division.type == DivisionType.MAIN and not match.is_consolation and _has_consolation_bracket(working.divisions):
        if match.consolation_match_id or _is_first_real_match(division, match, loser):
            working = working.model_copy(
                update={"divisions": move_loser_to_consolation(match, working, loser)}
            )

    if match.round_name == get_round_name(2) and find_third_place_match(division.matches) is not None:
        working = working.model_copy(update={"divisions": move_loser_to_third_place(match, working, loser)})

    return working.divisions


def record_match_result(
    ranking: Ranking,
    division_id: str,
    match_id: str,
    update: MatchResultUpdate,
) -> List[Division]:
    """
    Record a result and return the updated divisions.

    Raises RankingNotFoundError for an unknown division or match and
    ScoreValidationError when the score does not fit the format.
    """
    divisions = copy_divisions(ranking.divisions)
    index = MatchIndex(divisions)
    division = next((d for d in divisions if d.id == division_id), None)
    if division is None:
        raise RankingNotFoundError(f"Division {division_id} not found")
    match = index.get(match_id)
    owner = index.division_of(match_id)
    if match is None or owner is None or owner.id != division_id:
        raise RankingNotFoundError(f"Match {match_id} not found in division {division_id}")

    _apply_score(ranking, division, match, update)
    logger.info("Recorded result for match %s: %s (%s)", match.id, match.status.value, match.points)

    working = ranking.model_copy(update={"divisions": divisions})
    if match.status != MatchStatus.FINISHED or not _is_bracket_division(ranking, division):
        return working.divisions

    working = working.model_copy(update={"divisions": _advance_bracket(working, division, match)})
    if working.scheduler_config is not None:
        return schedule_next_matches(match, working, division_id)
    return working.divisions
