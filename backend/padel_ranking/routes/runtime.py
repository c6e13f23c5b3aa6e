"""
Runtime: record match results.

Recording a result runs the whole post-match flow in one call: points for the
format, bracket advancement (winner forward, loser to consolation or 3rd
place) and reactive scheduling of matches that just became ready.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from padel_ranking.database import get_session
from padel_ranking.exceptions import RankingNotFoundError, ScoreValidationError
from padel_ranking.models.domain import MatchScore
from padel_ranking.models.ranking import Ranking
from padel_ranking.routes.rankings import load_or_404
from padel_ranking.services.points import parse_score_string
from padel_ranking.services.ranking_store import save_ranking
from padel_ranking.services.result_service import MatchResultUpdate, record_match_result

router = APIRouter()


class MatchResultRequest(BaseModel):
    score: Optional[MatchScore] = None
    # "6-3 4-6 10-7" as typed at the desk; ignored when `score` is given
    score_text: Optional[str] = None
    is_incomplete: bool = False
    force_draw: bool = False
    not_played: bool = False
    auto_complete: bool = False


def _to_update(payload: MatchResultRequest) -> MatchResultUpdate:
    score = payload.score
    if score is None and payload.score_text:
        score = parse_score_string(payload.score_text)
        if score is None:
            raise HTTPException(status_code=422, detail=f"Unreadable score: '{payload.score_text}'")
    if score is not None and payload.is_incomplete:
        score.is_incomplete = True
    return MatchResultUpdate(
        score=score,
        force_draw=payload.force_draw,
        not_played=payload.not_played,
        auto_complete=payload.auto_complete,
    )


@router.patch(
    "/rankings/{ranking_id}/divisions/{division_id}/matches/{match_id}/result",
    response_model=Ranking,
)
def update_match_result(
    ranking_id: int,
    division_id: str,
    match_id: str,
    payload: MatchResultRequest,
    session: Session = Depends(get_session),
) -> Ranking:
    """Record a result and return the updated ranking."""
    ranking = load_or_404(session, ranking_id)
    update = _to_update(payload)

    try:
        divisions = record_match_result(ranking, division_id, match_id, update)
    except RankingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ScoreValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    ranking.divisions = divisions
    return save_ranking(session, ranking)
