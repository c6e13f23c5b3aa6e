from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from padel_ranking.database import get_session
from padel_ranking.models.domain import DivisionOverride, DivisionType, MatchPair, StandingRow
from padel_ranking.models.formats import LEAGUE_FORMATS
from padel_ranking.models.ranking import Ranking
from padel_ranking.routes.rankings import load_or_404
from padel_ranking.services.bracket_engine import get_final_standings, is_bracket_complete
from padel_ranking.services.promotions import apply_promotions, calculate_promotions
from padel_ranking.services.ranking_store import save_ranking
from padel_ranking.services.standings import generate_division_standings, generate_global_standings

router = APIRouter()


class MovementResponse(BaseModel):
    player_id: str
    from_div: int
    to_div: int
    type: str


class PromotionPreviewResponse(BaseModel):
    movements: List[MovementResponse]
    divisions: List[List[str]]


class PromotionRequest(BaseModel):
    overrides: Optional[List[DivisionOverride]] = None


class PodiumResponse(BaseModel):
    complete: bool
    first: Optional[MatchPair] = None
    second: Optional[MatchPair] = None
    third: Optional[MatchPair] = None


def _require_league(ranking: Ranking) -> None:
    if not isinstance(ranking.format, LEAGUE_FORMATS):
        raise HTTPException(status_code=422, detail="Promotions are only available for league rankings")


@router.get("/rankings/{ranking_id}/divisions/{division_id}/standings", response_model=List[StandingRow])
def get_division_standings(ranking_id: int, division_id: str, session: Session = Depends(get_session)):
    ranking = load_or_404(session, ranking_id)
    if ranking.find_division(division_id) is None:
        raise HTTPException(status_code=404, detail="Division not found")
    return generate_division_standings(ranking, division_id)


@router.get("/rankings/{ranking_id}/standings", response_model=List[StandingRow])
def get_global_standings(ranking_id: int, session: Session = Depends(get_session)):
    """One table over every division and the archived history"""
    return generate_global_standings(load_or_404(session, ranking_id))


@router.get("/rankings/{ranking_id}/podium", response_model=PodiumResponse)
def get_podium(ranking_id: int, session: Session = Depends(get_session)):
    """Champion, runner-up and third of the main bracket"""
    ranking = load_or_404(session, ranking_id)
    main = next((d for d in ranking.divisions if d.type == DivisionType.MAIN), None)
    if main is None:
        raise HTTPException(status_code=422, detail="Ranking has no elimination bracket")
    return PodiumResponse(complete=is_bracket_complete(main.matches), **get_final_standings(main.matches))


@router.post("/rankings/{ranking_id}/promotions/preview", response_model=PromotionPreviewResponse)
def preview_promotions(
    ranking_id: int,
    payload: Optional[PromotionRequest] = None,
    session: Session = Depends(get_session),
):
    ranking = load_or_404(session, ranking_id)
    _require_league(ranking)
    result = calculate_promotions(ranking, overrides=payload.overrides if payload else None)
    return PromotionPreviewResponse(
        movements=[MovementResponse(**vars(m)) for m in result.movements],
        divisions=[d.players for d in result.new_divisions],
    )


@router.post("/rankings/{ranking_id}/promotions/apply", response_model=Ranking)
def apply_ranking_promotions(
    ranking_id: int,
    payload: Optional[PromotionRequest] = None,
    session: Session = Depends(get_session),
):
    """Close the phase: archive matches into history and start the new divisions"""
    ranking = load_or_404(session, ranking_id)
    _require_league(ranking)
    updated = apply_promotions(ranking, overrides=payload.overrides if payload else None)
    return save_ranking(session, updated)
