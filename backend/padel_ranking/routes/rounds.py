from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from padel_ranking.database import get_session
from padel_ranking.exceptions import RankingNotFoundError
from padel_ranking.models.formats import HybridFormat
from padel_ranking.models.ranking import Ranking
from padel_ranking.routes.rankings import load_or_404
from padel_ranking.services.hybrid import build_playoffs
from padel_ranking.services.ranking_store import save_ranking
from padel_ranking.services.round_service import RoundNotFinishedError, generate_next_round

router = APIRouter()


@router.post("/rankings/{ranking_id}/divisions/{division_id}/next-round", response_model=Ranking)
def create_next_round(ranking_id: int, division_id: str, session: Session = Depends(get_session)):
    """Append the next round (Mexicano / Americano / Pozo / random individual)"""
    ranking = load_or_404(session, ranking_id)
    try:
        ranking.divisions = generate_next_round(ranking, division_id)
    except RankingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RoundNotFinishedError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return save_ranking(session, ranking)


@router.post("/rankings/{ranking_id}/playoffs", response_model=Ranking)
def create_playoffs(ranking_id: int, session: Session = Depends(get_session)):
    """Hybrid rankings: build the playoff brackets from the group standings"""
    ranking = load_or_404(session, ranking_id)
    if not isinstance(ranking.format, HybridFormat):
        raise HTTPException(status_code=422, detail="Playoffs are only available for hybrid rankings")
    ranking.divisions = build_playoffs(ranking)
    return save_ranking(session, ranking)
