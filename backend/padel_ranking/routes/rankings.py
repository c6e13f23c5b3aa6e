from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ValidationError, field_validator, model_validator
from sqlmodel import Session

from padel_ranking.database import get_session
from padel_ranking.exceptions import InvalidParticipantTokenError, RankingNotFoundError
from padel_ranking.models.domain import ManualStatsAdjustment
from padel_ranking.models.formats import TournamentFormat
from padel_ranking.models.ranking import Ranking
from padel_ranking.models.scheduling import PlayerAvailability, SchedulerConfig
from padel_ranking.services.config_migration import migrate_legacy_config
from padel_ranking.services.ranking_setup import build_initial_divisions
from padel_ranking.services.ranking_store import delete_ranking, list_rankings, load_ranking, save_ranking

router = APIRouter()


class RankingCreate(BaseModel):
    name: str
    format: Optional[TournamentFormat] = None
    # Older clients send a flat camelCase config plus the format name
    format_kind: Optional[str] = None
    legacy_config: Optional[Dict[str, Any]] = None
    participants: List[str] = []
    groups: Optional[List[List[str]]] = None
    scheduler_config: Optional[SchedulerConfig] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_format_source(self):
        if self.format is None and self.legacy_config is None and self.format_kind is None:
            raise ValueError("format or format_kind/legacy_config is required")
        return self


class RankingSummary(BaseModel):
    id: int
    name: str
    format_kind: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def load_or_404(session: Session, ranking_id: int) -> Ranking:
    try:
        return load_ranking(session, ranking_id)
    except RankingNotFoundError:
        raise HTTPException(status_code=404, detail="Ranking not found")


@router.get("/rankings", response_model=List[RankingSummary])
def get_rankings(session: Session = Depends(get_session)):
    """List all rankings"""
    return list_rankings(session)


@router.post("/rankings", response_model=Ranking, status_code=201)
def create_ranking(data: RankingCreate, session: Session = Depends(get_session)):
    """Create a ranking and generate its first divisions and matches"""
    fmt = data.format
    if fmt is None:
        try:
            fmt = migrate_legacy_config(data.format_kind, data.legacy_config)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=f"Invalid legacy config: {e.errors()}")

    try:
        divisions = build_initial_divisions(fmt, data.participants, groups=data.groups)
    except InvalidParticipantTokenError as e:
        raise HTTPException(status_code=422, detail=str(e))

    ranking = Ranking(name=data.name, format=fmt, divisions=divisions, scheduler_config=data.scheduler_config)
    return save_ranking(session, ranking)


@router.get("/rankings/{ranking_id}", response_model=Ranking)
def get_ranking(ranking_id: int, session: Session = Depends(get_session)):
    return load_or_404(session, ranking_id)


@router.delete("/rankings/{ranking_id}", status_code=204)
def remove_ranking(ranking_id: int, session: Session = Depends(get_session)):
    try:
        delete_ranking(session, ranking_id)
    except RankingNotFoundError:
        raise HTTPException(status_code=404, detail="Ranking not found")
    return Response(status_code=204)


@router.put("/rankings/{ranking_id}/scheduler-config", response_model=Ranking)
def update_scheduler_config(
    ranking_id: int,
    config: Optional[SchedulerConfig] = None,
    session: Session = Depends(get_session),
):
    """Set (or clear, with an empty body) the court scheduler configuration"""
    ranking = load_or_404(session, ranking_id)
    ranking.scheduler_config = config
    return save_ranking(session, ranking)


@router.put("/rankings/{ranking_id}/player-constraints/{player_id}", response_model=Ranking)
def update_player_constraints(
    ranking_id: int,
    player_id: str,
    availability: PlayerAvailability,
    session: Session = Depends(get_session),
):
    ranking = load_or_404(session, ranking_id)
    if availability.unavailable_ranges:
        ranking.player_constraints[player_id] = availability
    else:
        ranking.player_constraints.pop(player_id, None)
    return save_ranking(session, ranking)


@router.put("/rankings/{ranking_id}/stats-adjustments/{player_id}", response_model=Ranking)
def update_stats_adjustment(
    ranking_id: int,
    player_id: str,
    adjustment: ManualStatsAdjustment,
    session: Session = Depends(get_session),
):
    """Manual correction added on top of the computed standings of one player"""
    ranking = load_or_404(session, ranking_id)
    ranking.manual_stats_adjustments[player_id] = adjustment
    return save_ranking(session, ranking)
