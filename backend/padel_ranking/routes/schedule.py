from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, model_validator
from sqlmodel import Session

from padel_ranking.database import get_session
from padel_ranking.models.ranking import Ranking
from padel_ranking.routes.rankings import load_or_404
from padel_ranking.services.ranking_store import save_ranking
from padel_ranking.services.scheduler_engine import (
    add_minutes,
    auto_schedule_match,
    check_player_availability,
    get_all_occupied_slots,
    is_valid_slot,
    to_naive_utc,
)
from padel_ranking.utils.match_index import MatchIndex

router = APIRouter()


class SlotCheckRequest(BaseModel):
    start: datetime
    player_ids: List[str] = []
    exclude_match_id: Optional[str] = None


class SlotCheckResponse(BaseModel):
    valid: bool
    court: Optional[int] = None
    reason: Optional[str] = None
    conflict_player_id: Optional[str] = None


class OccupiedSlotResponse(BaseModel):
    match_id: Optional[str]
    court: int
    start: datetime
    end: datetime


class AutoScheduleRequest(BaseModel):
    min_start: Optional[datetime] = None

    @model_validator(mode="after")
    def normalize(self):
        if self.min_start is not None:
            self.min_start = to_naive_utc(self.min_start)
        return self


@router.get("/rankings/{ranking_id}/schedule/occupied", response_model=List[OccupiedSlotResponse])
def get_occupied_slots(ranking_id: int, session: Session = Depends(get_session)):
    """Every scheduled match as a court occupancy interval"""
    ranking = load_or_404(session, ranking_id)
    return [
        OccupiedSlotResponse(match_id=s.match_id, court=s.court, start=s.start, end=s.end)
        for s in get_all_occupied_slots(ranking)
    ]


@router.post("/rankings/{ranking_id}/schedule/check-slot", response_model=SlotCheckResponse)
def check_slot(ranking_id: int, payload: SlotCheckRequest, session: Session = Depends(get_session)):
    """Would a match for these players fit at `start`? Returns the first free court."""
    ranking = load_or_404(session, ranking_id)
    if ranking.scheduler_config is None:
        raise HTTPException(status_code=422, detail="Ranking has no scheduler config")

    start = to_naive_utc(payload.start)
    end = add_minutes(start, ranking.scheduler_config.slot_duration_minutes)
    availability = check_player_availability(start, end, payload.player_ids, ranking.player_constraints)
    if not availability.valid:
        return SlotCheckResponse(
            valid=False,
            reason="Player unavailable",
            conflict_player_id=availability.conflict_player_id,
        )

    occupied = get_all_occupied_slots(ranking, exclude_match_id=payload.exclude_match_id)
    check = is_valid_slot(start, end, ranking.scheduler_config, occupied, [])
    return SlotCheckResponse(valid=check.valid, court=check.court, reason=check.reason)


@router.post("/rankings/{ranking_id}/matches/{match_id}/auto-schedule", response_model=Ranking)
def auto_schedule(
    ranking_id: int,
    match_id: str,
    payload: Optional[AutoScheduleRequest] = None,
    session: Session = Depends(get_session),
):
    """Give one match the earliest free court/time (manual trigger)"""
    ranking = load_or_404(session, ranking_id)
    if ranking.scheduler_config is None:
        raise HTTPException(status_code=422, detail="Ranking has no scheduler config")
    if match_id not in MatchIndex(ranking.divisions):
        raise HTTPException(status_code=404, detail="Match not found")

    min_start = payload.min_start if payload else None
    ranking.divisions = auto_schedule_match(match_id, ranking, min_start=min_start)
    return save_ranking(session, ranking)
