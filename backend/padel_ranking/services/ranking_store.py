"""
Ranking persistence.

A ranking is stored whole as one JSON payload on RankingRecord; the engines
never see the table. Saving replaces the stored payload (last write wins).
"""
import logging
from datetime import datetime
from typing import List

from sqlmodel import Session, select

from padel_ranking.exceptions import RankingNotFoundError
from padel_ranking.models.ranking import Ranking
from padel_ranking.models.ranking_record import RankingRecord

logger = logging.getLogger(__name__)


def _to_ranking(record: RankingRecord) -> Ranking:
    ranking = Ranking.model_validate(record.payload)
    ranking.id = record.id
    ranking.name = record.name
    return ranking


def save_ranking(session: Session, ranking: Ranking) -> Ranking:
    """Insert or update; returns the ranking with its id set."""
    payload = ranking.model_dump(mode="json", exclude={"id"})
    record = session.get(RankingRecord, ranking.id) if ranking.id is not None else None
    if record is None:
        record = RankingRecord(name=ranking.name, format_kind=ranking.format.kind, payload=payload)
    else:
        record.name = ranking.name
        record.format_kind = ranking.format.kind
        record.payload = payload
        record.updated_at = datetime.utcnow()
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info("Saved ranking %s (%s)", record.id, record.format_kind)
    return _to_ranking(record)


def load_ranking(session: Session, ranking_id: int) -> Ranking:
    record = session.get(RankingRecord, ranking_id)
    if record is None:
        raise RankingNotFoundError(f"Ranking {ranking_id} not found")
    return _to_ranking(record)


def list_rankings(session: Session) -> List[RankingRecord]:
    return list(session.exec(select(RankingRecord).order_by(RankingRecord.id)).all())


def delete_ranking(session: Session, ranking_id: int) -> None:
    record = session.get(RankingRecord, ranking_id)
    if record is None:
        raise RankingNotFoundError(f"Ranking {ranking_id} not found")
    session.delete(record)
    session.commit()
