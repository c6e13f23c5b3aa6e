"""
Court/time scheduler for bracket and league matches.

Stateless: every function works on the values passed in. Courts are a
tournament-wide pool, so occupancy is always collected across every division.
Occupancy intervals are half-open: [start, start + slot_duration).

All datetimes are compared as naive UTC; aware values are converted first.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from padel_ranking.models.domain import Division, Match, MatchPair, MatchStatus
from padel_ranking.models.ranking import Ranking
from padel_ranking.models.scheduling import PlayerAvailability, SchedulerConfig, TimeRange, TimeWindow
from padel_ranking.services.engine_rules import (
    DEFAULT_SLOT_DURATION_MINUTES,
    SCHEDULER_SEARCH_DAYS,
    SCHEDULER_STEP_MINUTES,
)
from padel_ranking.utils.match_index import MatchIndex, copy_divisions

logger = logging.getLogger(__name__)


@dataclass
class OccupiedSlot:
    start: datetime
    end: datetime
    court: int
    match_id: Optional[str] = None


@dataclass
class AvailabilityResult:
    valid: bool
    conflict_player_id: Optional[str] = None
    conflict_range: Optional[TimeRange] = None


@dataclass
class SlotCheck:
    valid: bool
    court: Optional[int] = None
    reason: Optional[str] = None


@dataclass
class SlotAssignment:
    start: datetime
    court: int


# ============================================================================
# Time helpers
# ============================================================================


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_minutes(value: datetime, minutes: int) -> datetime:
    return value + timedelta(minutes=minutes)


def do_ranges_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Half-open overlap: touching boundaries do not overlap."""
    return to_naive_utc(start1) < to_naive_utc(end2) and to_naive_utc(start2) < to_naive_utc(end1)


def round_up_to_step(value: datetime, step_minutes: int) -> datetime:
    """Next step boundary counted from midnight; values already on a boundary are kept."""
    floor = value.replace(second=0, microsecond=0)
    minutes_of_day = floor.hour * 60 + floor.minute
    remainder = minutes_of_day % step_minutes
    if remainder == 0 and floor == value:
        return value
    return floor + timedelta(minutes=step_minutes - remainder)


def fits_time_windows(start: datetime, end: datetime, windows: List[TimeWindow]) -> bool:
    """True when [start, end) lies inside one daily window (or no windows are configured)."""
    if not windows:
        return True
    for window in windows:
        overnight = window.end <= window.start
        # An overnight window opened the previous day can still contain `start`.
        for day_offset in (-1, 0):
            base = start.date() + timedelta(days=day_offset)
            window_start = datetime.combine(base, window.start)
            window_end = datetime.combine(base, window.end)
            if overnight:
                window_end += timedelta(days=1)
            if window_start <= start and end <= window_end:
                return True
    return False


# ============================================================================
# Conflict checks
# ============================================================================


def check_player_availability(
    start: datetime,
    end: datetime,
    player_ids: Iterable[str],
    constraints: Optional[Dict[str, PlayerAvailability]],
) -> AvailabilityResult:
    if not constraints:
        return AvailabilityResult(valid=True)

    for pid in player_ids:
        if not pid or pid not in constraints:
            continue
        for busy in constraints[pid].unavailable_ranges:
            if do_ranges_overlap(start, end, busy.start, busy.end):
                return AvailabilityResult(valid=False, conflict_player_id=pid, conflict_range=busy)
    return AvailabilityResult(valid=True)


def check_match_conflict(start: datetime, end: datetime, court: int, occupied_slots: List[OccupiedSlot]) -> bool:
    """True if `court` is already occupied at any point of [start, end)."""
    return any(
        slot.court == court and do_ranges_overlap(start, end, slot.start, slot.end) for slot in occupied_slots
    )


def is_valid_slot(
    start: datetime,
    end: datetime,
    config: SchedulerConfig,
    occupied_slots: List[OccupiedSlot],
    player_constraints: List[PlayerAvailability],
) -> SlotCheck:
    """Players first, then first free court by ascending number."""
    for availability in player_constraints:
        for busy in availability.unavailable_ranges:
            if do_ranges_overlap(start, end, busy.start, busy.end):
                return SlotCheck(valid=False, reason="Player unavailable")

    for court in range(1, config.courts + 1):
        if not check_match_conflict(start, end, court, occupied_slots):
            return SlotCheck(valid=True, court=court)

    return SlotCheck(valid=False, reason="No courts available")


def find_next_slot(
    min_start: datetime,
    config: SchedulerConfig,
    occupied_slots: List[OccupiedSlot],
    player_constraints: List[PlayerAvailability],
) -> Optional[SlotAssignment]:
    """
    Earliest start >= min_start (rounded up to the step) with a free court.

    Candidates must fit entirely inside a configured daily time window.
    Returns None when the search window is exhausted.
    """
    min_start = to_naive_utc(min_start)
    search_end = min_start + timedelta(days=SCHEDULER_SEARCH_DAYS)
    candidate = round_up_to_step(min_start, SCHEDULER_STEP_MINUTES)

    while candidate < search_end:
        candidate_end = add_minutes(candidate, config.slot_duration_minutes)
        if fits_time_windows(candidate, candidate_end, config.time_windows):
            check = is_valid_slot(candidate, candidate_end, config, occupied_slots, player_constraints)
            if check.valid and check.court:
                return SlotAssignment(start=candidate, court=check.court)
        candidate = add_minutes(candidate, SCHEDULER_STEP_MINUTES)

    return None


def get_all_occupied_slots(
    ranking: Ranking,
    exclude_match_id: Optional[str] = None,
    divisions: Optional[List[Division]] = None,
) -> List[OccupiedSlot]:
    """Every scheduled match of every division as an occupancy interval."""
    duration = (
        ranking.scheduler_config.slot_duration_minutes
        if ranking.scheduler_config
        else DEFAULT_SLOT_DURATION_MINUTES
    )
    slots: List[OccupiedSlot] = []
    for division in divisions if divisions is not None else ranking.divisions:
        for match in division.matches:
            if match.start_time is None or not match.court or match.id == exclude_match_id:
                continue
            start = to_naive_utc(match.start_time)
            slots.append(OccupiedSlot(start=start, end=add_minutes(start, duration), court=match.court, match_id=match.id))
    return slots


# ============================================================================
# Reactive scheduling
# ============================================================================


def _find_dependent_match(division: Division, pair: MatchPair, min_jornada: int) -> Optional[Match]:
    if not pair.is_real():
        return None
    for match in division.matches:
        if match.jornada > min_jornada and match.has_pair(pair):
            return match
    return None


def _find_last_finished_match(pair: MatchPair, matches: List[Match], exclude_match_id: str) -> Optional[Match]:
    played = [
        m
        for m in matches
        if m.id != exclude_match_id and m.status == MatchStatus.FINISHED and m.has_pair(pair)
    ]
    if not played:
        return None
    return max(played, key=lambda m: m.jornada)


def _feeder_end_time(match: Optional[Match], config: SchedulerConfig, now: datetime) -> datetime:
    if match is None or match.start_time is None:
        return now
    return add_minutes(to_naive_utc(match.start_time), config.slot_duration_minutes)


def _constraints_for(match: Match, ranking: Ranking) -> List[PlayerAvailability]:
    return [ranking.player_constraints[pid] for pid in match.player_ids() if pid in ranking.player_constraints]


def _is_ready(match: Match) -> bool:
    return match.pair1.is_real() and match.pair2.is_real()


def schedule_match(
    match: Match,
    ranking: Ranking,
    divisions: List[Division],
    min_start: datetime,
) -> bool:
    """Find and write a slot for `match` (an object inside `divisions`). Returns True on success."""
    config = ranking.scheduler_config
    if config is None:
        return False
    occupied = get_all_occupied_slots(ranking, exclude_match_id=match.id, divisions=divisions)
    slot = find_next_slot(min_start, config, occupied, _constraints_for(match, ranking))
    if slot is None:
        logger.warning("Could not find slot for match %s (earliest start %s)", match.id, min_start.isoformat())
        return False
    match.start_time = slot.start
    match.court = slot.court
    logger.info("Scheduled match %s on court %d at %s", match.id, slot.court, slot.start.isoformat())
    return True


def schedule_next_matches(finished_match: Match, ranking: Ranking, division_id: str) -> List[Division]:
    """
    After a result, schedule the later-round matches both of whose sides are now known.

    Earliest start = latest feeder end (start + slot duration, or now when
    unknown) + rest minutes. Unschedulable matches are logged and left as is.
    """
    divisions = copy_divisions(ranking.divisions)
    config = ranking.scheduler_config
    if config is None:
        return divisions

    division = next((d for d in divisions if d.id == division_id), None)
    if division is None:
        logger.warning("Division %s not found; nothing scheduled", division_id)
        return divisions

    dependents: List[Match] = []
    for pair in (finished_match.pair1, finished_match.pair2):
        dependent = _find_dependent_match(division, pair, finished_match.jornada)
        if dependent is not None and all(d.id != dependent.id for d in dependents):
            dependents.append(dependent)

    now = utc_now()
    for dependent in dependents:
        if not _is_ready(dependent) or dependent.status != MatchStatus.PENDING:
            continue
        last1 = _find_last_finished_match(dependent.pair1, division.matches, dependent.id)
        last2 = _find_last_finished_match(dependent.pair2, division.matches, dependent.id)
        latest_end = max(_feeder_end_time(last1, config, now), _feeder_end_time(last2, config, now))
        min_start = add_minutes(latest_end, config.rest_minutes)
        schedule_match(dependent, ranking, divisions, min_start)

    return divisions


def auto_schedule_match(match_id: str, ranking: Ranking, min_start: Optional[datetime] = None) -> List[Division]:
    """Schedule one match on demand (manual trigger from the schedule screen)."""
    divisions = copy_divisions(ranking.divisions)
    match = MatchIndex(divisions).get(match_id)
    if match is None or ranking.scheduler_config is None:
        return divisions
    schedule_match(match, ranking, divisions, to_naive_utc(min_start) if min_start else utc_now())
    return divisions
