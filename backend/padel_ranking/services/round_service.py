"""
Next-round generation for round-by-round formats (Mexicano, Pozo, Americano,
individual leagues played as random rounds).
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional

from padel_ranking.exceptions import RankingNotFoundError, ScoreValidationError
from padel_ranking.models.domain import Division, Match, MatchStatus
from padel_ranking.models.formats import AmericanoFormat, MexicanoFormat, PozoFormat
from padel_ranking.models.ranking import Ranking
from padel_ranking.services.match_generator import generate_individual_round, generate_mexicano_round
from padel_ranking.services.pozo_engine import calculate_next_round
from padel_ranking.services.standings import generate_standings
from padel_ranking.utils.match_index import copy_divisions

logger = logging.getLogger(__name__)


class RoundNotFinishedError(ScoreValidationError):
    """The current round still has pending matches"""

    pass


def _last_round(division: Division) -> int:
    return max((m.jornada for m in division.matches), default=0)


def _round_matches(division: Division, round_number: int) -> List[Match]:
    return [m for m in division.matches if m.jornada == round_number]


def generate_next_round(
    ranking: Ranking,
    division_id: str,
    rng: Optional[random.Random] = None,
) -> List[Division]:
    """
    Append round N+1 to a division once round N is complete.

    Mexicano pairs by current standings, Pozo moves pairs between courts,
    everything else draws a random round.
    """
    divisions = copy_divisions(ranking.divisions)
    division = next((d for d in divisions if d.id == division_id), None)
    if division is None:
        raise RankingNotFoundError(f"Division {division_id} not found")

    current = _last_round(division)
    current_matches = _round_matches(division, current)
    if any(m.status == MatchStatus.PENDING for m in current_matches):
        raise RoundNotFinishedError(f"Round {current} still has pending matches")

    fmt = ranking.format
    if isinstance(fmt, MexicanoFormat):
        standings = generate_standings(division.matches, division.players)
        new_matches = generate_mexicano_round(standings, current + 1, courts=fmt.courts)
    elif isinstance(fmt, PozoFormat):
        new_matches = calculate_next_round(current_matches, current, fmt)
    else:
        courts = fmt.courts if isinstance(fmt, AmericanoFormat) else None
        new_matches = generate_individual_round(division.players, current + 1, rng=rng, courts=courts)

    division.matches.extend(new_matches)
    logger.info("Division %s: generated round %d with %d matches", division.id, current + 1, len(new_matches))
    return divisions
