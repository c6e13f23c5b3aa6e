"""
Pozo ("king of the court") rounds.

Every court plays one match per round. Winners move one court up (court 1
winners stay), losers move one court down (last-court losers stay). In the
individual variant the two pairs that meet on a court are re-split so nobody
keeps the partner they arrived with.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Tuple

from padel_ranking.models.domain import Match, MatchPair
from padel_ranking.models.formats import PozoFormat
from padel_ranking.utils.pair_tokens import pair_from_token

logger = logging.getLogger(__name__)


def generate_initial_round(
    participants: Sequence[str],
    fmt: PozoFormat,
    rng: Optional[random.Random] = None,
) -> List[Match]:
    """
    Random court assignment for round 1.

    Individual variant: four player ids per court. Pairs variant: two pair
    tokens ("id1::id2") per court. Courts that cannot be filled are skipped.
    """
    rng = rng or random.Random()
    shuffled = list(participants)
    rng.shuffle(shuffled)

    matches: List[Match] = []
    for i in range(fmt.num_courts):
        if fmt.variant == "pairs":
            if len(shuffled) < i * 2 + 2:
                break
            pair1 = pair_from_token(shuffled[i * 2])
            pair2 = pair_from_token(shuffled[i * 2 + 1])
        else:
            if len(shuffled) < i * 4 + 4:
                break
            a, b, c, d = shuffled[i * 4 : i * 4 + 4]
            pair1 = MatchPair(p1_id=a, p2_id=b)
            pair2 = MatchPair(p1_id=c, p2_id=d)
        matches.append(Match(jornada=1, pair1=pair1, pair2=pair2, court=i + 1))

    logger.info("Pozo round 1: %d courts for %d participants", len(matches), len(participants))
    return matches


def _outcome(match: Match) -> Tuple[MatchPair, MatchPair]:
    """(winners, losers). A level match goes to pair 1."""
    set1 = match.score.set1 if match.score is not None else None
    p1_won = (set1 is not None and set1.p1 > set1.p2) or match.points.p1 > match.points.p2
    p2_won = (set1 is not None and set1.p2 > set1.p1) or match.points.p2 > match.points.p1
    if p2_won and not p1_won:
        return match.pair2, match.pair1
    return match.pair1, match.pair2


def calculate_next_round(
    current_round: Sequence[Match],
    round_number: int,
    fmt: PozoFormat,
) -> List[Match]:
    """Matches for round `round_number + 1` from the finished round `round_number`."""
    played = sorted(current_round, key=lambda m: m.court or 0)
    if not played:
        return []
    court_count = len(played)
    buckets: List[List[MatchPair]] = [[] for _ in range(court_count)]

    for position, match in enumerate(played):
        winners, losers = _outcome(match)
        buckets[max(position - 1, 0)].append(winners)
        buckets[min(position + 1, court_count - 1)].append(losers)

    next_round: List[Match] = []
    for position, arriving in enumerate(buckets):
        if len(arriving) != 2:
            logger.warning("Pozo court %d has %d pairs for round %d; skipped", position + 1, len(arriving), round_number + 1)
            continue
        first, second = arriving
        if fmt.variant == "pairs":
            pair1 = MatchPair(p1_id=first.p1_id, p2_id=first.p2_id)
            pair2 = MatchPair(p1_id=second.p1_id, p2_id=second.p2_id)
        else:
            # [a, b] + [c, d] -> (a, c) v (b, d)
            pair1 = MatchPair(p1_id=first.p1_id, p2_id=second.p1_id)
            pair2 = MatchPair(p1_id=first.p2_id, p2_id=second.p2_id)
        next_round.append(Match(jornada=round_number + 1, pair1=pair1, pair2=pair2, court=position + 1))

    return next_round
