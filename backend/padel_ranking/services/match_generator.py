"""
Round-robin and partner-rotation generators.

All generators return a list of pending matches (jornada = round number) and
return [] instead of raising when there are too few participants. Randomized
generators take an optional random.Random so callers and tests can seed them.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Set, Tuple, Union

from padel_ranking.models.domain import Match, MatchPair, StandingRow
from padel_ranking.services.engine_rules import AMERICANO_MAX_ATTEMPTS, LEAGUE8_MAX_ATTEMPTS
from padel_ranking.utils.pair_tokens import as_pair

logger = logging.getLogger(__name__)

PartnerPair = Tuple[str, str]
Rotation = List[List[PartnerPair]]

FALLBACK_ROUNDS = 4


def _match(jornada: int, a: str, b: str, c: str, d: str, court: Optional[int] = None) -> Match:
    return Match(
        jornada=jornada,
        pair1=MatchPair(p1_id=a, p2_id=b),
        pair2=MatchPair(p1_id=c, p2_id=d),
        court=court,
    )


def partner_key(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a <= b else (b, a)


# ============================================================================
# Fixed schedules
# ============================================================================


def generate_classic4(players: Sequence[str]) -> List[Match]:
    """The three ways to split four players into two pairs."""
    if len(players) != 4:
        return []
    a, b, c, d = players
    return [
        _match(1, a, b, c, d),
        _match(2, a, c, b, d),
        _match(3, a, d, b, c),
    ]


def generate_pairs_league(pairs: Sequence[Union[str, MatchPair]]) -> List[Match]:
    """
    Circle-method round robin with each fixed pair as one competitor.

    Odd counts get a phantom bye competitor; a pair drawn against it sits out.
    """
    competitors: List[Optional[MatchPair]] = [as_pair(p) for p in pairs]
    if len(competitors) < 2:
        return []
    if len(competitors) % 2 == 1:
        competitors.append(None)

    n = len(competitors)
    matches: List[Match] = []
    for round_number in range(1, n):
        for i in range(n // 2):
            home = competitors[i]
            away = competitors[n - 1 - i]
            if home is None or away is None:
                continue
            matches.append(
                Match(
                    jornada=round_number,
                    pair1=home.model_copy(),
                    pair2=away.model_copy(),
                )
            )
        # Fix position 0, move the last competitor to position 1
        competitors = [competitors[0], competitors[-1]] + competitors[1:-1]
    return matches


def _five_player_league(players: Sequence[str]) -> List[Match]:
    # Player r rests in round r+1; (a,d) v (b,c) gives every pair exactly one partnership.
    matches: List[Match] = []
    for r in range(5):
        a, b, c, d = (players[(r + k) % 5] for k in range(1, 5))
        matches.append(_match(r + 1, a, d, b, c))
    return matches


def _sit_out_league(players: Sequence[str]) -> List[Match]:
    # N rounds; the sit-out window slides by one each round so every player rests N-4 times.
    n = len(players)
    resting = n - 4
    matches: List[Match] = []
    for r in range(n):
        sitting = {(r + k) % n for k in range(resting)}
        active = [players[i] for i in range(n) if i not in sitting]
        a, b, c, d = active
        if r % 2 == 0:
            matches.append(_match(r + 1, a, d, b, c))
        else:
            matches.append(_match(r + 1, a, c, b, d))
    return matches


def _rotation_to_matches(rotation: Rotation, courts: Optional[int] = None) -> List[Match]:
    matches: List[Match] = []
    for round_index, partner_pairs in enumerate(rotation):
        for k in range(len(partner_pairs) // 2):
            (a, b), (c, d) = partner_pairs[2 * k], partner_pairs[2 * k + 1]
            court = (k % courts) + 1 if courts else None
            matches.append(_match(round_index + 1, a, b, c, d, court=court))
    return matches


def _random_fallback(players: Sequence[str], rounds: int, rng: random.Random) -> List[Match]:
    matches: List[Match] = []
    for round_number in range(1, rounds + 1):
        matches.extend(generate_individual_round(players, round_number, rng=rng))
    return matches


def generate_individual_league(
    players: Sequence[str],
    rng: Optional[random.Random] = None,
    max_attempts: int = LEAGUE8_MAX_ATTEMPTS,
) -> List[Match]:
    """
    Partner-rotating league for one division.

    4 -> classic three rounds; 5 -> five rounds, one rest each; 6/7 -> N rounds
    with sliding sit-outs; 8 -> searched 7-round schedule where every pair
    partners exactly once; larger divisions or a failed search -> 4 random rounds.
    """
    n = len(players)
    rng = rng or random.Random()
    if n < 4:
        return []
    if n == 4:
        return generate_classic4(players)
    if n == 5:
        return _five_player_league(players)
    if n in (6, 7):
        return _sit_out_league(players)
    if n == 8:
        rotation = search_partner_rotation(players, n - 1, max_attempts, rng)
        if rotation is not None:
            return _rotation_to_matches(rotation)
        logger.info("No complete 8-player schedule in %d attempts; using random fallback", max_attempts)
    return _random_fallback(players, FALLBACK_ROUNDS, rng)


# ============================================================================
# Randomized partner rotation
# ============================================================================


def _greedy_round(order: List[str], used: Set[Tuple[str, str]]) -> Optional[List[PartnerPair]]:
    remaining = list(order)
    round_pairs: List[PartnerPair] = []
    while remaining:
        player = remaining.pop(0)
        partner = next((q for q in remaining if partner_key(player, q) not in used), None)
        if partner is None:
            if not remaining:
                break  # odd player out rests this round
            return None
        remaining.remove(partner)
        round_pairs.append((player, partner))
    return round_pairs


def search_partner_rotation(
    players: Sequence[str],
    rounds: int,
    max_attempts: int,
    rng: random.Random,
) -> Optional[Rotation]:
    """
    Bounded randomized search for `rounds` rounds of partner pairs with no
    partnership repeated. Each round: shuffle, greedily pair each player with
    the first remaining player not yet partnered; a dead end discards the
    whole attempt. Returns None when every attempt fails.
    """
    if len(players) < 2 or rounds < 1:
        return None

    for attempt in range(1, max_attempts + 1):
        used: Set[Tuple[str, str]] = set()
        rotation: Rotation = []
        for _ in range(rounds):
            order = list(players)
            rng.shuffle(order)
            round_pairs = _greedy_round(order, used)
            if round_pairs is None:
                break
            used.update(partner_key(a, b) for a, b in round_pairs)
            rotation.append(round_pairs)
        if len(rotation) == rounds:
            logger.debug("Partner rotation found on attempt %d", attempt)
            return rotation
    return None


def generate_americano(
    players: Sequence[str],
    courts: int = 2,
    rng: Optional[random.Random] = None,
    max_attempts: int = AMERICANO_MAX_ATTEMPTS,
) -> List[Match]:
    """N-1 rounds without repeated partners; one random round if the search fails."""
    if len(players) < 4:
        return []
    rng = rng or random.Random()
    rotation = search_partner_rotation(players, len(players) - 1, max_attempts, rng)
    if rotation is None:
        logger.info("Americano search exhausted %d attempts for %d players; falling back", max_attempts, len(players))
        return generate_individual_round(players, 1, rng=rng, courts=courts)
    return _rotation_to_matches(rotation, courts)


def generate_individual_round(
    players: Sequence[str],
    round_number: int,
    rng: Optional[random.Random] = None,
    courts: Optional[int] = None,
) -> List[Match]:
    """Shuffle and play groups of four as (a,b) v (c,d); the remainder rests."""
    if len(players) < 4:
        return []
    rng = rng or random.Random()
    shuffled = list(players)
    rng.shuffle(shuffled)
    matches: List[Match] = []
    for k in range(len(shuffled) // 4):
        a, b, c, d = shuffled[4 * k : 4 * k + 4]
        court = (k % courts) + 1 if courts else None
        matches.append(_match(round_number, a, b, c, d, court=court))
    return matches


def generate_mexicano_round(
    standings: Sequence[StandingRow],
    round_number: int,
    courts: Optional[int] = None,
) -> List[Match]:
    """Rank-balanced round: consecutive groups of four play 1&4 v 2&3."""
    ranked = sorted(standings, key=lambda row: (row.pts, row.games_diff), reverse=True)
    matches: List[Match] = []
    for k in range(len(ranked) // 4):
        first, second, third, fourth = (row.player_id for row in ranked[4 * k : 4 * k + 4])
        court = (k % courts) + 1 if courts else k + 1
        matches.append(_match(round_number, first, fourth, second, third, court=court))
    return matches
