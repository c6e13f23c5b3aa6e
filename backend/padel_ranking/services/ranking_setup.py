"""
Initial divisions for a new ranking, dispatched on the format variant.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from padel_ranking.models.domain import Division, StandingRow
from padel_ranking.models.formats import (
    AmericanoFormat,
    ClassicFormat,
    EliminationFormat,
    HybridFormat,
    IndividualFormat,
    MexicanoFormat,
    PairsFormat,
    PozoFormat,
)
from padel_ranking.services.bracket_engine import generate_bracket
from padel_ranking.services.hybrid import generate_group_stage
from padel_ranking.services.match_generator import (
    generate_americano,
    generate_individual_league,
    generate_mexicano_round,
    generate_pairs_league,
)
from padel_ranking.services.pozo_engine import generate_initial_round
from padel_ranking.utils.pair_tokens import as_pair, token_player_ids

logger = logging.getLogger(__name__)


def _chunk(items: Sequence[str], size: int) -> List[List[str]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def _league_division(numero: int, players: List[str], rng: random.Random) -> Division:
    return Division(
        numero=numero,
        name=f"División {numero}",
        players=players,
        matches=generate_individual_league(players, rng=rng),
    )


def build_initial_divisions(
    fmt,
    participants: Sequence[str] = (),
    groups: Optional[Sequence[Sequence[str]]] = None,
    rng: Optional[random.Random] = None,
) -> List[Division]:
    """
    Divisions and first matches for `fmt`.

    `participants` are player ids or pair tokens in seed order. League formats
    may pass explicit `groups` (one list per division, top division first);
    otherwise classic rankings are cut into groups of
    `max_players_per_division` and other leagues become one division.
    """
    rng = rng or random.Random()
    participants = list(participants)

    if isinstance(fmt, (ClassicFormat, IndividualFormat)):
        if groups is None:
            size = fmt.max_players_per_division if isinstance(fmt, ClassicFormat) else max(len(participants), 1)
            groups = _chunk(participants, size)
        return [_league_division(i + 1, list(g), rng) for i, g in enumerate(groups) if g]

    if isinstance(fmt, PairsFormat):
        if groups is None:
            groups = [participants]
        divisions = []
        for i, group in enumerate(groups):
            if not group:
                continue
            divisions.append(
                Division(
                    numero=i + 1,
                    name=f"División {i + 1}",
                    players=token_player_ids(list(group)),
                    matches=generate_pairs_league([as_pair(token) for token in group]),
                )
            )
        return divisions

    if isinstance(fmt, AmericanoFormat):
        matches = generate_americano(participants, courts=fmt.courts, rng=rng)
        return [Division(numero=1, name="Americano", players=participants, matches=matches)]

    if isinstance(fmt, MexicanoFormat):
        shuffled = list(participants)
        rng.shuffle(shuffled)
        opening = [StandingRow(player_id=pid) for pid in shuffled]
        matches = generate_mexicano_round(opening, 1, courts=fmt.courts)
        return [Division(numero=1, name="Mexicano", players=participants, matches=matches)]

    if isinstance(fmt, PozoFormat):
        matches = generate_initial_round(participants, fmt, rng=rng)
        players = token_player_ids(participants) if fmt.variant == "pairs" else participants
        return [Division(numero=1, name="Pozo", players=players, matches=matches)]

    if isinstance(fmt, EliminationFormat):
        return generate_bracket(
            participants,
            fmt.consolation,
            legacy_hyphen_pairs=fmt.legacy_hyphen_pairs,
            third_place_match=fmt.third_place_match,
        )

    if isinstance(fmt, HybridFormat):
        return generate_group_stage(participants, fmt)

    logger.warning("No setup for format %r; ranking starts without divisions", fmt)
    return []
