"""
Promotion / relegation between league divisions.

Divisions are tiers ordered by `numero` (1 = top). After a phase, the top
`promotion_count` of every non-top division move up one tier and the bottom
`relegation_count` of every non-bottom division move down one tier. Retired
players are dropped; overrides pin a player into a given division number.
New divisions get fresh ids and a fresh league schedule.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from padel_ranking.models.domain import Division, DivisionOverride, MatchStatus
from padel_ranking.models.ranking import Ranking
from padel_ranking.services.match_generator import generate_individual_league
from padel_ranking.services.standings import generate_standings

logger = logging.getLogger(__name__)

DEFAULT_PROMOTION_COUNT = 2
DEFAULT_RELEGATION_COUNT = 2


@dataclass
class Movement:
    player_id: str
    from_div: int  # 0 when the player had no previous division
    to_div: int
    type: str  # "up" | "down" | "stay"


@dataclass
class PromotionResult:
    new_divisions: List[Division] = field(default_factory=list)
    movements: List[Movement] = field(default_factory=list)


def calculate_promotions(
    ranking: Ranking,
    overrides: Optional[List[DivisionOverride]] = None,
    rng: Optional[random.Random] = None,
) -> PromotionResult:
    promotion_count = getattr(ranking.format, "promotion_count", DEFAULT_PROMOTION_COUNT)
    relegation_count = getattr(ranking.format, "relegation_count", DEFAULT_RELEGATION_COUNT)
    divisions = sorted(ranking.divisions, key=lambda d: d.numero)
    if not divisions:
        return PromotionResult()

    forced: Dict[str, int] = {}
    for override in overrides if overrides is not None else ranking.overrides:
        forced[override.player_id] = override.force_div

    targets: Dict[int, List[str]] = {d.numero: [] for d in divisions}
    origin: Dict[str, int] = {}

    for pos, division in enumerate(divisions):
        retired = set(division.retired_players)
        standings = generate_standings(
            division.matches,
            division.players,
            adjustments=ranking.manual_stats_adjustments,
        )
        active = [row.player_id for row in standings if row.player_id not in retired]
        n = len(active)
        up = min(promotion_count if pos > 0 else 0, n)
        down = min(relegation_count if pos < len(divisions) - 1 else 0, n - up)

        for i, player_id in enumerate(active):
            origin[player_id] = division.numero
            if player_id in forced:
                continue
            if i < up:
                destination = divisions[pos - 1].numero
            elif i >= n - down:
                destination = divisions[pos + 1].numero
            else:
                destination = division.numero
            targets[destination].append(player_id)

    for player_id, force_div in forced.items():
        targets.setdefault(force_div, []).append(player_id)

    movements: List[Movement] = []
    previous_by_numero = {d.numero: d for d in divisions}
    new_divisions: List[Division] = []
    for numero in sorted(targets):
        players = targets[numero]
        for player_id in players:
            from_div = origin.get(player_id, 0)
            if from_div and numero < from_div:
                kind = "up"
            elif from_div and numero > from_div:
                kind = "down"
            else:
                kind = "stay"
            movements.append(Movement(player_id=player_id, from_div=from_div, to_div=numero, type=kind))

        if not players:
            continue
        previous = previous_by_numero.get(numero)
        new_divisions.append(
            Division(
                numero=numero,
                name=previous.name if previous else None,
                category=previous.category if previous else None,
                players=list(players),
                matches=generate_individual_league(players, rng=rng),
            )
        )

    logger.info(
        "Promotions computed: %d divisions, %d up, %d down",
        len(new_divisions),
        sum(1 for m in movements if m.type == "up"),
        sum(1 for m in movements if m.type == "down"),
    )
    return PromotionResult(new_divisions=new_divisions, movements=movements)


def apply_promotions(
    ranking: Ranking,
    overrides: Optional[List[DivisionOverride]] = None,
    rng: Optional[random.Random] = None,
) -> Ranking:
    """Start the next phase: archive played matches into history and install the new divisions."""
    result = calculate_promotions(ranking, overrides=overrides, rng=rng)
    history = [m.model_copy(deep=True) for m in ranking.history]
    for division in ranking.divisions:
        history.extend(
            m.model_copy(deep=True)
            for m in division.matches
            if m.status in (MatchStatus.FINISHED, MatchStatus.NOT_PLAYED)
        )
    return ranking.model_copy(
        update={"divisions": result.new_divisions, "history": history, "overrides": []},
        deep=True,
    )
