"""
Hybrid format: pairs group stage followed by elimination playoffs.

Groups play a pairs round robin. The top `qualifiers_per_group` of every group
go to the main playoff and the next `consolation_qualifiers_per_group` to a
consolation playoff. Qualifiers are seeded by finishing position across
groups: every group winner first, then every runner-up, and so on.
"""
from __future__ import annotations

import logging
import math
from typing import List, Sequence, Union

from padel_ranking.models.domain import Division, DivisionStage, DivisionType, MatchPair
from padel_ranking.models.formats import HybridFormat
from padel_ranking.models.ranking import Ranking
from padel_ranking.services.bracket_engine import generate_bracket
from padel_ranking.services.match_generator import generate_pairs_league
from padel_ranking.services.standings import generate_standings
from padel_ranking.utils.match_index import copy_divisions
from padel_ranking.utils.pair_tokens import as_pair

logger = logging.getLogger(__name__)

MAIN_PLAYOFF_NAME = "Playoff Principal"
CONSOLATION_PLAYOFF_NAME = "Playoff Consolación"


def group_name(index: int) -> str:
    return f"Grupo {chr(ord('A') + index)}" if index < 26 else f"Grupo {index + 1}"


def snake_distribution(items: Sequence, group_count: int) -> List[list]:
    """Seeds 1..n dealt left-to-right, then right-to-left, row by row."""
    groups: List[list] = [[] for _ in range(group_count)]
    for i, item in enumerate(items):
        row, col = divmod(i, group_count)
        target = col if row % 2 == 0 else group_count - 1 - col
        groups[target].append(item)
    return groups


def generate_group_stage(pairs: Sequence[Union[str, MatchPair]], fmt: HybridFormat) -> List[Division]:
    """Split seeded pairs into groups, each with a pairs-league schedule."""
    seeded = [as_pair(p) for p in pairs]
    if len(seeded) < 2 or fmt.pairs_per_group < 2:
        return []

    group_count = math.ceil(len(seeded) / fmt.pairs_per_group)
    divisions: List[Division] = []
    for index, group_pairs in enumerate(snake_distribution(seeded, group_count)):
        players: List[str] = []
        for pair in group_pairs:
            players.extend(pair.player_ids())
        divisions.append(
            Division(
                numero=index + 1,
                name=group_name(index),
                players=players,
                matches=generate_pairs_league(group_pairs),
                stage=DivisionStage.GROUP,
            )
        )

    logger.info("Hybrid group stage: %d pairs in %d groups", len(seeded), group_count)
    return divisions


def _qualifiers(groups: Sequence[Division], first: int, count: int) -> List[str]:
    if count <= 0:
        return []
    tables = [
        generate_standings(g.matches, g.players, mode="pairs")
        for g in sorted(groups, key=lambda d: d.numero)
    ]
    tokens: List[str] = []
    for position in range(first, first + count):
        for table in tables:
            if position < len(table):
                tokens.append(table[position].player_id)
    return tokens


def get_main_playoff_qualifiers(groups: Sequence[Division], fmt: HybridFormat) -> List[str]:
    return _qualifiers(groups, 0, fmt.qualifiers_per_group)


def get_consolation_qualifiers(groups: Sequence[Division], fmt: HybridFormat) -> List[str]:
    return _qualifiers(groups, fmt.qualifiers_per_group, fmt.consolation_qualifiers_per_group)


def _playoff_division(tokens: List[str], numero: int, name: str, division_type: DivisionType) -> Division:
    main = generate_bracket(tokens, has_consolation=False)[0]
    main.numero = numero
    main.name = name
    main.type = division_type
    main.stage = DivisionStage.PLAYOFF
    return main


def build_playoffs(ranking: Ranking) -> List[Division]:
    """
    Group divisions plus the playoff brackets built from current group standings.

    Existing playoff divisions are replaced. A playoff with fewer than two
    qualifiers is not created.
    """
    fmt = ranking.format
    if not isinstance(fmt, HybridFormat):
        return copy_divisions(ranking.divisions)

    groups = [d for d in copy_divisions(ranking.divisions) if d.stage != DivisionStage.PLAYOFF]
    next_numero = max((g.numero for g in groups), default=0) + 1
    divisions = list(groups)

    main_tokens = get_main_playoff_qualifiers(groups, fmt)
    if len(main_tokens) >= 2:
        divisions.append(_playoff_division(main_tokens, next_numero, MAIN_PLAYOFF_NAME, DivisionType.MAIN))
        next_numero += 1

    consolation_tokens = get_consolation_qualifiers(groups, fmt)
    if len(consolation_tokens) >= 2:
        divisions.append(
            _playoff_division(
                consolation_tokens,
                next_numero,
                CONSOLATION_PLAYOFF_NAME,
                DivisionType.LEAGUE_CONSOLATION_MAIN,
            )
        )

    logger.info(
        "Hybrid playoffs built: %d main qualifiers, %d consolation qualifiers",
        len(main_tokens),
        len(consolation_tokens),
    )
    return divisions
