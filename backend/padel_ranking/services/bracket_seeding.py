"""
Elimination bracket seeding: bracket size, balanced seed order, round labels.

Seed order: recursive doubling from [1, 2]; every seed s is expanded to
(s, size + 1 - s) so that if chalk holds seed 1 meets seed 2 in the final.
Seeds beyond the participant count become BYE slots.
"""

from __future__ import annotations

import math
from typing import List

from padel_ranking.models.domain import BYE, CONSOLATION_SUFFIX


def calculate_bracket_size(participant_count: int) -> int:
    """Smallest power of two >= participant_count (0 for an empty field)."""
    if participant_count <= 0:
        return 0
    return 2 ** math.ceil(math.log2(participant_count))


def calculate_round_count(participant_count: int) -> int:
    size = calculate_bracket_size(participant_count)
    if size < 2:
        return 0
    return int(math.log2(size))


def balanced_seed_order(size: int) -> List[int]:
    """Seed numbers in bracket position order.

    Consecutive pairs are the Round 1 matchups:
      4-entry  -> [1, 4, 2, 3]
      8-entry  -> [1, 8, 4, 5, 2, 7, 3, 6]
    """
    if size < 2:
        return [1] if size == 1 else []

    order = [1, 2]
    while len(order) < size:
        current_size = len(order) * 2
        expanded: List[int] = []
        for seed in order:
            expanded.append(seed)
            expanded.append(current_size + 1 - seed)
        order = expanded
    return order


def map_seeds_to_bracket(participants: List[str], size: int) -> List[str]:
    """Participant tokens in bracket position order, BYE where the seed is missing."""
    return [
        participants[seed - 1] if seed <= len(participants) else BYE
        for seed in balanced_seed_order(size)
    ]


def get_round_name(match_count: int, consolation: bool = False) -> str:
    if match_count == 1:
        name = "Final"
    elif match_count == 2:
        name = "Semifinales"
    elif match_count == 4:
        name = "Cuartos"
    elif match_count == 8:
        name = "Octavos"
    else:
        name = f"Ronda de {match_count * 2}"
    if consolation:
        return f"{name} {CONSOLATION_SUFFIX}"
    return name
