"""
Match points calculation.

Set-based formats convert set scores into league points through a
PointsConfig table (2-0 / 2-1 / draw / 1-2 / 0-2). Tied sets count for
nobody. Matches stopped after set 2 follow the incomplete-match table in
calculate_match_points. Point-based formats (Americano, Mexicano, Pozo) use
the points scored directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from padel_ranking.exceptions import ScoreValidationError
from padel_ranking.models.domain import MatchPoints, MatchScore, SetScore
from padel_ranking.models.formats import PointBasedFormat, PointsConfig

COMPLETE = "completo"
INCOMPLETE_WIN = "victoria_incompleta"
INCOMPLETE_DRAW = "empate_diferencia"
INCOMPLETE_LOSS = "derrota_incompleta"
MANUAL_DRAW = "empate_manual"

# Set-2 game margin at which an abandoned comeback turns into a draw
INCOMPLETE_DRAW_MARGIN = 3

SCORING_MODE_TOTALS = {"16": 16, "21": 21, "24": 24, "31": 31, "32": 32, "per-game": 0}
DEFAULT_TOTAL_POINTS = 32


@dataclass
class MatchPointsResult:
    points: MatchPoints
    finalization_type: str
    description: str


def _result(p1: float, p2: float, finalization_type: str, description: str) -> MatchPointsResult:
    return MatchPointsResult(points=MatchPoints(p1=p1, p2=p2), finalization_type=finalization_type, description=description)


def count_sets_won(sets: List[Optional[SetScore]]) -> Tuple[int, int]:
    p1 = p2 = 0
    for s in sets:
        if s is None:
            continue
        if s.p1 > s.p2:
            p1 += 1
        elif s.p2 > s.p1:
            p2 += 1
    return p1, p2


def calculate_match_points(
    set1: SetScore,
    set2: Optional[SetScore] = None,
    set3: Optional[SetScore] = None,
    is_incomplete: bool = False,
    points_config: Optional[PointsConfig] = None,
    force_draw: bool = False,
    is_individual: bool = False,
) -> MatchPointsResult:
    cfg = points_config or PointsConfig()
    win_2_0 = (cfg.points_per_win_2_0, cfg.points_per_loss_2_0)
    draw = cfg.points_draw

    if force_draw:
        return _result(draw, draw, MANUAL_DRAW, "Empate Acordado")

    if is_individual:
        # One or two sets only; set 3 and the incomplete table never apply.
        if set2 is None:
            p1_sets, p2_sets = count_sets_won([set1])
            if p1_sets:
                return _result(win_2_0[0], win_2_0[1], COMPLETE, "Victoria (1 Set)")
            if p2_sets:
                return _result(win_2_0[1], win_2_0[0], COMPLETE, "Derrota (1 Set)")
            return _result(draw, draw, COMPLETE, "Empate")
        # Two sets: only a 2-0 decides the match
        p1_sets, p2_sets = count_sets_won([set1, set2])
        if p1_sets == 2:
            return _result(win_2_0[0], win_2_0[1], COMPLETE, "Victoria 2-0")
        if p2_sets == 2:
            return _result(win_2_0[1], win_2_0[0], COMPLETE, "Derrota 0-2")
        label = "Empate (1-1)" if p1_sets == 1 and p2_sets == 1 else "Empate"
        return _result(draw, draw, COMPLETE, label)

    if not is_incomplete:
        p1_sets, p2_sets = count_sets_won([set1, set2, set3])
        if p1_sets > p2_sets:
            if p2_sets == 0:
                return _result(cfg.points_per_win_2_0, cfg.points_per_loss_2_0, COMPLETE, "Victoria 2-0")
            return _result(cfg.points_per_win_2_1, cfg.points_per_loss_2_1, COMPLETE, "Victoria 2-1")
        if p2_sets > p1_sets:
            if p1_sets == 0:
                return _result(cfg.points_per_loss_2_0, cfg.points_per_win_2_0, COMPLETE, "Derrota 0-2")
            return _result(cfg.points_per_loss_2_1, cfg.points_per_win_2_1, COMPLETE, "Derrota 1-2")
        return _result(draw, draw, COMPLETE, "Empate 1-1")

    if set2 is None:
        raise ScoreValidationError("Set 2 is required for incomplete calculation")

    p1_won_set1 = set1.p1 > set1.p2
    p1_leads_set2 = set2.p1 > set2.p2
    margin = abs(set2.p1 - set2.p2)

    if p1_won_set1:
        if p1_leads_set2:
            return _result(win_2_0[0], win_2_0[1], INCOMPLETE_WIN, "Victoria Incompleta (Ventaja)")
        if margin >= INCOMPLETE_DRAW_MARGIN:
            return _result(draw, draw, INCOMPLETE_DRAW, "Empate por diferencia")
        return _result(win_2_0[0], win_2_0[1], INCOMPLETE_WIN, "Victoria Incompleta (Rival no remonta)")

    if p1_leads_set2:
        if margin >= INCOMPLETE_DRAW_MARGIN:
            return _result(draw, draw, INCOMPLETE_DRAW, "Empate por diferencia")
        return _result(win_2_0[1], win_2_0[0], INCOMPLETE_LOSS, "Derrota Incompleta (Dif < 3)")
    return _result(win_2_0[1], win_2_0[0], INCOMPLETE_LOSS, "Derrota Incompleta")


def calculate_elimination_points(score: MatchScore) -> MatchPointsResult:
    """Bracket matches only record who went through: 1 for the winner, 0 for the loser."""
    p1_sets, p2_sets = count_sets_won(score.sets())
    if p1_sets > p2_sets:
        return _result(1, 0, COMPLETE, f"Victoria {p1_sets}-{p2_sets}")
    if p2_sets > p1_sets:
        return _result(0, 1, COMPLETE, f"Derrota {p1_sets}-{p2_sets}")
    return _result(0, 0, COMPLETE, "Sin ganador")


# ============================================================================
# Point-based scoring (Americano / Mexicano / Pozo)
# ============================================================================


def get_total_points(fmt: PointBasedFormat) -> int:
    """Points per match for fixed-total modes; 0 for per-game scoring."""
    if fmt.scoring_mode == "custom" and fmt.total_points:
        return fmt.total_points
    return SCORING_MODE_TOTALS.get(fmt.scoring_mode, DEFAULT_TOTAL_POINTS)


def is_valid_point_score(points_scored: Optional[SetScore], fmt: PointBasedFormat) -> bool:
    if points_scored is None:
        return False
    p1, p2 = points_scored.p1, points_scored.p2
    if p1 < 0 or p2 < 0:
        return False
    total = get_total_points(fmt)
    if fmt.scoring_mode != "per-game" and total > 0:
        return p1 + p2 == total and (p1 > 0 or p2 > 0)
    return p1 != p2 and (p1 > 0 or p2 > 0)


def auto_complete_points(p1_points: int, fmt: PointBasedFormat) -> int:
    """Opponent's points in a fixed-total match (0 when scoring per game)."""
    if fmt.scoring_mode == "per-game":
        return 0
    return max(0, get_total_points(fmt) - p1_points)


def calculate_point_based_points(points_scored: SetScore, fmt: PointBasedFormat) -> MatchPointsResult:
    if not is_valid_point_score(points_scored, fmt):
        raise ScoreValidationError(
            f"Invalid score {points_scored.p1}-{points_scored.p2} for scoring mode '{fmt.scoring_mode}'"
        )
    return _result(points_scored.p1, points_scored.p2, COMPLETE, f"{points_scored.p1}-{points_scored.p2}")


# ============================================================================
# Score strings
# ============================================================================


def parse_score_string(raw: Optional[str]) -> Optional[MatchScore]:
    """Parse '6-3 4-6 10-7' or '6-3, 4-6' into a MatchScore. Returns None on failure."""
    if not raw or not raw.strip():
        return None
    parts = raw.replace(",", " ").split()
    if not parts or len(parts) > 3:
        return None

    sets: List[SetScore] = []
    for part in parts:
        games = part.split("-")
        if len(games) != 2:
            return None
        try:
            sets.append(SetScore(p1=int(games[0]), p2=int(games[1])))
        except ValueError:
            return None

    score = MatchScore(set1=sets[0])
    if len(sets) > 1:
        score.set2 = sets[1]
    if len(sets) > 2:
        score.set3 = sets[2]
    return score
