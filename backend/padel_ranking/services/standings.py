"""
Standings aggregation.

Points, played and won count every finished or not-played match; sets and
games only count finished matches that carry set scores. Ranking order:
points, set difference, game difference, games won (all descending).
"""
from typing import Dict, List, Literal, Optional, Sequence

from padel_ranking.models.domain import (
    BYE,
    ManualStatsAdjustment,
    Match,
    MatchPair,
    MatchStatus,
    StandingRow,
)
from padel_ranking.models.formats import HybridFormat, PairsFormat
from padel_ranking.models.ranking import Ranking

StandingsMode = Literal["individual", "pairs"]

COUNTED_STATUSES = (MatchStatus.FINISHED, MatchStatus.NOT_PLAYED)


def _sort_key(row: StandingRow):
    return (row.pts, row.sets_diff, row.games_diff, row.games_won)


def _side_rows(pair: MatchPair, table: Dict[str, StandingRow], mode: StandingsMode) -> List[StandingRow]:
    if mode == "pairs":
        row = table.get(pair.key)
        return [row] if row is not None else []
    return [table[pid] for pid in (pair.p1_id, pair.p2_id) if pid in table]


def generate_standings(
    matches: Sequence[Match],
    player_ids: Sequence[str],
    mode: StandingsMode = "individual",
    adjustments: Optional[Dict[str, ManualStatsAdjustment]] = None,
) -> List[StandingRow]:
    """Ranked rows for individual players, or for fixed pairs keyed "p1::p2"."""
    table: Dict[str, StandingRow] = {}
    if mode == "pairs":
        for m in matches:
            for pair in (m.pair1, m.pair2):
                if pair.is_real() and pair.key not in table:
                    table[pair.key] = StandingRow(player_id=pair.key)
    else:
        for pid in player_ids:
            if pid and pid != BYE and pid not in table:
                table[pid] = StandingRow(player_id=pid)

    for m in matches:
        if m.status not in COUNTED_STATUSES:
            continue
        side1 = _side_rows(m.pair1, table, mode)
        side2 = _side_rows(m.pair2, table, mode)

        for row in side1:
            row.pts += m.points.p1
            row.pj += 1
        for row in side2:
            row.pts += m.points.p2
            row.pj += 1

        if m.points.p1 > m.points.p2:
            for row in side1:
                row.pg += 1
        elif m.points.p2 > m.points.p1:
            for row in side2:
                row.pg += 1

        if m.status != MatchStatus.FINISHED or m.score is None or m.score.set1 is None:
            continue
        for s in m.score.sets():
            for row in side1:
                row.games_won += s.p1
                row.games_diff += s.p1 - s.p2
            for row in side2:
                row.games_won += s.p2
                row.games_diff += s.p2 - s.p1
            if s.p1 > s.p2:
                winners, losers = side1, side2
            elif s.p2 > s.p1:
                winners, losers = side2, side1
            else:
                continue
            for row in winners:
                row.sets_won += 1
                row.sets_diff += 1
            for row in losers:
                row.sets_diff -= 1

    if adjustments:
        for player_id, adj in adjustments.items():
            row = table.get(player_id)
            if row is None:
                continue
            row.pts += adj.pts
            row.pj += adj.pj
            row.pg += adj.pg
            row.sets_won += adj.sets_won
            row.sets_diff += adj.sets_diff
            row.games_won += adj.games_won
            row.games_diff += adj.games_diff

    rows = sorted(table.values(), key=_sort_key, reverse=True)
    for position, row in enumerate(rows, start=1):
        row.pos = position
    return rows


def standings_mode_for(ranking: Ranking) -> StandingsMode:
    return "pairs" if isinstance(ranking.format, (PairsFormat, HybridFormat)) else "individual"


def generate_division_standings(ranking: Ranking, division_id: str) -> List[StandingRow]:
    division = ranking.find_division(division_id)
    if division is None:
        return []
    return generate_standings(
        division.matches,
        division.players,
        mode=standings_mode_for(ranking),
        adjustments=ranking.manual_stats_adjustments,
    )


def generate_global_standings(ranking: Ranking) -> List[StandingRow]:
    """One table over every division plus archived history matches."""
    all_matches: List[Match] = []
    all_players: List[str] = []
    seen = set()

    def _add_player(pid: str) -> None:
        if pid and pid != BYE and pid not in seen:
            seen.add(pid)
            all_players.append(pid)

    for division in ranking.divisions:
        all_matches.extend(division.matches)
        for pid in division.players:
            _add_player(pid)
    for m in ranking.history:
        all_matches.append(m)
        for pid in m.player_ids():
            _add_player(pid)

    return generate_standings(
        all_matches,
        all_players,
        mode=standings_mode_for(ranking),
        adjustments=ranking.manual_stats_adjustments,
    )
