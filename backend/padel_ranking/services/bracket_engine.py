"""
Elimination bracket engine.

Builds a seeded single-elimination tree (plus an optional consolation tree fed
by Round 1 losers), resolves BYE slots forward through the tree, and moves
winners and losers after each result.

Every public function copies the divisions it receives and returns the
modified copy; callers replace their stored state with the return value.

BYE markers: when a BYE match has a consolation link, its "loser" (the BYE
itself) is written into the consolation slot as a BYE marker so the real
Round 1 loser on the other side advances automatically. If the bye-receiver
later loses its first real match, it takes that marker's place and the
automatic consolation result is rolled back.
"""
import logging
from typing import Dict, List, Optional, Union

from padel_ranking.models.domain import (
    BYE,
    Division,
    DivisionType,
    Match,
    MatchPair,
    MatchPoints,
    MatchScore,
    MatchStatus,
)
from padel_ranking.models.ranking import Ranking
from padel_ranking.services.bracket_seeding import (
    calculate_bracket_size,
    calculate_round_count,
    get_round_name,
    map_seeds_to_bracket,
)
from padel_ranking.utils.match_index import MatchIndex, copy_divisions
from padel_ranking.utils.pair_tokens import as_pair, pair_from_token, token_player_ids

logger = logging.getLogger(__name__)

MAIN_DIVISION_NAME = "Cuadro Principal"
CONSOLATION_DIVISION_NAME = "Cuadro Consolación"
LOSER_PLACEHOLDER = "Perdedor R1"
SEMIFINAL_LOSER_PLACEHOLDER = "Perdedor Semifinal"
THIRD_PLACE_ROUND_NAME = "3er y 4º Puesto"

PairInput = Union[MatchPair, str]


def winner_placeholder(round_number: int, slot: int) -> str:
    return f"Ganador {round_number}.{slot}"


# ============================================================================
# Generation
# ============================================================================


def _build_tree(first_round_matches: int, rounds: int, consolation: bool) -> List[List[Match]]:
    """Empty tree, rounds[0] = Round 1, with next_match_id links wired."""
    tree: List[List[Match]] = []
    for r in range(1, rounds + 1):
        count = first_round_matches // (2 ** (r - 1))
        round_name = get_round_name(count, consolation)
        matches: List[Match] = []
        for i in range(count):
            if r == 1:
                first = LOSER_PLACEHOLDER if consolation else None
                second = LOSER_PLACEHOLDER if consolation else None
            else:
                first = winner_placeholder(r - 1, i * 2 + 1)
                second = winner_placeholder(r - 1, i * 2 + 2)
            matches.append(
                Match(
                    jornada=r,
                    pair1=MatchPair(placeholder=first),
                    pair2=MatchPair(placeholder=second),
                    round_name=round_name,
                )
            )
        tree.append(matches)

    for r in range(rounds - 1):
        for i, match in enumerate(tree[r]):
            match.next_match_id = tree[r + 1][i // 2].id
    return tree


def generate_bracket(
    participants: List[str],
    has_consolation: bool,
    legacy_hyphen_pairs: bool = False,
    third_place_match: bool = False,
) -> List[Division]:
    """
    Build [main_division, consolation_division] for participants in seed order.

    The consolation division is always returned; it has no matches when
    consolation is disabled or the bracket is smaller than 4.
    Returns [] when fewer than 2 bracket slots would exist.
    """
    size = calculate_bracket_size(len(participants))
    if size < 2:
        return []

    # Decode every token before building anything so a bad token fails fast.
    for token in participants:
        pair_from_token(token, legacy_hyphen_pairs)
    slots = [pair_from_token(token, legacy_hyphen_pairs) for token in map_seeds_to_bracket(participants, size)]

    total_rounds = calculate_round_count(len(participants))
    main_tree = _build_tree(size // 2, total_rounds, consolation=False)
    for i, match in enumerate(main_tree[0]):
        match.pair1 = slots[i * 2]
        match.pair2 = slots[i * 2 + 1]

    main_division = Division(
        numero=1,
        name=MAIN_DIVISION_NAME,
        players=token_player_ids(participants, legacy_hyphen_pairs),
        matches=[m for round_matches in main_tree for m in round_matches],
        type=DivisionType.MAIN,
    )
    consolation_division = Division(
        numero=2,
        name=CONSOLATION_DIVISION_NAME,
        players=[],
        matches=[],
        type=DivisionType.CONSOLATION,
    )

    if has_consolation and size >= 4:
        consolation_tree = _build_tree(size // 4, total_rounds - 1, consolation=True)
        for i, match in enumerate(main_tree[0]):
            match.consolation_match_id = consolation_tree[0][i // 2].id
        consolation_division.matches = [m for round_matches in consolation_tree for m in round_matches]

    if third_place_match and size >= 4:
        main_division.matches.append(
            Match(
                jornada=total_rounds,
                pair1=MatchPair(placeholder=SEMIFINAL_LOSER_PLACEHOLDER),
                pair2=MatchPair(placeholder=SEMIFINAL_LOSER_PLACEHOLDER),
                round_name=THIRD_PLACE_ROUND_NAME,
            )
        )

    divisions = [main_division, consolation_division]
    index = MatchIndex(divisions)
    for match in main_tree[0]:
        _resolve_bye(match, index)

    if third_place_match and size >= 4:
        third_place = find_third_place_match(main_division.matches)
        for semifinal in main_tree[-2]:
            if semifinal.is_bye_result:
                _place_bye_marker(third_place, index)

    logger.info(
        "Generated bracket: %d participants, size %d, %d main matches, %d consolation matches",
        len(participants),
        size,
        len(main_division.matches),
        len(consolation_division.matches),
    )
    return divisions


# ============================================================================
# BYE resolution
# ============================================================================


def _first_empty_slot(match: Match) -> Optional[MatchPair]:
    if match.pair1.is_empty():
        return match.pair1
    if match.pair2.is_empty():
        return match.pair2
    return None


def _place_bye_marker(match: Optional[Match], index: MatchIndex) -> None:
    if match is None:
        return
    slot = _first_empty_slot(match)
    if slot is None:
        return
    slot.assign(BYE)
    _resolve_bye(match, index)


def _resolve_bye(match: Match, index: MatchIndex) -> None:
    """Finalize a match decided by a BYE and cascade the result forward.

    A BYE facing a still-empty slot waits for the opponent to arrive.
    """
    if match.status != MatchStatus.PENDING:
        return
    p1_bye = match.pair1.is_bye()
    p2_bye = match.pair2.is_bye()
    if not p1_bye and not p2_bye:
        return

    if p1_bye and p2_bye:
        points = MatchPoints(p1=0, p2=0)
        winner = MatchPair(p1_id=BYE)
    elif p1_bye:
        if match.pair2.is_empty():
            return
        points = MatchPoints(p1=0, p2=1)
        winner = match.pair2
    else:
        if match.pair1.is_empty():
            return
        points = MatchPoints(p1=1, p2=0)
        winner = match.pair1

    match.status = MatchStatus.FINISHED
    match.score = MatchScore(description=BYE)
    match.points = points
    logger.debug("BYE resolved match %s (%s)", match.id, match.round_name)

    next_match = index.get(match.next_match_id)
    if next_match is not None:
        slot = _first_empty_slot(next_match)
        if slot is not None:
            slot.assign(winner.p1_id, winner.p2_id)
            _resolve_bye(next_match, index)

    if match.consolation_match_id:
        _place_bye_marker(index.get(match.consolation_match_id), index)


def _round_slot_placeholder(match: Match, index: MatchIndex) -> Optional[str]:
    """Placeholder naming `match` as the feeder of its downstream slot."""
    division = index.division_of(match.id)
    if division is None:
        return None
    same_round = [
        m
        for m in division.matches
        if m.jornada == match.jornada and m.is_consolation == match.is_consolation and m.round_name == match.round_name
    ]
    position = next((i for i, m in enumerate(same_round) if m.id == match.id), 0)
    return winner_placeholder(match.jornada, position + 1)


def _bye_advanced_pair(match: Match) -> MatchPair:
    if match.points.p1 > match.points.p2:
        return match.pair1
    if match.points.p2 > match.points.p1:
        return match.pair2
    return MatchPair(p1_id=BYE)


def _can_rollback_bye(match: Match, index: MatchIndex) -> bool:
    """False when the BYE winner already played a real match further down the chain."""
    downstream = index.get(match.next_match_id)
    if downstream is None:
        return True
    advanced = _bye_advanced_pair(match)
    if downstream.is_bye_result and downstream.has_pair(advanced):
        return _can_rollback_bye(downstream, index)
    return downstream.status == MatchStatus.PENDING


def _rollback_bye(match: Match, index: MatchIndex) -> None:
    """
    Undo an automatic BYE result and pull its winner back out of the next match.

    Callers check _can_rollback_bye first; the chain is assumed to be pending.
    """
    advanced = _bye_advanced_pair(match)
    match.status = MatchStatus.PENDING
    match.score = None
    match.points = MatchPoints()

    downstream = index.get(match.next_match_id)
    if downstream is None:
        return
    if downstream.is_bye_result and downstream.has_pair(advanced):
        _rollback_bye(downstream, index)
    for slot in (downstream.pair1, downstream.pair2):
        if slot.same_as(advanced):
            slot.clear(placeholder=_round_slot_placeholder(match, index))
            break
    logger.info("Rolled back BYE result of match %s; cleared %s from %s", match.id, advanced.key, downstream.id)


# ============================================================================
# Advancement
# ============================================================================


def advance_winner(match: Match, ranking: Ranking, winner_pair: PairInput) -> List[Division]:
    """Insert the winner into the first empty slot of the match at next_match_id."""
    divisions = copy_divisions(ranking.divisions)
    if not match.next_match_id:
        return divisions

    index = MatchIndex(divisions)
    next_match = index.get(match.next_match_id)
    if next_match is None:
        logger.warning("Next match %s of match %s not found", match.next_match_id, match.id)
        return divisions

    winner = as_pair(winner_pair)
    if next_match.has_pair(winner):
        return divisions

    slot = _first_empty_slot(next_match)
    if slot is None:
        logger.warning("Next match %s has no empty slot for %s", next_match.id, winner.key)
        return divisions

    slot.assign(winner.p1_id, winner.p2_id)
    _resolve_bye(next_match, index)
    logger.info("Advanced %s from match %s to match %s", winner.key, match.id, next_match.id)
    return divisions


def _consolation_matches(divisions: List[Division]) -> List[Match]:
    matches: List[Match] = []
    for division in divisions:
        for m in division.matches:
            if division.is_consolation or m.is_consolation:
                matches.append(m)
    return matches


def _find_round_one_match(divisions: List[Division], pair: MatchPair) -> Optional[Match]:
    for division in divisions:
        if division.is_consolation:
            continue
        for m in division.matches:
            if m.jornada == 1 and not m.is_consolation and m.has_pair(pair):
                return m
    return None


def _fallback_consolation_match(divisions: List[Division]) -> Optional[Match]:
    """First consolation Round 1 match with a BYE token, else one with an empty slot."""
    first_round = [m for m in _consolation_matches(divisions) if m.jornada == 1]
    for m in first_round:
        if (m.status == MatchStatus.PENDING or m.is_bye_result) and (m.pair1.is_bye() or m.pair2.is_bye()):
            return m
    for m in first_round:
        if m.status == MatchStatus.PENDING and _first_empty_slot(m) is not None:
            return m
    return None


def _pick_slot(match: Match, prefer_bye: bool) -> Optional[MatchPair]:
    slots = (match.pair1, match.pair2)
    if prefer_bye:
        for slot in slots:
            if slot.is_bye():
                return slot
    for slot in slots:
        if slot.is_empty():
            return slot
    for slot in slots:
        if slot.is_bye():
            return slot
    return None


def move_loser_to_consolation(match: Match, ranking: Ranking, loser_pair: PairInput) -> List[Division]:
    """
    Place a loser into the consolation bracket.

    Resolution order: already placed -> direct consolation link -> trace back
    to the pair's Round 1 BYE match -> first open consolation Round 1 slot.
    When nothing fits the copy is returned unchanged and a warning is logged.
    """
    divisions = copy_divisions(ranking.divisions)
    loser = as_pair(loser_pair)
    if not loser.is_real():
        return divisions

    if any(m.has_pair(loser) for m in _consolation_matches(divisions)):
        logger.info("Pair %s already placed in consolation; nothing to do", loser.key)
        return divisions

    index = MatchIndex(divisions)
    target: Optional[Match] = None
    prefer_bye = False

    if match.consolation_match_id:
        target = index.get(match.consolation_match_id)

    if target is None and match.jornada > 1:
        origin = _find_round_one_match(divisions, loser)
        if origin is None or not origin.is_bye_result:
            logger.warning(
                "Loser %s of round %d match %s did not start with a BYE; not eligible for consolation",
                loser.key,
                match.jornada,
                match.id,
            )
            return divisions
        target = index.get(origin.consolation_match_id)
        prefer_bye = True

    if target is None:
        target = _fallback_consolation_match(divisions)
        prefer_bye = True

    if target is None:
        logger.warning("No consolation match available for loser %s of match %s", loser.key, match.id)
        return divisions

    if target.is_bye_result:
        if not _can_rollback_bye(target, index):
            logger.warning(
                "BYE winner of consolation match %s already played on; cannot place %s",
                target.id,
                loser.key,
            )
            return divisions
        _rollback_bye(target, index)

    if target.status != MatchStatus.PENDING:
        logger.warning("Consolation match %s already played; cannot place %s", target.id, loser.key)
        return divisions

    slot = _pick_slot(target, prefer_bye)
    if slot is None:
        logger.warning("Both slots of consolation match %s are filled", target.id)
        return divisions

    slot.assign(loser.p1_id, loser.p2_id)
    _resolve_bye(target, index)
    logger.info("Moved loser %s of match %s into consolation match %s", loser.key, match.id, target.id)
    return divisions


def find_third_place_match(matches: List[Match]) -> Optional[Match]:
    for m in matches:
        if m.round_name == THIRD_PLACE_ROUND_NAME:
            return m
    return None


def move_loser_to_third_place(match: Match, ranking: Ranking, loser_pair: PairInput) -> List[Division]:
    """Semifinal loser into the 3rd/4th place match, when the bracket has one."""
    divisions = copy_divisions(ranking.divisions)
    loser = as_pair(loser_pair)
    index = MatchIndex(divisions)
    division = index.division_of(match.id)
    if division is None or not loser.is_real():
        return divisions

    third_place = find_third_place_match(division.matches)
    if third_place is None or third_place.has_pair(loser):
        return divisions

    slot = _first_empty_slot(third_place)
    if slot is None:
        logger.warning("Third place match %s has no empty slot for %s", third_place.id, loser.key)
        return divisions
    slot.assign(loser.p1_id, loser.p2_id)
    _resolve_bye(third_place, index)
    return divisions


# ============================================================================
# Results
# ============================================================================


def count_sets(score: Optional[MatchScore]) -> Dict[str, int]:
    """Sets won per side; tied sets count for nobody."""
    won = {"p1": 0, "p2": 0}
    if score is None:
        return won
    for s in score.sets():
        if s.p1 > s.p2:
            won["p1"] += 1
        elif s.p2 > s.p1:
            won["p2"] += 1
    return won


def get_match_winner(match: Match) -> Optional[str]:
    """'p1', 'p2' or None for an unfinished or undecided match."""
    if match.status != MatchStatus.FINISHED:
        return None
    sets = count_sets(match.score)
    if sets["p1"] > sets["p2"]:
        return "p1"
    if sets["p2"] > sets["p1"]:
        return "p2"
    if match.points.p1 > match.points.p2:
        return "p1"
    if match.points.p2 > match.points.p1:
        return "p2"
    return None


def get_winner_pair(match: Match) -> Optional[MatchPair]:
    winner = get_match_winner(match)
    if winner == "p1":
        return match.pair1
    if winner == "p2":
        return match.pair2
    return None


def get_loser_pair(match: Match) -> Optional[MatchPair]:
    winner = get_match_winner(match)
    if winner == "p1":
        return match.pair2
    if winner == "p2":
        return match.pair1
    return None


def is_bracket_complete(matches: List[Match]) -> bool:
    return all(m.status in (MatchStatus.FINISHED, MatchStatus.NOT_PLAYED) for m in matches)


def get_final_standings(matches: List[Match]) -> Dict[str, Optional[MatchPair]]:
    """Champion, runner-up and (when a 3rd place match was played) third."""
    standings: Dict[str, Optional[MatchPair]] = {"first": None, "second": None, "third": None}
    final = next(
        (m for m in matches if m.round_name == "Final" and not m.next_match_id and not m.is_consolation),
        None,
    )
    if final is None or final.status != MatchStatus.FINISHED:
        return standings

    standings["first"] = get_winner_pair(final)
    standings["second"] = get_loser_pair(final)
    third_place = find_third_place_match(matches)
    if third_place is not None and third_place.status == MatchStatus.FINISHED:
        standings["third"] = get_winner_pair(third_place)
    return standings
