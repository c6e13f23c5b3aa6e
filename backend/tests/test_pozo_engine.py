"""
Pozo rounds: initial court assignment and up/down court movement.
"""
from padel_ranking.models import Match, MatchPair, MatchPoints, MatchScore, MatchStatus, PozoFormat, SetScore
from padel_ranking.services.pozo_engine import calculate_next_round, generate_initial_round


def _played(court: int, pair1: tuple, pair2: tuple, points: tuple) -> Match:
    return Match(
        jornada=1,
        court=court,
        pair1=MatchPair(p1_id=pair1[0], p2_id=pair1[1]),
        pair2=MatchPair(p1_id=pair2[0], p2_id=pair2[1]),
        status=MatchStatus.FINISHED,
        score=MatchScore(points_scored=SetScore(p1=points[0], p2=points[1])),
        points=MatchPoints(p1=points[0], p2=points[1]),
    )


def _sides(match: Match) -> tuple:
    return ((match.pair1.p1_id, match.pair1.p2_id), (match.pair2.p1_id, match.pair2.p2_id))


class TestInitialRound:
    def test_individual_fills_courts_in_fours(self, rng):
        players = [f"p{i}" for i in range(1, 11)]
        matches = generate_initial_round(players, PozoFormat(num_courts=4), rng=rng)
        assert [m.court for m in matches] == [1, 2]
        assert all(m.jornada == 1 for m in matches)
        seated = [pid for m in matches for pid in m.player_ids()]
        assert len(seated) == len(set(seated)) == 8

    def test_court_limit(self, rng):
        players = [f"p{i}" for i in range(1, 17)]
        matches = generate_initial_round(players, PozoFormat(num_courts=3), rng=rng)
        assert len(matches) == 3

    def test_pairs_variant(self, rng):
        tokens = ["a::b", "c::d", "e::f", "g::h"]
        matches = generate_initial_round(tokens, PozoFormat(variant="pairs"), rng=rng)
        assert len(matches) == 2
        keys = {pair.key for m in matches for pair in (m.pair1, m.pair2)}
        assert keys == set(tokens)

    def test_input_not_shuffled_in_place(self, rng):
        players = [f"p{i}" for i in range(1, 9)]
        generate_initial_round(players, PozoFormat(), rng=rng)
        assert players == [f"p{i}" for i in range(1, 9)]


class TestNextRound:
    def _round(self) -> list[Match]:
        return [
            _played(1, ("a", "b"), ("c", "d"), (20, 12)),
            _played(2, ("e", "f"), ("g", "h"), (10, 22)),
            _played(3, ("i", "j"), ("k", "l"), (16, 16)),
        ]

    def test_individual_movement_and_resplit(self):
        matches = calculate_next_round(self._round(), 1, PozoFormat())
        assert [m.court for m in matches] == [1, 2, 3]
        assert all(m.jornada == 2 for m in matches)
        # court 1 keeps its winners and gets court 2's winners
        assert _sides(matches[0]) == (("a", "g"), ("b", "h"))
        # court 1 losers go down, court 3 tie counts as a pair-1 win
        assert _sides(matches[1]) == (("c", "i"), ("d", "j"))
        assert _sides(matches[2]) == (("e", "k"), ("f", "l"))

    def test_pairs_variant_keeps_partners(self):
        matches = calculate_next_round(self._round(), 1, PozoFormat(variant="pairs"))
        assert _sides(matches[0]) == (("a", "b"), ("g", "h"))
        assert _sides(matches[2]) == (("e", "f"), ("k", "l"))

    def test_unordered_input_sorted_by_court(self):
        matches = calculate_next_round(list(reversed(self._round())), 4, PozoFormat())
        assert _sides(matches[0]) == (("a", "g"), ("b", "h"))
        assert matches[0].jornada == 5

    def test_single_court(self):
        matches = calculate_next_round([_played(1, ("a", "b"), ("c", "d"), (8, 24))], 1, PozoFormat(variant="pairs"))
        assert len(matches) == 1
        assert _sides(matches[0]) == (("c", "d"), ("a", "b"))

    def test_set_score_decides_winner(self):
        match = _played(1, ("a", "b"), ("c", "d"), (0, 0))
        match.score = MatchScore(set1=SetScore(p1=2, p2=6))
        matches = calculate_next_round([match, _played(2, ("e", "f"), ("g", "h"), (20, 12))], 1, PozoFormat(variant="pairs"))
        assert _sides(matches[0]) == (("c", "d"), ("e", "f"))
        assert _sides(matches[1]) == (("a", "b"), ("g", "h"))

    def test_empty_round(self):
        assert calculate_next_round([], 1, PozoFormat()) == []
