"""
Round-by-round formats: opening divisions and next-round generation.
"""
import pytest

from padel_ranking.exceptions import RankingNotFoundError
from padel_ranking.models import (
    AmericanoFormat,
    ClassicFormat,
    DivisionType,
    EliminationFormat,
    HybridFormat,
    IndividualFormat,
    MatchPoints,
    MatchStatus,
    MexicanoFormat,
    PairsFormat,
    PozoFormat,
    Ranking,
)
from padel_ranking.services.ranking_setup import build_initial_divisions
from padel_ranking.services.round_service import RoundNotFinishedError, generate_next_round

PLAYERS = [f"p{i}" for i in range(1, 9)]


def _finish_round(ranking: Ranking, jornada: int) -> None:
    for match in ranking.divisions[0].matches:
        if match.jornada == jornada:
            match.status = MatchStatus.FINISHED
            match.points = MatchPoints(p1=20, p2=12)


class TestBuildInitialDivisions:
    def test_classic_chunks_of_four(self, rng):
        divisions = build_initial_divisions(ClassicFormat(), PLAYERS + ["p9", "p10"], rng=rng)
        assert [d.name for d in divisions] == ["División 1", "División 2", "División 3"]
        assert [len(d.players) for d in divisions] == [4, 4, 2]
        assert len(divisions[0].matches) == 3
        assert divisions[2].matches == []

    def test_explicit_groups(self, rng):
        groups = [["a", "b", "c", "d"], ["e", "f", "g", "h", "i"]]
        divisions = build_initial_divisions(IndividualFormat(), groups=groups, rng=rng)
        assert [d.players for d in divisions] == groups
        assert len(divisions[1].matches) == 5

    def test_pairs_league(self, rng):
        divisions = build_initial_divisions(PairsFormat(), ["a::b", "c::d", "e::f", "g::h"], rng=rng)
        assert len(divisions) == 1
        assert divisions[0].players == ["a", "b", "c", "d", "e", "f", "g", "h"]
        assert len(divisions[0].matches) == 6

    def test_mexicano_opening_round(self, rng):
        divisions = build_initial_divisions(MexicanoFormat(), PLAYERS, rng=rng)
        matches = divisions[0].matches
        assert len(matches) == 2
        assert sorted(pid for m in matches for pid in m.player_ids()) == sorted(PLAYERS)

    def test_elimination_and_hybrid(self, rng):
        main, consolation = build_initial_divisions(EliminationFormat(consolation=True), PLAYERS, rng=rng)
        assert main.type == DivisionType.MAIN
        assert len(consolation.matches) == 3

        groups = build_initial_divisions(HybridFormat(), [f"x{i}::y{i}" for i in range(8)], rng=rng)
        assert len(groups) == 2


class TestGenerateNextRound:
    def test_pending_round_blocks_next(self, rng):
        fmt = MexicanoFormat()
        ranking = Ranking(name="Mex", format=fmt, divisions=build_initial_divisions(fmt, PLAYERS, rng=rng))
        with pytest.raises(RoundNotFinishedError):
            generate_next_round(ranking, ranking.divisions[0].id)

    def test_mexicano_round_from_standings(self, rng):
        fmt = MexicanoFormat()
        ranking = Ranking(name="Mex", format=fmt, divisions=build_initial_divisions(fmt, PLAYERS, rng=rng))
        _finish_round(ranking, 1)
        first_round = ranking.divisions[0].matches
        leaders = set(first_round[0].pair1.player_ids() + first_round[1].pair1.player_ids())

        divisions = generate_next_round(ranking, ranking.divisions[0].id)
        round_two = [m for m in divisions[0].matches if m.jornada == 2]
        assert len(round_two) == 2
        # the four 20-point players share the top court
        assert set(round_two[0].player_ids()) == leaders
        assert len(ranking.divisions[0].matches) == 2

    def test_pozo_round(self, rng):
        fmt = PozoFormat(num_courts=2)
        ranking = Ranking(name="Pozo", format=fmt, divisions=build_initial_divisions(fmt, PLAYERS, rng=rng))
        _finish_round(ranking, 1)
        divisions = generate_next_round(ranking, ranking.divisions[0].id)
        round_two = [m for m in divisions[0].matches if m.jornada == 2]
        assert [m.court for m in round_two] == [1, 2]

    def test_americano_random_round(self, rng):
        fmt = AmericanoFormat(courts=2)
        ranking = Ranking(name="Am", format=fmt, divisions=build_initial_divisions(fmt, PLAYERS, rng=rng))
        last = max(m.jornada for m in ranking.divisions[0].matches)
        for match in ranking.divisions[0].matches:
            match.status = MatchStatus.FINISHED
        divisions = generate_next_round(ranking, ranking.divisions[0].id, rng=rng)
        extra = [m for m in divisions[0].matches if m.jornada == last + 1]
        assert len(extra) == 2
        assert [m.court for m in extra] == [1, 2]

    def test_unknown_division(self):
        with pytest.raises(RankingNotFoundError):
            generate_next_round(Ranking(name="x"), "missing")
