"""
Promotion and relegation between league divisions.
"""
from padel_ranking.models import (
    ClassicFormat,
    Division,
    DivisionOverride,
    ManualStatsAdjustment,
    Match,
    MatchPair,
    MatchPoints,
    MatchStatus,
    Ranking,
)
from padel_ranking.services.promotions import apply_promotions, calculate_promotions


def _ranking(**kwargs) -> Ranking:
    """Three divisions of four; adjustments rank x1 > x2 > x3 > x4 inside each one."""
    divisions = [
        Division(numero=numero, name=f"División {numero}", players=[f"{prefix}{i}" for i in range(1, 5)])
        for numero, prefix in ((1, "a"), (2, "b"), (3, "c"))
    ]
    adjustments = {
        f"{prefix}{i}": ManualStatsAdjustment(pts=5 - i) for prefix in ("a", "b", "c") for i in range(1, 5)
    }
    return Ranking(
        name="Liga",
        format=ClassicFormat(promotion_count=1, relegation_count=1),
        divisions=divisions,
        manual_stats_adjustments=adjustments,
        **kwargs,
    )


def _by_numero(result) -> dict:
    return {d.numero: d.players for d in result.new_divisions}


class TestCalculatePromotions:
    def test_one_up_one_down(self, rng):
        result = calculate_promotions(_ranking(), rng=rng)
        assert _by_numero(result) == {
            1: ["a1", "a2", "a3", "b1"],
            2: ["a4", "b2", "b3", "c1"],
            3: ["b4", "c2", "c3", "c4"],
        }

    def test_movements(self, rng):
        movements = {m.player_id: m for m in calculate_promotions(_ranking(), rng=rng).movements}
        assert (movements["b1"].from_div, movements["b1"].to_div, movements["b1"].type) == (2, 1, "up")
        assert (movements["a4"].from_div, movements["a4"].to_div, movements["a4"].type) == (1, 2, "down")
        assert movements["b2"].type == "stay"
        assert len(movements) == 12

    def test_new_divisions_get_fresh_schedule(self, rng):
        ranking = _ranking()
        result = calculate_promotions(ranking, rng=rng)
        old_ids = {d.id for d in ranking.divisions}
        for division in result.new_divisions:
            assert division.id not in old_ids
            assert len(division.matches) == 3
            assert division.name == f"División {division.numero}"

    def test_retired_players_dropped(self, rng):
        ranking = _ranking()
        ranking.divisions[1].retired_players = ["b2"]
        result = calculate_promotions(ranking, rng=rng)
        assert _by_numero(result)[2] == ["a4", "b3", "c1"]
        assert "b2" not in {m.player_id for m in result.movements}

    def test_override_pins_player(self, rng):
        overrides = [DivisionOverride(player_id="c4", force_div=1)]
        result = calculate_promotions(_ranking(), overrides=overrides, rng=rng)
        assert _by_numero(result)[1] == ["a1", "a2", "a3", "b1", "c4"]
        assert _by_numero(result)[3] == ["b4", "c2", "c3"]
        movement = next(m for m in result.movements if m.player_id == "c4")
        assert (movement.from_div, movement.to_div, movement.type) == (3, 1, "up")

    def test_stored_overrides_used_by_default(self, rng):
        ranking = _ranking(overrides=[DivisionOverride(player_id="a1", force_div=3)])
        result = calculate_promotions(ranking, rng=rng)
        assert _by_numero(result)[3][-1] == "a1"

    def test_single_division_keeps_everyone(self, rng):
        ranking = _ranking()
        ranking.divisions = ranking.divisions[:1]
        result = calculate_promotions(ranking, rng=rng)
        assert _by_numero(result) == {1: ["a1", "a2", "a3", "a4"]}
        assert all(m.type == "stay" for m in result.movements)

    def test_no_divisions(self):
        result = calculate_promotions(Ranking(name="Empty"))
        assert result.new_divisions == []
        assert result.movements == []


class TestApplyPromotions:
    def test_archives_played_matches(self, rng):
        ranking = _ranking(overrides=[DivisionOverride(player_id="a1", force_div=1)])
        played = Match(
            jornada=1,
            pair1=MatchPair(p1_id="a1", p2_id="a2"),
            pair2=MatchPair(p1_id="a3", p2_id="a4"),
            status=MatchStatus.FINISHED,
            points=MatchPoints(p1=4, p2=0),
        )
        pending = Match(
            jornada=2,
            pair1=MatchPair(p1_id="a1", p2_id="a3"),
            pair2=MatchPair(p1_id="a2", p2_id="a4"),
        )
        ranking.divisions[0].matches = [played, pending]

        updated = apply_promotions(ranking, rng=rng)

        assert [m.id for m in updated.history] == [played.id]
        assert updated.overrides == []
        assert [d.numero for d in updated.divisions] == [1, 2, 3]
        assert updated.divisions[0].players[:3] == ["a2", "a3", "b1"]
        # input ranking untouched
        assert len(ranking.divisions[0].matches) == 2
        assert ranking.history == []
