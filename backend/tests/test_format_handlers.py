"""
Scoring dispatch per format and migration of legacy ranking configs.
"""
import pytest

from padel_ranking.exceptions import ScoreValidationError
from padel_ranking.models import (
    AmericanoFormat,
    ClassicFormat,
    EliminationFormat,
    HybridFormat,
    IndividualFormat,
    MatchScore,
    MexicanoFormat,
    PairsFormat,
    PointsConfig,
    PozoFormat,
    SetScore,
)
from padel_ranking.services.config_migration import migrate_legacy_config
from padel_ranking.services.format_handlers import SCORING_HANDLERS, missing_handlers, score_match

TWO_SETS = MatchScore(set1=SetScore(p1=6, p2=2), set2=SetScore(p1=6, p2=3))


class TestScoringHandlers:
    def test_every_variant_has_a_handler(self):
        assert missing_handlers() == []
        assert len(SCORING_HANDLERS) == 8

    def test_set_based_formats(self):
        for fmt in (ClassicFormat(), PairsFormat(), HybridFormat()):
            result = score_match(fmt, TWO_SETS)
            assert (result.points.p1, result.points.p2) == (4, 0)

    def test_format_points_config_is_used(self):
        fmt = ClassicFormat(points=PointsConfig(points_per_win_2_0=5))
        assert score_match(fmt, TWO_SETS).points.p1 == 5

    def test_individual_ignores_third_set(self):
        score = MatchScore(set1=SetScore(p1=6, p2=2), set2=SetScore(p1=2, p2=6), set3=SetScore(p1=10, p2=2))
        result = score_match(IndividualFormat(), score)
        assert (result.points.p1, result.points.p2) == (2, 2)

    def test_point_based_formats(self):
        score = MatchScore(points_scored=SetScore(p1=21, p2=11))
        for fmt in (AmericanoFormat(), MexicanoFormat(), PozoFormat()):
            result = score_match(fmt, score)
            assert (result.points.p1, result.points.p2) == (21, 11)

    def test_point_based_requires_points_scored(self):
        with pytest.raises(ScoreValidationError):
            score_match(AmericanoFormat(), TWO_SETS)

    def test_elimination_and_playoffs(self):
        result = score_match(EliminationFormat(), TWO_SETS)
        assert (result.points.p1, result.points.p2) == (1, 0)
        result = score_match(HybridFormat(), TWO_SETS, playoff=True)
        assert (result.points.p1, result.points.p2) == (1, 0)

    def test_missing_set1(self):
        with pytest.raises(ScoreValidationError):
            score_match(ClassicFormat(), MatchScore())


class TestLegacyConfigMigration:
    def test_classic_flat_keys(self):
        fmt = migrate_legacy_config(
            "classic",
            {"pointsPerWin2_0": 3, "pointsDraw": 1, "promotionCount": 1, "maxPlayersPerDivision": 4},
        )
        assert isinstance(fmt, ClassicFormat)
        assert fmt.points.points_per_win_2_0 == 3
        assert fmt.points.points_draw == 1
        assert fmt.points.points_per_win_2_1 == 3
        assert fmt.promotion_count == 1
        assert fmt.relegation_count == 2

    def test_namespace_wins_over_flat_keys(self):
        fmt = migrate_legacy_config("pozo", {"numCourts": 2, "pozoConfig": {"numCourts": 5, "variant": "fixed-pairs"}})
        assert isinstance(fmt, PozoFormat)
        assert fmt.num_courts == 5
        assert fmt.variant == "pairs"

    def test_custom_points(self):
        fmt = migrate_legacy_config("americano", {"scoringMode": "custom", "customPoints": 40})
        assert isinstance(fmt, AmericanoFormat)
        assert fmt.total_points == 40

    def test_elimination_flags(self):
        fmt = migrate_legacy_config("elimination", {"eliminationConfig": {"consolation": True, "type": "individual"}})
        assert fmt.consolation is True
        assert fmt.participant_type == "individual"
        assert fmt.third_place_match is False

    def test_irrelevant_keys_dropped(self):
        fmt = migrate_legacy_config("pairs", {"promotionCount": 3, "numCourts": 7})
        assert isinstance(fmt, PairsFormat)

    def test_missing_and_unknown_kind(self):
        assert isinstance(migrate_legacy_config(None, None), ClassicFormat)
        assert isinstance(migrate_legacy_config("torneo-express", {"promotionCount": 1}), ClassicFormat)
        assert migrate_legacy_config("torneo-express", {"promotionCount": 1}).promotion_count == 1
