"""
Tests for match points: set-based table, incomplete matches, individual
format, point-based scoring and score strings.
"""
import pytest

from padel_ranking.exceptions import ScoreValidationError
from padel_ranking.models import AmericanoFormat, MatchScore, PointsConfig, PozoFormat, SetScore
from padel_ranking.services.points import (
    COMPLETE,
    INCOMPLETE_DRAW,
    INCOMPLETE_LOSS,
    INCOMPLETE_WIN,
    MANUAL_DRAW,
    auto_complete_points,
    calculate_elimination_points,
    calculate_match_points,
    calculate_point_based_points,
    get_total_points,
    is_valid_point_score,
    parse_score_string,
)


def s(p1: int, p2: int) -> SetScore:
    return SetScore(p1=p1, p2=p2)


def pts(result) -> tuple:
    return (result.points.p1, result.points.p2)


class TestCompleteMatches:
    def test_straight_sets_win(self):
        result = calculate_match_points(s(6, 0), s(6, 0))
        assert pts(result) == (4, 0)
        assert result.finalization_type == COMPLETE
        assert result.description == "Victoria 2-0"

    def test_three_set_win_and_loss(self):
        assert pts(calculate_match_points(s(6, 4), s(4, 6), s(6, 3))) == (3, 1)
        result = calculate_match_points(s(6, 4), s(4, 6), s(3, 6))
        assert pts(result) == (1, 3)
        assert result.description == "Derrota 1-2"

    def test_straight_sets_loss(self):
        result = calculate_match_points(s(2, 6), s(3, 6))
        assert pts(result) == (0, 4)
        assert result.description == "Derrota 0-2"

    def test_tied_third_set_is_a_draw(self):
        result = calculate_match_points(s(6, 4), s(4, 6), s(6, 6))
        assert pts(result) == (2, 2)
        assert result.description == "Empate 1-1"

    def test_custom_points_config(self):
        cfg = PointsConfig(points_per_win_2_0=3, points_per_loss_2_0=1)
        assert pts(calculate_match_points(s(6, 1), s(6, 1), points_config=cfg)) == (3, 1)

    def test_force_draw(self):
        result = calculate_match_points(s(6, 0), s(6, 0), force_draw=True)
        assert pts(result) == (2, 2)
        assert result.finalization_type == MANUAL_DRAW
        assert result.description == "Empate Acordado"


class TestIncompleteMatches:
    @pytest.mark.parametrize(
        "set1,set2,expected_points,expected_type",
        [
            (s(6, 3), s(4, 2), (4, 0), INCOMPLETE_WIN),
            (s(6, 3), s(2, 5), (2, 2), INCOMPLETE_DRAW),
            (s(6, 3), s(3, 4), (4, 0), INCOMPLETE_WIN),
            (s(3, 6), s(5, 1), (2, 2), INCOMPLETE_DRAW),
            (s(3, 6), s(3, 2), (0, 4), INCOMPLETE_LOSS),
            (s(3, 6), s(1, 4), (0, 4), INCOMPLETE_LOSS),
        ],
    )
    def test_incomplete_table(self, set1, set2, expected_points, expected_type):
        result = calculate_match_points(set1, set2, is_incomplete=True)
        assert pts(result) == expected_points
        assert result.finalization_type == expected_type

    def test_set2_required(self):
        with pytest.raises(ScoreValidationError):
            calculate_match_points(s(6, 3), is_incomplete=True)


class TestIndividualFormat:
    def test_single_set(self):
        result = calculate_match_points(s(6, 3), is_individual=True)
        assert pts(result) == (4, 0)
        assert result.description == "Victoria (1 Set)"
        assert calculate_match_points(s(3, 6), is_individual=True).description == "Derrota (1 Set)"

    def test_split_sets_draw(self):
        result = calculate_match_points(s(6, 3), s(3, 6), is_individual=True)
        assert pts(result) == (2, 2)
        assert result.description == "Empate (1-1)"

    def test_double_tie_is_draw(self):
        result = calculate_match_points(s(5, 5), s(4, 4), is_individual=True)
        assert pts(result) == (2, 2)
        assert result.description == "Empate"

    def test_one_set_won_one_tied_is_draw(self):
        result = calculate_match_points(s(6, 3), s(4, 4), is_individual=True)
        assert pts(result) == (2, 2)
        assert result.description == "Empate"
        assert pts(calculate_match_points(s(5, 5), s(2, 6), is_individual=True)) == (2, 2)

    def test_third_set_ignored(self):
        result = calculate_match_points(s(6, 3), s(3, 6), s(6, 0), is_individual=True)
        assert pts(result) == (2, 2)

    def test_incomplete_flag_ignored(self):
        result = calculate_match_points(s(6, 3), s(6, 4), is_incomplete=True, is_individual=True)
        assert result.finalization_type == COMPLETE
        assert result.description == "Victoria 2-0"


class TestEliminationPoints:
    def test_winner_takes_one(self):
        score = MatchScore(set1=s(6, 4), set2=s(3, 6), set3=s(10, 8))
        result = calculate_elimination_points(score)
        assert pts(result) == (1, 0)
        assert result.description == "Victoria 2-1"


class TestPointBased:
    def test_total_points(self):
        assert get_total_points(AmericanoFormat()) == 32
        assert get_total_points(AmericanoFormat(scoring_mode="24")) == 24
        assert get_total_points(AmericanoFormat(scoring_mode="per-game")) == 0
        assert get_total_points(AmericanoFormat(scoring_mode="custom", total_points=40)) == 40
        assert get_total_points(AmericanoFormat(scoring_mode="custom")) == 32

    def test_fixed_total_validation(self):
        fmt = AmericanoFormat(scoring_mode="32")
        assert is_valid_point_score(s(20, 12), fmt)
        assert not is_valid_point_score(s(20, 10), fmt)
        assert not is_valid_point_score(s(-1, 33), fmt)
        assert not is_valid_point_score(None, fmt)

    def test_per_game_validation(self):
        fmt = PozoFormat(scoring_mode="per-game")
        assert is_valid_point_score(s(5, 3), fmt)
        assert not is_valid_point_score(s(4, 4), fmt)
        assert not is_valid_point_score(s(0, 0), fmt)

    def test_auto_complete(self):
        assert auto_complete_points(20, AmericanoFormat()) == 12
        assert auto_complete_points(30, AmericanoFormat(scoring_mode="24")) == 0
        assert auto_complete_points(5, AmericanoFormat(scoring_mode="per-game")) == 0

    def test_points_are_points_scored(self):
        result = calculate_point_based_points(s(18, 14), AmericanoFormat())
        assert pts(result) == (18, 14)
        assert result.description == "18-14"

    def test_invalid_score_raises(self):
        with pytest.raises(ScoreValidationError):
            calculate_point_based_points(s(18, 10), AmericanoFormat())


class TestParseScoreString:
    def test_three_sets(self):
        score = parse_score_string("6-3 4-6 10-7")
        assert (score.set1.p1, score.set1.p2) == (6, 3)
        assert (score.set2.p1, score.set2.p2) == (4, 6)
        assert (score.set3.p1, score.set3.p2) == (10, 7)

    def test_comma_separated(self):
        score = parse_score_string("6-3, 6-4")
        assert score.set2.p2 == 4
        assert score.set3 is None

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "6-3 6", "6-3 4-6 6-2 6-1", "6:3"])
    def test_unreadable(self, raw):
        assert parse_score_string(raw) is None
