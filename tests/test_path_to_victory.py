"""path_to_victory.pyのテスト"""

import pytest

from rydercup_score.models import Side, TeamPointTotals
from rydercup_score.path_to_victory import (
    calculate_path_to_victory,
    calculate_scenarios,
    quick_summary,
)
from rydercup_score.standings import calculate_magic_number


def make_totals(
    team_a: float,
    team_b: float,
    remaining: float,
    matches_remaining: int,
    defending_side: Side | None = None,
) -> TeamPointTotals:
    return TeamPointTotals(
        team_a_points=team_a,
        team_b_points=team_b,
        points_available_remaining=remaining,
        total_points=team_a + team_b + remaining,
        matches_remaining=matches_remaining,
        magic_number=calculate_magic_number(team_a, team_b, remaining, defending_side),
    )


class TestCalculateScenarios:
    """calculate_scenarios関数のテスト"""

    def test_wins_and_halves(self):
        """勝ち数の少ない順に、分けで補う組み合わせを返すこと"""
        scenarios = calculate_scenarios(1.0, 2)

        assert [(s.wins_needed, s.halves_needed) for s in scenarios] == [(0, 2), (1, 0)]
        assert scenarios[0].description == "halve 2 of 2 remaining"
        assert scenarios[1].description == "win 1 of 2 remaining"
        assert scenarios[1].matches_to_spare == 1
        assert scenarios[0].likelihood == "medium"

    def test_wins_only(self):
        scenarios = calculate_scenarios(2.0, 2)

        assert len(scenarios) == 1
        assert scenarios[0].wins_needed == 2
        assert scenarios[0].likelihood == "unlikely"

    def test_at_most_three(self):
        """シナリオは最大3件"""
        scenarios = calculate_scenarios(4.0, 12)

        assert len(scenarios) == 3
        assert [s.wins_needed for s in scenarios] == [0, 1, 2]
        assert scenarios[0].halves_needed == 8
        assert scenarios[0].likelihood == "medium"

    def test_already_clinched(self):
        scenarios = calculate_scenarios(0.0, 3)

        assert scenarios[0].description == "Already clinched"
        assert scenarios[0].matches_to_spare == 3

    def test_cannot_clinch(self):
        """残りマッチで届かない場合は不可能なシナリオを返すこと"""
        scenarios = calculate_scenarios(3.0, 2)

        assert len(scenarios) == 1
        assert scenarios[0].wins_needed == 3
        assert scenarios[0].description.startswith("Cannot clinch")

    def test_half_point_matches(self):
        """1マッチ0.5ポイントの場合"""
        scenarios = calculate_scenarios(1.0, 3, points_per_match=0.5)

        assert [(s.wins_needed, s.halves_needed) for s in scenarios] == [(1, 2), (2, 0)]


class TestCalculatePathToVictory:
    """calculate_path_to_victory関数のテスト"""

    def test_close_contest(self):
        """両チームとも優勝の可能性がある接戦"""
        path = calculate_path_to_victory(make_totals(1.5, 0.5, 2.0, 2))

        assert path.team_a.points_to_win == 2.5
        assert path.team_a.points_needed == 1.0
        assert path.team_a.can_clinch is True
        assert path.team_b.points_needed == 2.0
        assert [s.wins_needed for s in path.team_b.scenarios] == [2]
        assert path.dramatic is True
        assert path.is_decided is False
        assert path.remaining_matches == 2
        assert path.tie_breaker == "A tie shares the cup"

    def test_clinched_and_eliminated(self):
        """確定済みチームと可能性のないチーム"""
        path = calculate_path_to_victory(
            make_totals(2.0, 0.0, 1.0, 1), team_a_name="USA", team_b_name="Europe"
        )

        assert path.team_a.has_clinched is True
        assert path.team_a.scenarios[0].description == "Already clinched"
        assert path.team_a.worst_case == "USA has already clinched"
        assert path.team_b.is_eliminated is True
        assert path.team_b.scenarios[0].wins_needed == 2
        assert path.team_b.best_case == "Europe can reach 1 points maximum"
        assert path.is_decided is True
        assert path.dramatic is False

    def test_defending_side(self):
        """防衛チームは同点ラインで優勝扱いになること"""
        totals = make_totals(1.5, 0.5, 2.0, 2, defending_side=Side.B)
        path = calculate_path_to_victory(
            totals, team_a_name="USA", team_b_name="Europe", defending_side=Side.B
        )

        assert path.team_b.points_to_win == 2.0
        assert path.team_b.points_needed == 1.5
        assert path.tie_breaker == "Europe retains the cup on a tie"

    @pytest.mark.parametrize(
        ("team_a", "team_b", "remaining", "matches", "expected"),
        [
            (5.0, 1.0, 6.0, 6, False),
            (3.0, 2.0, 1.0, 1, False),
            (3.0, 2.0, 4.0, 4, True),
        ],
    )
    def test_dramatic(self, team_a, team_b, remaining, matches, expected):
        """点差3以内で残り2マッチ以上を接戦とする"""
        path = calculate_path_to_victory(
            make_totals(team_a, team_b, remaining, matches)
        )

        assert path.dramatic is expected


class TestQuickSummary:
    """quick_summary関数のテスト"""

    def test_in_progress(self):
        path = calculate_path_to_victory(make_totals(1.5, 0.5, 2.0, 2))

        assert quick_summary(path) == (
            "Team A needs 1 of 2 remaining points to clinch",
            "Team B needs 2 of 2 remaining points to clinch",
        )

    def test_decided(self):
        path = calculate_path_to_victory(
            make_totals(2.0, 0.0, 1.0, 1), team_a_name="USA", team_b_name="Europe"
        )

        assert quick_summary(path) == (
            "USA has clinched the cup",
            "Europe can no longer win the cup",
        )
