"""優勝への道筋モジュール

チームポイント集計から、各チームが優勝を確定させるための
勝ち・分けの組み合わせと要約文を算出する。
"""

import logging
import math

from .models import (
    PathToVictory,
    Side,
    TeamPath,
    TeamPointTotals,
    VictoryScenario,
)

logger = logging.getLogger(__name__)

MAX_SCENARIOS = 3
DRAMATIC_MARGIN = 3.0


def _likelihood(effective_wins: float, total_matches: int) -> str:
    ratio = effective_wins / total_matches if total_matches else 1.0
    if ratio <= 0.25:
        return "high"
    if ratio <= 0.5:
        return "medium"
    if ratio <= 0.75:
        return "low"
    return "unlikely"


def _describe(wins: int, halves: int, total: int) -> str:
    parts = []
    if wins:
        parts.append(f"win {wins}")
    if halves:
        parts.append(f"halve {halves}")
    return f"{' and '.join(parts)} of {total} remaining"


def calculate_scenarios(
    points_needed: float,
    remaining_matches: int,
    points_per_match: float = 1.0,
) -> list[VictoryScenario]:
    """必要ポイントに届く勝ち・分けの組み合わせを列挙する

    勝ち数の少ない順に、不足分を分けで補う組み合わせを返す。
    勝ちだけで届く最初の組み合わせで打ち切る。

    Args:
        points_needed: 優勝ラインまでの不足ポイント
        remaining_matches: 未確定マッチ数
        points_per_match: 1マッチあたりのポイント

    Returns:
        list[VictoryScenario]: 最大3件のシナリオ
    """
    if points_needed <= 0:
        return [
            VictoryScenario(
                wins_needed=0,
                matches_to_spare=remaining_matches,
                likelihood="high",
                description="Already clinched",
            )
        ]

    if points_needed > remaining_matches * points_per_match:
        return [
            VictoryScenario(
                wins_needed=remaining_matches + 1,
                likelihood="unlikely",
                description="Cannot clinch - not enough matches remaining",
            )
        ]

    scenarios: list[VictoryScenario] = []
    half_value = points_per_match / 2
    for wins in range(remaining_matches + 1):
        shortfall = points_needed - wins * points_per_match
        left = remaining_matches - wins
        if shortfall <= 0:
            scenarios.append(
                VictoryScenario(
                    wins_needed=wins,
                    matches_to_spare=left,
                    likelihood=_likelihood(wins, remaining_matches),
                    description=_describe(wins, 0, remaining_matches),
                )
            )
            break

        halves = math.ceil(shortfall / half_value)
        if halves <= left:
            scenarios.append(
                VictoryScenario(
                    wins_needed=wins,
                    halves_needed=halves,
                    matches_to_spare=left - halves,
                    likelihood=_likelihood(wins + halves / 2, remaining_matches),
                    description=_describe(wins, halves, remaining_matches),
                )
            )

    return scenarios[:MAX_SCENARIOS]


def _team_path(
    side: Side,
    name: str,
    totals: TeamPointTotals,
    points_per_match: float,
) -> TeamPath:
    points = totals.points(side)
    remaining = totals.points_available_remaining
    magic = totals.magic_number
    target = (
        magic.team_a_points_to_win if side is Side.A else magic.team_b_points_to_win
    )

    has_clinched = magic.clinched_side is side
    can_clinch = has_clinched or points + remaining >= target
    needed = max(0.0, target - points)

    if has_clinched:
        worst_case = f"{name} has already clinched"
    else:
        worst_case = f"{name} stays at {points:g} points if losing all remaining"
    max_points = points + remaining
    if max_points >= target:
        best_case = f"{name} can reach {max_points:g} points by winning all remaining matches"
    else:
        best_case = f"{name} can reach {max_points:g} points maximum"

    return TeamPath(
        side=side,
        name=name,
        current_points=points,
        points_to_win=target,
        points_needed=needed,
        has_clinched=has_clinched,
        can_clinch=can_clinch,
        is_eliminated=not can_clinch,
        scenarios=calculate_scenarios(
            needed, totals.matches_remaining, points_per_match
        ),
        best_case=best_case,
        worst_case=worst_case,
    )


def calculate_path_to_victory(
    totals: TeamPointTotals,
    team_a_name: str = "Team A",
    team_b_name: str = "Team B",
    defending_side: Side | None = None,
) -> PathToVictory:
    """両チームの優勝への道筋を算出する

    残りマッチのポイントが異なる場合は平均値を1マッチあたりのポイントとして扱う。

    Args:
        totals: チームポイント集計
        team_a_name: チームAの名称
        team_b_name: チームBの名称
        defending_side: 前回優勝チーム(同点時の説明文に使用)

    Returns:
        PathToVictory: 優勝への道筋
    """
    remaining_matches = totals.matches_remaining
    remaining_points = totals.points_available_remaining
    points_per_match = (
        remaining_points / remaining_matches if remaining_matches else 1.0
    )

    team_a = _team_path(Side.A, team_a_name, totals, points_per_match)
    team_b = _team_path(Side.B, team_b_name, totals, points_per_match)

    if defending_side is None:
        tie_breaker = "A tie shares the cup"
    else:
        defender = team_a_name if defending_side is Side.A else team_b_name
        tie_breaker = f"{defender} retains the cup on a tie"

    margin = abs(totals.team_a_points - totals.team_b_points)
    is_decided = totals.magic_number.is_decided
    dramatic = (
        margin <= DRAMATIC_MARGIN and remaining_matches >= 2 and not is_decided
    )

    logger.debug(
        "優勝への道筋: %s 残り%.1f / %s 残り%.1f",
        team_a_name,
        team_a.points_needed,
        team_b_name,
        team_b.points_needed,
    )
    return PathToVictory(
        team_a=team_a,
        team_b=team_b,
        remaining_matches=remaining_matches,
        remaining_points=remaining_points,
        is_decided=is_decided,
        dramatic=dramatic,
        tie_breaker=tie_breaker,
    )


def quick_summary(path: PathToVictory) -> tuple[str, str]:
    """各チームの状況を1行で返す

    Returns:
        tuple[str, str]: (チームAの要約, チームBの要約)
    """

    def summarize(team: TeamPath) -> str:
        if team.has_clinched:
            return f"{team.name} has clinched the cup"
        if team.is_eliminated:
            return f"{team.name} can no longer win the cup"
        return (
            f"{team.name} needs {team.points_needed:g} of "
            f"{path.remaining_points:g} remaining points to clinch"
        )

    return summarize(path.team_a), summarize(path.team_b)
