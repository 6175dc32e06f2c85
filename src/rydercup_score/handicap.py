"""ハンディキャップ計算モジュール

コースハンディキャップ、ホールごとのストローク配分、
マッチ形式ごとのハンディキャップ差の算出を提供する。
"""

import logging
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

logger = logging.getLogger(__name__)

STANDARD_SLOPE = 113
FOURBALL_ALLOWANCE = 0.9
FOURSOMES_ALLOWANCE = 0.5


def _round_half_up(value: float) -> int:
    """0.5を0から遠い方向へ丸める"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_course_handicap(
    handicap_index: float,
    slope_rating: float,
    course_rating: float,
    par: int,
) -> int:
    """コースハンディキャップを算出する

    CourseHandicap = HandicapIndex * (Slope / 113) + (CourseRating - Par)

    Args:
        handicap_index: ハンディキャップインデックス(プラスハンデは負数)
        slope_rating: スロープレーティング
        course_rating: コースレーティング
        par: コースのパー

    Returns:
        int: コースハンディキャップ

    Examples:
        >>> calculate_course_handicap(10.4, 125, 72.5, 72)
        12
    """
    course_handicap = handicap_index * (slope_rating / STANDARD_SLOPE) + (
        course_rating - par
    )
    return _round_half_up(course_handicap)


def validate_hole_handicaps(hole_handicaps: Sequence[int]) -> list[str]:
    """ホールハンディキャップ順位の並びを検証する

    1からホール数までの値がそれぞれ1回ずつ現れることを要求する。

    Args:
        hole_handicaps: ホール番号順のハンディキャップ順位

    Returns:
        list[str]: エラーメッセージ(問題がなければ空)
    """
    errors: list[str] = []
    count = len(hole_handicaps)
    if count not in (9, 18):
        errors.append(f"Expected 9 or 18 hole handicaps, got {count}")
        return errors

    expected = set(range(1, count + 1))

    seen: set[int] = set()
    duplicates: list[int] = []
    for rank in hole_handicaps:
        if rank in seen and rank not in duplicates:
            duplicates.append(rank)
        seen.add(rank)
    if duplicates:
        errors.append(f"Duplicate handicaps: {', '.join(map(str, duplicates))}")

    out_of_range = [rank for rank in hole_handicaps if rank not in expected]
    if out_of_range:
        errors.append(f"Out of range values: {', '.join(map(str, out_of_range))}")

    missing = sorted(expected - seen)
    if missing:
        errors.append(f"Missing handicaps: {', '.join(map(str, missing))}")

    return errors


def allocate_strokes(
    allowance: int,
    hole_handicaps: Sequence[int],
    hole_count: int | None = None,
) -> list[int]:
    """マッチのハンディキャップストロークをホールへ配分する

    対象ホールをハンディキャップ順位の小さい順(同順位はホール番号順)に並べ、
    先頭から1ストロークずつ配る。対象ホール数を超えるストロークは使われない
    (2周目の配分はしない)。

    Args:
        allowance: 受け取るストローク数
        hole_handicaps: ホール番号順のハンディキャップ順位
        hole_count: 対象ホール数(省略時は hole_handicaps の長さ)

    Returns:
        list[int]: ホールごとのストローク数(インデックス0がホール1)
    """
    if hole_count is None:
        hole_count = len(hole_handicaps)

    strokes = [0] * hole_count
    if allowance <= 0:
        return strokes

    ordered_holes = sorted(
        range(hole_count), key=lambda index: (hole_handicaps[index], index)
    )
    usable = min(allowance, hole_count)
    if usable < allowance:
        logger.debug(
            "ストローク%d個のうち%d個は対象ホール数(%d)を超えるため使われません",
            allowance,
            allowance - usable,
            hole_count,
        )

    for index in ordered_holes[:usable]:
        strokes[index] = 1
    return strokes


def strokes_on_hole(
    hole_number: int,
    allowance: int,
    hole_handicaps: Sequence[int],
    hole_count: int | None = None,
) -> int:
    """指定ホールで受け取るストローク数を返す"""
    allocation = allocate_strokes(allowance, hole_handicaps, hole_count)
    if hole_number < 1 or hole_number > len(allocation):
        return 0
    return allocation[hole_number - 1]


def net_score(gross: int, strokes_received: int) -> int:
    """ネットスコア(グロス - 受け取ったストローク)"""
    return gross - strokes_received


def singles_strokes(
    player_a_course_handicap: int,
    player_b_course_handicap: int,
    allowance: float = 1.0,
) -> tuple[int, int]:
    """シングルスのハンディキャップ差を算出する

    ハンディキャップの多い側が差分(×アローアンス)を受け取る。

    Returns:
        tuple[int, int]: (チームAのストローク, チームBのストローク)。片方は必ず0
    """
    difference = player_a_course_handicap - player_b_course_handicap
    adjusted = _round_half_up(abs(difference) * allowance)
    if difference > 0:
        return adjusted, 0
    if difference < 0:
        return 0, adjusted
    return 0, 0


def fourball_strokes(
    team_a_course_handicaps: Sequence[int],
    team_b_course_handicaps: Sequence[int],
    allowance: float = FOURBALL_ALLOWANCE,
) -> tuple[list[int], list[int]]:
    """フォアボールのストロークを算出する

    4人の中で最もハンディキャップが少ないプレーヤーをスクラッチとし、
    他のプレーヤーは差分×アローアンスを受け取る。

    Returns:
        tuple[list[int], list[int]]: 各チームのプレーヤーごとのストローク
    """
    lowest = min([*team_a_course_handicaps, *team_b_course_handicaps])
    team_a = [_round_half_up((hcp - lowest) * allowance) for hcp in team_a_course_handicaps]
    team_b = [_round_half_up((hcp - lowest) * allowance) for hcp in team_b_course_handicaps]
    return team_a, team_b


def foursomes_strokes(
    team_a_course_handicaps: Sequence[int],
    team_b_course_handicaps: Sequence[int],
    allowance: float = FOURSOMES_ALLOWANCE,
) -> tuple[int, int]:
    """フォアサムのストロークを算出する

    チーム合算ハンディキャップ×アローアンスの差を多い側が受け取る。

    Returns:
        tuple[int, int]: (チームAのストローク, チームBのストローク)。片方は必ず0
    """
    team_a_combined = _round_half_up(sum(team_a_course_handicaps) * allowance)
    team_b_combined = _round_half_up(sum(team_b_course_handicaps) * allowance)
    difference = team_a_combined - team_b_combined
    if difference > 0:
        return difference, 0
    if difference < 0:
        return 0, -difference
    return 0, 0


def format_handicap_index(handicap_index: float) -> str:
    """ハンディキャップインデックスを表示用に整形する(プラスハンデは+表記)"""
    if handicap_index < 0:
        return f"+{abs(handicap_index):.1f}"
    return f"{handicap_index:.1f}"
