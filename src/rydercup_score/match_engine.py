"""マッチエンジンモジュール

1マッチ分のホール記録からマッチプレーの状態(リード数、ドーミー、勝敗確定、
表示用スコア)を算出する。記録が変わるたびに一から再計算する純粋関数で構成し、
内部状態は持たない。
"""

import logging
from collections.abc import Sequence

from .handicap import allocate_strokes, net_score, validate_hole_handicaps
from .models import (
    HoleResult,
    IntegrityWarning,
    Match,
    MatchState,
    MatchStatus,
    ResultType,
    Side,
)

logger = logging.getLogger(__name__)

VALID_HOLE_COUNTS = (9, 18)


class MatchValidationError(Exception):
    """マッチ設定・記録が不正な場合の例外"""

    pass


class PlayerCountError(MatchValidationError):
    """マッチ形式と出場人数が一致しない場合の例外"""

    pass


class HandicapAllowanceError(MatchValidationError):
    """ハンディキャップストローク数が範囲外の場合の例外"""

    pass


class ConcessionConflictError(MatchValidationError):
    """グロススコアとコンシードが同じホールに記録されている場合の例外"""

    pass


class HoleNumberError(MatchValidationError):
    """ホール番号が範囲外・重複している場合の例外"""

    pass


class CourseHandicapError(MatchValidationError):
    """コースのホールハンディキャップ順位が不正な場合の例外"""

    pass


class MatchLockedError(MatchValidationError):
    """確定済みマッチを変更しようとした場合の例外"""

    pass


# ---------------------------------------------------------------------------
# バリデーション
# ---------------------------------------------------------------------------


def validate_match(match: Match, course_hole_handicaps: Sequence[int]) -> None:
    """マッチ設定とホール記録を検証する

    Args:
        match: 検証対象のマッチ
        course_hole_handicaps: ホール番号順のハンディキャップ順位

    Raises:
        MatchValidationError: 不正な入力を検出した場合(サブクラスで種類を表す)
    """
    if match.hole_count not in VALID_HOLE_COUNTS:
        raise HoleNumberError(
            f"Match {match.id}: hole_count must be 9 or 18, got {match.hole_count}"
        )

    course_errors = validate_hole_handicaps(course_hole_handicaps)
    if course_errors:
        raise CourseHandicapError("; ".join(course_errors))
    if len(course_hole_handicaps) < match.hole_count:
        raise CourseHandicapError(
            f"Course has {len(course_hole_handicaps)} holes, "
            f"match {match.id} needs {match.hole_count}"
        )

    required = match.format.players_per_side
    for side in Side:
        player_ids = match.player_ids(side)
        if len(player_ids) != required:
            raise PlayerCountError(
                f"Match {match.id}: {match.format.value} requires {required} "
                f"player(s) per side, team {side.value} has {len(player_ids)}"
            )

    course_holes = len(course_hole_handicaps)
    for side, allowance in (
        (Side.A, match.team_a_handicap_allowance),
        (Side.B, match.team_b_handicap_allowance),
    ):
        if allowance < 0 or allowance > course_holes:
            raise HandicapAllowanceError(
                f"Match {match.id}: team {side.value} allowance {allowance} "
                f"must be between 0 and {course_holes}"
            )

    seen: set[int] = set()
    for result in match.hole_results:
        if result.hole_number > match.hole_count:
            raise HoleNumberError(
                f"Match {match.id}: hole {result.hole_number} is outside "
                f"a {match.hole_count}-hole match"
            )
        if result.hole_number in seen:
            raise HoleNumberError(
                f"Match {match.id}: hole {result.hole_number} recorded twice"
            )
        seen.add(result.hole_number)

        if result.conceded_by is not None and result.has_both_scores:
            raise ConcessionConflictError(
                f"Match {match.id}: hole {result.hole_number} has both gross "
                f"scores and a concession by team {result.conceded_by.value}"
            )


# ---------------------------------------------------------------------------
# マッチ状態の算出
# ---------------------------------------------------------------------------


def net_allowance(match: Match) -> tuple[Side | None, int]:
    """両チームのストローク数を相殺し、受け取る側と差分を返す

    Returns:
        tuple[Side | None, int]: (ストロークを受け取るチーム, ストローク数)
    """
    difference = match.team_a_handicap_allowance - match.team_b_handicap_allowance
    if difference > 0:
        return Side.A, difference
    if difference < 0:
        return Side.B, -difference
    return None, 0


def hole_winner(
    result: HoleResult,
    stroke_side: Side | None = None,
    strokes: int = 0,
) -> Side | None:
    """1ホールの勝者を判定する

    Args:
        result: プレー済みのホール記録
        stroke_side: このホールでストロークを受け取るチーム
        strokes: 受け取るストローク数

    Returns:
        Side | None: 勝ったチーム(分けの場合はNone)
    """
    if result.conceded_by is not None:
        return result.conceded_by.opponent

    team_a_net = net_score(result.team_a_gross, strokes if stroke_side is Side.A else 0)
    team_b_net = net_score(result.team_b_gross, strokes if stroke_side is Side.B else 0)
    if team_a_net < team_b_net:
        return Side.A
    if team_b_net < team_a_net:
        return Side.B
    return None


def compute_match_state(
    match: Match, course_hole_handicaps: Sequence[int]
) -> MatchState:
    """ホール記録からマッチ状態を算出する

    ホール番号順に1ホールずつ集計し、リード数が残りホール数を上回った時点
    (または全ホール終了時点)で勝敗を確定する。確定後に記録されたホールは
    参考情報として ignored_holes に入れるだけで、スコアには反映しない。

    Args:
        match: 対象マッチ
        course_hole_handicaps: ホール番号順のハンディキャップ順位(1が最難)

    Returns:
        MatchState: マッチ状態

    Raises:
        MatchValidationError: マッチ設定・記録が不正な場合
    """
    validate_match(match, course_hole_handicaps)

    stroke_side, allowance = net_allowance(match)
    allocation = allocate_strokes(allowance, course_hole_handicaps, match.hole_count)

    warnings: list[IntegrityWarning] = []
    holes_up = 0
    team_a_won = 0
    team_b_won = 0
    halved = 0
    holes_played = 0
    thru_hole: int | None = None
    decided_at: int | None = None
    ignored: list[int] = []

    for result in sorted(match.hole_results, key=lambda r: r.hole_number):
        if decided_at is not None:
            if result.is_played:
                ignored.append(result.hole_number)
            continue

        if not result.is_played:
            if result.team_a_gross is not None or result.team_b_gross is not None:
                warnings.append(
                    _warn(
                        "incompleteHole",
                        f"Hole {result.hole_number} has only one gross score",
                        match.id,
                        result.hole_number,
                    )
                )
            continue

        if result.par is None:
            warnings.append(
                _warn(
                    "missingPar",
                    f"Hole {result.hole_number} has no par",
                    match.id,
                    result.hole_number,
                )
            )

        winner = hole_winner(result, stroke_side, allocation[result.hole_number - 1])
        if winner is Side.A:
            holes_up += 1
            team_a_won += 1
        elif winner is Side.B:
            holes_up -= 1
            team_b_won += 1
        else:
            halved += 1

        holes_played += 1
        thru_hole = result.hole_number
        holes_remaining = match.hole_count - holes_played
        if abs(holes_up) > holes_remaining or holes_remaining == 0:
            decided_at = result.hole_number

    holes_remaining = match.hole_count - holes_played
    is_decided = decided_at is not None

    if not is_decided:
        result_type = ResultType.NOT_FINISHED
    elif holes_up > 0:
        result_type = ResultType.TEAM_A_WIN
    elif holes_up < 0:
        result_type = ResultType.TEAM_B_WIN
    else:
        result_type = ResultType.HALVED

    if ignored:
        logger.info(
            "マッチ %s はホール%dで確定済みのため、以降の記録 %s は集計しません",
            match.id,
            decided_at,
            ignored,
        )

    return MatchState(
        match_id=match.id,
        holes_up=holes_up,
        holes_played=holes_played,
        holes_remaining=holes_remaining,
        team_a_holes_won=team_a_won,
        team_b_holes_won=team_b_won,
        holes_halved=halved,
        is_dormie=not is_decided and holes_up != 0 and abs(holes_up) == holes_remaining,
        is_decided=is_decided,
        decided_at_hole=decided_at,
        result_type=result_type,
        margin=abs(holes_up) if is_decided else 0,
        display_score=format_display_score(
            holes_up, holes_remaining, holes_played, is_decided, thru_hole
        ),
        thru_hole=thru_hole,
        ignored_holes=ignored,
        strokes_received={
            index + 1: strokes for index, strokes in enumerate(allocation) if strokes
        },
        stroke_side=stroke_side,
        warnings=warnings,
    )


def _warn(
    code: str, message: str, match_id: str, hole_number: int | None = None
) -> IntegrityWarning:
    logger.warning("マッチ %s: %s", match_id, message)
    return IntegrityWarning(
        code=code, message=message, match_id=match_id, hole_number=hole_number
    )


# ---------------------------------------------------------------------------
# 表示
# ---------------------------------------------------------------------------


def format_display_score(
    holes_up: int,
    holes_remaining: int,
    holes_played: int,
    is_decided: bool,
    thru_hole: int | None = None,
) -> str:
    """マッチスコアを表示用に整形する

    Args:
        holes_up: リード数(正ならチームA優勢)
        holes_remaining: 残りホール数
        holes_played: 集計済みホール数
        is_decided: 勝敗が確定しているか
        thru_hole: 最後に集計したホール番号

    Returns:
        str: "AS", "3&2", "1 up", "2 up (thru 14)" のいずれかの形式

    Examples:
        >>> format_display_score(4, 3, 15, True)
        '4&3'
        >>> format_display_score(1, 0, 18, True)
        '1 up'
        >>> format_display_score(-2, 4, 14, False, 14)
        '2 up (thru 14)'
    """
    if holes_played == 0 or holes_up == 0:
        return "AS"

    margin = abs(holes_up)
    if is_decided:
        if holes_remaining == 0:
            return f"{margin} up"
        return f"{margin}&{holes_remaining}"

    thru = thru_hole if thru_hole is not None else holes_played
    return f"{margin} up (thru {thru})"


def format_final_result(
    state: MatchState, team_a_name: str = "Team A", team_b_name: str = "Team B"
) -> str:
    """マッチ結果を1行の文章に整形する(共有テキスト用)"""
    if state.holes_played == 0:
        return "Not started"
    if state.result_type is ResultType.HALVED:
        return "Match Halved"

    leader_name = team_a_name if state.holes_up > 0 else team_b_name
    if state.is_decided:
        return f"{leader_name} won {state.display_score}"
    if state.holes_up == 0:
        return f"All square thru {state.thru_hole}"
    return f"{leader_name} leads {state.display_score}"


# ---------------------------------------------------------------------------
# ドーミー・クローズアウト判定
# ---------------------------------------------------------------------------


def check_dormie(holes_up: int, holes_remaining: int) -> tuple[bool, bool]:
    """各チームがドーミーかどうかを返す

    Returns:
        tuple[bool, bool]: (チームAがドーミー, チームBがドーミー)
    """
    return (
        holes_up > 0 and holes_up == holes_remaining,
        holes_up < 0 and -holes_up == holes_remaining,
    )


def would_close_out(holes_up: int, holes_remaining: int, winner: Side | None) -> bool:
    """次のホールの結果でマッチが確定するかどうか

    Args:
        holes_up: 現在のリード数
        holes_remaining: 次のホールを含む残りホール数
        winner: 次のホールの勝者(分けはNone)
    """
    if winner is Side.A:
        holes_up += 1
    elif winner is Side.B:
        holes_up -= 1
    return abs(holes_up) > holes_remaining - 1


def match_points(state: MatchState, points_per_match: float = 1.0) -> tuple[float, float]:
    """マッチ結果から各チームの獲得ポイントを返す

    勝ち: 全ポイント、分け: 半分ずつ、未確定: 0

    Returns:
        tuple[float, float]: (チームAのポイント, チームBのポイント)
    """
    if state.result_type is ResultType.TEAM_A_WIN:
        return points_per_match, 0.0
    if state.result_type is ResultType.TEAM_B_WIN:
        return 0.0, points_per_match
    if state.result_type is ResultType.HALVED:
        half = points_per_match / 2
        return half, half
    return 0.0, 0.0


# ---------------------------------------------------------------------------
# ライフサイクル
# ---------------------------------------------------------------------------


def record_hole_result(match: Match, hole_result: HoleResult) -> Match:
    """ホール記録を追加・更新した新しいマッチを返す

    同じホールの記録が既にあれば置き換える。

    Args:
        match: 対象マッチ
        hole_result: 記録するホール結果

    Returns:
        Match: 記録後のマッチ

    Raises:
        MatchLockedError: マッチが確定済みの場合
        HoleNumberError: ホール番号がマッチの範囲外の場合
    """
    if match.status is MatchStatus.COMPLETED:
        raise MatchLockedError(f"Match {match.id} is completed and cannot be edited")
    if hole_result.hole_number > match.hole_count:
        raise HoleNumberError(
            f"Match {match.id}: hole {hole_result.hole_number} is outside "
            f"a {match.hole_count}-hole match"
        )

    existing = [r for r in match.hole_results if r.hole_number != hole_result.hole_number]
    edited = len(existing) != len(match.hole_results)
    hole_results = sorted([*existing, hole_result], key=lambda r: r.hole_number)

    status = match.status
    if status is MatchStatus.SCHEDULED:
        status = MatchStatus.IN_PROGRESS

    logger.debug(
        "マッチ %s ホール%dを%sしました",
        match.id,
        hole_result.hole_number,
        "更新" if edited else "記録",
    )
    return match.model_copy(update={"hole_results": hole_results, "status": status})


def undo_last_hole(match: Match) -> Match:
    """最後のホール記録を取り消した新しいマッチを返す

    Raises:
        MatchLockedError: マッチが確定済みの場合
    """
    if match.status is MatchStatus.COMPLETED:
        raise MatchLockedError(f"Match {match.id} is completed and cannot be edited")
    if not match.hole_results:
        return match

    last = max(match.hole_results, key=lambda r: r.hole_number)
    hole_results = [r for r in match.hole_results if r is not last]
    status = match.status if hole_results else MatchStatus.SCHEDULED

    logger.debug("マッチ %s ホール%dの記録を取り消しました", match.id, last.hole_number)
    return match.model_copy(update={"hole_results": hole_results, "status": status})


def finalize_match(match: Match, state: MatchState) -> Match:
    """勝敗が確定していればマッチを completed にした新しいマッチを返す

    Raises:
        MatchValidationError: マッチ状態が別マッチのものだった場合
    """
    if state.match_id != match.id:
        raise MatchValidationError(
            f"State for match {state.match_id} cannot finalize match {match.id}"
        )
    if not state.is_decided or match.status is MatchStatus.COMPLETED:
        return match

    logger.info("マッチ %s が確定しました: %s", match.id, state.display_score)
    return match.model_copy(update={"status": MatchStatus.COMPLETED})


def current_hole(match: Match) -> int | None:
    """次に記録するホール番号を返す(全ホール記録済みならNone)"""
    scored = {r.hole_number for r in match.hole_results if r.is_played}
    for hole_number in range(1, match.hole_count + 1):
        if hole_number not in scored:
            return hole_number
    return None
