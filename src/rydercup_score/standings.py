"""スタンディングエンジンモジュール

大会の全マッチとマッチ状態から、チームポイント、セッションごとの集計、
個人成績の順位、マジックナンバーを算出する。
"""

import logging
import math
from collections.abc import Iterable, Mapping
from fractions import Fraction

from .config import Settings, get_settings
from .match_engine import compute_match_state, match_points
from .models import (
    IntegrityWarning,
    MagicNumber,
    Match,
    MatchState,
    Player,
    PlayerRecord,
    ResultType,
    Session,
    SessionTotals,
    Side,
    StandingsResult,
    TeamPointTotals,
    TripSnapshot,
)

logger = logging.getLogger(__name__)


def point_unit(values: Iterable[float]) -> float:
    """ポイントの最小単位を返す

    すべての値を割り切る最大の値(分数の最大公約数)。0の値は無視し、
    有効な値がない場合は0.5を返す。

    Examples:
        >>> point_unit([1.0, 0.5])
        0.5
        >>> point_unit([1.75, 1.0])
        0.25
    """
    unit = Fraction(0)
    for value in values:
        fraction = Fraction(value).limit_denominator(1000)
        if fraction <= 0:
            continue
        unit = Fraction(
            math.gcd(
                unit.numerator * fraction.denominator,
                fraction.numerator * unit.denominator,
            ),
            unit.denominator * fraction.denominator,
        )
    return float(unit) if unit else 0.5


def points_to_win(
    total_points: float,
    side: Side,
    defending_side: Side | None = None,
    point_step: float = 0.5,
) -> float:
    """優勝に必要なポイントを返す

    総ポイントの半分を上回る最小の point_step 刻みの値。前回優勝チームは
    同点でカップを防衛するため、半分以上の最小値でよい。point_step は
    チームが得られるポイントの最小単位(1マッチ1ポイントなら分けの0.5)。

    Examples:
        >>> points_to_win(28, Side.A)
        14.5
        >>> points_to_win(28, Side.A, defending_side=Side.A)
        14.0
        >>> points_to_win(3, Side.A, point_step=0.25)
        1.75
    """
    units = round(total_points / point_step)
    if defending_side is side:
        return math.ceil(units / 2) * point_step
    return (units // 2 + 1) * point_step


def calculate_magic_number(
    team_a_points: float,
    team_b_points: float,
    points_remaining: float,
    defending_side: Side | None = None,
    point_step: float = 0.5,
) -> MagicNumber:
    """マジックナンバーを算出する

    相手の獲得ポイントと残りポイントの合計を上回った(防衛チームは並んだ)
    時点で優勝確定とする。各チームが確定までに追加で必要なポイントを返し、
    どちらかが確定済み、残りポイントがない、または全勝しても届かない
    チームの値はNoneになる。

    Args:
        team_a_points: チームAの獲得ポイント
        team_b_points: チームBの獲得ポイント
        points_remaining: 未確定マッチの残りポイント
        defending_side: 前回優勝チーム
        point_step: ポイントの最小単位(獲得ポイントからさらに細かい単位を検出する)

    Returns:
        MagicNumber: マジックナンバー
    """
    total = team_a_points + team_b_points + points_remaining
    step = point_unit([point_step, team_a_points, team_b_points, points_remaining])
    team_a_target = points_to_win(total, Side.A, defending_side, step)
    team_b_target = points_to_win(total, Side.B, defending_side, step)

    if total <= 0:
        return MagicNumber(
            team_a_points_to_win=team_a_target,
            team_b_points_to_win=team_b_target,
        )

    def has_clinched(side: Side, points: float, other_points: float) -> bool:
        lead = points - (other_points + points_remaining)
        return lead >= 0 if defending_side is side else lead > 0

    clinched_side: Side | None = None
    if has_clinched(Side.A, team_a_points, team_b_points):
        clinched_side = Side.A
    elif has_clinched(Side.B, team_b_points, team_a_points):
        clinched_side = Side.B
    is_decided = clinched_side is not None or points_remaining <= 0

    def needed(points: float, target: float) -> float | None:
        if is_decided:
            return None
        shortfall = max(0.0, target - points)
        if shortfall > points_remaining:
            return None
        return shortfall

    return MagicNumber(
        team_a=needed(team_a_points, team_a_target),
        team_b=needed(team_b_points, team_b_target),
        team_a_points_to_win=team_a_target,
        team_b_points_to_win=team_b_target,
        clinched_side=clinched_side,
        is_decided=is_decided,
    )


def _warn(warnings: list[IntegrityWarning], code: str, message: str, **kwargs) -> None:
    logger.warning(message)
    warnings.append(IntegrityWarning(code=code, message=message, **kwargs))


def compute_standings(
    matches: Iterable[Match],
    match_states: Mapping[str, MatchState],
    sessions: Iterable[Session] | None = None,
    roster: Iterable[Player] | None = None,
    defending_side: Side | None = None,
    default_points_per_match: float = 1.0,
) -> StandingsResult:
    """大会のスタンディングを算出する

    確定したマッチは勝ちチームに全ポイント、分けは両チームに半分ずつ加算する。
    フォアサム・フォアボールでは組んだ2人それぞれに全ポイントを記録する
    (折半しない)。ロスターにないプレーヤーは未確定のマッチでも警告を付け、
    順位からは除外する。

    Args:
        matches: 大会の全マッチ
        match_states: マッチIDごとのマッチ状態
        sessions: セッション(1マッチあたりのポイント設定に使用。空なら未指定扱い)
        roster: ロスター(省略時・空の場合は出場プレーヤー全員を集計)
        defending_side: 前回優勝チーム
        default_points_per_match: セッションに設定がない場合のポイント

    Returns:
        StandingsResult: 集計結果
    """
    warnings: list[IntegrityWarning] = []
    # 空のリストは未指定として扱う
    sessions_by_id = {s.id: s for s in sessions or ()} or None
    roster_by_id = {p.id: p for p in roster or ()} or None

    session_totals: dict[str, SessionTotals] = {}
    if sessions_by_id is not None:
        for session in sessions_by_id.values():
            session_totals[session.id] = SessionTotals(
                session_id=session.id, name=session.name
            )

    records: dict[str, PlayerRecord] = {}
    if roster_by_id is not None:
        for player in roster_by_id.values():
            records[player.id] = _new_record(player.id, player)

    team_a_points = 0.0
    team_b_points = 0.0
    team_a_projected = 0.0
    team_b_projected = 0.0
    remaining = 0.0
    total = 0.0
    completed = 0
    in_progress = 0
    unfinished = 0
    match_values: list[float] = []

    for match in matches:
        value = default_points_per_match
        session = (
            sessions_by_id.get(match.session_id) if sessions_by_id is not None else None
        )
        if session is not None and session.points_per_match is not None:
            value = session.points_per_match
        elif sessions_by_id is not None and session is None:
            _warn(
                warnings,
                "unknownSession",
                f"Match {match.id} references unknown session {match.session_id}",
                match_id=match.id,
            )
        total += value
        match_values.append(value)

        totals = session_totals.setdefault(
            match.session_id, SessionTotals(session_id=match.session_id)
        )
        totals.total_matches += 1

        state = match_states.get(match.id)
        if state is None:
            _warn(
                warnings,
                "missingMatchState",
                f"No computed state for match {match.id}; counted as not finished",
                match_id=match.id,
            )
        else:
            warnings.extend(state.warnings)

        unknown_players: set[str] = set()
        if roster_by_id is not None:
            for player_id in match.team_a_player_ids + match.team_b_player_ids:
                if player_id in roster_by_id or player_id in unknown_players:
                    continue
                unknown_players.add(player_id)
                _warn(
                    warnings,
                    "unknownPlayer",
                    f"Match {match.id} references player {player_id} "
                    "who is not on the roster",
                    match_id=match.id,
                    player_id=player_id,
                )

        if state is None or state.result_type is ResultType.NOT_FINISHED:
            remaining += value
            unfinished += 1
            if state is not None and state.holes_played > 0:
                in_progress += 1
                leader = state.leader
                if leader is Side.A:
                    team_a_projected += value
                elif leader is Side.B:
                    team_b_projected += value
                else:
                    team_a_projected += value / 2
                    team_b_projected += value / 2
            continue

        a_points, b_points = match_points(state, value)
        team_a_points += a_points
        team_b_points += b_points
        team_a_projected += a_points
        team_b_projected += b_points
        completed += 1
        totals.team_a_points += a_points
        totals.team_b_points += b_points
        totals.matches_completed += 1

        for side, side_points in ((Side.A, a_points), (Side.B, b_points)):
            for player_id in match.player_ids(side):
                if player_id in unknown_players:
                    continue
                record = records.get(player_id)
                if record is None:
                    record = records[player_id] = _new_record(player_id)
                _apply_result(record, state, side, side_points)

    # 分けで得られる半分のポイントが最小単位
    point_step = point_unit(match_values) / 2 if match_values else 0.5
    magic_number = calculate_magic_number(
        team_a_points, team_b_points, remaining, defending_side, point_step
    )
    team_totals = TeamPointTotals(
        team_a_points=team_a_points,
        team_b_points=team_b_points,
        points_available_remaining=remaining,
        total_points=total,
        team_a_projected=team_a_projected,
        team_b_projected=team_b_projected,
        matches_completed=completed,
        matches_in_progress=in_progress,
        matches_remaining=unfinished,
        magic_number=magic_number,
    )

    ranked = rank_players(records.values())
    logger.debug(
        "スタンディング集計: A=%.1f B=%.1f 残り=%.1f (確定%d / 全%d)",
        team_a_points,
        team_b_points,
        remaining,
        completed,
        completed + unfinished,
    )
    return StandingsResult(
        team_totals=team_totals,
        player_records=ranked,
        session_totals=list(session_totals.values()),
        warnings=warnings,
    )


def _new_record(player_id: str, player: Player | None = None) -> PlayerRecord:
    if player is None:
        return PlayerRecord(player_id=player_id, player_name=player_id)
    return PlayerRecord(
        player_id=player_id,
        player_name=player.full_name,
        first_name=player.first_name,
        last_name=player.last_name,
        side=player.side,
    )


def _apply_result(
    record: PlayerRecord, state: MatchState, side: Side, points: float
) -> None:
    """1マッチ分の結果を個人成績に加算する"""
    if state.result_type is ResultType.HALVED:
        record.halves += 1
    elif state.leader is side:
        record.wins += 1
    else:
        record.losses += 1
    record.points += points
    record.holes_won += state.holes_won(side)
    record.holes_lost += state.holes_won(side.opponent)
    if record.side is None:
        record.side = side


def rank_players(records: Iterable[PlayerRecord]) -> list[PlayerRecord]:
    """個人成績を順位順に並べ、rank を振る

    ポイント、勝ち数、獲得ホール差の多い順。並んだ場合は姓のアルファベット順。
    """
    ordered = sorted(
        records,
        key=lambda r: (
            -r.points,
            -r.wins,
            -r.hole_differential,
            r.last_name.casefold(),
            r.first_name.casefold(),
            r.player_id,
        ),
    )
    for position, record in enumerate(ordered, start=1):
        record.rank = position
    return ordered


def compute_trip_standings(
    snapshot: TripSnapshot, settings: Settings | None = None
) -> tuple[dict[str, MatchState], StandingsResult]:
    """スナップショットの全マッチを再計算し、スタンディングを算出する

    Args:
        snapshot: 大会のスナップショット
        settings: アプリケーション設定(省略時は環境変数から読み込む)

    Returns:
        tuple[dict[str, MatchState], StandingsResult]: (マッチ状態, 集計結果)

    Raises:
        MatchValidationError: いずれかのマッチの設定・記録が不正な場合
    """
    if settings is None:
        settings = get_settings()

    states = {
        match.id: compute_match_state(match, snapshot.course_hole_handicaps)
        for match in snapshot.matches
    }
    standings = compute_standings(
        snapshot.matches,
        states,
        sessions=snapshot.sessions,
        roster=snapshot.players,
        defending_side=snapshot.defending_side or settings.defending_side,
        default_points_per_match=settings.points_per_match,
    )
    return states, standings
