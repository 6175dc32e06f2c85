"""共通フィクスチャ"""

from collections.abc import Callable, Iterable

import pytest

from rydercup_score.models import (
    HoleResult,
    Match,
    MatchFormat,
    MatchStatus,
    Player,
    Session,
    Side,
    TripSnapshot,
)

# ホール番号順のハンディキャップ順位(ホール6が最難、ホール17が2番目)
STROKE_INDEX = [7, 11, 3, 13, 9, 1, 15, 5, 17, 8, 16, 10, 4, 12, 6, 18, 2, 14]


def hole(
    number: int,
    team_a: int | None = 4,
    team_b: int | None = 4,
    par: int | None = 4,
    conceded_by: Side | None = None,
) -> HoleResult:
    """テスト用のホール記録を作成する"""
    return HoleResult(
        hole_number=number,
        par=par,
        team_a_gross=team_a,
        team_b_gross=team_b,
        conceded_by=conceded_by,
    )


def won_by(side: Side, numbers: Iterable[int]) -> list[HoleResult]:
    """指定チームがグロス1打差で勝ったホール記録のリスト"""
    if side is Side.A:
        return [hole(n, 4, 5) for n in numbers]
    return [hole(n, 5, 4) for n in numbers]


def halved(numbers: Iterable[int]) -> list[HoleResult]:
    """分けたホール記録のリスト"""
    return [hole(n, 4, 4) for n in numbers]


@pytest.fixture
def stroke_index() -> list[int]:
    return list(STROKE_INDEX)


@pytest.fixture
def make_match() -> Callable[..., Match]:
    """マッチを作成するファクトリ"""

    def _make(
        hole_results: list[HoleResult] | None = None,
        match_format: MatchFormat = MatchFormat.SINGLES,
        team_a_allowance: int = 0,
        team_b_allowance: int = 0,
        hole_count: int = 18,
        match_id: str = "m1",
        session_id: str = "s1",
        team_a_player_ids: list[str] | None = None,
        team_b_player_ids: list[str] | None = None,
        status: MatchStatus = MatchStatus.IN_PROGRESS,
    ) -> Match:
        per_side = match_format.players_per_side
        if team_a_player_ids is None:
            team_a_player_ids = ["a1", "a2"][:per_side]
        if team_b_player_ids is None:
            team_b_player_ids = ["b1", "b2"][:per_side]
        return Match(
            id=match_id,
            session_id=session_id,
            format=match_format,
            team_a_player_ids=team_a_player_ids,
            team_b_player_ids=team_b_player_ids,
            team_a_handicap_allowance=team_a_allowance,
            team_b_handicap_allowance=team_b_allowance,
            hole_count=hole_count,
            hole_results=hole_results or [],
            status=status,
        )

    return _make


@pytest.fixture
def roster() -> list[Player]:
    return [
        Player(id="p1", first_name="Tom", last_name="Adams", side=Side.A),
        Player(id="p2", first_name="Bill", last_name="Baker", side=Side.A),
        Player(id="p3", first_name="Colin", last_name="Clark", side=Side.B),
        Player(id="p4", first_name="Dan", last_name="Davis", side=Side.B),
        Player(id="p5", first_name="Eric", last_name="Evans", side=Side.A),
        Player(id="p6", first_name="Finn", last_name="Fox", side=Side.B),
    ]


@pytest.fixture
def sessions() -> list[Session]:
    return [
        Session(id="s1", name="Friday Fourball", session_type=MatchFormat.FOURBALL),
        Session(
            id="s2",
            name="Sunday Singles",
            session_type=MatchFormat.SINGLES,
            points_per_match=1.0,
        ),
    ]


@pytest.fixture
def sample_snapshot(roster: list[Player], sessions: list[Session]) -> TripSnapshot:
    """2マッチ確定・1マッチ進行中のスナップショット

    - m1 フォアボール: チームAが1〜3番を取り、以降分けて16番で 3&2
    - m2 シングルス: 全ホール分け
    - m3 シングルス: チームAが1〜2番を取り、10番まで分け(進行中)
    """
    m1 = Match(
        id="m1",
        session_id="s1",
        format=MatchFormat.FOURBALL,
        team_a_player_ids=["p1", "p2"],
        team_b_player_ids=["p3", "p4"],
        hole_results=won_by(Side.A, range(1, 4)) + halved(range(4, 17)),
        status=MatchStatus.IN_PROGRESS,
    )
    m2 = Match(
        id="m2",
        session_id="s2",
        format=MatchFormat.SINGLES,
        team_a_player_ids=["p5"],
        team_b_player_ids=["p6"],
        hole_results=halved(range(1, 19)),
        status=MatchStatus.IN_PROGRESS,
    )
    m3 = Match(
        id="m3",
        session_id="s2",
        format=MatchFormat.SINGLES,
        team_a_player_ids=["p1"],
        team_b_player_ids=["p3"],
        hole_results=won_by(Side.A, range(1, 3)) + halved(range(3, 11)),
        status=MatchStatus.IN_PROGRESS,
    )
    return TripSnapshot(
        name="Test Cup",
        team_a_name="USA",
        team_b_name="Europe",
        players=roster,
        sessions=sessions,
        matches=[m1, m2, m3],
        course_hole_handicaps=list(STROKE_INDEX),
    )
