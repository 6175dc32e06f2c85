"""データモデルモジュール

マッチプレー集計で扱う入力データ(永続化層から渡されるスナップショット)と、
エンジンが算出する派生データの型定義・バリデーションを提供する。
入力モデルはすべてイミュータブル。
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Side(str, Enum):
    """チーム識別子"""

    A = "A"
    B = "B"

    @property
    def opponent(self) -> "Side":
        return Side.B if self is Side.A else Side.A


class MatchFormat(str, Enum):
    """マッチ形式"""

    SINGLES = "singles"
    FOURSOMES = "foursomes"
    FOURBALL = "fourball"

    @property
    def players_per_side(self) -> int:
        """1チームあたりの出場人数"""
        return 1 if self is MatchFormat.SINGLES else 2


class MatchStatus(str, Enum):
    """マッチのライフサイクル状態"""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"


class ResultType(str, Enum):
    """マッチ結果の分類"""

    NOT_FINISHED = "notFinished"
    TEAM_A_WIN = "teamAWin"
    TEAM_B_WIN = "teamBWin"
    HALVED = "halved"


class IntegrityWarning(BaseModel):
    """データ整合性の警告(計算は継続する非致命的な問題)"""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="警告コード(例: unknownPlayer)")
    message: str = Field(..., description="警告メッセージ")
    match_id: str | None = Field(default=None, description="対象マッチID")
    player_id: str | None = Field(default=None, description="対象プレーヤーID")
    hole_number: int | None = Field(default=None, description="対象ホール番号")


# ---------------------------------------------------------------------------
# 入力モデル
# ---------------------------------------------------------------------------


class HoleResult(BaseModel):
    """1ホール分の記録

    グロススコアが両チーム分揃っているか、どちらかがコンシードした場合に
    プレー済みとみなす。
    """

    model_config = ConfigDict(frozen=True)

    hole_number: int = Field(..., ge=1, le=18, description="ホール番号")
    par: int | None = Field(default=None, ge=3, le=6, description="パー(表示用)")
    team_a_gross: int | None = Field(
        default=None, ge=1, description="チームAのグロススコア"
    )
    team_b_gross: int | None = Field(
        default=None, ge=1, description="チームBのグロススコア"
    )
    conceded_by: Side | None = Field(
        default=None, description="ホールをコンシードしたチーム"
    )

    @property
    def has_both_scores(self) -> bool:
        return self.team_a_gross is not None and self.team_b_gross is not None

    @property
    def is_played(self) -> bool:
        """勝敗を判定できる記録かどうか"""
        return self.conceded_by is not None or self.has_both_scores


class Match(BaseModel):
    """1試合分のマッチ設定とホール記録"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="マッチID")
    session_id: str = Field(..., description="所属セッションID")
    match_order: int = Field(default=1, ge=1, description="セッション内の順番")
    format: MatchFormat = Field(..., description="マッチ形式")

    team_a_player_ids: list[str] = Field(
        default_factory=list, description="チームAの出場プレーヤーID"
    )
    team_b_player_ids: list[str] = Field(
        default_factory=list, description="チームBの出場プレーヤーID"
    )

    # ハンディキャップ(受け取るストローク数)
    team_a_handicap_allowance: int = Field(
        default=0, description="チームAが受け取るストローク数"
    )
    team_b_handicap_allowance: int = Field(
        default=0, description="チームBが受け取るストローク数"
    )

    hole_count: int = Field(default=18, description="対象ホール数(9または18)")
    hole_results: list[HoleResult] = Field(
        default_factory=list, description="ホールごとの記録"
    )
    status: MatchStatus = Field(
        default=MatchStatus.SCHEDULED, description="ライフサイクル状態"
    )

    def player_ids(self, side: Side) -> list[str]:
        """指定チームの出場プレーヤーIDを返す"""
        return self.team_a_player_ids if side is Side.A else self.team_b_player_ids


class Session(BaseModel):
    """セッション(午前フォアサム等、同一形式のマッチ群)"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="セッションID")
    name: str = Field(default="", description="セッション名")
    session_type: MatchFormat = Field(..., description="セッション形式")
    points_per_match: float | None = Field(
        default=None, gt=0, description="1マッチあたりのポイント(省略時は設定値)"
    )


class Player(BaseModel):
    """ロスターに登録されたプレーヤー

    handicap_index は表示・ストローク数算出用の参考情報。エンジンはマッチの
    allowance だけを使うため、ストローク数は handicap モジュールの
    singles_strokes 等で事前に求めて Match に設定する。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="プレーヤーID")
    first_name: str = Field(..., description="名")
    last_name: str = Field(..., description="姓")
    side: Side | None = Field(default=None, description="所属チーム")
    handicap_index: float | None = Field(
        default=None, description="ハンディキャップインデックス(参考情報、集計には不使用)"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class TripSnapshot(BaseModel):
    """旅行(大会)全体のスナップショット

    永続化層から受け取る単位。CLIはこの形式のJSON/YAMLを読み込む。
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="大会名")
    team_a_name: str = Field(default="Team A", description="チームAの名称")
    team_b_name: str = Field(default="Team B", description="チームBの名称")
    players: list[Player] = Field(default_factory=list, description="ロスター")
    sessions: list[Session] = Field(default_factory=list, description="セッション")
    matches: list[Match] = Field(default_factory=list, description="マッチ")
    course_hole_handicaps: list[int] = Field(
        default_factory=lambda: list(range(1, 19)),
        description="ホールごとのハンディキャップ順位(1が最難)",
    )
    defending_side: Side | None = Field(
        default=None, description="前回優勝チーム(同点時に防衛)"
    )

    def to_dict(self) -> dict:
        """辞書形式に変換(JSON出力用)"""
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# 派生モデル
# ---------------------------------------------------------------------------


class MatchState(BaseModel):
    """マッチエンジンが算出するマッチ状態

    ホール記録が変わるたびに一から再計算される。
    """

    match_id: str = Field(..., description="マッチID")
    holes_up: int = Field(default=0, description="リードホール数(正ならチームA優勢)")
    holes_played: int = Field(default=0, description="勝敗が付いたホール数")
    holes_remaining: int = Field(..., description="残りホール数")
    team_a_holes_won: int = Field(default=0, description="チームAの獲得ホール数")
    team_b_holes_won: int = Field(default=0, description="チームBの獲得ホール数")
    holes_halved: int = Field(default=0, description="分けたホール数")

    is_dormie: bool = Field(default=False, description="ドーミーかどうか")
    is_decided: bool = Field(default=False, description="勝敗が確定したかどうか")
    decided_at_hole: int | None = Field(default=None, description="勝敗確定ホール")
    result_type: ResultType = Field(
        default=ResultType.NOT_FINISHED, description="結果の分類"
    )
    margin: int = Field(default=0, ge=0, description="確定時のリード数")
    display_score: str = Field(default="AS", description="表示用スコア")
    thru_hole: int | None = Field(default=None, description="最後に集計したホール")

    ignored_holes: list[int] = Field(
        default_factory=list, description="勝敗確定後に記録されたホール"
    )
    strokes_received: dict[int, int] = Field(
        default_factory=dict, description="ホールごとのハンディストローク数"
    )
    stroke_side: Side | None = Field(
        default=None, description="ストロークを受け取るチーム"
    )
    warnings: list[IntegrityWarning] = Field(
        default_factory=list, description="整合性の警告"
    )

    @property
    def leader(self) -> Side | None:
        if self.holes_up > 0:
            return Side.A
        if self.holes_up < 0:
            return Side.B
        return None

    def holes_won(self, side: Side) -> int:
        return self.team_a_holes_won if side is Side.A else self.team_b_holes_won


class MagicNumber(BaseModel):
    """優勝確定までに必要なポイント"""

    team_a: float | None = Field(default=None, description="チームAの必要ポイント")
    team_b: float | None = Field(default=None, description="チームBの必要ポイント")
    team_a_points_to_win: float = Field(..., description="チームAの優勝ライン")
    team_b_points_to_win: float = Field(..., description="チームBの優勝ライン")
    clinched_side: Side | None = Field(default=None, description="優勝確定チーム")
    is_decided: bool = Field(default=False, description="大会の勝敗が確定したか")

    def for_side(self, side: Side) -> float | None:
        return self.team_a if side is Side.A else self.team_b


class TeamPointTotals(BaseModel):
    """チームごとのポイント集計"""

    team_a_points: float = Field(default=0.0, description="チームAの獲得ポイント")
    team_b_points: float = Field(default=0.0, description="チームBの獲得ポイント")
    points_available_remaining: float = Field(
        default=0.0, description="未確定マッチの残りポイント"
    )
    total_points: float = Field(default=0.0, description="大会の総ポイント")
    team_a_projected: float = Field(default=0.0, description="チームAの予想ポイント")
    team_b_projected: float = Field(default=0.0, description="チームBの予想ポイント")
    matches_completed: int = Field(default=0, description="確定マッチ数")
    matches_in_progress: int = Field(default=0, description="進行中マッチ数")
    matches_remaining: int = Field(default=0, description="未確定マッチ数")
    magic_number: MagicNumber = Field(..., description="マジックナンバー")

    @property
    def leader(self) -> Side | None:
        if self.team_a_points > self.team_b_points:
            return Side.A
        if self.team_b_points > self.team_a_points:
            return Side.B
        return None

    def points(self, side: Side) -> float:
        return self.team_a_points if side is Side.A else self.team_b_points


class PlayerRecord(BaseModel):
    """プレーヤー個人の大会成績"""

    player_id: str = Field(..., description="プレーヤーID")
    player_name: str = Field(default="", description="表示名")
    last_name: str = Field(default="", description="姓(同順位の最終判定用)")
    first_name: str = Field(default="", description="名")
    side: Side | None = Field(default=None, description="所属チーム")
    wins: int = Field(default=0, description="勝ち")
    losses: int = Field(default=0, description="負け")
    halves: int = Field(default=0, description="引き分け")
    points: float = Field(default=0.0, description="獲得ポイント")
    holes_won: int = Field(default=0, description="獲得ホール数")
    holes_lost: int = Field(default=0, description="失ったホール数")
    rank: int = Field(default=0, description="順位(1始まり)")

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses + self.halves

    @property
    def hole_differential(self) -> int:
        return self.holes_won - self.holes_lost

    @property
    def record(self) -> str:
        """勝-負-分 形式の成績(例: 3-1-1)"""
        return f"{self.wins}-{self.losses}-{self.halves}"


class SessionTotals(BaseModel):
    """セッションごとのポイント集計"""

    session_id: str = Field(..., description="セッションID")
    name: str = Field(default="", description="セッション名")
    team_a_points: float = Field(default=0.0, description="チームAの獲得ポイント")
    team_b_points: float = Field(default=0.0, description="チームBの獲得ポイント")
    matches_completed: int = Field(default=0, description="確定マッチ数")
    total_matches: int = Field(default=0, description="マッチ数")


class StandingsResult(BaseModel):
    """スタンディングエンジンの出力"""

    team_totals: TeamPointTotals = Field(..., description="チームポイント集計")
    player_records: list[PlayerRecord] = Field(
        default_factory=list, description="個人成績(順位順)"
    )
    session_totals: list[SessionTotals] = Field(
        default_factory=list, description="セッションごとの集計"
    )
    warnings: list[IntegrityWarning] = Field(
        default_factory=list, description="整合性の警告"
    )

    @property
    def magic_number(self) -> MagicNumber:
        return self.team_totals.magic_number

    def to_dict(self) -> dict:
        """辞書形式に変換(JSON出力用)

        Returns:
            dict: 集計結果の辞書表現
        """
        return self.model_dump(mode="json")


class VictoryScenario(BaseModel):
    """優勝確定までの勝ち・分けの組み合わせ"""

    wins_needed: int = Field(..., description="必要な勝ち数")
    halves_needed: int = Field(default=0, description="必要な分け数")
    matches_to_spare: int = Field(default=0, description="落としてもよいマッチ数")
    likelihood: str = Field(..., description="可能性(high/medium/low/unlikely)")
    description: str = Field(..., description="説明文")


class TeamPath(BaseModel):
    """1チーム分の優勝への道筋"""

    side: Side = Field(..., description="チーム")
    name: str = Field(..., description="チーム名")
    current_points: float = Field(..., description="現在のポイント")
    points_to_win: float = Field(..., description="優勝ライン")
    points_needed: float = Field(..., description="優勝ラインまでの不足ポイント")
    has_clinched: bool = Field(default=False, description="優勝確定済みか")
    can_clinch: bool = Field(default=False, description="全勝すれば優勝できるか")
    is_eliminated: bool = Field(default=False, description="優勝の可能性がないか")
    scenarios: list[VictoryScenario] = Field(
        default_factory=list, description="優勝シナリオ"
    )
    best_case: str = Field(default="", description="最良ケースの説明")
    worst_case: str = Field(default="", description="最悪ケースの説明")


class PathToVictory(BaseModel):
    """両チームの優勝への道筋"""

    team_a: TeamPath = Field(..., description="チームA")
    team_b: TeamPath = Field(..., description="チームB")
    remaining_matches: int = Field(default=0, description="未確定マッチ数")
    remaining_points: float = Field(default=0.0, description="残りポイント")
    is_decided: bool = Field(default=False, description="大会の勝敗が確定したか")
    dramatic: bool = Field(default=False, description="接戦かどうか")
    tie_breaker: str = Field(default="", description="同点時の扱い")
