"""入出力処理モジュール

大会スナップショット(JSON/YAML)の読み込みと、
集計結果のJSONファイル出力を提供する。
"""

import json
import logging
from datetime import datetime
from pathlib import Path

import yaml

from .models import MatchState, StandingsResult, TripSnapshot

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def load_snapshot(file_path: Path) -> TripSnapshot:
    """大会スナップショットを読み込む

    拡張子が .yaml / .yml の場合はYAML、それ以外はJSONとして読み込む。

    Args:
        file_path: スナップショットファイルのパス

    Returns:
        TripSnapshot: 大会スナップショット

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        pydantic.ValidationError: 内容がスナップショット形式でない場合
    """
    with file_path.open("r", encoding="utf-8") as f:
        if file_path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    snapshot = TripSnapshot(**data)
    logger.info(
        "スナップショットを読み込みました: %s (マッチ%d件, プレーヤー%d人)",
        file_path,
        len(snapshot.matches),
        len(snapshot.players),
    )
    return snapshot


def save_standings_to_json(
    standings: StandingsResult,
    output_dir: Path,
    filename: str | None = None,
    match_states: dict[str, MatchState] | None = None,
) -> Path:
    """集計結果をJSONファイルに保存する

    Args:
        standings: 集計結果
        output_dir: 出力ディレクトリ
        filename: ファイル名(省略時は自動生成)
        match_states: マッチIDごとのマッチ状態(指定時は併せて出力)

    Returns:
        Path: 保存したファイルのパス
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        filename = f"standings_{timestamp}.json"

    output_path = output_dir / filename

    data = standings.to_dict()
    if match_states is not None:
        data["match_states"] = {
            match_id: state.model_dump(mode="json")
            for match_id, state in match_states.items()
        }

    with output_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info(
        "集計結果を保存しました: %s (個人成績%d件)",
        output_path,
        len(standings.player_records),
    )
    return output_path


def load_standings_from_json(file_path: Path) -> StandingsResult:
    """JSONファイルから集計結果を読み込む

    Args:
        file_path: JSONファイルのパス

    Returns:
        StandingsResult: 集計結果
    """
    with file_path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    data.pop("match_states", None)
    standings = StandingsResult(**data)
    logger.info("集計結果を読み込みました: %s", file_path)
    return standings
