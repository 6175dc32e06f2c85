"""CLIエントリーポイントモジュール

大会スナップショットからマッチ状態とスタンディングを算出するための
コマンドラインインターフェース。
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from . import __version__
from .config import Settings, get_settings
from .match_engine import MatchValidationError, format_final_result
from .models import Side
from .output import load_snapshot, save_standings_to_json
from .path_to_victory import calculate_path_to_victory, quick_summary
from .standings import compute_trip_standings


def setup_logging(debug: bool = False) -> None:
    """ロギングを設定する

    Args:
        debug: デバッグモードの場合True
    """
    level = logging.DEBUG if debug else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """コマンドライン引数をパースする

    Args:
        argv: 引数リスト(省略時は sys.argv)

    Returns:
        argparse.Namespace: パース済み引数
    """
    parser = argparse.ArgumentParser(
        prog="rydercup-score",
        description="ライダーカップ形式の大会スナップショットからスタンディングを集計するツール",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "snapshot",
        type=Path,
        help="大会スナップショットファイル(JSONまたはYAML)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="出力ディレクトリ(デフォルト: 環境変数OUTPUT_DIRまたはoutput)",
    )

    parser.add_argument(
        "--filename",
        "-f",
        type=str,
        default=None,
        help="出力ファイル名(省略時は自動生成)",
    )

    parser.add_argument(
        "--defending-side",
        type=str,
        choices=["A", "B"],
        default=None,
        help="前回優勝チーム(同点時に防衛)。スナップショットの指定が優先",
    )

    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="デバッグモードを有効にする",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """メインエントリーポイント

    Returns:
        int: 終了コード(0: 成功, 1: 失敗)
    """
    args = parse_args(argv)

    # 設定を読み込み
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"設定の読み込みに失敗しました: {e}", file=sys.stderr)
        print("環境変数または.envファイルを確認してください。", file=sys.stderr)
        return 1

    # コマンドライン引数で設定を上書き
    settings = Settings(
        points_per_match=settings.points_per_match,
        defending_side=(
            Side(args.defending_side)
            if args.defending_side is not None
            else settings.defending_side
        ),
        debug=args.debug or settings.debug,
        output_dir=args.output if args.output is not None else settings.output_dir,
    )

    # ロギング設定
    setup_logging(settings.debug)
    logger = logging.getLogger(__name__)

    logger.info("rydercup-score v%s を開始します", __version__)

    try:
        snapshot = load_snapshot(args.snapshot)
        states, standings = compute_trip_standings(snapshot, settings)
    except MatchValidationError as e:
        logger.exception("マッチデータが不正です: %s", e)
        return 1
    except ValidationError as e:
        logger.exception("スナップショットの形式が不正です: %s", e)
        return 1
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        logger.exception("スナップショットを読み込めませんでした: %s", e)
        return 1

    for match in snapshot.matches:
        logger.info(
            "マッチ %s: %s",
            match.id,
            format_final_result(
                states[match.id], snapshot.team_a_name, snapshot.team_b_name
            ),
        )

    totals = standings.team_totals
    logger.info(
        "%s %g - %g %s (残り %g ポイント)",
        snapshot.team_a_name,
        totals.team_a_points,
        totals.team_b_points,
        snapshot.team_b_name,
        totals.points_available_remaining,
    )

    path = calculate_path_to_victory(
        totals,
        snapshot.team_a_name,
        snapshot.team_b_name,
        defending_side=snapshot.defending_side or settings.defending_side,
    )
    for line in quick_summary(path):
        logger.info(line)

    for record in standings.player_records:
        logger.info(
            "%2d. %s %s (%g pts)",
            record.rank,
            record.player_name,
            record.record,
            record.points,
        )

    if standings.warnings:
        logger.warning("整合性の警告が%d件あります", len(standings.warnings))

    output_path = save_standings_to_json(
        standings,
        settings.output_dir,
        args.filename,
        match_states=states,
    )
    logger.info("完了: %s", output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
