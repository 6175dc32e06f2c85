"""設定管理モジュール

環境変数から設定を読み込み、アプリケーション全体で使用する設定を提供する。
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Side


class Settings(BaseSettings):
    """アプリケーション設定

    環境変数または.envファイルから設定を読み込む。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 集計ルール
    points_per_match: float = Field(
        default=1.0,
        gt=0,
        description="セッションに設定がない場合の1マッチあたりのポイント",
    )
    defending_side: Side | None = Field(
        default=None,
        description="前回優勝チーム(A/B)。同点時にカップを防衛する",
    )

    # オプション設定
    debug: bool = Field(
        default=False,
        description="デバッグモード(true: デバッグ情報出力)",
    )
    output_dir: Path = Field(
        default=Path("output"),
        description="出力ディレクトリ",
    )


def get_settings() -> Settings:
    """設定インスタンスを取得する

    Returns:
        Settings: アプリケーション設定
    """
    return Settings()
