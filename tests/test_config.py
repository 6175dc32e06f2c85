"""config.pyのテスト"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from rydercup_score.config import Settings, get_settings
from rydercup_score.models import Side


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """.envファイルと既存の環境変数の影響を受けないようにする"""
    monkeypatch.chdir(tmp_path)
    for name in ("POINTS_PER_MATCH", "DEFENDING_SIDE", "DEBUG", "OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Settingsクラスのテスト"""

    def test_default_values(self):
        """デフォルト値が正しく設定されること"""
        settings = Settings()

        assert settings.points_per_match == 1.0
        assert settings.defending_side is None
        assert settings.debug is False
        assert settings.output_dir == Path("output")

    def test_override_default_values(self, monkeypatch):
        """環境変数でデフォルト値を上書きできること"""
        monkeypatch.setenv("POINTS_PER_MATCH", "2")
        monkeypatch.setenv("DEFENDING_SIDE", "B")
        monkeypatch.setenv("DEBUG", "true")

        settings = Settings()

        assert settings.points_per_match == 2.0
        assert settings.defending_side is Side.B
        assert settings.debug is True

    def test_invalid_points_raise_error(self, monkeypatch):
        """1マッチあたりのポイントが0以下の場合はエラーになること"""
        monkeypatch.setenv("POINTS_PER_MATCH", "0")

        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_defending_side_raises_error(self, monkeypatch):
        monkeypatch.setenv("DEFENDING_SIDE", "C")

        with pytest.raises(ValidationError):
            Settings()

    def test_output_dir_as_path(self, monkeypatch):
        """出力ディレクトリがPath型に変換されること"""
        monkeypatch.setenv("OUTPUT_DIR", "/custom/output")

        settings = Settings()

        assert isinstance(settings.output_dir, Path)
        assert settings.output_dir == Path("/custom/output")

    def test_read_from_env_file(self, tmp_path):
        """.envファイルから読み込めること"""
        (tmp_path / ".env").write_text("POINTS_PER_MATCH=0.5\n", encoding="utf-8")

        settings = Settings()

        assert settings.points_per_match == 0.5


class TestGetSettings:
    """get_settings関数のテスト"""

    def test_get_settings(self, monkeypatch):
        """設定を取得できること"""
        monkeypatch.setenv("DEFENDING_SIDE", "A")

        settings = get_settings()

        assert isinstance(settings, Settings)
        assert settings.defending_side is Side.A
