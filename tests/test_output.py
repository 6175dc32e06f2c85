"""output.pyのテスト"""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from rydercup_score.config import Settings
from rydercup_score.models import TripSnapshot
from rydercup_score.output import (
    load_snapshot,
    load_standings_from_json,
    save_standings_to_json,
)
from rydercup_score.standings import compute_trip_standings


@pytest.fixture
def computed(sample_snapshot: TripSnapshot):
    return compute_trip_standings(sample_snapshot, Settings(points_per_match=1.0))


class TestLoadSnapshot:
    """load_snapshot関数のテスト"""

    def test_load_json(self, tmp_path: Path, sample_snapshot: TripSnapshot):
        path = tmp_path / "trip.json"
        path.write_text(
            json.dumps(sample_snapshot.to_dict(), ensure_ascii=False), encoding="utf-8"
        )

        assert load_snapshot(path) == sample_snapshot

    @pytest.mark.parametrize("suffix", [".yaml", ".yml"])
    def test_load_yaml(self, tmp_path: Path, sample_snapshot: TripSnapshot, suffix):
        """YAML形式のスナップショットを読み込めること"""
        path = tmp_path / f"trip{suffix}"
        path.write_text(
            yaml.safe_dump(sample_snapshot.to_dict(), allow_unicode=True),
            encoding="utf-8",
        )

        assert load_snapshot(path) == sample_snapshot

    def test_load_minimal_yaml(self, tmp_path: Path):
        path = tmp_path / "trip.yaml"
        path.write_text(
            "name: Weekend Cup\n"
            "matches:\n"
            "  - id: m1\n"
            "    session_id: s1\n"
            "    format: singles\n"
            "    team_a_player_ids: [p1]\n"
            "    team_b_player_ids: [p2]\n"
            "    hole_results:\n"
            "      - {hole_number: 1, team_a_gross: 4, team_b_gross: 5}\n"
            "      - {hole_number: 2, conceded_by: A}\n",
            encoding="utf-8",
        )

        snapshot = load_snapshot(path)

        assert snapshot.name == "Weekend Cup"
        assert snapshot.matches[0].hole_results[1].conceded_by == "A"

    def test_empty_yaml(self, tmp_path: Path):
        """空のYAMLは空のスナップショットになること"""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_snapshot(path).matches == []

    def test_file_not_found(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "missing.json")

    def test_invalid_content(self, tmp_path: Path):
        """スナップショット形式でない場合はエラーになること"""
        path = tmp_path / "trip.json"
        path.write_text('{"matches": [{"id": "m1"}]}', encoding="utf-8")

        with pytest.raises(ValidationError):
            load_snapshot(path)


class TestSaveStandingsToJson:
    """save_standings_to_json関数のテスト"""

    def test_save_standings(self, tmp_path: Path, computed):
        states, standings = computed
        output_path = save_standings_to_json(
            standings, tmp_path, "standings.json", match_states=states
        )

        assert output_path.exists()
        assert output_path.name == "standings.json"

        with output_path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        assert data["team_totals"]["team_a_points"] == 1.5
        assert data["player_records"][0]["player_id"] == "p1"
        assert data["match_states"]["m1"]["display_score"] == "3&2"

    def test_save_without_match_states(self, tmp_path: Path, computed):
        _, standings = computed
        output_path = save_standings_to_json(standings, tmp_path, "standings.json")

        with output_path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        assert "match_states" not in data

    def test_auto_generate_filename(self, tmp_path: Path, computed):
        """ファイル名を自動生成できること"""
        _, standings = computed
        output_path = save_standings_to_json(standings, tmp_path)

        assert output_path.exists()
        assert output_path.name.startswith("standings_")
        assert output_path.suffix == ".json"

    def test_create_output_directory(self, tmp_path: Path, computed):
        """出力ディレクトリが存在しない場合は作成すること"""
        _, standings = computed
        nested_path = tmp_path / "nested" / "output"
        output_path = save_standings_to_json(standings, nested_path, "test.json")

        assert nested_path.exists()
        assert output_path.parent == nested_path


class TestLoadStandingsFromJson:
    """load_standings_from_json関数のテスト"""

    def test_round_trip(self, tmp_path: Path, computed):
        """保存した集計結果を読み込めること"""
        states, standings = computed
        output_path = save_standings_to_json(
            standings, tmp_path, "standings.json", match_states=states
        )

        restored = load_standings_from_json(output_path)

        assert restored.team_totals == standings.team_totals
        assert [r.player_id for r in restored.player_records] == [
            r.player_id for r in standings.player_records
        ]
