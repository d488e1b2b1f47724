"""
Tests for the player catalog loader.
"""
import json
from pathlib import Path

from app.catalog import load_catalog, normalize_catalog


class TestNormalizeCatalog:

    def test_list_is_shared_by_both_sides(self):
        assert normalize_catalog(["Asha", "Ben"]) == {
            "teamA": ["Asha", "Ben"],
            "teamB": ["Asha", "Ben"],
        }

    def test_per_team_object(self):
        catalog = normalize_catalog({"teamA": ["Asha"], "teamB": ["Ben", "Cal"]})
        assert catalog == {"teamA": ["Asha"], "teamB": ["Ben", "Cal"]}

    def test_missing_side_is_empty(self):
        assert normalize_catalog({"teamA": ["Asha"]})["teamB"] == []

    def test_blank_duplicate_and_non_string_entries_dropped(self):
        catalog = normalize_catalog([" Asha ", "", "Asha", 7, None, "Ben"])
        assert catalog["teamA"] == ["Asha", "Ben"]

    def test_unknown_shape(self):
        assert normalize_catalog("Asha") == {"teamA": [], "teamB": []}


class TestLoadCatalog:

    def test_loads_file(self, tmp_path):
        path = tmp_path / "players.json"
        path.write_text(json.dumps({"teamA": ["Asha"], "teamB": ["Ben"]}), encoding="utf-8")
        assert load_catalog(str(path)) == {"teamA": ["Asha"], "teamB": ["Ben"]}

    def test_missing_file_gives_empty_rosters(self, tmp_path):
        assert load_catalog(str(tmp_path / "nope.json")) == {"teamA": [], "teamB": []}

    def test_broken_json_gives_empty_rosters(self, tmp_path, caplog):
        path = tmp_path / "players.json"
        path.write_text("{not json", encoding="utf-8")
        with caplog.at_level("WARNING"):
            assert load_catalog(str(path)) == {"teamA": [], "teamB": []}
        assert "Could not read player catalog" in caplog.text

    def test_bundled_catalog_has_full_sides(self):
        catalog = load_catalog(str(Path(__file__).parent.parent / "data" / "players.json"))
        assert len(catalog["teamA"]) == 11
        assert len(catalog["teamB"]) == 11
