"""
Tests for catalogue persistence — load, save, atomic write, recovery.
"""

import json
from pathlib import Path

import pytest

from jswitch.core.errors import PersistenceError
from jswitch.core.models.catalogue import Catalogue
from jswitch.core.models.installation import Installation
from jswitch.core.models.settings import Settings
from jswitch.core.persistence.catalogue_file import (
    DEFAULT_CATALOGUE_FILE,
    load_catalogue,
    resolve_catalogue_path,
    save_catalogue,
)


def _sample() -> Catalogue:
    return Catalogue(
        installations=[
            Installation(name="temurin-17", path="/opt/temurin-17", version="17.0.9", active=True),
            Installation(name="zulu-8", path="/opt/zulu-8", version="1.8.0_462"),
        ]
    )


class TestLoadCatalogue:
    def test_missing_file(self, tmp_path: Path):
        catalogue = load_catalogue(tmp_path / "nope.json")
        assert catalogue.installations == []

    def test_corrupt_json(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        path.write_text("{not json")
        assert load_catalogue(path).installations == []

    def test_undecodable_bytes(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        path.write_bytes(b"\xff\xfe{garbage")
        assert load_catalogue(path).installations == []

    def test_wrong_shape(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        path.write_text(json.dumps({"installations": [{"name": "no path"}]}))
        assert load_catalogue(path).installations == []

    def test_not_an_object(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        path.write_text("[]")
        assert load_catalogue(path).installations == []


class TestSaveCatalogue:
    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        save_catalogue(_sample(), path)

        loaded = load_catalogue(path)
        assert [r.name for r in loaded.installations] == ["temurin-17", "zulu-8"]
        assert loaded.installations[0].version == "17.0.9"
        assert loaded.installations[0].active is True

    def test_creates_parent_dirs(self, tmp_path: Path):
        path = tmp_path / "a" / "b" / "catalogue.json"
        save_catalogue(Catalogue(), path)
        assert path.is_file()

    def test_valid_json_on_disk(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        save_catalogue(_sample(), path)
        data = json.loads(path.read_text())
        assert data["schema_version"] == 1
        assert len(data["installations"]) == 2

    def test_touches_updated_at(self, tmp_path: Path):
        catalogue = Catalogue(updated_at="2000-01-01T00:00:00+00:00")
        save_catalogue(catalogue, tmp_path / "catalogue.json")
        assert catalogue.updated_at != "2000-01-01T00:00:00+00:00"

    def test_overwrites_whole_file(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        save_catalogue(_sample(), path)
        save_catalogue(Catalogue(), path)
        assert load_catalogue(path).installations == []

    def test_no_temp_files_left(self, tmp_path: Path):
        save_catalogue(_sample(), tmp_path / "catalogue.json")
        assert list(tmp_path.glob(".catalogue_*")) == []

    def test_unwritable_raises(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(PersistenceError):
            save_catalogue(_sample(), blocker / "catalogue.json")

    def test_unicode_paths(self, tmp_path: Path):
        path = tmp_path / "catalogue.json"
        catalogue = Catalogue(installations=[Installation(name="jdk", path="/opt/Jävä/jdk")])
        save_catalogue(catalogue, path)
        assert load_catalogue(path).installations[0].path == "/opt/Jävä/jdk"


class TestCataloguePath:
    def test_from_settings(self, tmp_path: Path):
        settings = Settings(catalogue_path=str(tmp_path / "mine.json"))
        assert resolve_catalogue_path(settings) == tmp_path / "mine.json"

    def test_default_in_user_config_dir(self):
        path = resolve_catalogue_path(Settings())
        assert path.name == DEFAULT_CATALOGUE_FILE
        assert path.parent.name == "jswitch"
