"""Tests for configuration loading and validation."""

import json
from pathlib import Path

import pytest

from jd_organizer.exceptions import ConfigurationError
from jd_organizer.models.config import (
    Config,
    create_default_config,
    load_config,
    save_config,
    validate_config_dict,
)
from jd_organizer.models.operations import ConflictStrategy


class TestConfig:
    """Test the configuration model."""

    def test_defaults(self):
        config = Config.default()

        assert config.move.conflict_strategy is ConflictStrategy.RENAME
        assert config.move.max_unique_name_attempts == 100
        assert not config.move.verify_checksum
        assert config.rename.max_undo_logs == 10
        assert config.database_path.name == "organizer.db"

    def test_round_trip(self, tmp_path):
        path = tmp_path / "config" / "jd.json"
        config = Config(database_path=tmp_path / "my.db", undo_log_path=tmp_path / "undo.json")
        config.move.default_conflict_strategy = "skip"
        config.move.verify_checksum = True
        config.rename.max_undo_logs = 3

        save_config(config, path)
        loaded = load_config(path)

        assert loaded == config
        assert isinstance(loaded.database_path, Path)

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "jd.json"
        path.write_text(json.dumps({"move": {"stop_on_error": True}}))

        config = load_config(path)

        assert config.move.stop_on_error
        assert config.move.max_unique_name_attempts == 100
        assert config.rename.max_undo_logs == 10

    def test_create_default_config(self, tmp_path):
        path = tmp_path / "jd.json"
        create_default_config(path)
        assert load_config(path) == Config.default()

    def test_user_home_expanded(self, tmp_path):
        path = tmp_path / "jd.json"
        path.write_text(json.dumps({"database_path": "~/jd.db"}))
        assert load_config(path).database_path == Path.home() / "jd.db"


class TestConfigErrors:
    """Test configuration failures."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "jd.json"
        path.write_text("{")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_config(path)

    @pytest.mark.parametrize("data,location", [
        ({"move": {"default_conflict_strategy": "merge"}}, "move.default_conflict_strategy"),
        ({"move": {"max_unique_name_attempts": 0}}, "move.max_unique_name_attempts"),
        ({"rename": {"max_undo_logs": "ten"}}, "rename.max_undo_logs"),
        ({"colour": "blue"}, "root"),
    ])
    def test_schema_violations(self, data, location):
        with pytest.raises(ConfigurationError, match=f"at {location}"):
            validate_config_dict(data)
