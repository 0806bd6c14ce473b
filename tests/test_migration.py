"""Tests for config migration."""
import pytest
from funrotate.migration import migrate_config
from funrotate.policy import ConfigError

class TestMigration:
    def test_v1_to_v2(self):
        v1_config = {
            "version": 1,
            "files": [{"path": "a.log", "strategy": "copy"}],
        }
        result = migrate_config(v1_config)
        assert result["version"] == 2
        assert result["files"][0]["strategy"] == "copytruncate"

    def test_preserves_other_strategies(self):
        v1_config = {"version": 1, "files": [{"path": "a.log", "strategy": "nocopytruncate"}]}
        result = migrate_config(v1_config)
        assert result["files"][0]["strategy"] == "nocopytruncate"

    def test_does_not_mutate_input(self):
        record = {"path": "a.log", "strategy": "copy"}
        migrate_config({"version": 1, "files": [record]})
        assert record["strategy"] == "copy"

    def test_adds_files_key(self):
        result = migrate_config({"version": 1})
        assert result["files"] == []

    def test_already_v2(self):
        v2_config = {"version": 2, "files": [{"path": "a.log", "strategy": "copy"}]}
        result = migrate_config(v2_config)
        assert result["files"][0]["strategy"] == "copy"

    def test_no_version_key(self):
        result = migrate_config({"files": []})
        assert result["version"] == 2

    @pytest.mark.parametrize("version", ["2", 1.5, None, True])
    def test_non_integer_version(self, version):
        with pytest.raises(ConfigError, match="version"):
            migrate_config({"version": version, "files": []})
