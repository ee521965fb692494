# tests/test_config.py
"""Tests for LintConfig: validation, JSON loading, discovery and merging."""

import json

import pytest

from formatlint.config import CONFIG_FILE_NAME, LintConfig
from formatlint.errors import ConfigError, FormatLintError


class TestDefaults:

    def test_defaults(self):
        config = LintConfig()
        assert config.safety_net_slots == 1_000_000
        assert config.report_trivial_only_for_format is True
        assert config.extra_format_methods == []
        assert config.suppress == []
        assert config.output == "gcc"

    @pytest.mark.parametrize("kwargs", [
        {"safety_net_slots": 0},
        {"output": "xml"},
        {"extra_format_methods": ["Format"]},
        {"extra_format_methods": ["Log.Info."]},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            LintConfig(**kwargs)


class TestFromMapping:

    def test_full_mapping(self):
        config = LintConfig.from_mapping({
            "safety_net_slots": 10,
            "report_trivial_only_for_format": False,
            "extra_format_methods": ["Acme.Log.InfoFormat"],
            "suppress": ["S3457"],
            "output": "json",
        })
        assert config.safety_net_slots == 10
        assert config.report_trivial_only_for_format is False
        assert config.extra_format_methods == ["Acme.Log.InfoFormat"]
        assert config.suppress == ["S3457"]
        assert config.output == "json"

    def test_unknown_key(self):
        with pytest.raises(ConfigError) as excinfo:
            LintConfig.from_mapping({"colour": "red"}, source="cfg.json")
        assert "colour" in str(excinfo.value)

    @pytest.mark.parametrize("key,value", [
        ("safety_net_slots", "10"),
        ("safety_net_slots", True),
        ("report_trivial_only_for_format", 1),
        ("suppress", "S3457"),
        ("extra_format_methods", [1]),
        ("output", 3),
    ])
    def test_bad_types(self, key, value):
        with pytest.raises(ConfigError):
            LintConfig.from_mapping({key: value})

    def test_error_is_a_formatlint_error(self):
        with pytest.raises(FormatLintError):
            LintConfig.from_mapping({"output": "pdf"})


class TestLoad:

    def test_load(self, tmp_path):
        path = tmp_path / "lint.json"
        path.write_text(json.dumps({"suppress": ["S2275"]}), encoding="utf-8")
        assert LintConfig.load(path).suppress == ["S2275"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "lint.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            LintConfig.load(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "lint.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigError):
            LintConfig.load(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            LintConfig.load(tmp_path / "absent.json")


class TestDiscover:

    def test_defaults_without_file(self, tmp_path):
        assert LintConfig.discover(tmp_path) == LintConfig()

    def test_reads_file(self, tmp_path):
        (tmp_path / CONFIG_FILE_NAME).write_text('{"output": "summary"}', encoding="utf-8")
        assert LintConfig.discover(tmp_path).output == "summary"


class TestMerged:

    def test_none_values_ignored(self):
        config = LintConfig(output="json")
        assert config.merged(output=None, suppress=None) == config

    def test_overrides_applied(self):
        config = LintConfig().merged(output="summary", suppress=["S3457"])
        assert config.output == "summary"
        assert config.suppress == ["S3457"]

    def test_overrides_are_validated(self):
        with pytest.raises(ConfigError):
            LintConfig().merged(safety_net_slots=-1)
