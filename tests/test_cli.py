#!/usr/bin/env python3
"""
Tests for the field-relations command-line interface.

The CLI is run in a subprocess (``python -m field_relations.cli``) so exit
codes and stdout are checked exactly as a shell would see them.
"""
import json

import pytest

ITEM_XML = '<items><item name="Sword"/><item name="Shield"/><item name="Bow"/></items>'
DROP_XML = "<drops><drop item_name='sword'/><drop item_name='shield'/></drops>"


@pytest.fixture
def config_dir(tmp_path, write_file):
    write_file("data/item.xml", ITEM_XML)
    write_file("data/drop.xml", DROP_XML)
    return tmp_path / "data"


class TestAnalyzeCommand:
    """Test the analyze subcommand."""

    def test_text_output(self, run_cli, config_dir, tmp_path):
        result = run_cli(["analyze", str(config_dir)], cwd=str(tmp_path))
        assert result.returncode == 0, result.stderr
        assert "item.xml :: items/item/@name" in result.stdout
        assert "drop.xml :: drops/drop/@item_name" in result.stdout
        assert "matches=2" in result.stdout

    def test_json_output(self, run_cli, config_dir, tmp_path):
        result = run_cli(["analyze", str(config_dir), "--output-format", "json"], cwd=str(tmp_path))
        assert result.returncode == 0, result.stderr
        report = json.loads(result.stdout)
        (relationship,) = report["relationships"]
        assert relationship["match_count"] == 2
        assert relationship["source_file"] == "item.xml"
        assert report["metadata"]["sources_scanned"] == 2

    def test_thresholds_from_flags(self, run_cli, config_dir, tmp_path):
        result = run_cli(
            ["analyze", str(config_dir), "--min-match-count", "3", "--output-format", "json"],
            cwd=str(tmp_path),
        )
        assert result.returncode == 0, result.stderr
        assert json.loads(result.stdout)["relationships"] == []

    def test_settings_file(self, run_cli, config_dir, tmp_path, write_file):
        settings = write_file("strict.yml", "min_confidence: 0.9\n")
        result = run_cli(
            ["analyze", str(config_dir), "--config", settings, "--output-format", "json"],
            cwd=str(tmp_path),
        )
        assert result.returncode == 0, result.stderr
        assert json.loads(result.stdout)["metadata"]["thresholds"]["min_confidence"] == 0.9

    def test_missing_directory_exits_1(self, run_cli, tmp_path):
        result = run_cli(["analyze", str(tmp_path / "missing")], cwd=str(tmp_path))
        assert result.returncode == 1
        assert "Error" in result.stderr
        assert result.stdout == ""

    def test_invalid_threshold_exits_1(self, run_cli, config_dir, tmp_path):
        result = run_cli(["analyze", str(config_dir), "--min-confidence", "1.5"], cwd=str(tmp_path))
        assert result.returncode == 1

    def test_timeout_exits_130(self, run_cli, config_dir, tmp_path):
        result = run_cli(["analyze", str(config_dir), "--timeout", "0"], cwd=str(tmp_path))
        assert result.returncode == 130
        assert result.stdout == ""


class TestConfigCommand:
    def test_init_then_show(self, run_cli, tmp_path):
        result = run_cli(["config", "--init", "field-relations.yml"], cwd=str(tmp_path))
        assert result.returncode == 0, result.stderr
        assert (tmp_path / "field-relations.yml").exists()

        shown = run_cli(["config", "--show"], cwd=str(tmp_path))
        assert shown.returncode == 0
        assert "min_match_count: 2" in shown.stdout
        assert "Config file: field-relations.yml" in shown.stdout

    def test_init_refuses_to_overwrite(self, run_cli, tmp_path, write_file):
        write_file("field-relations.yml", "min_match_count: 9\n")
        result = run_cli(["config", "--init", "field-relations.yml"], cwd=str(tmp_path))
        assert result.returncode == 1
        assert "already exists" in result.stderr

    def test_version(self, run_cli, tmp_path):
        result = run_cli(["config", "--version"], cwd=str(tmp_path))
        assert result.returncode == 0
        assert "field-relations version" in result.stdout


def test_no_command_prints_help(run_cli, tmp_path):
    result = run_cli([], cwd=str(tmp_path))
    assert result.returncode == 1
    assert "analyze" in result.stdout
