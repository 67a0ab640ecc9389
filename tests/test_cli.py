"""Tests for the recordset-vcr CLI."""

import json

import pytest
from click.testing import CliRunner

from recordset_vcr.cli import cli


# ===== Helpers =====


def _write_recordset(root, name, manifest):
    folder = root / name
    folder.mkdir(parents=True)
    (folder / "config.json").write_text(json.dumps(manifest))
    return folder


@pytest.fixture
def populated_root(storage_root):
    folder = _write_recordset(
        storage_root,
        "session1",
        {
            "general": {"speed": {"delay": 0}},
            "requests": [
                {
                    "req": {"method": "GET", "url": "/a"},
                    "res": {
                        "status": 200,
                        "headers": {"content-type": "application/json"},
                        "file": "a.json",
                    },
                },
                {"req": {"method": "POST", "url": "/b"}, "res": {"status": 201}},
            ],
        },
    )
    (folder / "a.json").write_bytes(b'{"ok": true}')
    _write_recordset(storage_root, "session2", {"requests": [{"req": {}, "res": {}}]})
    (storage_root / "empty").mkdir()
    return storage_root


# ===== list =====


class TestListCommand:
    """Tests for `recordset-vcr list`."""

    def test_lists_recordsets(self, populated_root):
        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(populated_root), "list"])

        assert result.exit_code == 0
        assert "session1" in result.output
        assert "session2" in result.output
        assert "empty" not in result.output

    def test_no_recordsets(self, storage_root):
        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(storage_root), "list"])

        assert result.exit_code == 0
        assert "No recordsets found" in result.output

    def test_missing_root(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(tmp_path / "nope"), "list"])
        assert result.exit_code != 0

    def test_folder_from_environment(self, populated_root):
        runner = CliRunner()
        result = runner.invoke(cli, ["list"], env={"RECORDSET_VCR_FOLDER": str(populated_root)})

        assert result.exit_code == 0
        assert "session1" in result.output


# ===== inspect =====


class TestInspectCommand:
    """Tests for `recordset-vcr inspect`."""

    def test_table_output(self, populated_root):
        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(populated_root), "inspect", "session1"])

        assert result.exit_code == 0
        assert "session1" in result.output
        assert "Exchanges: 2" in result.output
        assert "speed" in result.output
        assert "POST" in result.output

    def test_json_output(self, populated_root):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--folder", str(populated_root), "inspect", "session1", "--format", "json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data["requests"]) == 2
        assert data["requests"][0]["res"]["body"] == '{"ok": true}'

    def test_missing_recordset(self, populated_root):
        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(populated_root), "inspect", "nope"])

        assert result.exit_code != 0
        assert "not found" in result.output

    def test_malformed_recordset(self, storage_root):
        _write_recordset(storage_root, "bad", ["not", "an", "object"])
        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(storage_root), "inspect", "bad"])

        assert result.exit_code != 0
        assert "Invalid manifest" in result.output


# ===== load-all =====


class TestLoadAllCommand:
    """Tests for `recordset-vcr load-all`."""

    def test_reports_totals(self, populated_root):
        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(populated_root), "load-all"])

        assert result.exit_code == 0
        assert "Loaded 2 recordsets for a total of 3 requests" in result.output

    def test_failure_exits_non_zero(self, populated_root):
        (populated_root / "zz-bad").mkdir()
        (populated_root / "zz-bad" / "config.json").write_text("{")

        runner = CliRunner()
        result = runner.invoke(cli, ["--folder", str(populated_root), "load-all"])

        assert result.exit_code != 0
        assert "zz-bad" in result.output


# ===== misc =====


class TestCliGroup:
    """Tests for the top-level group."""

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("list", "inspect", "load-all", "serve"):
            assert command in result.output
