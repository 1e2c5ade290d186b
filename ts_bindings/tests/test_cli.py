#!/usr/bin/env python3

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from ts_bindings.pipeline.config import EXPORT_DIR_ENV
from ts_bindings.ts_bindings import ts_bindings

FEEDS = Path(__file__).parent / "test_data" / "feeds"
API = str(FEEDS / "api_models.json")
AUTH = str(FEEDS / "auth.json")


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Test cases for the ts_bindings command"""

    def test_export_all(self, runner, tmp_path):
        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "bindings" / "api" / "models" / "User.ts").exists()
        assert (tmp_path / "bindings" / "auth" / "Role.ts").exists()
        assert "wrote" in result.output

    def test_selected_type(self, runner, tmp_path):
        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path), "--type", "Message"])

        assert result.exit_code == 0, result.output
        assert [p.name for p in (tmp_path / "bindings" / "api" / "models").iterdir()] == ["Message.ts"]

    def test_failed_type_exits_with_error(self, runner, tmp_path):
        result = runner.invoke(
            ts_bindings,
            [API, AUTH, "--base-dir", str(tmp_path), "-t", "api::models::Callback", "-t", "api::models::Message"],
        )

        assert result.exit_code == 1
        assert "api::models::Callback" in result.output
        assert (tmp_path / "bindings" / "api" / "models" / "Message.ts").exists()

    def test_export_dir_from_environment(self, runner, tmp_path):
        result = runner.invoke(
            ts_bindings,
            [API, AUTH, "--base-dir", str(tmp_path), "--flat"],
            env={EXPORT_DIR_ENV: "web/generated"},
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "web" / "generated" / "User.ts").exists()

    def test_export_dir_option(self, runner, tmp_path):
        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path), "--export-dir", "out"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "auth" / "Role.ts").exists()

    def test_esm(self, runner, tmp_path):
        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path), "--esm"])

        assert result.exit_code == 0, result.output
        content = (tmp_path / "bindings" / "api" / "models" / "User.ts").read_text()
        assert 'from "./UserId.js";' in content

    def test_stdout(self, runner, tmp_path):
        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path), "--stdout", "-t", "auth::Role"])

        assert result.exit_code == 0, result.output
        assert 'export type Role = "admin" | "member";' in result.output
        assert not (tmp_path / "bindings").exists()

    def test_conflict_aborts(self, runner, tmp_path):
        existing = tmp_path / "bindings" / "Role.ts"
        existing.parent.mkdir(parents=True)
        existing.write_text("export type Role = string;\n")

        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path), "--flat"])

        assert result.exit_code == 1
        assert "conflicts with" in result.output
        assert existing.read_text() == "export type Role = string;\n"
        assert not (tmp_path / "bindings" / "User.ts").exists()

    def test_force(self, runner, tmp_path):
        existing = tmp_path / "bindings" / "Role.ts"
        existing.parent.mkdir(parents=True)
        existing.write_text("export type Role = string;\n")

        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path), "--flat", "--force"])

        assert result.exit_code == 0, result.output
        assert "auth::Role" in existing.read_text()

    def test_config_file(self, runner, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"emit_docs": False, "output": {"export_dir": "from_config", "layout": "flat"}}))

        result = runner.invoke(ts_bindings, [API, AUTH, "--base-dir", str(tmp_path), "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "/**" not in (tmp_path / "from_config" / "User.ts").read_text()

    def test_invalid_feed(self, runner, tmp_path):
        feed = tmp_path / "broken.json"
        feed.write_text(json.dumps({"module": "m", "types": [{"name": "X", "kind": "trait"}]}))

        result = runner.invoke(ts_bindings, [str(feed)])

        assert result.exit_code == 1
        assert "trait" in result.output


if __name__ == "__main__":
    pytest.main([__file__])
