"""Unit tests for the main entry point.

Tests the main() function including:
- Configuration loading with log level priority (CLI > env > config)
- --check-config mode
- A full run against a file collector and an in-memory database
- Summary and results files
- Exit code handling
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from app.config.environment import EnvironmentConfig
from app.config.models import RunConfig
from app.main import load_runtime_config, main


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put the original handlers back."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def run_env(mock_env_vars):
    """Point the CLI at an in-memory database."""
    mock_env_vars.setenv("DATABASE_URL", "sqlite:///:memory:")
    return mock_env_vars


@pytest.fixture
def config_file(tmp_path):
    candidates = tmp_path / "candidates.yaml"
    candidates.write_text(
        """
Acme GmbH:
  - firstName: Anna
    lastName: Mueller
    email: a.mueller@acme.com
    jobTitle: CTO
  - firstName: Team
    lastName: Support
    email: info@acme.com
    jobTitle: Support
""",
        encoding="utf-8",
    )
    config = tmp_path / "config.yaml"
    config.write_text(
        f"""
organizations:
  - Acme GmbH
max_contacts_per_org: 2
target_roles: [CTO, CIO]
min_domain_delay_ms: 0
sources:
  - type: website
    collector: file
    options:
      path: {candidates}
output:
  results_path: {tmp_path / "out" / "results.jsonl"}
  summary_path: {tmp_path / "out" / "summary.json"}
""",
        encoding="utf-8",
    )
    return config


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    def _mock_load(self, env_level=None, config_level="WARNING"):
        run_config = RunConfig(organizations=["Acme"], logging={"level": config_level})
        return run_config, EnvironmentConfig(log_level=env_level)

    def test_cli_level_wins(self):
        with patch("app.main.load_config", return_value=self._mock_load(env_level="INFO")):
            _, env_config = load_runtime_config(Path("config.yaml"), "DEBUG")

        assert env_config.log_level == "DEBUG"

    def test_env_level_beats_config(self):
        with patch("app.main.load_config", return_value=self._mock_load(env_level="ERROR")):
            _, env_config = load_runtime_config(Path("config.yaml"), None)

        assert env_config.log_level == "ERROR"

    def test_config_level_used_last(self):
        with patch("app.main.load_config", return_value=self._mock_load()):
            _, env_config = load_runtime_config(Path("config.yaml"), None)

        assert env_config.log_level == "WARNING"


class TestCheckConfig:
    """Test --check-config mode."""

    def test_valid_file(self, config_file, capsys):
        assert main(["--config", str(config_file), "--check-config"]) == 0
        assert "is valid" in capsys.readouterr().out

    def test_invalid_file(self, tmp_path, capsys):
        bad = tmp_path / "bad.yaml"
        bad.write_text("region: DE\n")

        assert main(["--config", str(bad), "--check-config"]) == 1

    def test_inline_input(self, mock_env_vars, capsys):
        mock_env_vars.setenv("CONTACT_FINDER_INPUT", json.dumps({"organizations": ["Acme", "Globex"]}))

        assert main(["--check-config"]) == 0
        assert "2 organization(s)" in capsys.readouterr().out


class TestMainRun:
    """Test full runs through main()."""

    def test_successful_run(self, run_env, config_file, tmp_path, capsys):
        exit_code = main(["--config", str(config_file), "--log-level", "WARNING"])

        assert exit_code == 0

        summary_line = capsys.readouterr().out.strip().splitlines()[-1]
        summary = json.loads(summary_line)
        assert summary["organizationsProcessed"] == 1
        assert summary["candidatesFound"] == 2
        assert summary["candidatesValid"] == 1
        assert summary["candidatesSaved"] == 1
        assert summary["errors"] == 0

        written = json.loads((tmp_path / "out" / "summary.json").read_text(encoding="utf-8"))
        assert written["runId"] == summary["runId"]

        results = (tmp_path / "out" / "results.jsonl").read_text(encoding="utf-8").splitlines()
        assert len(results) == 1
        record = json.loads(results[0])
        assert record["email"] == "a.mueller@acme.com"
        assert record["organization"] == "Acme"

    def test_missing_config_exits_nonzero(self, run_env, tmp_path, capsys):
        exit_code = main(["--config", str(tmp_path / "missing.yaml")])

        assert exit_code == 1
        assert "Configuration Error" in capsys.readouterr().err

    def test_missing_organizations_exits_nonzero(self, run_env, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("region: DE\n")

        assert main(["--config", str(config)]) == 1

    def test_bad_collector_options_exit_nonzero(self, run_env, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text(
            "organizations: [Acme]\nsources:\n  - type: website\n    collector: file\n"
        )

        assert main(["--config", str(config)]) == 1
        assert "Fatal error" in capsys.readouterr().err

    def test_database_failure_exits_nonzero(self, mock_env_vars, config_file):
        mock_env_vars.setenv("DATABASE_URL", "not a url")

        assert main(["--config", str(config_file)]) == 1

    def test_organization_errors_still_exit_zero(self, run_env, config_file):
        with patch("app.pipeline.runner.OrganizationPipeline.process", side_effect=RuntimeError("boom")):
            assert main(["--config", str(config_file)]) == 0
