"""Integration tests for configuration module."""

import json
from pathlib import Path

import pytest

from app.config import (
    ConfigurationError,
    InputShapeError,
    RunConfig,
    SourceConfig,
    load_config,
    parse_run_config,
    validate_config_file,
)
from app.config.environment import DEFAULT_DATABASE_URL, load_environment_config
from app.config.validators import check_for_warnings
from app.domain.models import SourceType

# Test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestConfigurationLoading:
    """Test configuration loading from YAML files and the environment."""

    def test_load_valid_config(self, mock_env_vars):
        """Test loading a configuration mixing camelCase and snake_case keys."""
        run_config, env_config = load_config(FIXTURES_DIR / "valid_config.yaml")

        assert run_config.organizations == ["Acme GmbH", "Widget Works Inc."]
        assert run_config.region == "DE"
        assert run_config.max_contacts_per_org == 3
        assert run_config.target_roles == ["CEO", "CTO"]
        assert run_config.max_retries == 2
        assert run_config.min_domain_delay_seconds == 0.5
        assert run_config.logging.level == "DEBUG"
        assert run_config.logging.format == "json"
        assert run_config.output.summary_path == "data/summary.json"
        assert [s.type for s in run_config.get_enabled_sources()] == ["linkedin"]
        assert env_config.database_url == DEFAULT_DATABASE_URL

    def test_load_minimal_config(self, mock_env_vars):
        """Test loading a minimal configuration with defaults."""
        run_config, _ = load_config(FIXTURES_DIR / "minimal_config.yaml")

        assert run_config.organizations == ["Acme GmbH"]
        assert run_config.max_contacts_per_org == 2
        assert run_config.target_roles[0] == "CEO"
        assert run_config.sources == []
        assert run_config.max_concurrency == 2
        assert run_config.min_domain_delay_ms == 1000
        assert run_config.output.results_path is None

    def test_inline_input_from_environment(self, mock_env_vars):
        mock_env_vars.setenv(
            "CONTACT_FINDER_INPUT",
            json.dumps({"organizations": ["Acme GmbH"], "maxContactsPerOrg": 1}),
        )

        run_config, env_config = load_config()

        assert run_config.organizations == ["Acme GmbH"]
        assert run_config.max_contacts_per_org == 1
        assert env_config.inline_input is not None

    def test_inline_input_invalid_json(self, mock_env_vars):
        mock_env_vars.setenv("CONTACT_FINDER_INPUT", "{not json")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config()

        assert "CONTACT_FINDER_INPUT" in str(exc_info.value)

    def test_explicit_path_wins_over_inline_input(self, mock_env_vars):
        mock_env_vars.setenv("CONTACT_FINDER_INPUT", json.dumps({"organizations": ["Other"]}))

        run_config, _ = load_config(FIXTURES_DIR / "minimal_config.yaml")

        assert run_config.organizations == ["Acme GmbH"]

    def test_config_file_not_found(self, mock_env_vars):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(Path("nonexistent_config.yaml"))

        assert "not found" in str(exc_info.value)

    def test_no_config_anywhere(self, mock_env_vars, tmp_path):
        mock_env_vars.chdir(tmp_path)

        with pytest.raises(ConfigurationError) as exc_info:
            load_config()

        assert "Configuration not found" in str(exc_info.value)

    def test_default_config_file_in_cwd(self, mock_env_vars, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({"organizations": ["Globex"]}), encoding="utf-8")
        mock_env_vars.chdir(tmp_path)

        run_config, _ = load_config()

        assert run_config.organizations == ["Globex"]

    def test_invalid_yaml_syntax(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("organizations: [Acme\n  bad: : :")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)

        assert "Failed to parse" in str(exc_info.value)


class TestConfigurationValidation:
    """Test validation of the run configuration."""

    def test_missing_organizations(self):
        with pytest.raises(InputShapeError) as exc_info:
            parse_run_config({"region": "DE"})

        assert "organizations" in str(exc_info.value)

    def test_blank_organizations(self):
        with pytest.raises(InputShapeError):
            parse_run_config({"organizations": ["  ", ""]})

    def test_empty_config(self):
        with pytest.raises(InputShapeError):
            parse_run_config(None)

    def test_non_mapping_config(self):
        with pytest.raises(ConfigurationError):
            parse_run_config(["Acme GmbH"])

    def test_organizations_are_trimmed(self):
        config = parse_run_config({"organizations": [" Acme GmbH ", "", "Globex"]})
        assert config.organizations == ["Acme GmbH", "Globex"]

    def test_max_contacts_bounds(self):
        with pytest.raises(ConfigurationError):
            parse_run_config({"organizations": ["Acme"], "max_contacts_per_org": 0})

    def test_invalid_source_type(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_run_config({"organizations": ["Acme"], "sources": [{"type": "fax"}]})

        assert "sources" in str(exc_info.value)

    def test_duplicate_sources(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_run_config(
                {"organizations": ["Acme"], "sources": [{"type": "website"}, {"type": "website"}]}
            )

        assert "Duplicate source" in str(exc_info.value)

    def test_invalid_collector_reference(self):
        with pytest.raises(ConfigurationError):
            parse_run_config(
                {"organizations": ["Acme"], "sources": [{"type": "website", "collector": "scraper"}]}
            )

    def test_custom_collector_reference(self):
        config = parse_run_config(
            {
                "organizations": ["Acme"],
                "sources": [{"type": "website", "collector": "mypkg.collectors:SiteCollector"}],
            }
        )
        assert config.sources[0].collector == "mypkg.collectors:SiteCollector"

    def test_blank_region_means_no_filter(self):
        assert parse_run_config({"organizations": ["Acme"], "region": "  "}).region is None


class TestSourceRegions:
    """Test per-source region filtering."""

    def test_default_regions(self):
        assert SourceConfig(type="xing").effective_regions() == ["DE", "AT", "CH"]
        assert SourceConfig(type="linkedin").effective_regions() == []

    def test_serves_region(self):
        xing = SourceConfig(type="xing")

        assert xing.serves_region("de")
        assert not xing.serves_region("US")
        assert xing.serves_region(None)

    def test_explicit_regions_override_default(self):
        registry = SourceConfig(type="registry", regions=["us", " "])

        assert registry.effective_regions() == ["US"]
        assert registry.serves_region("US")
        assert not registry.serves_region("DE")

    def test_enabled_sources_follow_region(self):
        config = RunConfig(
            organizations=["Acme"],
            region="US",
            sources=[{"type": "xing"}, {"type": "website"}],
        )

        assert [s.type for s in config.get_enabled_sources()] == [SourceType.WEBSITE.value]


class TestEnvironmentVariables:
    """Test environment variable validation."""

    def test_defaults(self, mock_env_vars):
        env_config = load_environment_config()

        assert env_config.log_level is None
        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.environment == "local"

    def test_log_level_normalized(self, mock_env_vars):
        mock_env_vars.setenv("LOG_LEVEL", "debug")
        assert load_environment_config().log_level == "DEBUG"

    def test_invalid_log_level(self, mock_env_vars):
        mock_env_vars.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert "LOG_LEVEL" in str(exc_info.value)

    def test_empty_database_url(self, mock_env_vars):
        mock_env_vars.setenv("DATABASE_URL", "  ")

        with pytest.raises(ConfigurationError):
            load_environment_config()


class TestConfigurationHelpers:
    """Test warning checks and the config file validator."""

    def test_warnings(self):
        config = RunConfig(
            organizations=["Acme", "acme"],
            target_roles=[],
            min_domain_delay_ms=0,
            sources=[{"type": "website", "enabled": False}],
        )

        warnings = check_for_warnings(config)

        assert any("disabled" in w for w in warnings)
        assert any("No source is enabled" in w for w in warnings)
        assert any("target_roles is empty" in w for w in warnings)
        assert any("more than once" in w for w in warnings)
        assert any("min_domain_delay_ms" in w for w in warnings)

    def test_load_config_emits_warnings(self, mock_env_vars):
        with pytest.warns(UserWarning, match="No source is enabled"):
            load_config(FIXTURES_DIR / "minimal_config.yaml")

    def test_validate_config_file_utility(self, capsys):
        assert validate_config_file(FIXTURES_DIR / "valid_config.yaml") is True
        assert "is valid" in capsys.readouterr().out

    def test_validate_config_file_reports_errors(self, tmp_path, capsys):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("region: DE\n")

        assert validate_config_file(config_file) is False
        assert "validation failed" in capsys.readouterr().out
