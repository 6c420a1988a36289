"""Unit tests for source collectors.

Tests cover:
- BaseCollector construction, candidate building and HTTP error mapping
- FileCollector lookups
- JsonEndpointCollector URL building and response shapes
- Collector factory resolution
- Retry classification of collector errors
"""

from unittest.mock import Mock, patch

import pytest
import requests

from app.collectors import (
    CollectorConfigurationError,
    CollectorHTTPError,
    CollectorResponseError,
    CollectorTimeoutError,
    FileCollector,
    JsonEndpointCollector,
    build_collectors,
    get_collector,
    is_retryable,
    resolve_collector_class,
)
from app.config.models import AdvancedConfig, RunConfig, SourceConfig
from app.domain.models import SourceType
from tests.helpers import ScriptedCollector


@pytest.fixture
def candidates_file(tmp_path):
    path = tmp_path / "candidates.yaml"
    path.write_text(
        """
Acme GmbH:
  - firstName: Anna
    lastName: Mueller
    email: a.mueller@acme.com
    jobTitle: CTO
  - firstName: Jan
    lastName: Schmidt
    email: j.schmidt@acme.com
    jobTitle: CIO
    extractedAt: "2026-10-01T08:00:00Z"
Widget Works Inc.:
  - firstName: Maria
    lastName: Lopez
    phone: "+1 415 555 0142"
    jobTitle: Head of Operations
""",
        encoding="utf-8",
    )
    return path


def _response(status_code=200, json_data=None, reason="OK"):
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


class TestBaseCollector:
    """Tests for shared collector behavior."""

    def test_timeout_bounds(self):
        with pytest.raises(CollectorConfigurationError):
            ScriptedCollector(timeout=0)
        with pytest.raises(CollectorConfigurationError):
            ScriptedCollector(timeout=301)

    def test_empty_user_agent_rejected(self):
        with pytest.raises(CollectorConfigurationError):
            ScriptedCollector(user_agent="  ")

    def test_name_includes_source(self):
        assert ScriptedCollector(source="xing").name == "xing:ScriptedCollector"

    def test_build_candidates_forces_organization_and_source(self):
        collector = ScriptedCollector(
            source=SourceType.LINKEDIN,
            items=[{"firstName": "Anna", "organization": "Other", "source": "registry"}],
        )

        candidates = collector.collect("Acme GmbH")

        assert len(candidates) == 1
        assert candidates[0].organization == "Acme GmbH"
        assert candidates[0].source == SourceType.LINKEDIN
        assert candidates[0].extracted_at is not None

    def test_malformed_items_skipped(self):
        collector = ScriptedCollector(
            items=["not a mapping", {"firstName": "Anna", "extractedAt": "not a date"}, {"lastName": "Ok"}]
        )

        candidates = collector.collect("Acme GmbH")

        assert [c.last_name for c in candidates] == ["Ok"]

    def test_truncates_to_max_candidates(self):
        collector = ScriptedCollector(
            items=[{"firstName": f"Person{i}"} for i in range(5)], max_candidates=2
        )

        assert len(collector.collect("Acme GmbH")) == 2


class TestFetchJson:
    """Tests for BaseCollector._fetch_json error mapping."""

    @pytest.fixture
    def collector(self):
        return JsonEndpointCollector(
            source=SourceType.WEBSITE, url_template="https://api.acme.com/{organization}"
        )

    def test_returns_parsed_json(self, collector):
        with patch.object(requests.Session, "get", return_value=_response(json_data=[{"a": 1}])):
            assert collector._fetch_json("https://api.acme.com/x") == [{"a": 1}]

    def test_waits_on_rate_limiter(self, collector):
        collector.rate_limiter = Mock()
        with patch.object(requests.Session, "get", return_value=_response(json_data=[])):
            collector._fetch_json("https://www.acme.com/team")

        collector.rate_limiter.wait_for.assert_called_once_with("acme.com")

    def test_http_error_status(self, collector):
        with patch.object(
            requests.Session, "get", return_value=_response(404, reason="Not Found")
        ):
            with pytest.raises(CollectorHTTPError) as exc_info:
                collector._fetch_json("https://api.acme.com/x")

        assert exc_info.value.status_code == 404

    def test_timeout(self, collector):
        with patch.object(requests.Session, "get", side_effect=requests.exceptions.Timeout()):
            with pytest.raises(CollectorTimeoutError):
                collector._fetch_json("https://api.acme.com/x")

    def test_connection_error(self, collector):
        with patch.object(
            requests.Session, "get", side_effect=requests.exceptions.ConnectionError("refused")
        ):
            with pytest.raises(CollectorHTTPError) as exc_info:
                collector._fetch_json("https://api.acme.com/x")

        assert exc_info.value.status_code == 0

    def test_invalid_json(self, collector):
        with patch.object(
            requests.Session, "get", return_value=_response(json_data=ValueError("bad json"))
        ):
            with pytest.raises(CollectorResponseError):
                collector._fetch_json("https://api.acme.com/x")


class TestFileCollector:
    """Tests for FileCollector."""

    def test_requires_path(self):
        with pytest.raises(CollectorConfigurationError):
            FileCollector(source=SourceType.WEBSITE)

    def test_exact_lookup(self, candidates_file):
        collector = FileCollector(path=str(candidates_file), source=SourceType.WEBSITE)

        candidates = collector.collect("Acme GmbH")

        assert [c.first_name for c in candidates] == ["Anna", "Jan"]
        assert candidates[1].extracted_at.isoformat() == "2026-10-01T08:00:00+00:00"

    def test_case_insensitive_lookup(self, candidates_file):
        collector = FileCollector(path=str(candidates_file), source=SourceType.WEBSITE)
        assert len(collector.collect("acme gmbh")) == 2

    def test_lookup_without_legal_suffix(self, candidates_file):
        collector = FileCollector(path=str(candidates_file), source=SourceType.WEBSITE)

        candidates = collector.collect("Acme AG")

        assert len(candidates) == 2
        assert candidates[0].organization == "Acme AG"

    def test_unknown_organization(self, candidates_file):
        collector = FileCollector(path=str(candidates_file), source=SourceType.WEBSITE)
        assert collector.collect("Initech") == []

    def test_organizations_wrapper(self, tmp_path):
        path = tmp_path / "wrapped.yaml"
        path.write_text("organizations:\n  Acme GmbH:\n    - firstName: Anna\n", encoding="utf-8")

        collector = FileCollector(path=str(path), source=SourceType.WEBSITE)

        assert len(collector.collect("Acme GmbH")) == 1

    def test_missing_file(self, tmp_path):
        collector = FileCollector(path=str(tmp_path / "missing.yaml"), source=SourceType.WEBSITE)
        with pytest.raises(CollectorConfigurationError):
            collector.collect("Acme GmbH")

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        collector = FileCollector(path=str(path), source=SourceType.WEBSITE)

        with pytest.raises(CollectorResponseError):
            collector.collect("Acme GmbH")


class TestJsonEndpointCollector:
    """Tests for JsonEndpointCollector."""

    def test_requires_absolute_template(self):
        with pytest.raises(CollectorConfigurationError):
            JsonEndpointCollector(source=SourceType.WEBSITE, url_template="/relative/{organization}")

    def test_build_url_quotes_placeholders(self):
        collector = JsonEndpointCollector(
            source=SourceType.WEBSITE,
            url_template="https://api.acme.com/orgs/{organization}?region={region}",
        )

        url = collector.build_url("Müller & Co GmbH", "DE")

        assert url == "https://api.acme.com/orgs/M%C3%BCller%20%26%20Co%20GmbH?region=DE"

    def test_unknown_placeholder(self):
        collector = JsonEndpointCollector(
            source=SourceType.WEBSITE, url_template="https://api.acme.com/{company}"
        )
        with pytest.raises(CollectorConfigurationError):
            collector.build_url("Acme")

    @pytest.mark.parametrize(
        "payload",
        [
            [{"firstName": "Anna", "email": "a.mueller@acme.com"}],
            {"contacts": [{"firstName": "Anna", "email": "a.mueller@acme.com"}]},
        ],
    )
    def test_collect_accepts_list_or_wrapper(self, payload):
        collector = JsonEndpointCollector(
            source=SourceType.WEBSITE, url_template="https://api.acme.com/{organization}"
        )
        with patch.object(collector, "_fetch_json", return_value=payload):
            candidates = collector.collect("Acme GmbH")

        assert len(candidates) == 1
        assert candidates[0].email == "a.mueller@acme.com"

    def test_collect_rejects_other_shapes(self):
        collector = JsonEndpointCollector(
            source=SourceType.WEBSITE, url_template="https://api.acme.com/{organization}"
        )
        with patch.object(collector, "_fetch_json", return_value={"items": []}):
            with pytest.raises(CollectorResponseError):
                collector.collect("Acme GmbH")


class TestFactory:
    """Tests for collector resolution and construction."""

    def test_resolve_builtin(self):
        assert resolve_collector_class("file") is FileCollector
        assert resolve_collector_class("http_json") is JsonEndpointCollector

    def test_resolve_import_path(self):
        assert resolve_collector_class("tests.helpers.fake_collector:ScriptedCollector") is ScriptedCollector

    def test_resolve_missing_module(self):
        with pytest.raises(CollectorConfigurationError):
            resolve_collector_class("no_such_module_xyz:Thing")

    def test_resolve_non_collector_class(self):
        with pytest.raises(CollectorConfigurationError):
            resolve_collector_class("app.domain.models:RawCandidate")

    def test_get_collector_passes_settings(self, candidates_file):
        source = SourceConfig(type="registry", collector="file", options={"path": str(candidates_file)})
        advanced = AdvancedConfig(http_request_timeout=15, user_agent="Test/1.0", max_candidates_per_source=5)
        limiter = Mock()

        collector = get_collector(source, advanced, limiter)

        assert isinstance(collector, FileCollector)
        assert collector.source == SourceType.REGISTRY
        assert collector.timeout == 15
        assert collector.user_agent == "Test/1.0"
        assert collector.max_candidates == 5
        assert collector.rate_limiter is limiter

    def test_get_collector_wraps_bad_options(self):
        source = SourceConfig(type="website", collector="file", options={"unknown": 1, "path": "x"})
        with pytest.raises(CollectorConfigurationError):
            get_collector(source, AdvancedConfig())

    def test_build_collectors_respects_enabled_and_region(self, candidates_file):
        config = RunConfig(
            organizations=["Acme GmbH"],
            region="US",
            sources=[
                {"type": "linkedin", "collector": "file", "options": {"path": str(candidates_file)}},
                {"type": "website", "enabled": False, "collector": "file", "options": {"path": str(candidates_file)}},
                {"type": "xing", "collector": "file", "options": {"path": str(candidates_file)}},
            ],
        )

        collectors = build_collectors(config)

        assert [c.source for c in collectors] == [SourceType.LINKEDIN]


class TestRetryClassification:
    """Tests for is_retryable."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (CollectorHTTPError("boom", status_code=503, url="u"), True),
            (CollectorHTTPError("slow down", status_code=429, url="u"), True),
            (CollectorHTTPError("timeout", status_code=408, url="u"), True),
            (CollectorHTTPError("refused", status_code=0, url="u"), True),
            (CollectorHTTPError("missing", status_code=404, url="u"), False),
            (CollectorHTTPError("forbidden", status_code=403, url="u"), False),
            (CollectorTimeoutError("slow", url="u"), True),
            (CollectorResponseError("garbled"), True),
            (CollectorConfigurationError("bad options"), False),
            (RuntimeError("third-party bug"), True),
        ],
    )
    def test_classification(self, error, expected):
        assert is_retryable(error) is expected
