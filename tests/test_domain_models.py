"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.domain.models import (
    ContactRecord,
    RankedCandidate,
    RawCandidate,
    RunSummary,
    SourceType,
    ValidatedCandidate,
    source_trust_rank,
)


def _validated(**overrides):
    data = {
        "organization": "Acme GmbH",
        "company": "Acme",
        "first_name": "Jan",
        "last_name": "Schmidt",
        "email": None,
        "phone": "+49301234567",
        "job_title": "CIO",
        "source": SourceType.WEBSITE,
        "is_valid": False,
        "violations": ("email.missing",),
    }
    data.update(overrides)
    return ValidatedCandidate(**data)


class TestSourceTrust:
    """Tests for source trust ranking."""

    def test_trust_order(self):
        """LinkedIn outranks website, which outranks XING and the registry."""
        assert source_trust_rank(SourceType.LINKEDIN) == 4
        assert source_trust_rank(SourceType.WEBSITE) == 3
        assert source_trust_rank(SourceType.XING) == 2
        assert source_trust_rank(SourceType.REGISTRY) == 1

    def test_accepts_string_value(self):
        assert source_trust_rank("linkedin") == 4

    def test_unknown_source_raises(self):
        with pytest.raises(ValueError):
            source_trust_rank("fax")


class TestRawCandidate:
    """Tests for RawCandidate model."""

    def test_accepts_camel_case_keys(self):
        """Collectors may hand over camelCase dicts."""
        candidate = RawCandidate.model_validate(
            {
                "organization": "Acme GmbH",
                "firstName": "Anna",
                "lastName": "Mueller",
                "jobTitle": "CTO",
                "profileUrl": "https://www.linkedin.com/in/anna-mueller",
                "source": "linkedin",
            }
        )

        assert candidate.first_name == "Anna"
        assert candidate.job_title == "CTO"
        assert candidate.source == SourceType.LINKEDIN

    def test_blank_strings_become_none(self):
        """Whitespace-only values count as absent."""
        candidate = RawCandidate(
            organization="Acme GmbH",
            source=SourceType.WEBSITE,
            email="   ",
            phone="",
            first_name=" Anna ",
        )

        assert candidate.email is None
        assert candidate.phone is None
        # Non-blank values are kept verbatim for the normalizer
        assert candidate.first_name == " Anna "

    def test_naive_extracted_at_is_utc(self):
        candidate = RawCandidate(
            organization="Acme GmbH",
            source=SourceType.WEBSITE,
            extracted_at=datetime(2026, 10, 18, 12, 0, 0),
        )

        assert candidate.extracted_at.tzinfo == timezone.utc

    def test_invalid_source_rejected(self):
        with pytest.raises(ValidationError):
            RawCandidate(organization="Acme GmbH", source="fax")

    def test_frozen(self):
        candidate = RawCandidate(organization="Acme GmbH", source=SourceType.WEBSITE)
        with pytest.raises(ValidationError):
            candidate.email = "x@acme.com"


class TestBackfillEligibility:
    """Tests for ValidatedCandidate.backfill_eligible."""

    def test_missing_email_with_phone_is_eligible(self):
        assert _validated().backfill_eligible

    def test_missing_phone_is_not_eligible(self):
        assert not _validated(phone=None).backfill_eligible

    def test_additional_violation_is_not_eligible(self):
        """A record failing anything besides the email is not backfill material."""
        candidate = _validated(violations=("email.missing", "last_name.missing"), last_name=None)
        assert not candidate.backfill_eligible

    def test_valid_candidate_is_not_eligible(self):
        candidate = _validated(email="j.schmidt@acme.com", is_valid=True, violations=())
        assert not candidate.backfill_eligible


class TestContactRecord:
    """Tests for ContactRecord construction and serialization."""

    def _ranked(self, **overrides):
        data = {
            "organization": "Acme GmbH",
            "company": "Acme",
            "first_name": "Jan",
            "last_name": "Schmidt",
            "email": "j.schmidt@acme.com",
            "job_title": "CIO",
            "source": SourceType.LINKEDIN,
            "is_valid": True,
            "violations": (),
            "score": 996,
            "source_rank": 4,
        }
        data.update(overrides)
        return RankedCandidate(**data)

    def test_from_ranked_uses_company_name(self):
        record = ContactRecord.from_ranked(self._ranked(), "2026-10-18T12:00:00Z")

        assert record.organization == "Acme"
        assert record.score == 996
        assert record.backfilled is False
        assert record.extracted_at == "2026-10-18T12:00:00Z"

    def test_from_ranked_prefers_collector_timestamp(self):
        extracted = datetime(2026, 10, 1, 8, 30, 0, tzinfo=timezone.utc)
        record = ContactRecord.from_ranked(
            self._ranked(extracted_at=extracted), "2026-10-18T12:00:00Z"
        )

        assert record.extracted_at == "2026-10-01T08:30:00Z"

    def test_to_output_dict_camel_case(self):
        record = ContactRecord.from_ranked(self._ranked(), "2026-10-18T12:00:00Z")
        output = record.to_output_dict()

        assert output["firstName"] == "Jan"
        assert output["lastName"] == "Schmidt"
        assert output["jobTitle"] == "CIO"
        assert output["source"] == "linkedin"
        assert output["organization"] == "Acme"
        assert "score" not in output
        assert set(output) == {
            "organization",
            "location",
            "salutation",
            "firstName",
            "lastName",
            "email",
            "phone",
            "jobTitle",
            "profileUrl",
            "source",
            "extractedAt",
        }


class TestRunSummary:
    """Tests for RunSummary."""

    def test_duration_and_output(self):
        started = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
        summary = RunSummary(
            run_id="run-1",
            started_at=started,
            finished_at=started + timedelta(seconds=12.5),
            organizations_total=3,
            organizations_processed=3,
            candidates_found=10,
            candidates_valid=6,
            candidates_saved=4,
            errors=1,
            collector_failures=2,
        )

        assert summary.duration_seconds == 12.5
        output = summary.to_output_dict()
        assert output["runId"] == "run-1"
        assert output["startedAt"] == "2026-10-18T12:00:00Z"
        assert output["durationSeconds"] == 12.5
        assert output["candidatesSaved"] == 4
        assert output["collectorFailures"] == 2
