"""Core domain models for candidate contacts and organization results.

This module defines the data structures used throughout the application:
- RawCandidate: contact candidate exactly as a collector emitted it
- NormalizedCandidate: candidate with canonical casing, whitespace and company name
- ValidatedCandidate: normalized candidate plus validity verdict and violated rules
- RankedCandidate: validated candidate plus priority score and source trust rank
- ContactRecord: the emitted output record
- OrganizationResult: the final, ordered contacts for one organization
- RunSummary: counters of one finished run
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.utils.timestamps import format_timestamp


class SourceType(str, Enum):
    """Information sources a collector can draw candidates from."""

    WEBSITE = "website"
    LINKEDIN = "linkedin"
    XING = "xing"
    REGISTRY = "registry"


# Highest trust first. Used only as a tie-break after role scoring.
SOURCE_TRUST_ORDER: Tuple[SourceType, ...] = (
    SourceType.LINKEDIN,
    SourceType.WEBSITE,
    SourceType.XING,
    SourceType.REGISTRY,
)


def source_trust_rank(source: SourceType) -> int:
    """Return the trust rank of a source (higher is more trusted).

    Args:
        source: Source identifier (enum member or its string value)

    Returns:
        Integer rank, len(SOURCE_TRUST_ORDER) for the most trusted source down to 1
    """
    source = SourceType(source)
    return len(SOURCE_TRUST_ORDER) - SOURCE_TRUST_ORDER.index(source)


OPTIONAL_TEXT_FIELDS = (
    "location",
    "salutation",
    "first_name",
    "last_name",
    "email",
    "phone",
    "job_title",
    "profile_url",
)


class RawCandidate(BaseModel):
    """Candidate contact as produced by a collector, before normalization.

    Absent values are None. A blank or whitespace-only string coming from a
    collector is treated as absent; any other value is kept verbatim, since
    trimming and casing belong to the normalizer.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        json_schema_extra={"example": {
            "organization": "Acme GmbH",
            "location": "Berlin",
            "salutation": "Frau",
            "first_name": "Anna",
            "last_name": "Mueller",
            "email": "a.mueller@acme.com",
            "phone": "+49 30 1234567",
            "job_title": "CTO",
            "profile_url": "https://www.linkedin.com/in/anna-mueller",
            "source": "website",
        }},
    )

    organization: str = Field(..., description="Organization name as given in the run input")
    location: Optional[str] = Field(None, description="Location of the contact or office")
    salutation: Optional[str] = Field(None, description="Salutation (Herr, Frau, Mr., ...)")
    first_name: Optional[str] = Field(None, description="Given name")
    last_name: Optional[str] = Field(None, description="Family name")
    email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Phone number")
    job_title: Optional[str] = Field(None, description="Job title / role")
    profile_url: Optional[str] = Field(None, description="Professional network profile URL")
    source: SourceType = Field(..., description="Source the candidate was collected from")
    extracted_at: Optional[datetime] = Field(None, description="When the collector found it (UTC)")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Opaque collector metadata"
    )

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat blank strings as absent values."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("extracted_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        if v is None:
            return None
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class NormalizedCandidate(RawCandidate):
    """Candidate with trimmed fields, lower-cased email and stripped phone.

    ``organization`` keeps the trimmed name as given; ``company`` is the same
    name with one trailing legal-entity suffix removed. ``company`` is always
    derived from ``organization``, never from a previous ``company`` value.
    """

    company: str = Field(..., description="Organization name without legal suffix")


class ValidatedCandidate(NormalizedCandidate):
    """Normalized candidate plus the validator's verdict.

    Validation never modifies the candidate fields; it only attaches the
    verdict and the identifiers of every rule the candidate violated.
    """

    is_valid: bool = Field(..., description="Whether every validation rule passed")
    violations: Tuple[str, ...] = Field(
        default_factory=tuple, description="Identifiers of violated rules"
    )

    @property
    def backfill_eligible(self) -> bool:
        """Whether this email-less candidate may be used to backfill results.

        True when the only reason the record is invalid is the missing email
        and a (validated) phone number is present.
        """
        return (
            not self.is_valid
            and self.email is None
            and self.phone is not None
            and self.violations == ("email.missing",)
        )


class RankedCandidate(ValidatedCandidate):
    """Validated candidate with its priority score and source trust rank."""

    score: int = Field(..., description="Priority score from role match / leadership bonus")
    source_rank: int = Field(..., description="Source trust rank used as tie-break")


class ContactRecord(BaseModel):
    """Emitted contact record for one organization."""

    model_config = ConfigDict(frozen=True)

    organization: str = Field(..., description="Normalized organization name")
    location: Optional[str] = None
    salutation: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = Field(None, description="Email address (None if backfilled)")
    phone: Optional[str] = None
    job_title: Optional[str] = None
    profile_url: Optional[str] = None
    source: SourceType
    score: int = 0
    backfilled: bool = False
    extracted_at: str = Field(..., description="Extraction timestamp (ISO 8601, UTC)")

    @classmethod
    def from_ranked(
        cls, candidate: RankedCandidate, extracted_at: str, backfilled: bool = False
    ) -> "ContactRecord":
        """Build an output record from a ranked candidate.

        Args:
            candidate: Ranked candidate to emit
            extracted_at: ISO 8601 timestamp to use when the collector supplied none
            backfilled: Whether the candidate came from the phone-only pool

        Returns:
            ContactRecord instance
        """
        if candidate.extracted_at is not None:
            extracted_at = format_timestamp(candidate.extracted_at)

        return cls(
            organization=candidate.company,
            location=candidate.location,
            salutation=candidate.salutation,
            first_name=candidate.first_name,
            last_name=candidate.last_name,
            email=candidate.email,
            phone=candidate.phone,
            job_title=candidate.job_title,
            profile_url=candidate.profile_url,
            source=candidate.source,
            score=candidate.score,
            backfilled=backfilled,
            extracted_at=extracted_at,
        )

    def to_output_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return {
            "organization": self.organization,
            "location": self.location,
            "salutation": self.salutation,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "jobTitle": self.job_title,
            "profileUrl": self.profile_url,
            "source": SourceType(self.source).value,
            "extractedAt": self.extracted_at,
        }


class OrganizationResult(BaseModel):
    """Final, ordered contacts for one organization. Emitted once."""

    model_config = ConfigDict(frozen=True)

    organization: str = Field(..., description="Organization name as given")
    company: str = Field(..., description="Normalized organization name")
    contacts: Tuple[ContactRecord, ...] = Field(default_factory=tuple)


class RunSummary(BaseModel):
    """Immutable snapshot of the run statistics, persisted once per run."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    started_at: datetime
    finished_at: datetime
    organizations_total: int = 0
    organizations_processed: int = 0
    candidates_found: int = 0
    candidates_valid: int = 0
    candidates_saved: int = 0
    errors: int = 0
    collector_failures: int = 0

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def to_output_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return {
            "runId": self.run_id,
            "startedAt": format_timestamp(self.started_at),
            "finishedAt": format_timestamp(self.finished_at),
            "durationSeconds": round(self.duration_seconds, 3),
            "organizationsTotal": self.organizations_total,
            "organizationsProcessed": self.organizations_processed,
            "candidatesFound": self.candidates_found,
            "candidatesValid": self.candidates_valid,
            "candidatesSaved": self.candidates_saved,
            "errors": self.errors,
            "collectorFailures": self.collector_failures,
        }
