"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.domain.models import SourceType

DEFAULT_TARGET_ROLES = [
    "CEO",
    "Geschäftsführer",
    "CTO",
    "CIO",
    "Head of IT",
    "IT-Leiter",
    "Head of Digital",
    "CDO",
    "COO",
    "Head of Operations",
]

# Sources whose data is only meaningful for German-speaking markets.
DEFAULT_SOURCE_REGIONS: Dict[str, List[str]] = {
    SourceType.XING.value: ["DE", "AT", "CH"],
    SourceType.REGISTRY.value: ["DE", "AT", "CH"],
}

BUILTIN_COLLECTORS = ("file", "http_json")


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class _CamelModel(BaseModel):
    """Base for config sections accepting snake_case or camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class SourceConfig(_CamelModel):
    """Configuration for a single contact source."""

    type: SourceType = Field(..., description="Source identifier (website, linkedin, xing, registry)")
    enabled: bool = Field(True, description="Whether to collect from this source")
    collector: str = Field(
        "file",
        min_length=1,
        description="Built-in collector name (file, http_json) or 'package.module:Class'",
    )
    regions: Optional[List[str]] = Field(
        None,
        description="Regions this source serves (empty = all; None = source default)",
    )
    options: Dict[str, Any] = Field(
        default_factory=dict, description="Collector-specific options"
    )

    @field_validator("collector")
    @classmethod
    def validate_collector(cls, v: str) -> str:
        """Require a built-in name or an importable 'module:Class' path."""
        stripped = v.strip()
        if stripped in BUILTIN_COLLECTORS:
            return stripped
        module, _, attr = stripped.partition(":")
        if not module or not attr:
            raise ValueError(
                f"collector must be one of {', '.join(BUILTIN_COLLECTORS)} "
                f"or 'package.module:ClassName', got: {v}"
            )
        return stripped

    @field_validator("regions")
    @classmethod
    def normalize_regions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Upper-case region codes and drop blanks."""
        if v is None:
            return None
        return [region.strip().upper() for region in v if region and region.strip()]

    def effective_regions(self) -> List[str]:
        """Regions this source serves, falling back to the per-source default."""
        if self.regions is not None:
            return self.regions
        return DEFAULT_SOURCE_REGIONS.get(str(self.type), [])

    def serves_region(self, region: Optional[str]) -> bool:
        """Whether this source should run for the given run region."""
        regions = self.effective_regions()
        if not region or not regions:
            return True
        return region.strip().upper() in regions


class LoggingConfig(_CamelModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )


class OutputConfig(_CamelModel):
    """Where results and the run summary are written besides the database."""

    results_path: Optional[str] = Field(
        None, description="JSON-lines file receiving one line per emitted contact"
    )
    summary_path: Optional[str] = Field(
        None, description="JSON file receiving the run summary"
    )


class AdvancedConfig(_CamelModel):
    """Advanced runtime settings."""

    http_request_timeout: int = Field(
        30, ge=5, le=300, description="Request timeout for collector HTTP calls (seconds)"
    )
    user_agent: str = Field(
        "OrgContactFinder/1.0",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )
    max_candidates_per_source: int = Field(
        200, ge=0, description="Maximum raw candidates kept per source (0 = unlimited)"
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        """Strip whitespace from user agent."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class RunConfig(_CamelModel):
    """Root configuration object for one contact-finding run."""

    organizations: List[str] = Field(
        ..., min_length=1, description="Organization names to find contacts for"
    )
    region: Optional[str] = Field(None, description="Country/region filter (e.g. DE)")
    max_contacts_per_org: int = Field(
        2, ge=1, le=50, description="Maximum contacts emitted per organization"
    )
    target_roles: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TARGET_ROLES),
        description="Ordered target roles; earlier entries rank higher",
    )
    sources: List[SourceConfig] = Field(
        default_factory=list, description="Sources in precedence order"
    )
    max_retries: int = Field(1, ge=0, le=10, description="Retries per collector")
    retry_initial_delay_seconds: float = Field(
        1.0, ge=0, le=60, description="Delay before the first retry; doubles each retry"
    )
    collector_timeout_seconds: float = Field(
        120.0, gt=0, le=3600, description="Deadline per collector, retries included"
    )
    max_concurrency: int = Field(
        2, ge=1, le=32, description="Organizations processed concurrently"
    )
    min_domain_delay_ms: int = Field(
        1000, ge=0, description="Minimum spacing between requests to one domain (ms)"
    )
    abundance_threshold: int = Field(
        6, ge=0, description="Raw candidates after which pending collectors are skipped (0 = never)"
    )
    collector_parallelism: Optional[int] = Field(
        None, ge=1, description="Collectors run at once per organization (None = all)"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig, description="Result and summary files"
    )
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Advanced runtime settings"
    )

    @field_validator("organizations")
    @classmethod
    def strip_organizations(cls, v: List[str]) -> List[str]:
        """Strip names and drop blank entries; at least one must remain."""
        stripped = [name.strip() for name in v if isinstance(name, str) and name.strip()]
        if not stripped:
            raise ValueError("organizations must contain at least one non-empty name")
        return stripped

    @field_validator("region")
    @classmethod
    def normalize_region(cls, v: Optional[str]) -> Optional[str]:
        """Upper-case the region; blank means no filter."""
        if v is None or not v.strip():
            return None
        return v.strip().upper()

    @field_validator("target_roles")
    @classmethod
    def strip_target_roles(cls, v: List[str]) -> List[str]:
        """Strip roles and drop blank entries, keeping order."""
        return [role.strip() for role in v if role and role.strip()]

    @model_validator(mode="after")
    def validate_sources(self):
        """Reject the same source type configured twice."""
        seen = set()
        for source in self.sources:
            if source.type in seen:
                raise ValueError(
                    f"Duplicate source: {source.type} appears multiple times"
                )
            seen.add(source.type)
        return self

    def get_enabled_sources(self) -> List[SourceConfig]:
        """Sources enabled for this run's region, in precedence order."""
        return [
            source
            for source in self.sources
            if source.enabled and source.serves_region(self.region)
        ]

    @property
    def min_domain_delay_seconds(self) -> float:
        """Minimum per-domain delay in seconds."""
        return self.min_domain_delay_ms / 1000.0
