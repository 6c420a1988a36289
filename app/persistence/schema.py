"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for emitted contacts and run
summaries, and conversion methods between ORM and domain models.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from app.domain.models import ContactRecord, RunSummary

logger = logging.getLogger(__name__)

Base = declarative_base()


class ContactModel(Base):
    """ORM model for contacts table.

    One row per emitted contact. ``contact_key`` identifies a contact within
    a run (run id + company + email, or phone for backfilled contacts).
    """

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_key = Column(String(64), nullable=False, unique=True)
    run_id = Column(String(64), nullable=False)

    organization = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    salutation = Column(String(50), nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(254), nullable=True)
    phone = Column(String(50), nullable=True)
    job_title = Column(Text, nullable=True)
    profile_url = Column(Text, nullable=True)
    source = Column(String(50), nullable=False)
    score = Column(Integer, nullable=False, default=0)
    backfilled = Column(Boolean, nullable=False, default=False)

    # ISO 8601 string, as emitted
    extracted_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_contacts_run", "run_id"),
        Index("idx_contacts_organization", "organization"),
        Index("idx_contacts_email", "email"),
    )

    def to_domain(self) -> ContactRecord:
        """Convert ORM model to domain model."""
        return ContactRecord(
            organization=self.organization,
            location=self.location,
            salutation=self.salutation,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            job_title=self.job_title,
            profile_url=self.profile_url,
            source=self.source,
            score=self.score,
            backfilled=self.backfilled,
            extracted_at=self.extracted_at,
        )

    def apply(self, record: ContactRecord) -> None:
        """Copy record fields onto this row."""
        self.organization = record.organization
        self.location = record.location
        self.salutation = record.salutation
        self.first_name = record.first_name
        self.last_name = record.last_name
        self.email = record.email
        self.phone = record.phone
        self.job_title = record.job_title
        self.profile_url = record.profile_url
        self.source = record.source.value if hasattr(record.source, "value") else str(record.source)
        self.score = record.score
        self.backfilled = record.backfilled
        self.extracted_at = record.extracted_at

    @classmethod
    def from_domain(cls, record: ContactRecord, contact_key: str, run_id: str) -> "ContactModel":
        """Create ORM model from domain model."""
        model = cls(contact_key=contact_key, run_id=run_id)
        model.apply(record)
        return model


class RunSummaryModel(Base):
    """ORM model for run_summaries table. One row per run."""

    __tablename__ = "run_summaries"

    run_id = Column(String(64), primary_key=True, nullable=False)
    started_at = Column(String(50), nullable=False)
    finished_at = Column(String(50), nullable=False)

    organizations_total = Column(Integer, nullable=False, default=0)
    organizations_processed = Column(Integer, nullable=False, default=0)
    candidates_found = Column(Integer, nullable=False, default=0)
    candidates_valid = Column(Integer, nullable=False, default=0)
    candidates_saved = Column(Integer, nullable=False, default=0)
    errors = Column(Integer, nullable=False, default=0)
    collector_failures = Column(Integer, nullable=False, default=0)

    __table_args__ = (Index("idx_run_summaries_started", "started_at"),)

    def to_domain(self) -> RunSummary:
        return RunSummary(
            run_id=self.run_id,
            started_at=_parse_datetime(self.started_at),
            finished_at=_parse_datetime(self.finished_at),
            organizations_total=self.organizations_total,
            organizations_processed=self.organizations_processed,
            candidates_found=self.candidates_found,
            candidates_valid=self.candidates_valid,
            candidates_saved=self.candidates_saved,
            errors=self.errors,
            collector_failures=self.collector_failures,
        )

    @classmethod
    def from_domain(cls, summary: RunSummary) -> "RunSummaryModel":
        return cls(
            run_id=summary.run_id,
            started_at=_format_datetime(summary.started_at),
            finished_at=_format_datetime(summary.finished_at),
            organizations_total=summary.organizations_total,
            organizations_processed=summary.organizations_processed,
            candidates_found=summary.candidates_found,
            candidates_valid=summary.candidates_valid,
            candidates_saved=summary.candidates_saved,
            errors=summary.errors,
            collector_failures=summary.collector_failures,
        )


def _format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO 8601 string (UTC, microseconds, Z suffix)."""
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string written by _format_datetime."""
    if not dt_str:
        return None

    dt_str = dt_str.rstrip("Z")
    try:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(dt_str, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
