"""Data access layer (repositories) for persistence operations.

Repositories encapsulate database operations on emitted contacts and run
summaries and return domain models rather than ORM models.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.models import ContactRecord, RunSummary
from app.utils.hashing import compute_contact_key

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import ContactModel, RunSummaryModel

logger = logging.getLogger(__name__)


class ContactRepository:
    """Repository for emitted contact records."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, run_id: str, record: ContactRecord) -> str:
        """Insert a contact, or update the row with the same contact key.

        The same organization listed twice in one run yields the same key;
        the later result replaces the earlier one.

        Args:
            run_id: Identifier of the current run
            record: Contact to persist

        Returns:
            The contact key of the stored row

        Raises:
            DataIntegrityError: On constraint violations
            PersistenceError: On other database errors
        """
        contact_key = compute_contact_key(
            run_id,
            record.organization,
            record.email,
            record.phone,
            first_name=record.first_name,
            last_name=record.last_name,
        )

        try:
            stmt = select(ContactModel).where(ContactModel.contact_key == contact_key)
            existing = self.session.execute(stmt).scalar_one_or_none()

            if existing:
                existing.apply(record)
            else:
                self.session.add(ContactModel.from_domain(record, contact_key, run_id))

            self.session.flush()
            return contact_key

        except IntegrityError as e:
            logger.error(f"Integrity error saving contact {contact_key}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to save contact due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving contact {contact_key}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save contact: {e}") from e

    def save_all(self, run_id: str, records: Iterable[ContactRecord]) -> int:
        """Persist several contacts; returns how many were written."""
        count = 0
        for record in records:
            self.save(run_id, record)
            count += 1
        return count

    def get_by_run(self, run_id: str, organization: Optional[str] = None) -> List[ContactRecord]:
        """List contacts of a run in insertion order, optionally for one organization.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(ContactModel).where(ContactModel.run_id == run_id)
            if organization is not None:
                stmt = stmt.where(ContactModel.organization == organization)
            stmt = stmt.order_by(ContactModel.id)
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving contacts for run {run_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve contacts: {e}") from e


class RunSummaryRepository:
    """Repository for per-run summaries."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, summary: RunSummary) -> RunSummary:
        """Insert the summary of a run (written once per run).

        Raises:
            DataIntegrityError: If a summary for the run already exists
            PersistenceError: On other database errors
        """
        try:
            self.session.add(RunSummaryModel.from_domain(summary))
            self.session.flush()
            return summary

        except IntegrityError as e:
            logger.error(f"Integrity error saving run summary {summary.run_id}: {e}", exc_info=True)
            raise DataIntegrityError(
                f"Run summary for {summary.run_id} already exists: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving run summary {summary.run_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save run summary: {e}") from e

    def get(self, run_id: str) -> RunSummary:
        """Fetch the summary of a run.

        Raises:
            RecordNotFoundError: If no summary exists for run_id
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(RunSummaryModel, run_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to retrieve run summary: {e}") from e

        if model is None:
            raise RecordNotFoundError(f"No run summary for run {run_id}")
        return model.to_domain()
