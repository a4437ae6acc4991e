"""Company profile history.

The issuer's details are kept as a chain of revisions. A revision that no
invoice references yet is a draft and is edited in place. Once an invoice
pins it, the revision is published: editing the latest published revision
creates a new revision pointing back at it, and older published revisions
cannot be edited at all.
"""

import logging
from enum import Enum
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.orm import Session

from stoptime.errors import BillingValidationError, ImmutabilityViolation
from stoptime.models.company_info import EDITABLE_FIELDS, CompanyInfo, CompanyInfoUpdate
from stoptime.storage.records import CompanyInfoRecord
from stoptime.storage.repository import BillingRepository, to_company_info
from stoptime.utils.logging_utils import LogContext, sanitize_sensitive_data

logger = logging.getLogger(__name__)

DEFAULT_COMPANY_INFO = {
    "name": "My Company",
    "country": "The Netherlands",
    "country_code": "NL",
}


class RevisionState(Enum):
    """Whether a revision is referenced by any invoice."""

    DRAFT = "draft"
    PUBLISHED = "published"


class EditAction(Enum):
    """How an edit of a revision is carried out."""

    MUTATE = "mutate"
    NEW_REVISION = "new_revision"


def plan_company_edit(is_latest: bool, state: RevisionState) -> EditAction:
    """Decide how to apply an edit to a company revision.

    Args:
        is_latest: Whether the revision is the most recent one
        state: Whether the revision is referenced by invoices

    Returns:
        MUTATE for drafts, NEW_REVISION for the latest published revision

    Raises:
        ImmutabilityViolation: If the revision is published and superseded
    """
    if state is RevisionState.DRAFT:
        return EditAction.MUTATE
    if is_latest:
        return EditAction.NEW_REVISION
    raise ImmutabilityViolation(
        "This company revision is referenced by invoices and has been superseded",
        recovery_hint="Edit the current company information instead",
    )


def revision_state(repository: BillingRepository, revision_id: int) -> RevisionState:
    if repository.count_invoices_for_company_info(revision_id) > 0:
        return RevisionState.PUBLISHED
    return RevisionState.DRAFT


def _latest_or_default(repository: BillingRepository) -> CompanyInfoRecord:
    record = repository.latest_company_info()
    if record is None:
        record = CompanyInfoRecord(**DEFAULT_COMPANY_INFO)
        repository.add(record)
        repository.flush()
        logger.info(f"Created default company information (revision {record.id})")
    return record


def current_company_info(session: Session) -> CompanyInfo:
    """Return the latest company revision, creating the default if none exists."""
    return to_company_info(_latest_or_default(BillingRepository(session)))


def latest_company_info_record(session: Session) -> CompanyInfoRecord:
    """Record of the latest company revision, for pinning on a new invoice."""
    return _latest_or_default(BillingRepository(session))


def company_revisions(session: Session) -> List[CompanyInfo]:
    """Return the whole revision history, oldest first."""
    return [to_company_info(r) for r in BillingRepository(session).company_revisions()]


def _validated_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    try:
        update = CompanyInfoUpdate(**changes)
    except ValidationError as e:
        raise BillingValidationError.from_pydantic(e) from e
    return update.model_dump(exclude_unset=True)


def edit_company_info(
    session: Session, revision_id: int, changes: Dict[str, Any]
) -> CompanyInfo:
    """Apply changes to a company revision.

    Args:
        session: Open database session (the caller commits)
        revision_id: Revision the operator is editing
        changes: Field name to new value; only editable fields are accepted

    Returns:
        The revision carrying the changes, which is a new revision when the
        edited one was already published

    Raises:
        BillingValidationError: If a field is unknown or a value is invalid
        ImmutabilityViolation: If the revision is published and superseded
    """
    repository = BillingRepository(session)
    record = repository.get_company_info(revision_id)
    if record is None:
        raise BillingValidationError(
            f"Company revision {revision_id} does not exist",
            fields={"revision_id": "does not exist"},
        )

    values = {
        name: value
        for name, value in _validated_changes(changes).items()
        if getattr(record, name) != value
    }
    if not values:
        logger.debug(f"No changes to company revision {record.id}")
        return to_company_info(record)

    latest = repository.latest_company_info()
    is_latest = latest is not None and latest.id == record.id
    state = revision_state(repository, record.id)

    with LogContext(company_revision=record.id):
        action = plan_company_edit(is_latest, state)
        logger.debug(
            f"Editing company revision ({state.value}, {action.value}): "
            f"{sanitize_sensitive_data(values)}"
        )

        if action is EditAction.NEW_REVISION:
            copied = {name: getattr(record, name) for name in EDITABLE_FIELDS}
            record = CompanyInfoRecord(**copied, original_id=record.id)
            repository.add(record)

        for name, value in values.items():
            setattr(record, name, value)

        repository.flush()
        logger.info(f"Company information saved as revision {record.id}")

    return to_company_info(record)
