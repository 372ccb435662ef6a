import logging
from dataclasses import dataclass

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from install_review.config import settings
from install_review.database import atomic
from install_review.exceptions import InvalidState, PermissionDenied, ValidationError
from install_review.models.application import (
    APPROVED,
    DRAFT,
    EDITABLE_STATUSES,
    REJECTED,
    STATUSES,
    SUBMITTED,
    Application,
)
from install_review.models.resolution import ResolutionDocument
from install_review.models.role import ADMIN, SUPERVISOR, TECHNICIAN
from install_review.repository import ApplicationRepository
from install_review.schemas.application import ApplicationCreate, ApplicationUpdate
from install_review.services.access_control import AccessControl
from install_review.services.blob_store import BlobStore
from install_review.services.completeness import AttachmentCompletenessChecker
from install_review.services.history_ledger import HistoryLedger
from install_review.services.requirement_catalog import RequirementCatalog
from install_review.services.resolution_service import ResolutionDocumentGenerator
from install_review.services.supervisor_assigner import SupervisorAssigner
from install_review.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

# Columns a patch may change but never blank out.
NON_NULLABLE_FIELDS = {
    "client_code", "first_names", "last_names",
    "document_type", "document_number", "neighborhood",
}


@dataclass
class DecisionResult:
    application: Application
    document: ResolutionDocument


def _validate(schema: type[BaseModel], data) -> BaseModel:
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except SchemaError as exc:
        raise ValidationError(f"Invalid application data: {exc}") from exc


class ApplicationLifecycle:
    """Drives an application through DRAFT -> SUBMITTED -> APPROVED | REJECTED.

    Every status change and its history row commit together. Approve and
    reject then generate the resolution document in a second transaction.

    Submitting does not check attachment completeness; only the supervisor's
    decision does. Any supervisor may decide, not only the assigned one.
    """

    def __init__(
        self,
        db: Session,
        access: AccessControl | None = None,
        catalog: RequirementCatalog | None = None,
        assigner: SupervisorAssigner | None = None,
        ledger: HistoryLedger | None = None,
        checker: AttachmentCompletenessChecker | None = None,
        generator: ResolutionDocumentGenerator | None = None,
        blob_store: BlobStore | None = None,
        require_submitted_for_decision: bool | None = None,
    ):
        self.db = db
        self.repository = ApplicationRepository(db)
        self.access = access or AccessControl(db)
        self.assigner = assigner or SupervisorAssigner(self.access)
        self.ledger = ledger or HistoryLedger(db)
        self.checker = checker or AttachmentCompletenessChecker(
            self.repository, catalog or RequirementCatalog(db)
        )
        self.generator = generator or ResolutionDocumentGenerator(db, blob_store or BlobStore())
        self.require_submitted_for_decision = (
            settings.require_submitted_for_decision
            if require_submitted_for_decision is None
            else require_submitted_for_decision
        )

    # --- queries ---

    def get(self, application_id: int) -> Application:
        return self.repository.get(application_id)

    def list_for(
        self, user_id: int, status: str | None = None, page: int = 1, size: int = 20
    ) -> tuple[list[Application], int]:
        """Supervisors and admins see every application; everyone else only their own."""
        if status and status not in STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(STATUSES)}")
        sees_all = self.access.has_role(user_id, SUPERVISOR) or self.access.has_role(user_id, ADMIN)
        owner_id = None if sees_all else user_id
        return self.repository.list_applications(owner_id=owner_id, status=status, page=page, size=size)

    # --- technician operations ---

    def create(self, data, technician_id: int) -> Application:
        self.access.ensure_role(technician_id, TECHNICIAN)
        payload = _validate(ApplicationCreate, data)

        now = utc_now()
        with atomic(self.db):
            application = Application(
                **payload.model_dump(),
                status=DRAFT,
                technician_id=technician_id,
                created_at=now,
                updated_at=now,
            )
            self.repository.add(application)
            self.ledger.append(application.id, None, DRAFT, technician_id, "Application created")

        logger.info("Application %s created by technician %s", application.id, technician_id)
        return application

    def update(self, application_id: int, patch, technician_id: int) -> Application:
        self.access.ensure_role(technician_id, TECHNICIAN)
        with atomic(self.db):
            application = self._get_owned(application_id, technician_id)
            if application.status not in EDITABLE_STATUSES:
                raise InvalidState(f"Application {application_id} cannot be edited in status {application.status}")

            changes = _validate(ApplicationUpdate, patch).model_dump(exclude_unset=True)
            blanked = sorted(k for k, v in changes.items() if v is None and k in NON_NULLABLE_FIELDS)
            if blanked:
                raise ValidationError(f"Fields cannot be empty: {', '.join(blanked)}")
            for key, value in changes.items():
                setattr(application, key, value)
            application.updated_at = utc_now()
        return application

    def submit(self, application_id: int, technician_id: int) -> Application:
        self.access.ensure_role(technician_id, TECHNICIAN)

        with atomic(self.db):
            application = self._get_owned(application_id, technician_id)
            if application.status not in EDITABLE_STATUSES:
                raise InvalidState(f"Cannot submit application {application_id} from status {application.status}")

            supervisor_id = self.assigner.assign()
            previous = application.status
            now = utc_now()
            application.status = SUBMITTED
            application.submitted_at = now
            application.supervisor_id = supervisor_id
            application.updated_at = now
            self.ledger.append(application.id, previous, SUBMITTED, technician_id)

        logger.info("Application %s submitted, assigned to supervisor %s", application_id, supervisor_id)
        return application

    # --- supervisor decisions ---

    def approve(self, application_id: int, supervisor_id: int, comment: str | None = None) -> DecisionResult:
        return self._decide(application_id, supervisor_id, APPROVED, comment=comment)

    def reject(self, application_id: int, supervisor_id: int, reason: str) -> DecisionResult:
        return self._decide(application_id, supervisor_id, REJECTED, reason=(reason or "").strip() or "Rejected")

    def _decide(self, application_id, supervisor_id, decision, comment=None, reason=None) -> DecisionResult:
        self.access.ensure_role(supervisor_id, SUPERVISOR)

        with atomic(self.db):
            application = self.repository.get(application_id)
            if self.require_submitted_for_decision and application.status != SUBMITTED:
                raise InvalidState(
                    f"Application {application_id} must be {SUBMITTED} to be decided, not {application.status}"
                )
            if not self.checker.is_complete(application.id):
                missing = self.checker.missing_kinds(application.id)
                raise ValidationError(
                    f"Application {application_id} is missing required attachments: {', '.join(missing)}"
                )

            previous = application.status
            now = utc_now()
            application.status = decision
            application.supervisor_id = supervisor_id
            application.reviewed_at = now
            application.updated_at = now
            if decision == APPROVED:
                application.approved_at = now
                application.rejection_reason = None
                history_comment = comment or "Approved"
            else:
                application.approved_at = None
                application.rejection_reason = reason
                history_comment = reason
            self.ledger.append(application.id, previous, decision, supervisor_id, history_comment)

        logger.info("Application %s %s by supervisor %s", application_id, decision.lower(), supervisor_id)
        document = self.generator.generate(
            application.id, decision, generated_by=supervisor_id, comment=comment, reason=reason
        )
        return DecisionResult(application=application, document=document)

    def _get_owned(self, application_id: int, technician_id: int) -> Application:
        application = self.repository.get(application_id)
        if application.technician_id != technician_id:
            raise PermissionDenied(f"Application {application_id} belongs to another technician")
        return application
