import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from install_review.config import settings
from install_review.exceptions import ConflictError, StorageError, ValidationError
from install_review.models.application import APPROVED, REJECTED, Application
from install_review.models.resolution import ResolutionDocument
from install_review.repository import ApplicationRepository
from install_review.services.blob_store import BlobStore
from install_review.services.pdf_service import (
    ResolutionAttachment,
    ResolutionSnapshot,
    is_image,
    render_resolution_pdf,
)
from install_review.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


def _value(value) -> str:
    return "-" if value is None or value == "" else str(value)


def applicant_lines(application: Application) -> list[str]:
    identification = " ".join(p for p in (application.document_type, application.document_number) if p)
    return [
        f"Application ID: {application.id}",
        f"Installation ID: {_value(application.client_code)}",
        f"Name: {_value(application.full_name)}",
        f"Identification: {_value(identification)}",
        f"Address: {_value(application.address)}",
        f"Neighborhood: {_value(application.neighborhood)}",
        f"Email: {_value(application.email)}",
        f"Contact: {_value(application.contact_number)}",
        f"Locality code: {_value(application.locality_code)}",
        f"Stratum: {_value(application.stratum)}",
    ]


class ResolutionDocumentGenerator:
    """Renders a decision to PDF and stores it as the application's next version.

    Versions are allocated optimistically: read the current maximum, render,
    insert under the (application_id, version) unique constraint and start
    over when a concurrent decision took the number first.
    """

    def __init__(
        self,
        db: Session,
        blob_store: BlobStore,
        renderer: Callable[[ResolutionSnapshot], bytes] = render_resolution_pdf,
        max_retries: int | None = None,
    ):
        self.db = db
        self.repository = ApplicationRepository(db)
        self.blob_store = blob_store
        self.renderer = renderer
        self.max_retries = settings.resolution_max_retries if max_retries is None else max_retries

    def generate(
        self,
        application_id: int,
        decision: str,
        generated_by: int | None = None,
        comment: str | None = None,
        reason: str | None = None,
    ) -> ResolutionDocument:
        if decision not in (APPROVED, REJECTED):
            raise ValidationError(f"Unknown decision {decision}")

        attempt = 0
        while True:
            try:
                return self._generate_once(application_id, decision, generated_by, comment, reason)
            except IntegrityError:
                self.db.rollback()
                if attempt >= self.max_retries:
                    raise ConflictError(
                        f"Could not allocate a resolution version for application {application_id}"
                    )
                attempt += 1
                logger.warning(
                    "Resolution version conflict for application %s, retry %s/%s",
                    application_id, attempt, self.max_retries,
                )

    def _generate_once(self, application_id, decision, generated_by, comment, reason) -> ResolutionDocument:
        application = self.repository.get(application_id)
        version = self.repository.max_version(application_id) + 1

        content = self.renderer(self._snapshot(application, decision, comment, reason))

        file_name = f"RESOLUTION_{application_id}_v{version}.pdf"
        storage_path = f"resolutions/{application_id}/{file_name}"
        document = ResolutionDocument(
            application_id=application_id,
            version=version,
            decision=decision,
            file_name=file_name,
            storage_path=storage_path,
            generated_by=generated_by,
            created_at=utc_now(),
        )
        # The flush takes the write lock, so a losing writer fails here
        # before it can touch the winner's file.
        self.repository.add_document(document)
        try:
            self.blob_store.write(storage_path, content, read_only=True)
        except StorageError:
            self.db.rollback()
            raise
        self.db.commit()

        logger.info("Stored %s (%s bytes) for application %s", file_name, len(content), application_id)
        return document

    def _snapshot(self, application: Application, decision, comment, reason) -> ResolutionSnapshot:
        attachments = []
        for attachment in self.repository.list_attachments(application.id):
            data = None
            if is_image(attachment.file_name):
                try:
                    data = self.blob_store.read(attachment.storage_path)
                except StorageError as exc:
                    logger.debug("Image %s unavailable: %s", attachment.storage_path, exc)
            attachments.append(ResolutionAttachment(attachment.kind, attachment.file_name, data))

        return ResolutionSnapshot(
            application_id=application.id,
            decision=decision,
            generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
            applicant_lines=applicant_lines(application),
            comment=comment,
            reason=reason,
            attachments=attachments,
        )
