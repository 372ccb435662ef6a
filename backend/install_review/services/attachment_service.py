import logging

from sqlalchemy.orm import Session

from install_review.config import settings
from install_review.database import atomic
from install_review.exceptions import ValidationError
from install_review.models.attachment import AttachmentFile
from install_review.models.requirement import SPEED_TEST_PHOTO
from install_review.models.role import ADMIN, SUPERVISOR, TECHNICIAN
from install_review.repository import ApplicationRepository
from install_review.services.access_control import AccessControl
from install_review.services.blob_store import BlobStore
from install_review.utils.filesystem import sanitize_filename
from install_review.utils.hashing import sha256_bytes
from install_review.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

# Older clients upload speed test screenshots under these names.
KIND_ALIASES = {
    "CAPTURE": SPEED_TEST_PHOTO,
    "CAPTURE_TEST": SPEED_TEST_PHOTO,
}


def normalize_kind(kind: str | None) -> str:
    cleaned = (kind or "").strip().strip("\"'").strip().upper()
    return KIND_ALIASES.get(cleaned, cleaned)


class AttachmentService:
    def __init__(
        self,
        db: Session,
        blob_store: BlobStore | None = None,
        access: AccessControl | None = None,
        max_bytes: int | None = None,
    ):
        self.db = db
        self.repository = ApplicationRepository(db)
        self.blob_store = blob_store or BlobStore()
        self.access = access or AccessControl(db)
        self.max_bytes = settings.max_upload_bytes if max_bytes is None else max_bytes

    def add(
        self,
        application_id: int,
        user_id: int,
        kind: str,
        file_name: str,
        content: bytes,
        mime_type: str | None = None,
    ) -> AttachmentFile:
        """Store an uploaded file and record it against the application.

        Supervisors and admins may attach to any application; a technician
        only to the ones they own. Kinds are free-form after normalization,
        so files outside the requirement catalog are accepted too.
        """
        kind = normalize_kind(kind)
        if not kind:
            raise ValidationError("Attachment kind is required")
        if not content:
            raise ValidationError("Empty file")
        if len(content) > self.max_bytes:
            raise ValidationError(f"File too large (max {self.max_bytes} bytes)")

        application = self.repository.get(application_id)
        self._ensure_can_attach(application, user_id)

        file_hash = sha256_bytes(content)
        safe_name = sanitize_filename(file_name)
        storage_path = f"files/{application_id}/{file_hash[:8]}_{safe_name}"
        self.blob_store.write(storage_path, content)

        with atomic(self.db):
            attachment = self.repository.add_attachment(
                AttachmentFile(
                    application_id=application_id,
                    kind=kind,
                    file_name=safe_name,
                    mime_type=mime_type,
                    byte_size=len(content),
                    storage_path=storage_path,
                    sha256=file_hash,
                    uploaded_by=user_id,
                    uploaded_at=utc_now(),
                )
            )

        logger.info("Stored %s for application %s (%s, %s bytes)", safe_name, application_id, kind, len(content))
        return attachment

    def list_for(self, application_id: int) -> list[AttachmentFile]:
        self.repository.get(application_id)
        return self.repository.list_attachments(application_id)

    def read(self, application_id: int, file_id: int) -> tuple[AttachmentFile, bytes]:
        attachment = self.repository.get_attachment(application_id, file_id)
        return attachment, self.blob_store.read(attachment.storage_path)

    def _ensure_can_attach(self, application, user_id: int) -> None:
        if application.technician_id == user_id and self.access.has_role(user_id, TECHNICIAN):
            return
        self.access.ensure_any_role(user_id, SUPERVISOR, ADMIN)
