from sqlalchemy import func
from sqlalchemy.orm import Session

from install_review.exceptions import NotFound
from install_review.models.application import Application
from install_review.models.attachment import AttachmentFile
from install_review.models.resolution import ResolutionDocument


class ApplicationRepository:
    """Reads and writes application rows and the records hanging off them.

    Writes only stage and flush; committing is left to the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    # --- applications ---

    def add(self, application: Application) -> Application:
        self.db.add(application)
        self.db.flush()
        return application

    def get(self, application_id: int) -> Application:
        application = self.db.query(Application).filter(Application.id == application_id).first()
        if not application:
            raise NotFound(f"Application {application_id} not found")
        return application

    def list_applications(
        self,
        owner_id: int | None = None,
        status: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[Application], int]:
        query = self.db.query(Application)
        if owner_id is not None:
            query = query.filter(Application.technician_id == owner_id)
        if status:
            query = query.filter(Application.status == status)

        total = query.count()
        items = query.order_by(Application.id.desc()).offset((page - 1) * size).limit(size).all()
        return items, total

    # --- attachments ---

    def add_attachment(self, attachment: AttachmentFile) -> AttachmentFile:
        self.db.add(attachment)
        self.db.flush()
        return attachment

    def list_attachments(self, application_id: int) -> list[AttachmentFile]:
        return (
            self.db.query(AttachmentFile)
            .filter(AttachmentFile.application_id == application_id)
            .order_by(AttachmentFile.id.asc())
            .all()
        )

    def get_attachment(self, application_id: int, file_id: int) -> AttachmentFile:
        attachment = (
            self.db.query(AttachmentFile)
            .filter(AttachmentFile.id == file_id, AttachmentFile.application_id == application_id)
            .first()
        )
        if not attachment:
            raise NotFound(f"File {file_id} not found for application {application_id}")
        return attachment

    def attachment_kinds(self, application_id: int) -> set[str]:
        rows = (
            self.db.query(AttachmentFile.kind)
            .filter(AttachmentFile.application_id == application_id)
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    # --- resolution documents ---

    def max_version(self, application_id: int) -> int:
        value = (
            self.db.query(func.max(ResolutionDocument.version))
            .filter(ResolutionDocument.application_id == application_id)
            .scalar()
        )
        return value or 0

    def add_document(self, document: ResolutionDocument) -> ResolutionDocument:
        self.db.add(document)
        self.db.flush()
        return document

    def list_documents(self, application_id: int) -> list[ResolutionDocument]:
        return (
            self.db.query(ResolutionDocument)
            .filter(ResolutionDocument.application_id == application_id)
            .order_by(ResolutionDocument.version.asc())
            .all()
        )

    def get_document(self, application_id: int, version: int) -> ResolutionDocument:
        document = (
            self.db.query(ResolutionDocument)
            .filter(
                ResolutionDocument.application_id == application_id,
                ResolutionDocument.version == version,
            )
            .first()
        )
        if not document:
            raise NotFound(f"Resolution v{version} not found for application {application_id}")
        return document
