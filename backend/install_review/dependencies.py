from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from install_review.config import settings
from install_review.database import get_db
from install_review.services.access_control import AccessControl
from install_review.services.application_service import ApplicationLifecycle
from install_review.services.attachment_service import AttachmentService
from install_review.services.blob_store import BlobStore
from install_review.services.requirement_catalog import RequirementCatalog
from install_review.services.resolution_service import ResolutionDocumentGenerator


async def current_user_id(x_user_id: int = Header(...)) -> int:
    # Identity comes from the upstream gateway; this service only checks roles.
    return x_user_id


def get_blob_store() -> BlobStore:
    return BlobStore(settings.storage_path)


def get_access(db: Session = Depends(get_db)) -> AccessControl:
    return AccessControl(db)


def get_catalog(request: Request, db: Session = Depends(get_db)) -> RequirementCatalog:
    return RequirementCatalog(db, cache=getattr(request.app.state, "catalog_cache", None))


def get_lifecycle(
    db: Session = Depends(get_db),
    access: AccessControl = Depends(get_access),
    catalog: RequirementCatalog = Depends(get_catalog),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ApplicationLifecycle:
    generator = ResolutionDocumentGenerator(db, blob_store)
    return ApplicationLifecycle(db, access=access, catalog=catalog, generator=generator)


def get_attachment_service(
    db: Session = Depends(get_db),
    access: AccessControl = Depends(get_access),
    blob_store: BlobStore = Depends(get_blob_store),
) -> AttachmentService:
    return AttachmentService(db, blob_store=blob_store, access=access)
