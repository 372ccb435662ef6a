from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from install_review.database import get_db
from install_review.dependencies import current_user_id, get_blob_store
from install_review.repository import ApplicationRepository
from install_review.routers.applications import _document_to_response
from install_review.schemas.resolution import ResolutionDocumentResponse
from install_review.services.blob_store import BlobStore

router = APIRouter(prefix="/applications/{application_id}/resolutions", tags=["resolutions"])


@router.get("", response_model=list[ResolutionDocumentResponse])
async def list_resolutions(
    application_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    repository = ApplicationRepository(db)
    repository.get(application_id)
    return [_document_to_response(d) for d in repository.list_documents(application_id)]


@router.get("/{version}/download")
async def download_resolution(
    application_id: int,
    version: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    document = ApplicationRepository(db).get_document(application_id, version)
    return Response(
        content=blob_store.read(document.storage_path),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document.file_name}"'},
    )
