from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from install_review.config import settings
from install_review.dependencies import current_user_id, get_attachment_service
from install_review.exceptions import ValidationError
from install_review.models.attachment import AttachmentFile
from install_review.schemas.attachment import AttachmentResponse
from install_review.services.attachment_service import AttachmentService

router = APIRouter(prefix="/applications/{application_id}/files", tags=["files"])


def _attachment_to_response(attachment: AttachmentFile) -> AttachmentResponse:
    return AttachmentResponse(
        id=attachment.id,
        application_id=attachment.application_id,
        kind=attachment.kind,
        file_name=attachment.file_name,
        mime_type=attachment.mime_type,
        byte_size=attachment.byte_size,
        sha256=attachment.sha256,
        uploaded_by=attachment.uploaded_by,
        uploaded_at=attachment.uploaded_at,
    )


@router.post("", response_model=AttachmentResponse, status_code=201)
async def upload_file(
    application_id: int,
    kind: str = Form(...),
    file: UploadFile = File(...),
    user_id: int = Depends(current_user_id),
    service: AttachmentService = Depends(get_attachment_service),
):
    # Read in chunks so an oversized upload is refused before it is fully buffered.
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise ValidationError(f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    attachment = service.add(
        application_id,
        user_id,
        kind,
        file.filename or "file",
        b"".join(chunks),
        mime_type=file.content_type,
    )
    return _attachment_to_response(attachment)


@router.get("", response_model=list[AttachmentResponse])
async def list_files(
    application_id: int,
    user_id: int = Depends(current_user_id),
    service: AttachmentService = Depends(get_attachment_service),
):
    return [_attachment_to_response(a) for a in service.list_for(application_id)]


@router.get("/{file_id}/download")
async def download_file(
    application_id: int,
    file_id: int,
    user_id: int = Depends(current_user_id),
    service: AttachmentService = Depends(get_attachment_service),
):
    attachment, content = service.read(application_id, file_id)
    return Response(
        content=content,
        media_type=attachment.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{attachment.file_name}"'},
    )
