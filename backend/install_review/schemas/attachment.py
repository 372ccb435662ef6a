from pydantic import BaseModel


class AttachmentResponse(BaseModel):
    id: int
    application_id: int
    kind: str
    file_name: str
    mime_type: str | None
    byte_size: int
    sha256: str | None
    uploaded_by: int | None
    uploaded_at: str
