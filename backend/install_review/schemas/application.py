from typing import Literal

from pydantic import BaseModel, Field

DocumentType = Literal["CC", "CE", "PAS", "NIT", "OTHER"]
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ApplicationCreate(BaseModel):
    client_code: str = Field(min_length=1)
    first_names: str = Field(min_length=2)
    last_names: str = Field(min_length=2)
    document_type: DocumentType
    document_number: str = Field(min_length=3, max_length=50)
    address: str | None = Field(None, min_length=3)
    neighborhood: str = Field(min_length=2)
    email: str | None = Field(None, pattern=EMAIL_PATTERN)
    contact_number: str | None = None
    stratum: int | None = None
    locality_code: str | None = None


class ApplicationUpdate(BaseModel):
    client_code: str | None = Field(None, min_length=1)
    first_names: str | None = Field(None, min_length=2)
    last_names: str | None = Field(None, min_length=2)
    document_type: DocumentType | None = None
    document_number: str | None = Field(None, min_length=3, max_length=50)
    address: str | None = Field(None, min_length=3)
    neighborhood: str | None = Field(None, min_length=2)
    email: str | None = Field(None, pattern=EMAIL_PATTERN)
    contact_number: str | None = None
    stratum: int | None = None
    locality_code: str | None = None


class ApplicationResponse(BaseModel):
    id: int
    client_code: str
    first_names: str
    last_names: str
    document_type: str
    document_number: str
    address: str | None
    neighborhood: str
    email: str | None
    contact_number: str | None
    stratum: int | None
    locality_code: str | None
    status: str
    technician_id: int
    supervisor_id: int | None
    submitted_at: str | None
    reviewed_at: str | None
    approved_at: str | None
    rejection_reason: str | None
    created_at: str
    updated_at: str


class ApplicationListResponse(BaseModel):
    items: list[ApplicationResponse]
    total: int
    page: int
    size: int


class ApproveRequest(BaseModel):
    comment: str | None = None


class RejectRequest(BaseModel):
    reason: str = ""
