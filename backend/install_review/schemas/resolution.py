from pydantic import BaseModel

from install_review.schemas.application import ApplicationResponse


class ResolutionDocumentResponse(BaseModel):
    id: int
    application_id: int
    version: int
    decision: str
    file_name: str
    generated_by: int | None
    created_at: str


class DecisionResponse(BaseModel):
    application: ApplicationResponse
    document: ResolutionDocumentResponse
