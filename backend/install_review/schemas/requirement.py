from pydantic import BaseModel


class RequirementResponse(BaseModel):
    kind: str
    is_required: bool
    description: str | None


class RequirementUpdate(BaseModel):
    is_required: bool | None = None
    description: str | None = None
