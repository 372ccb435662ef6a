from pydantic import BaseModel


class HistoryEntryResponse(BaseModel):
    id: int
    application_id: int
    from_status: str | None
    to_status: str
    actor_id: int
    comment: str | None
    created_at: str
