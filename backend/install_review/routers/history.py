from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from install_review.database import get_db
from install_review.dependencies import current_user_id
from install_review.repository import ApplicationRepository
from install_review.schemas.history import HistoryEntryResponse
from install_review.services.history_ledger import HistoryLedger

router = APIRouter(prefix="/applications/{application_id}/history", tags=["history"])


@router.get("", response_model=list[HistoryEntryResponse])
async def list_history(
    application_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    ApplicationRepository(db).get(application_id)
    return [
        HistoryEntryResponse(
            id=entry.id,
            application_id=entry.application_id,
            from_status=entry.from_status,
            to_status=entry.to_status,
            actor_id=entry.actor_id,
            comment=entry.comment,
            created_at=entry.created_at,
        )
        for entry in HistoryLedger(db).list_for(application_id)
    ]
