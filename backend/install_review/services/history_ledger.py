from sqlalchemy.orm import Session

from install_review.models.history import HistoryEntry
from install_review.utils.timestamps import utc_now


class HistoryLedger:
    """Append-only log of status transitions.

    ``append`` only stages the row; it is committed by the caller's
    transaction together with the status change it records.
    """

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        application_id: int,
        from_status: str | None,
        to_status: str,
        actor_id: int,
        comment: str | None = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            application_id=application_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor_id,
            comment=comment,
            created_at=utc_now(),
        )
        self.db.add(entry)
        return entry

    def list_for(self, application_id: int) -> list[HistoryEntry]:
        return (
            self.db.query(HistoryEntry)
            .filter(HistoryEntry.application_id == application_id)
            .order_by(HistoryEntry.id.asc())
            .all()
        )
