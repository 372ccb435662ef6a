from sqlalchemy import Column, Integer, Text
from sqlalchemy.orm import relationship
from install_review.database import Base

DRAFT = "DRAFT"
SUBMITTED = "SUBMITTED"
APPROVED = "APPROVED"
REJECTED = "REJECTED"

STATUSES = (DRAFT, SUBMITTED, APPROVED, REJECTED)
# Statuses in which the owning technician may still edit and (re)submit.
EDITABLE_STATUSES = (DRAFT, REJECTED)


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_code = Column(Text, nullable=False)
    first_names = Column(Text, nullable=False)
    last_names = Column(Text, nullable=False)
    document_type = Column(Text, nullable=False)
    document_number = Column(Text, nullable=False)
    address = Column(Text)
    neighborhood = Column(Text, nullable=False)
    email = Column(Text)
    contact_number = Column(Text)
    stratum = Column(Integer)
    locality_code = Column(Text)
    status = Column(Text, nullable=False, default=DRAFT)
    technician_id = Column(Integer, nullable=False)
    supervisor_id = Column(Integer)
    submitted_at = Column(Text)
    reviewed_at = Column(Text)
    approved_at = Column(Text)
    rejection_reason = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    attachments = relationship("AttachmentFile", back_populates="application", order_by="AttachmentFile.id")
    history = relationship("HistoryEntry", back_populates="application", order_by="HistoryEntry.id")
    documents = relationship("ResolutionDocument", back_populates="application", order_by="ResolutionDocument.version")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_names, self.last_names) if part)
