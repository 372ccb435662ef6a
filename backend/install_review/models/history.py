from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from install_review.database import Base


class HistoryEntry(Base):
    __tablename__ = "application_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False)
    from_status = Column(Text)
    to_status = Column(Text, nullable=False)
    actor_id = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(Text, nullable=False)

    application = relationship("Application", back_populates="history")
