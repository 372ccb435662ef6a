from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from install_review.database import Base


class ResolutionDocument(Base):
    __tablename__ = "application_pdfs"
    __table_args__ = (UniqueConstraint("application_id", "version"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False)
    version = Column(Integer, nullable=False)
    decision = Column(Text, nullable=False)
    file_name = Column(Text, nullable=False)
    storage_path = Column(Text, nullable=False)
    generated_by = Column(Integer)
    created_at = Column(Text, nullable=False)

    application = relationship("Application", back_populates="documents")
