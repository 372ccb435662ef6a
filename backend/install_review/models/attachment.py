from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from install_review.database import Base


class AttachmentFile(Base):
    __tablename__ = "application_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False)
    kind = Column(Text, nullable=False)
    file_name = Column(Text, nullable=False)
    mime_type = Column(Text)
    byte_size = Column(Integer, nullable=False)
    storage_path = Column(Text, nullable=False)
    sha256 = Column(Text)
    uploaded_by = Column(Integer)
    uploaded_at = Column(Text, nullable=False)

    application = relationship("Application", back_populates="attachments")
