from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from install_review.database import Base

ADMIN = "ADMIN"
SUPERVISOR = "SUPERVISOR"
TECHNICIAN = "TECNICO"


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(Text, nullable=False, unique=True)
    name = Column(Text)

    members = relationship("UserRole", back_populates="role")


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id = Column(Integer, primary_key=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)

    role = relationship("Role", back_populates="members")
