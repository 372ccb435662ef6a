from sqlalchemy import Boolean, Column, Integer, Text
from install_review.database import Base

FACADE_PHOTO = "FACADE_PHOTO"
NOMENCLATURE_PHOTO = "NOMENCLATURE_PHOTO"
SPEED_TEST_PHOTO = "SPEED_TEST_PHOTO"
WORK_ORDER = "WORK_ORDER"

# Tags the frontend and backend agree on; seeded into the catalog by init_db.
DEFAULT_KINDS = (FACADE_PHOTO, NOMENCLATURE_PHOTO, SPEED_TEST_PHOTO, WORK_ORDER)


class RequirementCatalogEntry(Base):
    __tablename__ = "application_requirements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(Text, nullable=False, unique=True)
    is_required = Column(Boolean, nullable=False, default=True)
    description = Column(Text)
