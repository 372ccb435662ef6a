from dataclasses import dataclass

from sqlalchemy.orm import Session

from install_review.database import atomic
from install_review.exceptions import NotFound
from install_review.models.requirement import RequirementCatalogEntry
from install_review.utils.cache import TTLCache

CATALOG_CACHE_KEY = "requirement_catalog"


@dataclass(frozen=True)
class Requirement:
    kind: str
    is_required: bool
    description: str | None


class RequirementCatalog:
    def __init__(self, db: Session, cache: TTLCache | None = None):
        self.db = db
        self.cache = cache

    def entries(self) -> list[Requirement]:
        if self.cache is not None:
            cached = self.cache.get(CATALOG_CACHE_KEY)
            if cached is not None:
                return cached

        rows = self.db.query(RequirementCatalogEntry).order_by(RequirementCatalogEntry.id).all()
        entries = [Requirement(r.kind, bool(r.is_required), r.description) for r in rows]
        if self.cache is not None:
            self.cache.set(CATALOG_CACHE_KEY, entries)
        return entries

    def kinds(self, required_only: bool = False) -> set[str]:
        return {e.kind for e in self.entries() if e.is_required or not required_only}

    def get(self, kind: str) -> Requirement:
        for entry in self.entries():
            if entry.kind == kind:
                return entry
        raise NotFound(f"Requirement {kind} not found")

    def upsert(self, kind: str, is_required: bool | None = None, description: str | None = None) -> Requirement:
        with atomic(self.db):
            row = self.db.query(RequirementCatalogEntry).filter_by(kind=kind).first()
            if not row:
                row = RequirementCatalogEntry(kind=kind, is_required=True)
                self.db.add(row)
            if is_required is not None:
                row.is_required = is_required
            if description is not None:
                row.description = description
        self._invalidate()
        return Requirement(row.kind, bool(row.is_required), row.description)

    def remove(self, kind: str) -> None:
        with atomic(self.db):
            deleted = self.db.query(RequirementCatalogEntry).filter_by(kind=kind).delete()
            if not deleted:
                raise NotFound(f"Requirement {kind} not found")
        self._invalidate()

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(CATALOG_CACHE_KEY)
