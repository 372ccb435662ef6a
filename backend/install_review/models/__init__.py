from install_review.models.role import Role, UserRole
from install_review.models.application import Application
from install_review.models.attachment import AttachmentFile
from install_review.models.history import HistoryEntry
from install_review.models.resolution import ResolutionDocument
from install_review.models.requirement import RequirementCatalogEntry

__all__ = [
    "Role",
    "UserRole",
    "Application",
    "AttachmentFile",
    "HistoryEntry",
    "ResolutionDocument",
    "RequirementCatalogEntry",
]
