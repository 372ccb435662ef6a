from install_review.config import settings
from install_review.repository import ApplicationRepository
from install_review.services.requirement_catalog import RequirementCatalog


class AttachmentCompletenessChecker:
    """Compares the kinds attached to an application against the catalog.

    By default every catalog row counts as mandatory and ``is_required`` is
    not consulted. ``required_flag_only=True`` enforces only the rows flagged
    as required.
    """

    def __init__(
        self,
        repository: ApplicationRepository,
        catalog: RequirementCatalog,
        required_flag_only: bool | None = None,
    ):
        self.repository = repository
        self.catalog = catalog
        self.required_flag_only = (
            settings.enforce_required_flag if required_flag_only is None else required_flag_only
        )

    def missing_kinds(self, application_id: int) -> list[str]:
        required = self.catalog.kinds(required_only=self.required_flag_only)
        present = self.repository.attachment_kinds(application_id)
        return sorted(required - present)

    def is_complete(self, application_id: int) -> bool:
        return not self.missing_kinds(application_id)
