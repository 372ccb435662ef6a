from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "InstallReview"
    api_prefix: str = "/api/v1"
    max_upload_bytes: int = 20 * 1024 * 1024  # 20 MiB
    # Development only: skips role checks in AccessControl.ensure_role.
    dev_noauth: bool = False
    resolution_max_retries: int = 2
    # False restores the legacy behaviour where any status can be decided.
    require_submitted_for_decision: bool = True
    # False treats every catalog row as mandatory regardless of is_required.
    enforce_required_flag: bool = False
    catalog_cache_ttl_seconds: float = 30.0
    brand_name: str = "INSTALLATION SERVICES"

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    @property
    def storage_path(self) -> Path:
        return self.data_path / "storage"

    model_config = {"env_prefix": "INSTALL_REVIEW_"}


settings = Settings()
