from pathlib import Path
from install_review.config import settings


def ensure_storage_dirs(storage_path: Path | None = None) -> Path:
    path = storage_path or settings.storage_path
    path.mkdir(parents=True, exist_ok=True)
    (path / "files").mkdir(exist_ok=True)
    (path / "resolutions").mkdir(exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    cleaned = "".join(c if c in keep else "_" for c in Path(name or "").name)
    return cleaned or "file"


def file_extension(name: str | None) -> str:
    return Path(name or "").suffix.lower().lstrip(".")
