import os
from pathlib import Path

from install_review.config import settings
from install_review.exceptions import StorageError


class BlobStore:
    """Opaque byte storage for attachments and resolution documents.

    Paths are relative to ``base_path``; any filesystem failure surfaces as
    :class:`StorageError`.
    """

    def __init__(self, base_path: Path | None = None):
        self.base_path = base_path or settings.storage_path

    def _resolve(self, path: str) -> Path:
        root = self.base_path.resolve()
        full_path = (root / path).resolve()
        if root not in full_path.parents:
            raise StorageError(f"Path escapes storage root: {path}")
        return full_path

    def write(self, path: str, data: bytes, read_only: bool = False) -> str:
        full_path = self._resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.unlink(missing_ok=True)
            full_path.write_bytes(data)
            if read_only:
                os.chmod(full_path, 0o444)
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}") from exc
        return path

    def read(self, path: str) -> bytes:
        full_path = self._resolve(path)
        try:
            return full_path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Could not read {path}: {exc}") from exc

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()
