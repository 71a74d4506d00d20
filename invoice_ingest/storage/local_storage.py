import re
import uuid
from pathlib import Path, PurePath

from invoice_ingest.ingestion.models import IncomingFile
from invoice_ingest.storage.base import BaseObjectStorage
from invoice_ingest.storage.exceptions import StorageError, StoredObjectNotFoundError

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def object_key(owner_id: str, job_id: str, file_name: str) -> str:
    """Build a storage key: {owner_id}/{job_id}/{random}-{safe file name}"""
    safe_name = _UNSAFE_CHARS.sub("_", PurePath(file_name).name).strip("._") or "document"
    safe_owner = _UNSAFE_CHARS.sub("_", owner_id)
    return f"{safe_owner}/{job_id}/{uuid.uuid4().hex}-{safe_name}"


class LocalObjectStorage(BaseObjectStorage):
    """Stores uploaded documents on the local filesystem under a root directory."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def store(self, owner_id: str, job_id: str, file: IncomingFile) -> str:
        key = object_key(owner_id, job_id, file.name)
        path = self._resolve_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(file.content)
        except OSError as exc:
            raise StorageError(f"Failed to store '{file.name}': {exc}") from exc
        return key

    def load(self, storage_path: str) -> bytes:
        path = self._resolve_path(storage_path)
        if not path.exists():
            raise StoredObjectNotFoundError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read '{storage_path}': {exc}") from exc

    def _resolve_path(self, storage_path: str) -> Path:
        root = self._files_root.resolve()
        path = (root / storage_path).resolve()
        if not path.is_relative_to(root):
            raise StorageError(f"Storage path escapes the files root: {storage_path}")
        return path
