"""Filesystem layout for permanent and staged uploads."""
import logging
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from voyage.config import settings

logger = logging.getLogger(__name__)


def build_file_url(public_prefix: str, module: Optional[str], field: Optional[str],
                   storage_id: Optional[str], filename: Optional[str]) -> Optional[str]:
    """Public URL of a permanent file, or None if any part is missing."""
    if not module or not field or not storage_id or not filename:
        return None
    return f"/{public_prefix.strip('/')}/{module}/{field}/{storage_id}/{filename}"


class UploadStorage:
    """Builds upload paths and performs the primitive file operations.

    Permanent files live at ``{root}/{module}/{field}/{storage_id}/{filename}``
    and in-flight uploads at ``{staging_root}/{staging_id}/``.
    """

    def __init__(self, root: Optional[str] = None, staging_root: Optional[str] = None,
                 public_prefix: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_ROOT)
        self.staging_root = Path(staging_root or settings.UPLOAD_STAGING_ROOT)
        self.public_prefix = public_prefix or settings.UPLOAD_PUBLIC_PREFIX

    # ---- paths -----------------------------------------------------------

    def field_dir(self, module: str, field: str, storage_id: str) -> Path:
        return self.root / module / field / storage_id

    def permanent_path(self, module: str, field: str, storage_id: str, filename: str) -> Path:
        return self.field_dir(module, field, storage_id) / filename

    def staging_dir(self, staging_id: str) -> Path:
        return self.staging_root / staging_id

    def file_url(self, module: str, field: str, storage_id: Optional[str], filename: Optional[str]) -> Optional[str]:
        return build_file_url(self.public_prefix, module, field, storage_id, filename)

    # ---- primitives ------------------------------------------------------

    def move(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))

    def copy(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

    def delete(self, path: Path) -> bool:
        """Delete a file; returns False if it was already gone."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def remove_tree(self, path: Path) -> None:
        if path.exists():
            shutil.rmtree(path)

    def remove_entity_dirs(self, module: str, fields: Iterable[str], storage_id: Optional[str]) -> List[str]:
        """Best-effort removal of every field directory of one storage id.

        Errors are logged and returned, never raised.
        """
        if not storage_id:
            logger.debug("No storage id for %s; nothing to remove", module)
            return []

        failures = []
        for field in fields:
            directory = self.field_dir(module, field, storage_id)
            try:
                self.remove_tree(directory)
            except OSError as e:
                logger.error("Failed to remove %s: %s", directory, e)
                failures.append(f"Failed to remove {field} files.")
        return failures


def get_upload_storage() -> UploadStorage:
    """FastAPI dependency; tests override it to point at a temp directory"""
    return UploadStorage()
