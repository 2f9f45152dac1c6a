"""
Per-request staging of uploaded files.

A ``StagingArea`` receives the file parts of one request into
``{staging_root}/{staging_id}/{field}-{disambiguator}{ext}``, validates them
against per-field rules and is always discarded when the request finishes
(use it as a context manager). Files that were placed into permanent storage
have already been moved out by then, so only leftovers are deleted.
"""
import logging
import secrets
import shutil
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from fastapi import UploadFile

from voyage.exceptions import ValidationError
from voyage.uploads.storage import UploadStorage

logger = logging.getLogger(__name__)

IMAGE_TYPES = ("image/jpeg", "image/png", "image/jpg")
DOCUMENT_TYPES = IMAGE_TYPES + ("application/pdf",)
MB = 1024 * 1024


@dataclass(frozen=True)
class FieldRule:
    name: str
    allowed_types: Tuple[str, ...]
    max_size: int


@dataclass(frozen=True)
class ReceivedFile:
    field_name: str
    temporary_path: Path
    original_name: str
    mime_type: str
    size_bytes: int

    @property
    def filename(self) -> str:
        return self.temporary_path.name


class StagingArea:
    """Files received by a single request, grouped by field name"""

    def __init__(self, storage: UploadStorage):
        self.storage = storage
        self._staging_id: Optional[str] = None
        self.files: Dict[str, List[ReceivedFile]] = {}
        self.errors: Dict[str, List[str]] = {}

    def __enter__(self) -> "StagingArea":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            logger.info("[%s] Discarding staged uploads after %s", self._staging_id or "-", exc_type.__name__)
        self.cleanup()

    @property
    def staging_id(self) -> Optional[str]:
        return self._staging_id

    @property
    def directory(self) -> Optional[Path]:
        return self.storage.staging_dir(self._staging_id) if self._staging_id else None

    @property
    def has_files(self) -> bool:
        return any(self.files.values())

    def first(self, field_name: str) -> Optional[ReceivedFile]:
        received = self.files.get(field_name)
        return received[0] if received else None

    def receive(self, field_name: str, upload: UploadFile) -> ReceivedFile:
        """Write one file part into the staging directory."""
        if self._staging_id is None:
            self._staging_id = str(uuid.uuid4())
        directory = self.storage.staging_dir(self._staging_id)
        directory.mkdir(parents=True, exist_ok=True)

        original_name = upload.filename or ""
        suffix = Path(original_name).suffix.lower()
        disambiguator = f"{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}"
        destination = directory / f"{field_name}-{disambiguator}{suffix}"

        with destination.open("wb") as out:
            shutil.copyfileobj(upload.file, out)

        received = ReceivedFile(
            field_name=field_name,
            temporary_path=destination,
            original_name=original_name,
            mime_type=upload.content_type or "application/octet-stream",
            size_bytes=destination.stat().st_size,
        )
        self.files.setdefault(field_name, []).append(received)
        return received

    def validate(self, rules: Sequence[FieldRule]) -> None:
        """Check type and size of every received file and collect errors.

        Invalid files are removed immediately; valid siblings stay until
        ``cleanup``.
        """
        by_name = {rule.name: rule for rule in rules}
        for field_name, received_files in list(self.files.items()):
            rule = by_name.get(field_name)
            if rule is None:
                self._add_error(field_name, f"Unexpected file field: {field_name}")
                self._drop(field_name, received_files)
                continue

            invalid = []
            for received in received_files:
                if received.mime_type not in rule.allowed_types:
                    self._add_error(
                        field_name,
                        f"Invalid file type for {field_name}. Allowed: {', '.join(rule.allowed_types)}. "
                        f"Received: {received.mime_type}",
                    )
                    invalid.append(received)
                elif received.size_bytes > rule.max_size:
                    self._add_error(
                        field_name,
                        f"File too large for {field_name}. Max size: {rule.max_size / MB:g}MB. "
                        f"Received: {received.size_bytes / MB:.2f}MB",
                    )
                    invalid.append(received)
            if invalid:
                self._drop(field_name, invalid)

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ValidationError("Uploaded files are invalid", code="INVALID_UPLOAD", errors=dict(self.errors))

    def cleanup(self) -> None:
        if self._staging_id:
            cleanup_staging(self.storage, self._staging_id)
        self.files = {}

    def _add_error(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, []).append(message)

    def _drop(self, field_name: str, received_files: List[ReceivedFile]) -> None:
        for received in received_files:
            self.storage.delete(received.temporary_path)
        remaining = [f for f in self.files.get(field_name, []) if f not in received_files]
        if remaining:
            self.files[field_name] = remaining
        else:
            self.files.pop(field_name, None)


def cleanup_staging(storage: UploadStorage, staging_id: str) -> None:
    """Delete a staging directory and everything in it; missing is fine."""
    directory = storage.staging_dir(staging_id)
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.error("[%s] Failed to remove staging directory %s: %s", staging_id, directory, e)
        return
    logger.debug("[%s] Removed staging directory", staging_id)


def stage_uploads(storage: UploadStorage, uploads: Mapping[str, Optional[UploadFile]],
                  rules: Sequence[FieldRule]) -> StagingArea:
    """Receive the non-empty file parts of a request and validate them."""
    area = StagingArea(storage)
    try:
        for field_name, upload in uploads.items():
            # browsers send an empty part for an untouched file input
            if upload is None or not upload.filename:
                continue
            area.receive(field_name, upload)
        area.validate(rules)
    except Exception:
        logger.exception("[%s] Failed to stage uploads", area.staging_id or "-")
        area.cleanup()
        raise
    if area.has_files or area.errors:
        logger.info(
            "[%s] Staged fields: %s",
            area.staging_id, ", ".join(sorted(area.files)) or "none",
        )
    return area
