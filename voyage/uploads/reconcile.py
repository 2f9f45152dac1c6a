"""
Reconciliation of an entity's attachment fields with one request's uploads.

Every attachment field of an entity ends up in exactly one state:

* ``REPLACED``  - a new file was received; the old file is deleted.
* ``REMOVED``   - the request set the field to null and sent no file; the old
  file is deleted and the reference cleared.
* ``NO_CHANGE`` - the reference is kept. If a sibling field was replaced the
  entity moves to a new storage id, so the kept file is copied forward.

All fields of one entity share a single storage id. A new one (the staging id
of the request) is allocated only when at least one field is replaced, and
the storage id is cleared once no field references a file.

Planning is pure; ``apply_plan`` performs the filesystem work and must run
only after the database write has been committed.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import AbstractSet, Any, Dict, List, Optional, Tuple

from voyage.uploads.staging import StagingArea
from voyage.uploads.storage import UploadStorage

logger = logging.getLogger(__name__)


class FieldState(str, Enum):
    NO_CHANGE = "no_change"
    REPLACED = "replaced"
    REMOVED = "removed"


@dataclass(frozen=True)
class AttachmentSet:
    """Attachment columns of one entity type"""
    module: str
    fields: Tuple[str, ...]
    storage_column: str = "upload_uuid"


@dataclass(frozen=True)
class Placement:
    field_name: str
    source: Path
    destination: Path


@dataclass(frozen=True)
class CopyOperation:
    field_name: str
    source: Path
    destination: Path


@dataclass(frozen=True)
class DeleteOperation:
    field_name: str
    path: Path


@dataclass
class ReconcilePlan:
    storage_id: Optional[str]
    field_states: Dict[str, FieldState]
    data_to_persist: Dict[str, Optional[str]] = field(default_factory=dict)
    placements: List[Placement] = field(default_factory=list)
    copy_operations: List[CopyOperation] = field(default_factory=list)
    delete_operations: List[DeleteOperation] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.data_to_persist or self.placements or self.copy_operations or self.delete_operations
        )


def resolve_field_state(field_name: str, staging: StagingArea, explicit_nulls: AbstractSet[str]) -> FieldState:
    if staging.first(field_name) is not None:
        return FieldState.REPLACED
    if field_name in explicit_nulls:
        return FieldState.REMOVED
    return FieldState.NO_CHANGE


def reconcile_upload(attachments: AttachmentSet, existing: Optional[Any], explicit_nulls: AbstractSet[str],
                     staging: StagingArea, storage: UploadStorage) -> ReconcilePlan:
    """Plan the column updates and file operations for one create/update.

    ``existing`` is the persisted entity (None on create). ``explicit_nulls``
    holds the attachment fields the request explicitly set to null.
    """
    old_storage_id = getattr(existing, attachments.storage_column, None) if existing is not None else None
    states = {name: resolve_field_state(name, staging, explicit_nulls) for name in attachments.fields}
    allocate = any(state is FieldState.REPLACED for state in states.values())
    target_storage_id = staging.staging_id if allocate else old_storage_id

    plan = ReconcilePlan(storage_id=target_storage_id, field_states=states)
    final_names: Dict[str, Optional[str]] = {}

    for name in attachments.fields:
        old_name = getattr(existing, name, None) if existing is not None else None
        old_path = (
            storage.permanent_path(attachments.module, name, old_storage_id, old_name)
            if old_storage_id and old_name else None
        )
        state = states[name]

        if state is FieldState.REPLACED:
            received = staging.first(name)
            final_names[name] = received.filename
            plan.placements.append(Placement(
                name,
                received.temporary_path,
                storage.permanent_path(attachments.module, name, target_storage_id, received.filename),
            ))
            if old_path is not None:
                plan.delete_operations.append(DeleteOperation(name, old_path))
        elif state is FieldState.REMOVED:
            final_names[name] = None
            if old_path is not None:
                plan.delete_operations.append(DeleteOperation(name, old_path))
        else:
            final_names[name] = old_name
            if allocate and old_path is not None:
                plan.copy_operations.append(CopyOperation(
                    name,
                    old_path,
                    storage.permanent_path(attachments.module, name, target_storage_id, old_name),
                ))

    if all(value is None for value in final_names.values()):
        plan.storage_id = None

    for name, value in final_names.items():
        old_name = getattr(existing, name, None) if existing is not None else None
        if value != old_name:
            plan.data_to_persist[name] = value
    if plan.storage_id != old_storage_id:
        plan.data_to_persist[attachments.storage_column] = plan.storage_id

    return plan


def apply_plan(plan: ReconcilePlan, storage: UploadStorage, request_id: Optional[str] = None) -> List[str]:
    """Run placements, then copies, then deletes. Returns warning messages.

    Nothing here raises: the database already holds the new state, so a failed
    file operation is reported as a warning. A file that is already gone
    counts as deleted.
    """
    tag = request_id or "-"
    warnings: List[str] = []

    for op in plan.placements:
        try:
            storage.move(op.source, op.destination)
            logger.info("[%s] Stored %s: %s", tag, op.field_name, op.destination)
        except OSError as e:
            logger.error("[%s] Failed to store %s at %s: %s", tag, op.field_name, op.destination, e)
            warnings.append(f"Failed to store {op.field_name}.")

    for op in plan.copy_operations:
        try:
            storage.copy(op.source, op.destination)
            logger.info("[%s] Copied %s: %s -> %s", tag, op.field_name, op.source, op.destination)
        except OSError as e:
            logger.error("[%s] Failed to copy %s from %s to %s: %s", tag, op.field_name, op.source, op.destination, e)
            warnings.append(f"Failed to copy {op.field_name}.")

    for op in plan.delete_operations:
        try:
            if storage.delete(op.path):
                logger.info("[%s] Deleted old %s file: %s", tag, op.field_name, op.path)
            else:
                logger.info("[%s] Old %s file not found (OK): %s", tag, op.field_name, op.path)
        except OSError as e:
            logger.error("[%s] Failed to delete old %s file %s: %s", tag, op.field_name, op.path, e)
            warnings.append(f"Failed to delete old {op.field_name} file.")

    if warnings:
        logger.warning("[%s] Finished with file operation warnings: %s", tag, warnings)
    return warnings
