import logging
from dataclasses import dataclass, field
from typing import Any, AbstractSet, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voyage.uploads.reconcile import AttachmentSet, ReconcilePlan, apply_plan, reconcile_upload
from voyage.uploads.staging import StagingArea
from voyage.uploads.storage import UploadStorage

logger = logging.getLogger(__name__)


@dataclass
class UpdateOutcome:
    entity: Any
    changed: bool
    warnings: List[str] = field(default_factory=list)


def _values_differ(old: Any, new: Any) -> bool:
    if old is None and new is None:
        return False
    if isinstance(old, bool) or isinstance(new, bool):
        return bool(old) != bool(new)
    return old != new


class AttachmentManager:
    """Drives create/update/delete of an entity that owns attachment fields.

    The database write always comes first; files are placed, copied and
    deleted only after the commit succeeded.
    """

    def __init__(self, db: Session, storage: UploadStorage, attachments: AttachmentSet):
        self.db = db
        self.storage = storage
        self.attachments = attachments

    def file_urls(self, entity: Any) -> Dict[str, Optional[str]]:
        storage_id = getattr(entity, self.attachments.storage_column, None)
        return {
            f"{name}_url": self.storage.file_url(self.attachments.module, name, storage_id, getattr(entity, name, None))
            for name in self.attachments.fields
        }

    def create(self, entity: Any, staging: StagingArea) -> List[str]:
        """Insert ``entity`` with its staged files. Returns file warnings."""
        plan = reconcile_upload(self.attachments, None, frozenset(), staging, self.storage)
        for column, value in plan.data_to_persist.items():
            setattr(entity, column, value)

        self.db.add(entity)
        self._commit()
        self.db.refresh(entity)
        return apply_plan(plan, self.storage, staging.staging_id)

    def update(self, entity: Any, changes: Dict[str, Any], explicit_nulls: AbstractSet[str],
               staging: StagingArea) -> UpdateOutcome:
        """Apply scalar ``changes`` and reconcile attachments on ``entity``.

        Attachment keys in ``changes`` are ignored; they are driven by the
        staged files and ``explicit_nulls``.
        """
        plan = reconcile_upload(self.attachments, entity, explicit_nulls, staging, self.storage)
        managed = set(self.attachments.fields) | {self.attachments.storage_column}
        scalar_changes = {
            key: value for key, value in changes.items()
            if key not in managed and _values_differ(getattr(entity, key, None), value)
        }

        if not scalar_changes and not plan.has_changes:
            logger.info("[%s] No effective changes for %s %s",
                        staging.staging_id or "-", self.attachments.module, getattr(entity, "id", None))
            return UpdateOutcome(entity=entity, changed=False)

        self._log_plan(plan, staging)
        for key, value in {**scalar_changes, **plan.data_to_persist}.items():
            setattr(entity, key, value)
        self._commit()
        self.db.refresh(entity)

        warnings = apply_plan(plan, self.storage, staging.staging_id)
        return UpdateOutcome(entity=entity, changed=True, warnings=warnings)

    def delete(self, entity: Any) -> List[str]:
        """Delete the row, then best-effort remove its field directories."""
        storage_id = getattr(entity, self.attachments.storage_column, None)
        self.db.delete(entity)
        self._commit()
        return self.remove_files(storage_id)

    def remove_files(self, storage_id: Optional[str]) -> List[str]:
        return self.storage.remove_entity_dirs(self.attachments.module, self.attachments.fields, storage_id)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        except Exception:
            self.db.rollback()
            logger.exception("Database write failed for %s", self.attachments.module)
            raise

    def _log_plan(self, plan: ReconcilePlan, staging: StagingArea) -> None:
        logger.info(
            "[%s] %s storage=%s states=%s copies=%d deletes=%d",
            staging.staging_id or "-",
            self.attachments.module,
            plan.storage_id,
            {name: state.value for name, state in plan.field_states.items()},
            len(plan.copy_operations),
            len(plan.delete_operations),
        )
