"""
Upload Handling Module

Receives multipart file parts into a per-request staging area, validates them,
and reconciles an entity's attachment fields with permanent storage on create,
update and delete.

Key Components:
- storage.py: path layout, public URLs and primitive file operations
- staging.py: per-request staging area and per-field validation rules
- reconcile.py: field state machine and the copy/delete plan
- manager.py: database-first create/update/delete driver for attachment owners
- forms.py: parsing of the JSON ``data`` part of multipart requests
"""

from .storage import UploadStorage, build_file_url, get_upload_storage
from .staging import (
    DOCUMENT_TYPES, IMAGE_TYPES, MB, FieldRule, ReceivedFile, StagingArea,
    cleanup_staging, stage_uploads
)
from .reconcile import (
    AttachmentSet, CopyOperation, DeleteOperation, FieldState, Placement,
    ReconcilePlan, apply_plan, reconcile_upload
)
from .manager import AttachmentManager, UpdateOutcome
from .forms import explicit_nulls, parse_form_payload, validate_multipart

__all__ = [
    "UploadStorage",
    "build_file_url",
    "get_upload_storage",
    "DOCUMENT_TYPES",
    "IMAGE_TYPES",
    "MB",
    "FieldRule",
    "ReceivedFile",
    "StagingArea",
    "cleanup_staging",
    "stage_uploads",
    "AttachmentSet",
    "CopyOperation",
    "DeleteOperation",
    "FieldState",
    "Placement",
    "ReconcilePlan",
    "apply_plan",
    "reconcile_upload",
    "AttachmentManager",
    "UpdateOutcome",
    "explicit_nulls",
    "parse_form_payload",
    "validate_multipart"
]
