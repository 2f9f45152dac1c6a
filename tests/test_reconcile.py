"""
tests/test_reconcile.py
=======================
Attachment field states, storage id allocation and the copy/delete plan.
"""
from types import SimpleNamespace

from voyage.uploads import AttachmentSet, FieldState, apply_plan, reconcile_upload

AGENCY = AttachmentSet(module="agency", fields=("logo", "letterhead"))
PNG = b"\x89PNG\r\n\x1a\n"


def existing_agency(storage, storage_id="old-id", logo="logo-1.png", letterhead="letterhead-1.png"):
    """Persisted agency whose files exist on disk"""
    for field, name in (("logo", logo), ("letterhead", letterhead)):
        if name:
            path = storage.permanent_path("agency", field, storage_id, name)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(PNG)
    return SimpleNamespace(upload_uuid=storage_id, logo=logo, letterhead=letterhead)


class TestCreate:

    def test_files_go_under_the_staging_id(self, storage, make_staging):
        staging = make_staging({"logo": ("logo.png", PNG, "image/png")})

        plan = reconcile_upload(AGENCY, None, frozenset(), staging, storage)

        assert plan.storage_id == staging.staging_id
        assert plan.data_to_persist == {"logo": staging.first("logo").filename, "upload_uuid": staging.staging_id}
        assert plan.placements[0].destination == storage.permanent_path(
            "agency", "logo", staging.staging_id, staging.first("logo").filename
        )
        assert plan.copy_operations == [] and plan.delete_operations == []

    def test_no_files_no_storage_id(self, storage, make_staging):
        plan = reconcile_upload(AGENCY, None, frozenset(), make_staging(), storage)
        assert plan.storage_id is None
        assert not plan.has_changes


class TestUpdate:

    def test_replacing_one_field_copies_the_sibling_forward(self, storage, make_staging):
        agency = existing_agency(storage)
        staging = make_staging({"logo": ("new.png", PNG, "image/png")})

        plan = reconcile_upload(AGENCY, agency, frozenset(), staging, storage)

        assert plan.field_states == {"logo": FieldState.REPLACED, "letterhead": FieldState.NO_CHANGE}
        assert plan.storage_id == staging.staging_id
        assert plan.data_to_persist["upload_uuid"] == staging.staging_id
        assert "letterhead" not in plan.data_to_persist
        [copy] = plan.copy_operations
        assert copy.source == storage.permanent_path("agency", "letterhead", "old-id", "letterhead-1.png")
        assert copy.destination == storage.permanent_path(
            "agency", "letterhead", staging.staging_id, "letterhead-1.png"
        )
        [delete] = plan.delete_operations
        assert delete.path == storage.permanent_path("agency", "logo", "old-id", "logo-1.png")

    def test_removing_one_field_keeps_the_storage_id(self, storage, make_staging):
        agency = existing_agency(storage)

        plan = reconcile_upload(AGENCY, agency, {"logo"}, make_staging(), storage)

        assert plan.field_states["logo"] is FieldState.REMOVED
        assert plan.storage_id == "old-id"
        assert plan.data_to_persist == {"logo": None}
        assert plan.copy_operations == []
        assert [op.field_name for op in plan.delete_operations] == ["logo"]

    def test_removing_every_field_clears_the_storage_id(self, storage, make_staging):
        agency = existing_agency(storage)

        plan = reconcile_upload(AGENCY, agency, {"logo", "letterhead"}, make_staging(), storage)

        assert plan.storage_id is None
        assert plan.data_to_persist == {"logo": None, "letterhead": None, "upload_uuid": None}
        assert len(plan.delete_operations) == 2

    def test_new_file_wins_over_explicit_null(self, storage, make_staging):
        agency = existing_agency(storage)
        staging = make_staging({"logo": ("new.png", PNG, "image/png")})

        plan = reconcile_upload(AGENCY, agency, {"logo"}, staging, storage)

        assert plan.field_states["logo"] is FieldState.REPLACED

    def test_nothing_sent_is_a_no_op(self, storage, make_staging):
        agency = existing_agency(storage)
        plan = reconcile_upload(AGENCY, agency, frozenset(), make_staging(), storage)
        assert not plan.has_changes
        assert plan.storage_id == "old-id"

    def test_null_for_a_field_without_file_changes_nothing(self, storage, make_staging):
        agency = existing_agency(storage, letterhead=None)
        plan = reconcile_upload(AGENCY, agency, {"letterhead"}, make_staging(), storage)
        assert not plan.has_changes


class TestApplyPlan:

    def test_update_moves_copies_and_deletes(self, storage, make_staging):
        agency = existing_agency(storage)
        staging = make_staging({"logo": ("new.png", PNG, "image/png")})
        new_name = staging.first("logo").filename
        plan = reconcile_upload(AGENCY, agency, frozenset(), staging, storage)

        warnings = apply_plan(plan, storage, staging.staging_id)

        new_id = staging.staging_id
        assert warnings == []
        assert storage.permanent_path("agency", "logo", new_id, new_name).exists()
        assert storage.permanent_path("agency", "letterhead", new_id, "letterhead-1.png").exists()
        assert not storage.permanent_path("agency", "logo", "old-id", "logo-1.png").exists()
        # the kept file's old copy stays until the entity is deleted
        assert storage.permanent_path("agency", "letterhead", "old-id", "letterhead-1.png").exists()

    def test_already_missing_old_file_is_not_a_warning(self, storage, make_staging):
        agency = existing_agency(storage)
        storage.permanent_path("agency", "logo", "old-id", "logo-1.png").unlink()

        plan = reconcile_upload(AGENCY, agency, {"logo"}, make_staging(), storage)

        assert apply_plan(plan, storage) == []

    def test_missing_copy_source_is_a_warning(self, storage, make_staging):
        agency = existing_agency(storage)
        storage.permanent_path("agency", "letterhead", "old-id", "letterhead-1.png").unlink()
        staging = make_staging({"logo": ("new.png", PNG, "image/png")})
        plan = reconcile_upload(AGENCY, agency, frozenset(), staging, storage)

        warnings = apply_plan(plan, storage, staging.staging_id)

        assert warnings == ["Failed to copy letterhead."]
