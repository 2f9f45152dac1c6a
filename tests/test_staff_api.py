"""
tests/test_staff_api.py
=======================
Agency staff management: admin-only writes, hashed passwords, branch
checks, activation and the guards against acting on one's own account.
"""
import pytest

STAFF = "/api/v1/staff/"
LOGIN = "/api/v1/auth/login"


@pytest.fixture
def headers(agency_admin, headers_for):
    return headers_for(agency_admin)


@pytest.fixture
def branch_id(agency):
    return agency.branches[0].id


def create_staff(api, headers, branch_id, **fields):
    payload = {
        "name": "Meera Iyer",
        "email": "meera@agency.com",
        "mobile": "9822200000",
        "password": "Secret123",
        "branch_id": branch_id,
    }
    payload.update(fields)
    return api.post(STAFF, json=payload, headers=headers)


class TestCreateStaff:

    def test_created_member_can_log_in(self, api, headers, branch_id, agency):
        response = create_staff(api, headers, branch_id)
        assert response.status_code == 201, response.text
        member = response.json()
        assert member["agency_id"] == agency.id
        assert member["role"] == "user"
        assert "password" not in member

        login = api.post(LOGIN, json={"email": "meera@agency.com", "password": "Secret123"})
        assert login.status_code == 200

    def test_duplicate_email_conflicts(self, api, headers, branch_id, agency_user):
        response = create_staff(api, headers, branch_id, email=agency_user.email)
        assert response.status_code == 409
        assert "email" in response.json()["detail"]["errors"]["fields"]

    def test_branch_of_another_agency_rejected(self, api, headers, make_agency):
        other_branch = make_agency().branches[0].id
        response = create_staff(api, headers, other_branch)
        assert response.status_code == 400
        assert "branch_id" in response.json()["detail"]["errors"]["fields"]

    @pytest.mark.parametrize("fields", [
        {"password": "12345"},
        {"role": "super_admin"},
        {"email": "nope"},
    ])
    def test_invalid_payload(self, api, headers, branch_id, fields):
        assert create_staff(api, headers, branch_id, **fields).status_code == 422

    def test_regular_user_cannot_create(self, api, agency_user, headers_for, branch_id):
        assert create_staff(api, headers_for(agency_user), branch_id).status_code == 403


class TestListStaff:

    def test_admin_sees_whole_agency(self, api, headers, agency_user, make_agency, make_user):
        make_user(agency=make_agency())
        body = api.get(STAFF, headers=headers).json()
        assert body["meta"]["total"] == 2

    def test_active_filter_and_search(self, api, headers, branch_id):
        create_staff(api, headers, branch_id)
        create_staff(api, headers, branch_id, name="Karan Mehta", email="karan@agency.com", active=False)
        inactive = api.get(STAFF, params={"active": "false"}, headers=headers).json()["data"]
        assert [m["name"] for m in inactive] == ["Karan Mehta"]
        found = api.get(STAFF, params={"search": "meera"}, headers=headers).json()["data"]
        assert [m["email"] for m in found] == ["meera@agency.com"]

    def test_regular_user_sees_own_branch_only(self, api, headers, agency_user, headers_for):
        other_branch = api.post("/api/v1/branches/", json={"branch_name": "Goa"}, headers=headers).json()
        create_staff(api, headers, other_branch["id"])
        emails = [m["email"] for m in api.get(STAFF, headers=headers_for(agency_user)).json()["data"]]
        assert "meera@agency.com" not in emails
        assert agency_user.email in emails


class TestUpdateStaff:

    def test_update_role_and_clear_mobile(self, api, headers, branch_id):
        member = create_staff(api, headers, branch_id).json()
        response = api.put(f"{STAFF}{member['id']}", json={"role": "admin", "mobile": None}, headers=headers)
        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        assert response.json()["mobile"] is None

    @pytest.mark.parametrize("field", ["name", "email", "branch_id"])
    def test_null_rejected_for_required_field(self, api, headers, branch_id, field):
        member = create_staff(api, headers, branch_id).json()
        assert api.put(f"{STAFF}{member['id']}", json={field: None}, headers=headers).status_code == 422

    def test_change_password(self, api, headers, branch_id):
        member = create_staff(api, headers, branch_id).json()
        response = api.patch(f"{STAFF}{member['id']}/password", json={"password": "NewSecret1"}, headers=headers)
        assert response.json() == {"message": "Password changed successfully"}
        assert api.post(LOGIN, json={"email": "meera@agency.com", "password": "Secret123"}).status_code == 401
        assert api.post(LOGIN, json={"email": "meera@agency.com", "password": "NewSecret1"}).status_code == 200

    def test_deactivated_member_cannot_log_in(self, api, headers, branch_id):
        member = create_staff(api, headers, branch_id).json()
        response = api.patch(f"{STAFF}{member['id']}/status", json={"active": False}, headers=headers)
        assert response.json()["active"] is False
        assert api.post(LOGIN, json={"email": "meera@agency.com", "password": "Secret123"}).status_code == 401

    def test_cannot_deactivate_self(self, api, headers, agency_admin):
        response = api.patch(f"{STAFF}{agency_admin.id}/status", json={"active": False}, headers=headers)
        assert response.status_code == 403


class TestDeleteStaff:

    def test_delete(self, api, headers, branch_id):
        member = create_staff(api, headers, branch_id).json()
        assert api.delete(f"{STAFF}{member['id']}", headers=headers).status_code == 204
        assert api.get(f"{STAFF}{member['id']}", headers=headers).status_code == 404

    def test_cannot_delete_self(self, api, headers, agency_admin):
        response = api.delete(f"{STAFF}{agency_admin.id}", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"]["errors"]["message"] == "You cannot delete your own account."

    def test_member_of_another_agency_not_found(self, api, headers, make_agency, make_user):
        outsider = make_user(agency=make_agency())
        assert api.delete(f"{STAFF}{outsider.id}", headers=headers).status_code == 404
