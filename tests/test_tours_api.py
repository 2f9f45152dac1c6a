"""
tests/test_tours_api.py
=======================
Tenant-scoped tour endpoints with a single image attachment.
"""
import json

import pytest

TOURS = "/api/v1/tours/"
JPEG = ("cover.jpg", b"\xff\xd8\xff\xe0" + b"\x00" * 16, "image/jpeg")


@pytest.fixture
def headers(agency_user, headers_for):
    return headers_for(agency_user)


def create_tour(api, headers, files=None, **fields):
    payload = {"tour_title": "Kerala Backwaters", "destination": "Alleppey", "number_of_nights": 3}
    payload.update(fields)
    return api.post(TOURS, data={"data": json.dumps(payload)}, files=files, headers=headers)


class TestTours:

    def test_create_with_attachment(self, api, headers, agency, storage):
        response = create_tour(api, headers, files={"attachment": JPEG})
        assert response.status_code == 201, response.text
        tour = response.json()["tour"]
        assert tour["agency_id"] == agency.id
        assert tour["status"] == "active"
        assert tour["attachment_url"] == f"/uploads/tour/attachment/{tour['upload_uuid']}/{tour['attachment']}"
        assert storage.permanent_path("tour", "attachment", tour["upload_uuid"], tour["attachment"]).exists()

    def test_invalid_status(self, api, headers):
        assert create_tour(api, headers, status="archived").status_code == 400

    def test_search_title_and_destination(self, api, headers):
        create_tour(api, headers)
        create_tour(api, headers, tour_title="Golden Triangle", destination="Jaipur")
        titles = [t["tour_title"] for t in api.get(TOURS, params={"search": "jaipur"}, headers=headers).json()["data"]]
        assert titles == ["Golden Triangle"]

    def test_tours_are_tenant_scoped(self, api, headers, make_agency, make_user, headers_for):
        tour = create_tour(api, headers).json()["tour"]
        outsider = headers_for(make_user(agency=make_agency()))
        assert api.get(f"{TOURS}{tour['id']}", headers=outsider).status_code == 404
        assert api.get(TOURS, headers=outsider).json()["meta"]["total"] == 0

    def test_update_and_remove_attachment(self, api, headers, storage):
        tour = create_tour(api, headers, files={"attachment": JPEG}).json()["tour"]
        response = api.put(
            f"{TOURS}{tour['id']}",
            data={"data": json.dumps({"number_of_nights": 4, "attachment": None})},
            headers=headers,
        )
        updated = response.json()["tour"]
        assert updated["number_of_nights"] == 4
        assert updated["attachment"] is None
        assert not storage.permanent_path("tour", "attachment", tour["upload_uuid"], tour["attachment"]).exists()

    def test_delete(self, api, headers, storage):
        tour = create_tour(api, headers, files={"attachment": JPEG}).json()["tour"]
        assert api.delete(f"{TOURS}{tour['id']}", headers=headers).status_code == 204
        assert not storage.field_dir("tour", "attachment", tour["upload_uuid"]).exists()

    def test_null_clears_notes(self, api, headers):
        tour = create_tour(api, headers, notes="Houseboat included").json()["tour"]
        response = api.put(f"{TOURS}{tour['id']}", data={"data": json.dumps({"notes": None})}, headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Tour updated successfully."
        assert response.json()["tour"]["notes"] is None

    @pytest.mark.parametrize("field", ["tour_title", "status"])
    def test_null_rejected_for_required_field(self, api, headers, field):
        tour = create_tour(api, headers).json()["tour"]
        response = api.put(f"{TOURS}{tour['id']}", data={"data": json.dumps({field: None})}, headers=headers)
        assert response.status_code == 400
        assert field in response.json()["detail"]["errors"]["fields"]
