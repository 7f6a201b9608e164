"""
HTTP tests for the adoption application endpoints.
"""

import pytest

from conftest import application_form, auth_headers

pytestmark = pytest.mark.integration


@pytest.fixture
async def listing(session, user_factory, pet_factory):
    """Committed rescue user, pet, applicant and admin."""
    owner = await user_factory.create_rescue_user(session)
    pet = await pet_factory.create(session, owner.rescue_id)
    applicant = await user_factory.create(session)
    admin = await user_factory.create_admin(session)
    await session.commit()
    return owner, pet, applicant, admin


async def _submit(api_client, settings, applicant, pet, **form_overrides):
    return await api_client.post(
        "/applications",
        json={"pet_id": str(pet.id), "form_data": application_form(**form_overrides)},
        headers=auth_headers(applicant, settings),
    )


class TestSubmit:
    """Test POST /applications."""

    async def test_submit(self, api_client, settings, listing):
        _, pet, applicant, _ = listing

        response = await _submit(api_client, settings, applicant, pet)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["pet_id"] == str(pet.id)
        assert body["user_id"] == str(applicant.id)

    async def test_missing_consent(self, api_client, settings, listing):
        _, pet, applicant, _ = listing

        response = await _submit(api_client, settings, applicant, pet, consent=False)

        assert response.status_code == 422
        errors = response.json()["error"]["details"]["validation_errors"]
        assert "form_data.consent" in errors

    async def test_second_pending_application(self, api_client, settings, listing):
        _, pet, applicant, _ = listing
        await _submit(api_client, settings, applicant, pet)

        response = await _submit(api_client, settings, applicant, pet)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BUSINESS_RULE_ERROR"


class TestReview:
    """Test reading and deciding applications."""

    async def test_owner_approves(self, api_client, settings, listing):
        owner, pet, applicant, _ = listing
        application_id = (await _submit(api_client, settings, applicant, pet)).json()["id"]

        response = await api_client.patch(
            f"/applications/{application_id}/status",
            json={"status": "approved"},
            headers=auth_headers(owner, settings),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "accepted"

    async def test_applicant_cannot_decide(self, api_client, settings, listing):
        _, pet, applicant, _ = listing
        application_id = (await _submit(api_client, settings, applicant, pet)).json()["id"]

        response = await api_client.patch(
            f"/applications/{application_id}/status",
            json={"status": "accepted"},
            headers=auth_headers(applicant, settings),
        )

        assert response.status_code == 403

    async def test_lists_by_role(self, api_client, settings, listing):
        owner, pet, applicant, admin = listing
        await _submit(api_client, settings, applicant, pet)

        for viewer in (owner, applicant, admin):
            response = await api_client.get("/applications", headers=auth_headers(viewer, settings))
            assert response.json()["pagination"]["total"] == 1

        per_pet = await api_client.get(
            f"/applications/pet/{pet.id}", headers=auth_headers(owner, settings)
        )
        assert per_pet.json()["pagination"]["total"] == 1

    async def test_status_filter(self, api_client, settings, listing):
        owner, pet, applicant, _ = listing
        await _submit(api_client, settings, applicant, pet)
        headers = auth_headers(owner, settings)

        pending = await api_client.get("/applications", params={"status": "pending"}, headers=headers)
        rejected = await api_client.get("/applications", params={"status": "rejected"}, headers=headers)
        unknown = await api_client.get("/applications", params={"status": "maybe"}, headers=headers)

        assert pending.json()["pagination"]["total"] == 1
        assert rejected.json()["pagination"]["total"] == 0
        assert unknown.status_code == 400

    async def test_stranger_cannot_read(self, api_client, session, settings, listing, user_factory):
        _, pet, applicant, _ = listing
        stranger = await user_factory.create(session)
        await session.commit()
        application_id = (await _submit(api_client, settings, applicant, pet)).json()["id"]

        response = await api_client.get(
            f"/applications/{application_id}", headers=auth_headers(stranger, settings)
        )

        assert response.status_code == 403


class TestDetailsAndDelete:
    """Test applicant edits and admin deletion."""

    async def test_applicant_adds_details(self, api_client, settings, listing):
        _, pet, applicant, _ = listing
        application_id = (await _submit(api_client, settings, applicant, pet)).json()["id"]

        response = await api_client.put(
            f"/applications/{application_id}",
            json={"additional_details": "We have a vet nearby"},
            headers=auth_headers(applicant, settings),
        )

        assert response.status_code == 200
        assert response.json()["form_data"]["additional_details"] == "We have a vet nearby"

    async def test_admin_deletes(self, api_client, settings, listing):
        _, pet, applicant, admin = listing
        application_id = (await _submit(api_client, settings, applicant, pet)).json()["id"]

        forbidden = await api_client.delete(
            f"/applications/{application_id}", headers=auth_headers(applicant, settings)
        )
        deleted = await api_client.delete(
            f"/applications/{application_id}", headers=auth_headers(admin, settings)
        )

        assert forbidden.status_code == 403
        assert deleted.status_code == 204
        missing = await api_client.get(
            f"/applications/{application_id}", headers=auth_headers(admin, settings)
        )
        assert missing.status_code == 404
