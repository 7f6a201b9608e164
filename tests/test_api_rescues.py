"""
HTTP tests for the rescue directory and the rescue dashboard under /rescues/me.
"""

import uuid

import pytest

from conftest import application_form, auth_headers

pytestmark = pytest.mark.integration


class TestRescueDirectory:
    """Test the public rescue endpoints."""

    async def test_list_and_get(self, api_client, session, rescue_factory):
        rescue = await rescue_factory.create(session, name="Cavy Haven")
        await rescue_factory.create(session, name="Chin Corner")
        await session.commit()

        listing = await api_client.get("/rescues", params={"search": "haven"})
        single = await api_client.get(f"/rescues/{rescue.id}")

        assert [r["name"] for r in listing.json()["data"]] == ["Cavy Haven"]
        assert single.json()["id"] == str(rescue.id)

    async def test_rescue_pets_hide_adopted(self, api_client, session, rescue_factory, pet_factory):
        rescue = await rescue_factory.create(session)
        await pet_factory.create(session, rescue.id, name="Home")
        await pet_factory.create(session, rescue.id, name="Gone", is_adopted=True)
        await session.commit()

        response = await api_client.get(f"/rescues/{rescue.id}/pets")

        assert [p["name"] for p in response.json()["data"]] == ["Home"]

    async def test_unknown_rescue(self, api_client):
        response = await api_client.get(f"/rescues/{uuid.uuid4()}/pets")

        assert response.status_code == 404


class TestMyRescue:
    """Test the rescue dashboard."""

    async def test_requires_rescue_role(self, api_client, session, settings, user_factory):
        user = await user_factory.create(session)
        await session.commit()

        response = await api_client.get("/rescues/me", headers=auth_headers(user, settings))

        assert response.status_code == 403

    async def test_get_and_update(self, api_client, session, settings, user_factory):
        owner = await user_factory.create_rescue_user(session)
        await session.commit()
        headers = auth_headers(owner, settings)

        updated = await api_client.put(
            "/rescues/me", json={"description": "Now with <b>more</b> hay"}, headers=headers
        )
        fetched = await api_client.get("/rescues/me", headers=headers)

        assert updated.status_code == 200
        assert fetched.json()["id"] == str(owner.rescue_id)
        assert fetched.json()["description"] == "Now with more hay"

    async def test_pet_lifecycle(self, api_client, session, settings, user_factory):
        owner = await user_factory.create_rescue_user(session)
        await session.commit()
        headers = auth_headers(owner, settings)

        created = await api_client.post(
            "/rescues/me/pets",
            json={
                "name": "Dusty",
                "species": "chinchilla",
                "age": 1,
                "size": "small",
                "description": "Night owl",
                "internal_notes": "Check teeth monthly",
            },
            headers=headers,
        )
        assert created.status_code == 201
        pet_id = created.json()["id"]

        listed = await api_client.get("/rescues/me/pets", headers=headers)
        assert [p["id"] for p in listed.json()["data"]] == [pet_id]
        assert listed.json()["data"][0]["internal_notes"] == "Check teeth monthly"

        updated = await api_client.put(
            f"/rescues/me/pets/{pet_id}",
            json={"age": 2},
            headers={**headers, "If-Match": '"1"'},
        )
        assert updated.json()["version"] == 2

        deleted = await api_client.delete(f"/rescues/me/pets/{pet_id}", headers=headers)
        assert deleted.status_code == 204
        assert (await api_client.get(f"/rescues/me/pets/{pet_id}", headers=headers)).status_code == 404

    async def test_cannot_touch_other_rescues_pet(
        self, api_client, session, settings, user_factory, pet_factory
    ):
        owner = await user_factory.create_rescue_user(session)
        stranger = await user_factory.create_rescue_user(session)
        pet = await pet_factory.create(session, owner.rescue_id)
        await session.commit()

        response = await api_client.get(
            f"/rescues/me/pets/{pet.id}", headers=auth_headers(stranger, settings)
        )

        assert response.status_code == 403

    async def test_review_applications(
        self, api_client, session, settings, user_factory, pet_factory
    ):
        owner = await user_factory.create_rescue_user(session)
        applicant = await user_factory.create(session)
        pet = await pet_factory.create(session, owner.rescue_id)
        await session.commit()
        headers = auth_headers(owner, settings)
        submitted = await api_client.post(
            "/applications",
            json={"pet_id": str(pet.id), "form_data": application_form()},
            headers=auth_headers(applicant, settings),
        )
        application_id = submitted.json()["id"]

        per_pet = await api_client.get(f"/rescues/me/pets/{pet.id}/applications", headers=headers)
        assert per_pet.json()["pagination"]["total"] == 1

        reviewed = await api_client.put(
            f"/rescues/me/applications/{application_id}",
            json={"status": "rejected"},
            headers=headers,
        )
        assert reviewed.json()["status"] == "unsuccessful"

        pending = await api_client.get(
            "/rescues/me/applications", params={"status": "pending"}, headers=headers
        )
        assert pending.json()["pagination"]["total"] == 0


class TestRescueMembers:
    """Test /rescues/me/users."""

    async def test_list_and_remove_member(
        self, api_client, session, settings, user_factory, rescue_factory
    ):
        rescue = await rescue_factory.create(session)
        owner = await user_factory.create_rescue_user(session, rescue=rescue)
        colleague = await user_factory.create_rescue_user(session, rescue=rescue)
        await session.commit()
        headers = auth_headers(owner, settings)

        members = await api_client.get("/rescues/me/users", headers=headers)
        assert {m["id"] for m in members.json()} == {str(owner.id), str(colleague.id)}

        removed = await api_client.delete(f"/rescues/me/users/{colleague.id}", headers=headers)
        assert removed.status_code == 200
        assert removed.json()["role"] == "user"
        assert removed.json()["rescue_id"] is None

    async def test_last_member_stays(self, api_client, session, settings, user_factory):
        owner = await user_factory.create_rescue_user(session)
        await session.commit()

        response = await api_client.delete(
            f"/rescues/me/users/{owner.id}", headers=auth_headers(owner, settings)
        )

        assert response.status_code == 400
