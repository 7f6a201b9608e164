"""
HTTP tests for rescue requests and their admin review.
"""

import pytest

from adopt_core.models import CouponAppliesTo, DiscountType

from conftest import auth_headers

pytestmark = pytest.mark.integration

REQUEST_BODY = {
    "reason": "We already foster <em>guinea pigs</em>",
    "rescue_name": "Hay Day Rescue",
    "rescue_location": "Leeds, UK",
}


@pytest.fixture
async def people(session, user_factory):
    """A committed applicant and admin."""
    applicant = await user_factory.create(session)
    admin = await user_factory.create_admin(session)
    await session.commit()
    return applicant, admin


async def _submit(api_client, settings, user, **overrides):
    return await api_client.post(
        "/rescue-requests", json={**REQUEST_BODY, **overrides}, headers=auth_headers(user, settings)
    )


class TestSubmitRescueRequest:
    """Test POST /rescue-requests."""

    async def test_submit(self, api_client, settings, people):
        applicant, _ = people

        response = await _submit(api_client, settings, applicant)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["reason"] == "We already foster guinea pigs"
        assert body["required_fee"] == "50.00"

        mine = await api_client.get("/rescue-requests/me", headers=auth_headers(applicant, settings))
        assert [r["id"] for r in mine.json()["data"]] == [body["id"]]

    async def test_fee_coupon(self, api_client, session, settings, people, coupon_factory):
        applicant, _ = people
        await coupon_factory.create(
            session,
            code="HALFFEE",
            applies_to=CouponAppliesTo.RESCUE_FEE,
            discount_type=DiscountType.PERCENTAGE,
        )
        await session.commit()

        response = await _submit(api_client, settings, applicant, coupon_code="halffee")

        assert response.status_code == 201
        assert response.json()["required_fee"] == "25.00"
        assert response.json()["coupon_code"] == "HALFFEE"

    async def test_only_one_pending(self, api_client, settings, people):
        applicant, _ = people
        await _submit(api_client, settings, applicant)

        response = await _submit(api_client, settings, applicant)

        assert response.status_code == 400

    async def test_withdraw(self, api_client, settings, people):
        applicant, _ = people
        request_id = (await _submit(api_client, settings, applicant)).json()["id"]
        headers = auth_headers(applicant, settings)

        assert (await api_client.delete(f"/rescue-requests/{request_id}", headers=headers)).status_code == 204
        assert (await api_client.get(f"/rescue-requests/{request_id}", headers=headers)).status_code == 404


class TestReviewRescueRequest:
    """Test the admin approve and reject endpoints."""

    async def test_approve_promotes_applicant(self, api_client, settings, people):
        applicant, admin = people
        request_id = (await _submit(api_client, settings, applicant)).json()["id"]
        admin_headers = auth_headers(admin, settings)

        pending = await api_client.get(
            "/admin/rescue-requests", params={"status": "pending"}, headers=admin_headers
        )
        assert pending.json()["pagination"]["total"] == 1

        approved = await api_client.put(
            f"/admin/rescue-requests/{request_id}/approve",
            json={"admin_notes": "Welcome aboard"},
            headers=admin_headers,
        )
        assert approved.status_code == 200
        body = approved.json()
        assert body["status"] == "approved"
        assert body["admin_notes"] == "Welcome aboard"
        assert body["rescue_id"]

        me = await api_client.get("/users/me", headers=auth_headers(applicant, settings))
        assert me.json()["role"] == "rescue"
        assert me.json()["rescue_id"] == body["rescue_id"]

        rescue = await api_client.get(f"/rescues/{body['rescue_id']}")
        assert rescue.json()["name"] == "Hay Day Rescue"

    async def test_reject_without_body(self, api_client, settings, people):
        applicant, admin = people
        request_id = (await _submit(api_client, settings, applicant)).json()["id"]
        admin_headers = auth_headers(admin, settings)

        rejected = await api_client.put(
            f"/admin/rescue-requests/{request_id}/reject", headers=admin_headers
        )
        assert rejected.json()["status"] == "rejected"
        assert rejected.json()["admin_notes"]

        again = await api_client.put(
            f"/admin/rescue-requests/{request_id}/approve", headers=admin_headers
        )
        assert again.status_code == 400

    async def test_applicant_cannot_review(self, api_client, settings, people):
        applicant, _ = people
        request_id = (await _submit(api_client, settings, applicant)).json()["id"]

        response = await api_client.put(
            f"/admin/rescue-requests/{request_id}/approve",
            headers=auth_headers(applicant, settings),
        )

        assert response.status_code == 403
