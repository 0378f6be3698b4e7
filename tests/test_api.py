"""HTTP contract: status codes, error shape and identity headers."""
from pathlib import Path

from formco.config import Settings


def headers(actor) -> dict[str, str]:
    return {"X-Actor-Role": str(actor.role), "X-Actor-Id": str(actor.id)}


async def test_registration_and_membership(client):
    org = await client.post("/organizations", json={"name": "Gamma Institute", "email": "info@gamma.edu"})
    assert org.status_code == 201
    secret_code = org.json()["secret_code"]

    person = await client.post("/organizers", json={"name": "Omar", "email": "omar@gamma.edu"})
    assert person.status_code == 201
    me = {"X-Actor-Role": "organizer", "X-Actor-Id": person.json()["id"]}

    bad = await client.post("/organizers/me/join", json={"secret_code": "nope"}, headers=me)
    assert bad.status_code == 400
    assert bad.json()["error"] == "invalid_secret_code"

    joined = await client.post("/organizers/me/join", json={"secret_code": secret_code}, headers=me)
    assert joined.status_code == 200
    assert joined.json()["organization_ids"] == [org.json()["id"]]

    again = await client.post("/organizers/me/join", json={"secret_code": secret_code}, headers=me)
    assert again.status_code == 409

    left = await client.post("/organizers/me/leave", json={"organization_id": org.json()["id"]}, headers=me)
    assert left.status_code == 200 and left.json()["organization_ids"] == []

    duplicate = await client.post("/organizers", json={"name": "Omar", "email": "OMAR@gamma.edu"})
    assert duplicate.status_code == 409


async def test_identity_headers_required(client, form):
    response = await client.post("/competitions", json=form())
    assert response.status_code == 401


async def test_competition_validation_returns_all_details(client, organizer, form):
    response = await client.post(
        "/competitions", json=form(title="", mode="hybrid"), headers=headers(organizer)
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert "title is required" in body["details"]
    assert "Location is required for onsite or hybrid events" in body["details"]


async def test_apply_flow(client, organizer, student, form):
    created = await client.post("/competitions", json=form(isTeamEvent=True, teamSize={"min": 2, "max": 3}),
                                headers=headers(organizer))
    assert created.status_code == 201
    comp_id = created.json()["id"]

    listing = await client.get("/competitions")
    assert listing.json()["total"] == 1
    assert listing.json()["items"][0]["status"] == "Open"
    assert (await client.get(f"/competitions/{comp_id}/status")).json()["status"] == "Open"

    team = {
        "team_name": "Null Pointers",
        "team_members": [{"name": "A", "email": "a@uni.edu"}, {"name": "B", "email": "b@uni.edu"}],
    }
    too_small = await client.post(
        f"/competitions/{comp_id}/apply", json={**team, "team_members": team["team_members"][:1]},
        headers=headers(student),
    )
    assert too_small.status_code == 400
    assert too_small.json()["error"] == "team_size_out_of_range"

    applied = await client.post(f"/competitions/{comp_id}/apply", json=team, headers=headers(student))
    assert applied.status_code == 201
    application = applied.json()
    assert application["verification_code"]

    duplicate = await client.post(f"/competitions/{comp_id}/apply", json=team, headers=headers(student))
    assert duplicate.status_code == 409
    assert duplicate.json()["application_id"] == application["id"]

    check = await client.get(f"/competitions/{comp_id}/check-application", headers=headers(student))
    assert check.json()["has_applied"] is True

    forbidden = await client.patch(
        f"/applications/{application['id']}", json={"attended": True}, headers=headers(student)
    )
    assert forbidden.status_code == 403

    paid = await client.patch(
        f"/applications/{application['id']}/payment", json={"payment_verified": True}, headers=headers(organizer)
    )
    assert paid.status_code == 200 and paid.json()["payment_date"] is not None

    accepted = await client.patch(
        f"/applications/{application['id']}", json={"accepted": "accepted"}, headers=headers(organizer)
    )
    assert accepted.json()["accepted"] == "accepted"
    assert accepted.json()["payment_verified"] is True

    two_axes = await client.patch(
        f"/applications/{application['id']}", json={"attended": True, "accepted": "rejected"},
        headers=headers(organizer),
    )
    assert two_axes.status_code == 400

    mine = await client.get("/students/me/applications", headers=headers(student))
    assert [row["id"] for row in mine.json()] == [application["id"]]

    roster = await client.get(f"/competitions/{comp_id}/applications", headers=headers(organizer))
    assert len(roster.json()) == 1

    deleted = await client.delete(f"/competitions/{comp_id}", headers=headers(organizer))
    assert deleted.status_code == 204
    assert (await client.get(f"/applications/{application['id']}", headers=headers(student))).status_code == 404
    assert (await client.get(f"/competitions/{comp_id}")).status_code == 404


async def test_receipt_upload(client, student):
    response = await client.post(
        "/receipts",
        files={"file": ("bank slip.png", b"\x89PNG fake", "image/png")},
        headers=headers(student),
    )
    assert response.status_code == 201
    path = response.json()["receipt_image"]
    assert path.startswith("/receipts/") and path.endswith("-bank_slip.png")
    stored = Settings().receipts_dir / Path(path).name
    assert stored.read_bytes() == b"\x89PNG fake"


async def test_organization_manages_its_organizers(client, organization, organizer):
    listed = await client.get("/organizations/me/organizers", headers=headers(organization))
    assert listed.status_code == 200
    assert [o["id"] for o in listed.json()] == [str(organizer.id)]

    mine = await client.get("/organizers/me/organizations", headers=headers(organizer))
    assert [o["id"] for o in mine.json()] == [str(organization.id)]

    directory = await client.get("/organizations")
    assert directory.status_code == 200
    assert [o["name"] for o in directory.json()] == ["Acme University"]
    assert "secret_code" not in directory.json()[0]

    denied = await client.get("/organizations/me/organizers", headers=headers(organizer))
    assert denied.status_code == 403

    removed = await client.delete(f"/organizations/me/organizers/{organizer.id}", headers=headers(organization))
    assert removed.status_code == 200 and removed.json() == []

    again = await client.delete(f"/organizations/me/organizers/{organizer.id}", headers=headers(organization))
    assert again.status_code == 400
    assert again.json()["error"] == "organizer_not_linked"

    assert (await client.get("/organizers/me/organizations", headers=headers(organizer))).json() == []


async def test_audit_trail_is_scoped_to_caller(client, organizer, student, form):
    created = await client.post("/competitions", json=form(), headers=headers(organizer))
    comp_id = created.json()["id"]
    await client.post(f"/competitions/{comp_id}/apply", json={"name": "Sam", "email": "sam@student.edu"},
                      headers=headers(student))

    trail = await client.get("/me/audit-logs", headers=headers(student))
    assert trail.status_code == 200
    body = trail.json()
    assert body["total"] == 1
    assert body["items"][0]["action"] == "services.application.submit"
    assert body["items"][0]["actor_id"] == str(student.id)

    filtered = await client.get(
        "/me/audit-logs", params={"action": "services.competition.create_competition"}, headers=headers(organizer)
    )
    assert filtered.json()["total"] == 1
    assert (await client.get("/me/audit-logs")).status_code == 401
