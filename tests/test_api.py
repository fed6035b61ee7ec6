"""
HTTP contract tests

Status codes, error body format and the camelCase JSON shapes of the
approval, scoring and winners endpoints.
"""

import pytest

from conftest import ADMIN_HEADERS, ADMIN_PASSWORD


async def create_event(client, **overrides):
    body = {"name": "Holiday Parade", "city": "Springfield", "judges": ["Alice", "Bob"]}
    body.update(overrides)
    response = await client.post("/api/admin/events", json=body, headers=ADMIN_HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


async def signup(client, event_id, organization="Rotary Club"):
    response = await client.post(
        "/api/entries", json={"organization": organization, "eventId": event_id}
    )
    assert response.status_code == 201, response.text
    return response.json()


async def approve(client, entry_id, float_number=None):
    response = await client.patch(
        "/api/coordinator/approve",
        json={"entryId": entry_id, "approved": True, "floatNumber": float_number},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestErrorResponseFormat:

    async def test_admin_routes_require_password(self, client):
        response = await client.get("/api/admin/events")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    async def test_wrong_password_rejected(self, client):
        response = await client.get(
            "/api/admin/events", headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 401

    async def test_non_ascii_password_is_401(self, client):
        response = await client.get("/api/admin/events", params={"password": "pässwort"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    async def test_password_query_parameter_accepted(self, client):
        response = await client.get(f"/api/admin/events?password={ADMIN_PASSWORD}")
        assert response.status_code == 200

    async def test_judge_routes_require_identity(self, client):
        response = await client.get("/api/floats")
        assert response.status_code == 401

    async def test_not_found_format(self, client):
        response = await client.get("/api/admin/winners?eventId=9999", headers=ADMIN_HEADERS)
        assert response.status_code == 404
        assert response.json() == {"error": "Event not found"}

    async def test_malformed_body_is_400(self, client):
        response = await client.patch(
            "/api/coordinator/approve", json={"approved": True}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Invalid request"
        assert data["details"]


    async def test_oversized_ids_are_400(self, client):
        huge = 10**20
        requests = [
            client.patch(
                "/api/coordinator/approve",
                json={"entryId": huge, "approved": True},
                headers=ADMIN_HEADERS,
            ),
            client.patch(
                "/api/coordinator/floats",
                json={"floatId": huge, "floatNumber": 1},
                headers=ADMIN_HEADERS,
            ),
            client.delete(f"/api/coordinator/approve?entryId={huge}", headers=ADMIN_HEADERS),
            client.get(f"/api/admin/winners?eventId={huge}", headers=ADMIN_HEADERS),
            client.get(f"/api/event-categories?eventId={huge}"),
            client.get("/api/floats", headers={"X-Judge-Id": str(huge)}),
        ]
        for request in requests:
            response = await request
            assert response.status_code == 400, response.text
            assert "error" in response.json()

class TestHealthEndpoints:

    async def test_health(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestEventEndpoints:

    async def test_create_event_seeds_default_categories(self, client):
        event = await create_event(client)

        names = [c["categoryName"] for c in event["categories"]]
        assert names == ["Lighting", "Theme", "Traditions", "Spirit", "Music"]
        assert [j["name"] for j in event["judges"]] == ["Alice", "Bob"]
        assert event["entryCategoryTitle"] == "Best Entry"

    async def test_duplicate_category_conflicts(self, client):
        event = await create_event(client)

        response = await client.post(
            "/api/admin/events/categories",
            json={"eventId": event["id"], "categoryName": "Theme"},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 409

    async def test_add_category_goes_last(self, client):
        event = await create_event(client)

        response = await client.post(
            "/api/admin/events/categories",
            json={"eventId": event["id"], "categoryName": "Costumes", "hasNoneOption": False},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["displayOrder"] == 5
        assert data["hasNoneOption"] is False

    async def test_public_event_categories(self, client):
        event = await create_event(client, categories=[{"name": "Taste"}, {"name": "Stand"}])

        response = await client.get(f"/api/event-categories?eventId={event['id']}")
        assert response.status_code == 200
        assert [c["categoryName"] for c in response.json()] == ["Taste", "Stand"]

    async def test_update_event_title(self, client):
        event = await create_event(client)

        response = await client.patch(
            "/api/admin/events",
            json={"id": event["id"], "entryCategoryTitle": "Best Float"},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["entryCategoryTitle"] == "Best Float"
        assert response.json()["name"] == "Holiday Parade"

    async def test_delete_event_reports_counts(self, client):
        event = await create_event(client)
        await signup(client, event["id"])

        response = await client.delete(
            f"/api/admin/events?id={event['id']}", headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        assert response.json()["deleted"] == {"floats": 1, "scores": 0, "categories": 5, "judges": 2}


class TestApprovalEndpoints:

    async def test_signup_is_pending(self, client):
        event = await create_event(client)
        entry = await signup(client, event["id"])

        assert entry["approved"] is False
        response = await client.get("/api/coordinator/approve", headers=ADMIN_HEADERS)
        assert [e["id"] for e in response.json()] == [entry["id"]]

    async def test_signup_requires_organization(self, client):
        event = await create_event(client)
        response = await client.post(
            "/api/entries", json={"organization": "  ", "eventId": event["id"]}
        )
        assert response.status_code == 400

    async def test_approve_with_taken_float_number_shifts(self, client):
        event = await create_event(client)
        first = await signup(client, event["id"], "A")
        second = await signup(client, event["id"], "B")
        await approve(client, first["id"], 1)

        approved = await approve(client, second["id"], 1)

        assert approved["floatNumber"] == 1
        response = await client.get(
            f"/api/coordinator/floats?eventId={event['id']}", headers=ADMIN_HEADERS
        )
        order = [(e["id"], e["floatNumber"]) for e in response.json()]
        assert order == [(second["id"], 1), (first["id"], 2)]

    async def test_zero_float_number_is_400(self, client):
        event = await create_event(client)
        entry = await signup(client, event["id"])

        response = await client.patch(
            "/api/coordinator/approve",
            json={"entryId": entry["id"], "approved": True, "floatNumber": 0},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("float_number", ["100000000000000000000", "1e400", "2147483648"])
    async def test_float_number_beyond_column_range_is_400(self, client, float_number):
        event = await create_event(client)
        entry = await signup(client, event["id"])

        response = await client.patch(
            "/api/coordinator/approve",
            content=f'{{"entryId": {entry["id"]}, "approved": true, "floatNumber": {float_number}}}',
            headers={**ADMIN_HEADERS, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    async def test_scored_entry_cannot_move_events(self, client):
        event = await create_event(client)
        other = await create_event(client, name="Fair")
        entry = await signup(client, event["id"])
        await approve(client, entry["id"], 1)
        await client.post(
            "/api/scores",
            json={"floatId": entry["id"], "scores": {"Lighting": 9}},
            headers={"X-Judge-Id": str(event["judges"][0]["id"])},
        )

        response = await client.patch(
            "/api/coordinator/approve",
            json={"entryId": entry["id"], "approved": True, "eventId": other["id"]},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 409

    async def test_delete_from_running_order(self, client):
        event = await create_event(client)
        entry = await signup(client, event["id"])
        await approve(client, entry["id"], 1)

        response = await client.delete(
            f"/api/coordinator/floats?floatId={entry['id']}", headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

        response = await client.get(
            f"/api/coordinator/floats?eventId={event['id']}", headers=ADMIN_HEADERS
        )
        assert response.json() == []

    async def test_delete_unknown_float_is_404(self, client):
        response = await client.delete("/api/coordinator/floats?floatId=4242", headers=ADMIN_HEADERS)
        assert response.status_code == 404

    async def test_status_and_location_live_in_metadata(self, client):
        event = await create_event(client)
        entry = await signup(client, event["id"])

        response = await client.patch(
            f"/api/coordinator/entries/{entry['id']}/status",
            json={"status": "checked-in"},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["metadata"]["status"] == "checked-in"

        response = await client.patch(
            f"/api/coordinator/entries/{entry['id']}/location",
            json={"location": {"zone": "B", "spot": 4}},
            headers=ADMIN_HEADERS,
        )
        metadata = response.json()["metadata"]
        assert metadata["location"] == {"zone": "B", "spot": 4}
        assert metadata["statusHistory"][0]["status"] == "checked-in"

    async def test_unknown_status_rejected(self, client):
        event = await create_event(client)
        entry = await signup(client, event["id"])

        response = await client.patch(
            f"/api/coordinator/entries/{entry['id']}/status",
            json={"status": "lost"},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 400


class TestScoringEndpoints:

    async def test_score_submit_and_winners(self, client):
        event = await create_event(client, categories=[{"name": "Taste"}, {"name": "Stand"}])
        alice, bob = event["judges"]
        entry = await signup(client, event["id"], "Lemonade Co")
        await approve(client, entry["id"], 1)

        for judge, values in ((alice, {"Taste": 20, "Stand": 10}), (bob, {"Taste": 15, "Stand": 12})):
            response = await client.post(
                "/api/scores",
                json={"floatId": entry["id"], "scores": values},
                headers={"X-Judge-Id": str(judge["id"])},
            )
            assert response.status_code == 200, response.text

        response = await client.get(
            f"/api/admin/winners?eventId={event['id']}", headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        data = response.json()
        totals = {c["category"]: [w["total"] for w in c["winners"]] for c in data["categories"]}
        assert totals == {"Taste": [35], "Stand": [22]}
        assert data["overall"]["winners"][0]["total"] == 57
        assert data["overall"]["category"] == "Best Entry"

    async def test_judge_sees_entries_with_status(self, client):
        event = await create_event(client)
        alice = event["judges"][0]
        entry = await signup(client, event["id"])
        await approve(client, entry["id"], 999)

        response = await client.get("/api/floats", headers={"Cookie": f"judgeId={alice['id']}"})
        assert response.status_code == 200
        rows = response.json()
        assert rows[0]["floatNumber"] == 999
        assert rows[0]["status"] == "not_started"

    async def test_locked_judge_gets_403(self, client):
        event = await create_event(client)
        alice = event["judges"][0]
        entry = await signup(client, event["id"])
        await approve(client, entry["id"], 1)
        headers = {"X-Judge-Id": str(alice["id"])}

        response = await client.post("/api/judge/submit", headers=headers)
        assert response.status_code == 200

        response = await client.patch(
            "/api/scores", json={"floatId": entry["id"], "scores": {"Theme": 4}}, headers=headers
        )
        assert response.status_code == 403

        response = await client.post(
            "/api/admin/judges/unlock", json={"judgeId": alice["id"]}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 200

        response = await client.patch(
            "/api/scores", json={"floatId": entry["id"], "scores": {"Theme": 4}}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["total"] == 4

    async def test_scored_entry_and_judge_cannot_be_deleted(self, client):
        event = await create_event(client)
        alice = event["judges"][0]
        entry = await signup(client, event["id"])
        await approve(client, entry["id"], 1)
        await client.post(
            "/api/scores",
            json={"floatId": entry["id"], "scores": {"Lighting": 9}},
            headers={"X-Judge-Id": str(alice["id"])},
        )

        response = await client.delete(
            f"/api/coordinator/approve?entryId={entry['id']}", headers=ADMIN_HEADERS
        )
        assert response.status_code == 409

        response = await client.delete(
            f"/api/admin/events/judges?eventId={event['id']}&judgeId={alice['id']}",
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 409

        response = await client.get("/api/admin/judges", headers=ADMIN_HEADERS)
        counts = {j["name"]: j["scoreCount"] for j in response.json()}
        assert counts == {"Alice": 1, "Bob": 0}

    async def test_admin_score_listing(self, client):
        event = await create_event(client, categories=[{"name": "Taste"}, {"name": "Stand"}])
        alice = event["judges"][0]
        entry = await signup(client, event["id"])
        await approve(client, entry["id"], 1)
        await client.post(
            "/api/scores",
            json={"floatId": entry["id"], "scores": {"Taste": 7}},
            headers={"X-Judge-Id": str(alice["id"])},
        )

        response = await client.get(
            f"/api/admin/scores?eventId={event['id']}", headers=ADMIN_HEADERS
        )
        data = response.json()
        assert data["categories"] == ["Taste", "Stand"]
        assert data["scores"][0]["scores"] == {"Taste": 7, "Stand": None}
        assert data["scores"][0]["judgeName"] == "Alice"

    async def test_category_delete_keeps_totals_in_step(self, client):
        event = await create_event(client, categories=[{"name": "Taste"}, {"name": "Stand"}])
        alice = event["judges"][0]
        stand = next(c for c in event["categories"] if c["categoryName"] == "Stand")
        entry = await signup(client, event["id"])
        await approve(client, entry["id"], 1)
        await client.post(
            "/api/scores",
            json={"floatId": entry["id"], "scores": {"Taste": 7, "Stand": 9}},
            headers={"X-Judge-Id": str(alice["id"])},
        )

        response = await client.delete(
            f"/api/admin/events/categories?eventId={event['id']}&categoryId={stand['id']}",
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 200

        response = await client.get(
            f"/api/admin/scores?eventId={event['id']}", headers=ADMIN_HEADERS
        )
        row = response.json()["scores"][0]
        assert row["scores"] == {"Taste": 7}
        assert row["total"] == 7


class TestLookupEndpoints:

    async def test_event_judges_sorted_by_name(self, client):
        event = await create_event(client, judges=["Zed", "Alice", "Mona"])
        await create_event(client, name="Fair", judges=["Other"])

        response = await client.get(f"/api/judges?eventId={event['id']}")
        assert response.status_code == 200
        assert [j["name"] for j in response.json()] == ["Alice", "Mona", "Zed"]
        assert all(j["submitted"] is False for j in response.json())

    async def test_event_judges_requires_event_id(self, client):
        response = await client.get("/api/judges")
        assert response.status_code == 400

    async def test_entries_by_email(self, client):
        event = await create_event(client)
        await client.post(
            "/api/entries",
            json={"organization": "Scouts", "email": "troop@example.com", "eventId": event["id"]},
        )
        await signup(client, event["id"], "Band")

        response = await client.get("/api/entries", params={"email": " troop@example.com "})
        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [e["organization"] for e in entries] == ["Scouts"]

    async def test_entries_without_email_is_400(self, client):
        response = await client.get("/api/entries")
        assert response.status_code == 400
        assert response.json() == {"error": "Email parameter is required"}


class TestParticipantEndpoints:

    async def test_search_collapses_repeat_participants(self, client):
        event = await create_event(client)
        for organization, email in (
            ("Scouts", "troop@example.com"),
            ("Scouts", "troop@example.com"),
            ("Scouts", "leader@example.com"),
            ("Garden Club", None),
        ):
            body = {"organization": organization, "email": email, "eventId": event["id"]}
            response = await client.post("/api/entries", json=body)
            assert response.status_code == 201

        response = await client.get("/api/coordinator/participants", headers=ADMIN_HEADERS)
        assert response.status_code == 200
        participants = response.json()
        assert len(participants) == 3
        assert [p["id"] for p in participants] == [1, 2, 3]

        response = await client.get(
            "/api/coordinator/participants", params={"q": "scout", "limit": 1}, headers=ADMIN_HEADERS
        )
        participants = response.json()
        assert len(participants) == 1
        assert participants[0]["organization"] == "Scouts"

    async def test_search_requires_password(self, client):
        response = await client.get("/api/coordinator/participants")
        assert response.status_code == 401

    async def test_create_from_previous_participant(self, client):
        event = await create_event(client)
        await client.post(
            "/api/entries",
            json={
                "organization": "Scouts",
                "email": "troop@example.com",
                "phone": "555-0100",
                "eventId": event["id"],
            },
        )
        next_year = await create_event(client, name="Next Year")

        response = await client.post(
            "/api/coordinator/participants",
            json={
                "participantId": 1,
                "organization": "Scouts",
                "email": "troop@example.com",
                "eventId": next_year["id"],
                "floatNumber": 3,
            },
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Entry created from participant successfully"
        entry = data["entry"]
        assert entry["phone"] == "555-0100"
        assert entry["eventId"] == next_year["id"]
        assert entry["approved"] is False
        assert entry["floatNumber"] == 3

    async def test_create_from_direct_details(self, client):
        event = await create_event(client)

        response = await client.post(
            "/api/coordinator/participants",
            json={"organization": "Garden Club", "firstName": "Ann", "eventId": event["id"]},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["entry"]["firstName"] == "Ann"

    async def test_unknown_participant_is_404(self, client):
        await create_event(client)

        response = await client.post(
            "/api/coordinator/participants",
            json={"participantId": 1, "organization": "Nobody"},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 404

    async def test_missing_participant_and_organization_is_400(self, client):
        response = await client.post(
            "/api/coordinator/participants", json={"eventId": 1}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 400
