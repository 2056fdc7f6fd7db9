"""
SConf Backend - Participation API Tests
=======================================

What:  /api/participations CRUD, foreign-key enforcement, the joined
       listing, metadata regex search and the bulk status transition.
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import DBAPIError

from sconf.database import get_db_session
from sconf.exceptions import DatabaseError, ValidationError
from sconf.services.participation_service import participation_service

# Past the INTEGER column range
HUGE = "99999999999999999999"


class DriverError(Exception):
    """Stands in for a driver error carrying a PostgreSQL SQLSTATE."""

    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.fixture
def linked(create_scientist, create_conference):
    """Creates one scientist and one conference; returns their ids."""
    async def _linked(**conference_overrides):
        scientist = await create_scientist()
        conference = await create_conference(**conference_overrides)
        return scientist["id"], conference["id"]
    return _linked


class TestParticipationCrud:

    @pytest.mark.asyncio
    async def test_create_defaults_status_to_confirmed(self, test_client, linked):
        scientist_id, conference_id = await linked()

        response = await test_client.post("/api/participations", json={
            "talkTitle": "Biotech Innovations",
            "participationType": "Workshop",
            "durationMinutes": 90,
            "scientistId": scientist_id,
            "conferenceId": conference_id,
            "metadata": {"rating": 4, "tags": ["bio"]},
        })

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "confirmed"
        assert body["metadata"] == {"rating": 4, "tags": ["bio"]}

        fetched = (await test_client.get(f"/api/participations/{body['id']}")).json()
        assert fetched == body

    @pytest.mark.asyncio
    async def test_create_without_metadata_reports_null(self, linked, create_participation):
        scientist_id, conference_id = await linked()
        participation = await create_participation(scientist_id, conference_id)
        assert participation["metadata"] is None

    @pytest.mark.asyncio
    async def test_unknown_conference_is_400_and_nothing_created(self, test_client, create_scientist):
        scientist = await create_scientist()

        response = await test_client.post("/api/participations", json={
            "talkTitle": "Ghost",
            "participationType": "Poster",
            "durationMinutes": 10,
            "scientistId": scientist["id"],
            "conferenceId": 9999,
        })

        assert response.status_code == 400
        assert response.json()["code"] == "constraint_violation"
        listing = (await test_client.get("/api/participations")).json()
        assert listing["pagination"]["total"] == 0

    @pytest.mark.asyncio
    async def test_zero_duration_is_400(self, test_client, linked):
        scientist_id, conference_id = await linked()
        response = await test_client.post("/api/participations", json={
            "talkTitle": "Short", "participationType": "Poster", "durationMinutes": 0,
            "scientistId": scientist_id, "conferenceId": conference_id,
        })
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_to_unknown_scientist_is_400(self, test_client, linked, create_participation):
        scientist_id, conference_id = await linked()
        participation = await create_participation(scientist_id, conference_id)

        response = await test_client.put(
            f"/api/participations/{participation['id']}", json={"scientistId": 5555}
        )

        assert response.status_code == 400
        fetched = (await test_client.get(f"/api/participations/{participation['id']}")).json()
        assert fetched["scientistId"] == scientist_id

    @pytest.mark.asyncio
    async def test_update_can_clear_metadata(self, test_client, linked, create_participation):
        scientist_id, conference_id = await linked()
        participation = await create_participation(
            scientist_id, conference_id, metadata={"rating": 1}
        )

        response = await test_client.put(
            f"/api/participations/{participation['id']}",
            json={"metadata": None, "status": "cancelled"},
        )

        assert response.status_code == 200
        assert response.json()["metadata"] is None
        assert response.json()["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_delete_then_scientist_can_be_deleted(
        self, test_client, linked, create_participation
    ):
        scientist_id, conference_id = await linked()
        participation = await create_participation(scientist_id, conference_id)

        blocked = await test_client.delete(f"/api/scientists/{scientist_id}")
        assert blocked.status_code == 400

        deleted = await test_client.delete(f"/api/participations/{participation['id']}")
        assert deleted.json() == {"message": "Participation deleted successfully"}

        assert (await test_client.delete(f"/api/scientists/{scientist_id}")).status_code == 200

    @pytest.mark.asyncio
    async def test_missing_participation_404(self, test_client):
        response = await test_client.get("/api/participations/31337")
        assert response.status_code == 404
        assert response.json()["error"] == "Participation not found"

    @pytest.mark.asyncio
    async def test_id_beyond_integer_column_is_400(self, test_client):
        assert (await test_client.get(f"/api/participations/{HUGE}")).status_code == 400
        assert (await test_client.delete(f"/api/participations/{HUGE}")).status_code == 400

    @pytest.mark.asyncio
    async def test_foreign_key_beyond_integer_column_is_400(self, test_client, create_scientist):
        scientist = await create_scientist()
        response = await test_client.post("/api/participations", json={
            "talkTitle": "Overflow", "participationType": "Poster", "durationMinutes": 10,
            "scientistId": scientist["id"], "conferenceId": 2**31,
        })
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"


class TestParticipationList:

    @pytest.mark.asyncio
    async def test_filters(self, test_client, linked, create_participation):
        s1, c1 = await linked()
        s2, c2 = await linked()
        await create_participation(s1, c1, participationType="Keynote", status="confirmed")
        await create_participation(s1, c2, participationType="Poster", status="pending")
        await create_participation(s2, c2, participationType="Keynote", status="pending")

        by_type = (await test_client.get(
            "/api/participations", params={"participationType": "key"}
        )).json()
        assert by_type["pagination"]["total"] == 2

        by_scientist_and_status = (await test_client.get(
            "/api/participations", params={"scientistId": str(s1), "status": "PEND"}
        )).json()
        assert [p["conferenceId"] for p in by_scientist_and_status["data"]] == [c2]

    @pytest.mark.asyncio
    async def test_non_integer_exact_filter_is_400(self, test_client):
        response = await test_client.get("/api/participations", params={"scientistId": "x"})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "scientistId"

    @pytest.mark.asyncio
    async def test_exact_filter_beyond_integer_column_is_400(self, test_client):
        response = await test_client.get(
            "/api/participations", params={"scientistId": HUGE}
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "scientistId"

    @pytest.mark.asyncio
    async def test_with_details_embeds_summaries(self, test_client, create_scientist, create_conference,
                                                 create_participation):
        scientist = await create_scientist(fullName="Niels Bohr", country="Denmark", email="nb@nbi.dk")
        conference = await create_conference(name="Solvay", country="Belgium", location="Brussels")
        await create_participation(scientist["id"], conference["id"], talkTitle="Complementarity")

        response = await test_client.get("/api/participations/with-details")

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}
        row = body["data"][0]
        assert row["talkTitle"] == "Complementarity"
        assert row["scientist"] == {
            "id": scientist["id"],
            "fullName": "Niels Bohr",
            "country": "Denmark",
            "organization": scientist["organization"],
        }
        assert row["conference"]["name"] == "Solvay"
        assert row["conference"]["location"] == "Brussels"
        assert "capacity" not in row["conference"]

    @pytest.mark.asyncio
    async def test_with_details_honours_filters_and_sorting(
        self, test_client, linked, create_participation
    ):
        s1, c1 = await linked()
        for minutes in (20, 60, 40):
            await create_participation(s1, c1, durationMinutes=minutes)

        body = (await test_client.get("/api/participations/with-details", params={
            "sortBy": "durationMinutes", "sortOrder": "desc", "limit": "2",
        })).json()

        assert [p["durationMinutes"] for p in body["data"]] == [60, 40]
        assert body["pagination"]["pages"] == 2


class TestMetadataSearch:

    @pytest.mark.asyncio
    async def test_case_insensitive_regex_with_joined_names(
        self, test_client, create_scientist, create_conference, create_participation
    ):
        scientist = await create_scientist(fullName="Rosalind Franklin")
        conference = await create_conference(name="Structure Days")
        match = await create_participation(
            scientist["id"], conference["id"],
            metadata={"slidesUrl": "https://example.com/slides/7", "tags": ["DNA", "Keynote"]},
        )
        await create_participation(
            scientist["id"], conference["id"], metadata={"tags": ["proteins"]},
        )
        await create_participation(scientist["id"], conference["id"])

        response = await test_client.get("/api/participations/search", params={"q": "dna|slides/7"})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"page": 1, "limit": 10}
        assert [row["id"] for row in body["data"]] == [match["id"]]
        assert body["data"][0]["scientistName"] == "Rosalind Franklin"
        assert body["data"][0]["conferenceName"] == "Structure Days"
        assert body["data"][0]["metadata"]["tags"] == ["DNA", "Keynote"]

    @pytest.mark.asyncio
    async def test_search_paginates_in_id_order(self, test_client, linked, create_participation):
        s1, c1 = await linked()
        created = [
            await create_participation(s1, c1, metadata={"rating": 5})
            for _ in range(3)
        ]

        body = (await test_client.get(
            "/api/participations/search", params={"q": "rating", "page": "2", "limit": "2"}
        )).json()

        assert [row["id"] for row in body["data"]] == [created[2]["id"]]

    @pytest.mark.asyncio
    async def test_missing_query_is_400(self, test_client):
        response = await test_client.get("/api/participations/search")
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "q"

    @pytest.mark.asyncio
    async def test_invalid_regex_is_400(self, test_client):
        response = await test_client.get("/api/participations/search", params={"q": "([unclosed"})
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_page_beyond_integer_column_is_400(self, test_client):
        response = await test_client.get(
            "/api/participations/search", params={"q": "x", "page": HUGE}
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "page"

    @pytest.mark.asyncio
    async def test_pattern_rejected_by_database_is_validation_error(self, mock_db_session):
        mock_db_session.execute.side_effect = DBAPIError(
            "SELECT", {}, DriverError("invalid regular expression", "2201B")
        )

        with pytest.raises(ValidationError) as exc_info:
            await participation_service.search_metadata(mock_db_session, "(?P<n>x)", {})

        assert exc_info.value.field == "q"

    @pytest.mark.asyncio
    async def test_other_database_failures_stay_database_errors(self, mock_db_session):
        mock_db_session.execute.side_effect = DBAPIError(
            "SELECT", {}, DriverError("connection reset", "08006")
        )

        with pytest.raises(DatabaseError):
            await participation_service.search_metadata(mock_db_session, "rating", {})

    @pytest.mark.asyncio
    async def test_pattern_rejected_by_database_is_400_over_http(self, app, test_client):
        async def rejecting_session():
            session = AsyncMock()
            session.execute.side_effect = DBAPIError(
                "SELECT", {}, DriverError("invalid regular expression", "2201B")
            )
            yield session

        app.dependency_overrides[get_db_session] = rejecting_session
        try:
            response = await test_client.get(
                "/api/participations/search", params={"q": "(?P<n>x)"}
            )
        finally:
            app.dependency_overrides.pop(get_db_session)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "q"


class TestBulkStatusUpdate:

    @pytest.mark.asyncio
    async def test_moves_matching_participations_only(
        self, test_client, create_scientist, create_conference, create_participation
    ):
        scientist = await create_scientist()
        target = await create_conference()
        other = await create_conference()
        p1 = await create_participation(scientist["id"], target["id"], status="pending")
        p2 = await create_participation(scientist["id"], target["id"], status="pending")
        p3 = await create_participation(scientist["id"], target["id"], status="confirmed")
        p4 = await create_participation(scientist["id"], other["id"], status="pending")

        response = await test_client.patch("/api/participations/bulk-update-status", json={
            "conferenceId": target["id"],
            "oldStatus": "pending",
            "newStatus": "confirmed",
        })

        assert response.status_code == 200
        assert response.json() == {"updated": 2}

        statuses = {
            p["id"]: (await test_client.get(f"/api/participations/{p['id']}")).json()["status"]
            for p in (p1, p2, p3, p4)
        }
        assert statuses == {
            p1["id"]: "confirmed",
            p2["id"]: "confirmed",
            p3["id"]: "confirmed",
            p4["id"]: "pending",
        }

    @pytest.mark.asyncio
    async def test_before_date_cutoff(self, test_client, linked, create_participation):
        scientist_id, conference_id = await linked(date="2030-06-01T00:00:00Z")
        await create_participation(scientist_id, conference_id, status="pending")

        too_early = await test_client.patch("/api/participations/bulk-update-status", json={
            "conferenceId": conference_id,
            "oldStatus": "pending",
            "newStatus": "archived",
            "beforeDate": "2030-01-01T00:00:00Z",
        })
        assert too_early.json() == {"updated": 0}

        after = await test_client.patch("/api/participations/bulk-update-status", json={
            "conferenceId": conference_id,
            "oldStatus": "pending",
            "newStatus": "archived",
            "beforeDate": "2031-01-01T00:00:00Z",
        })
        assert after.json() == {"updated": 1}

    @pytest.mark.asyncio
    async def test_unknown_conference_updates_nothing(self, test_client):
        response = await test_client.patch("/api/participations/bulk-update-status", json={
            "conferenceId": 404,
            "oldStatus": "pending",
            "newStatus": "confirmed",
        })
        assert response.status_code == 200
        assert response.json() == {"updated": 0}

    @pytest.mark.asyncio
    async def test_missing_fields_is_400(self, test_client):
        response = await test_client.patch(
            "/api/participations/bulk-update-status", json={"conferenceId": 1}
        )
        assert response.status_code == 400
