"""
SConf Backend - Scientist API Tests
===================================

What:  End-to-end tests for /api/scientists through the ASGI app:
       CRUD, list contract (pagination, search, sorting) and error bodies.
"""

import pytest


class TestScientistCrud:

    @pytest.mark.asyncio
    async def test_create_then_fetch_round_trip(self, test_client):
        payload = {
            "fullName": "Grace Hopper",
            "country": "USA",
            "degree": "PhD",
            "specialization": "Math",
            "organization": "Yale",
            "email": "grace@yale.edu",
        }
        created = await test_client.post("/api/scientists", json=payload)
        assert created.status_code == 201
        body = created.json()
        assert body["hIndex"] == 0
        assert body["orcid"] is None

        fetched = await test_client.get(f"/api/scientists/{body['id']}")
        assert fetched.status_code == 200
        for key, value in payload.items():
            assert fetched.json()[key] == value

    @pytest.mark.asyncio
    async def test_invalid_email_is_400(self, test_client):
        response = await test_client.post("/api/scientists", json={
            "fullName": "X", "country": "USA", "degree": "PhD",
            "specialization": "AI", "organization": "MIT", "email": "not-an-email",
        })
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_blank_required_field_is_400(self, test_client):
        response = await test_client.post("/api/scientists", json={
            "fullName": "   ", "country": "USA", "degree": "PhD",
            "specialization": "AI", "organization": "MIT",
        })
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, create_scientist):
        scientist = await create_scientist(email="old@mit.edu")

        response = await test_client.put(
            f"/api/scientists/{scientist['id']}", json={"hIndex": 17, "email": None}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["hIndex"] == 17
        assert body["email"] is None
        assert body["fullName"] == scientist["fullName"]

    @pytest.mark.asyncio
    async def test_update_cannot_null_required_field(self, test_client, create_scientist):
        scientist = await create_scientist()
        response = await test_client.put(f"/api/scientists/{scientist['id']}", json={"country": None})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete(self, test_client, create_scientist):
        scientist = await create_scientist()

        response = await test_client.delete(f"/api/scientists/{scientist['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Scientist deleted successfully"}

        assert (await test_client.get(f"/api/scientists/{scientist['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_missing_scientist_404_body(self, test_client):
        response = await test_client.get("/api/scientists/4242")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Scientist not found"
        assert body["code"] == "not_found"
        assert "request_id" in body

    @pytest.mark.asyncio
    async def test_update_and_delete_missing_are_404(self, test_client):
        assert (await test_client.put("/api/scientists/4242", json={"hIndex": 1})).status_code == 404
        assert (await test_client.delete("/api/scientists/4242")).status_code == 404

    @pytest.mark.asyncio
    async def test_non_integer_id_is_400(self, test_client):
        response = await test_client.get("/api/scientists/abc")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_id_beyond_integer_column_is_400(self, test_client):
        huge = "99999999999999999999"

        responses = [
            await test_client.get(f"/api/scientists/{huge}"),
            await test_client.put(f"/api/scientists/{huge}", json={"hIndex": 1}),
            await test_client.delete(f"/api/scientists/{huge}"),
        ]

        for response in responses:
            assert response.status_code == 400
            assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_h_index_beyond_integer_column_is_400(self, test_client):
        response = await test_client.post("/api/scientists", json={
            "fullName": "X", "country": "USA", "degree": "PhD",
            "specialization": "AI", "organization": "MIT", "hIndex": 2**31,
        })
        assert response.status_code == 400


class TestScientistList:

    @pytest.mark.asyncio
    async def test_pagination_block(self, test_client, create_scientist):
        for _ in range(12):
            await create_scientist()

        response = await test_client.get("/api/scientists", params={"page": "2", "limit": "5"})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"page": 2, "limit": 5, "total": 12, "pages": 3}
        assert len(body["data"]) == 5
        assert [s["id"] for s in body["data"]] == sorted(s["id"] for s in body["data"])

    @pytest.mark.asyncio
    async def test_page_beyond_end_is_empty(self, test_client, create_scientist):
        await create_scientist()
        body = (await test_client.get("/api/scientists", params={"page": "9"})).json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_search_matches_any_descriptive_column(self, test_client, create_scientist):
        await create_scientist(fullName="Alan Turing", organization="Cambridge")
        await create_scientist(fullName="Someone Else", specialization="Turing machines")
        await create_scientist(fullName="Unrelated", organization="MIT", specialization="Biology")

        body = (await test_client.get("/api/scientists", params={"search": "TURING"})).json()

        assert {s["fullName"] for s in body["data"]} == {"Alan Turing", "Someone Else"}
        assert body["pagination"]["total"] == 2

    @pytest.mark.asyncio
    async def test_filter_with_no_match(self, test_client, create_scientist):
        await create_scientist(country="Germany")
        body = (await test_client.get("/api/scientists", params={"country": "Atlantis"})).json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 0
        assert body["pagination"]["pages"] == 0

    @pytest.mark.asyncio
    async def test_like_wildcards_match_literally(self, test_client, create_scientist):
        await create_scientist(fullName="Plain Name")
        body = (await test_client.get("/api/scientists", params={"search": "%"})).json()
        assert body["data"] == []

    @pytest.mark.asyncio
    async def test_sort_by_h_index_descending(self, test_client, create_scientist):
        for h in (5, 30, 12):
            await create_scientist(hIndex=h)

        body = (await test_client.get(
            "/api/scientists", params={"sortBy": "hIndex", "sortOrder": "desc"}
        )).json()

        assert [s["hIndex"] for s in body["data"]] == [30, 12, 5]

    @pytest.mark.asyncio
    async def test_unknown_sort_field_is_400(self, test_client):
        response = await test_client.get("/api/scientists", params={"sortBy": "email"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "validation_error"
        assert body["details"]["field"] == "sortBy"

    @pytest.mark.asyncio
    async def test_malformed_page_is_400(self, test_client):
        response = await test_client.get("/api/scientists", params={"page": "first"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_limit_is_clamped(self, test_client, create_scientist):
        await create_scientist()
        body = (await test_client.get("/api/scientists", params={"limit": "1000"})).json()
        assert body["pagination"]["limit"] == 100

    @pytest.mark.asyncio
    async def test_page_beyond_integer_column_is_400(self, test_client):
        response = await test_client.get(
            "/api/scientists", params={"page": "99999999999999999999"}
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "page"

    @pytest.mark.asyncio
    async def test_descending_is_exact_reverse_of_ascending(self, test_client, create_scientist):
        for h in (7, 3, 7, 12, 3, 0):
            await create_scientist(hIndex=h, country="Sweden")
        await create_scientist(hIndex=50, country="Norway")

        async def ids(order):
            body = (await test_client.get("/api/scientists", params={
                "country": "swed", "sortBy": "hIndex", "sortOrder": order,
            })).json()
            return [s["id"] for s in body["data"]]

        ascending = await ids("asc")
        descending = await ids("desc")

        assert len(ascending) == 6
        assert descending == list(reversed(ascending))
