"""
Natours Backend — Tour Endpoint Tests
=======================================

What:  Tour CRUD, the list query language, secret tours, the two reports,
       and the catch-all 404 under /api/v1/tours.
"""

from uuid import uuid4

import pytest

TOURS_URL = "/api/v1/tours"


class TestCreateTour:
    """POST /api/v1/tours"""

    @pytest.mark.asyncio
    async def test_create_derives_slug_and_trims_summary(self, create_tour):
        tour = await create_tour()

        assert tour["name"] == "The Forest Hiker"
        assert tour["slug"] == "the-forest-hiker"
        assert tour["summary"] == "Breathtaking hike through the Canadian Banff National Park"
        assert tour["durationWeeks"] == pytest.approx(5 / 7)
        assert len(tour["startDates"]) == 2
        assert tour["startLocation"]["coordinates"] == [-115.570154, 51.178456]
        assert "createdAt" not in tour
        assert tour["secretTour"] is False

    @pytest.mark.asyncio
    async def test_create_requires_login(self, test_client, tour_body):
        response = await test_client.post(TOURS_URL, json=tour_body())
        assert response.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["user", "guide"])
    async def test_create_forbidden_for_other_roles(self, test_client, tour_body, auth_headers, role):
        response = await test_client.post(TOURS_URL, json=tour_body(), headers=await auth_headers(role))

        assert response.status_code == 403
        assert response.json()["status"] == "fail"

    @pytest.mark.asyncio
    async def test_lead_guide_may_create(self, test_client, tour_body, auth_headers):
        response = await test_client.post(
            TOURS_URL, json=tour_body(), headers=await auth_headers("lead-guide")
        )
        assert response.status_code == 201

    @pytest.mark.asyncio
    @pytest.mark.parametrize("discount", [397, 500])
    async def test_discount_not_below_price_is_rejected(
        self, test_client, tour_body, auth_headers, discount
    ):
        response = await test_client.post(
            TOURS_URL,
            json=tour_body(priceDiscount=discount),
            headers=await auth_headers("admin"),
        )

        assert response.status_code == 400
        assert f"Discount price ({discount}) should be below regular price" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_discount_below_price_is_accepted(self, create_tour):
        tour = await create_tour(priceDiscount=297)
        assert tour["priceDiscount"] == 297

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "Too short"},
            {"name": "x" * 41},
            {"difficulty": "extreme"},
            {"ratingsAverage": 5.5},
            {"summary": None},
        ],
    )
    async def test_invalid_fields_are_rejected(self, test_client, tour_body, auth_headers, overrides):
        response = await test_client.post(
            TOURS_URL, json=tour_body(**overrides), headers=await auth_headers("admin")
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid input data")

    @pytest.mark.asyncio
    async def test_padding_does_not_count_towards_name_length(
        self, test_client, tour_body, auth_headers
    ):
        response = await test_client.post(
            TOURS_URL, json=tour_body(name="   Short      "), headers=await auth_headers("admin")
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_name_is_stored_trimmed(self, create_tour):
        tour = await create_tour(name="  The Forest Hiker  ")

        assert tour["name"] == "The Forest Hiker"
        assert tour["slug"] == "the-forest-hiker"

    @pytest.mark.asyncio
    async def test_duplicate_name(self, test_client, create_tour, tour_body, auth_headers):
        await create_tour()

        response = await test_client.post(
            TOURS_URL, json=tour_body(), headers=await auth_headers("admin")
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Duplicate field value: The Forest Hiker. Please use another value!"
        )

    @pytest.mark.asyncio
    async def test_guides_are_embedded(self, create_tour, make_user):
        guide, _ = await make_user("guide", email="guide@natours.io", name="Steven Miller")
        lead, _ = await make_user("lead-guide", email="lead@natours.io", name="Lisa Brown")

        tour = await create_tour(guides=[str(lead.id), str(guide.id)])

        assert [g["name"] for g in tour["guides"]] == ["Lisa Brown", "Steven Miller"]
        assert tour["guides"][1] == {
            "id": str(guide.id),
            "name": "Steven Miller",
            "email": "guide@natours.io",
            "role": "guide",
            "photo": None,
        }

    @pytest.mark.asyncio
    async def test_unknown_guide_ids_are_dropped(self, create_tour):
        tour = await create_tour(guides=[str(uuid4())])
        assert tour["guides"] == []


class TestGetTour:
    """GET /api/v1/tours/{id}"""

    @pytest.mark.asyncio
    async def test_get_existing(self, test_client, create_tour):
        created = await create_tour()

        response = await test_client.get(f"{TOURS_URL}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["status"] == "success"
        assert response.json()["data"]["tour"]["slug"] == "the-forest-hiker"

    @pytest.mark.asyncio
    async def test_start_dates_keep_utc(self, test_client, create_tour):
        created = await create_tour(startDates=["2021-04-25T09:00:00Z", "2021-07-20T11:00:00+02:00"])

        tour = (await test_client.get(f"{TOURS_URL}/{created['id']}")).json()["data"]["tour"]

        assert tour["startDates"] == ["2021-04-25T09:00:00Z", "2021-07-20T09:00:00Z"]

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, test_client):
        response = await test_client.get(f"{TOURS_URL}/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["message"] == "No tour found with that ID"

    @pytest.mark.asyncio
    async def test_non_uuid_segment_hits_catch_all(self, test_client):
        response = await test_client.get(f"{TOURS_URL}/nonexistent-route")

        assert response.status_code == 404
        body = response.json()
        assert body["status"] == "fail"
        assert body["message"] == "Can't find /api/v1/tours/nonexistent-route on this server!"


class TestUpdateTour:
    """PATCH /api/v1/tours/{id}"""

    @pytest.mark.asyncio
    async def test_update_without_name_change_keeps_slug(self, test_client, create_tour, auth_headers):
        created = await create_tour()

        response = await test_client.patch(
            f"{TOURS_URL}/{created['id']}", json={"price": 450}, headers=await auth_headers("admin")
        )

        assert response.status_code == 200
        tour = response.json()["data"]["tour"]
        assert tour["price"] == 450
        assert tour["slug"] == "the-forest-hiker"

    @pytest.mark.asyncio
    async def test_update_name_rederives_slug(self, test_client, create_tour, auth_headers):
        created = await create_tour()

        response = await test_client.patch(
            f"{TOURS_URL}/{created['id']}",
            json={"name": "The Mountain Biker"},
            headers=await auth_headers("admin"),
        )

        assert response.json()["data"]["tour"]["slug"] == "the-mountain-biker"

    @pytest.mark.asyncio
    async def test_update_discount_above_stored_price(self, test_client, create_tour, auth_headers):
        created = await create_tour(price=397)

        response = await test_client.patch(
            f"{TOURS_URL}/{created['id']}",
            json={"priceDiscount": 500},
            headers=await auth_headers("admin"),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Discount price (500) should be below regular price"

    @pytest.mark.asyncio
    async def test_update_price_below_stored_discount(self, test_client, create_tour, auth_headers):
        created = await create_tour(price=397, priceDiscount=300)

        response = await test_client.patch(
            f"{TOURS_URL}/{created['id']}", json={"price": 250}, headers=await auth_headers("admin")
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Discount price (300) should be below regular price"

    @pytest.mark.asyncio
    async def test_update_rejects_padded_short_name(self, test_client, create_tour, auth_headers):
        created = await create_tour()
        url = f"{TOURS_URL}/{created['id']}"

        response = await test_client.patch(
            url, json={"name": "  Tiny          "}, headers=await auth_headers("admin")
        )

        assert response.status_code == 400
        assert (await test_client.get(url)).json()["data"]["tour"]["name"] == "The Forest Hiker"

    @pytest.mark.asyncio
    async def test_update_cannot_clear_required_field(self, test_client, create_tour, auth_headers):
        created = await create_tour()

        response = await test_client.patch(
            f"{TOURS_URL}/{created['id']}", json={"price": None}, headers=await auth_headers("admin")
        )

        assert response.status_code == 400
        assert response.json()["message"] == "price cannot be null"

    @pytest.mark.asyncio
    async def test_update_replaces_start_dates(self, test_client, create_tour, auth_headers):
        created = await create_tour()

        response = await test_client.patch(
            f"{TOURS_URL}/{created['id']}",
            json={"startDates": ["2022-01-10T09:00:00Z"]},
            headers=await auth_headers("admin"),
        )

        dates = response.json()["data"]["tour"]["startDates"]
        assert len(dates) == 1
        assert dates[0].startswith("2022-01-10")

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client, auth_headers):
        response = await test_client.patch(
            f"{TOURS_URL}/{uuid4()}", json={"price": 1}, headers=await auth_headers("admin")
        )
        assert response.status_code == 404


class TestDeleteTour:
    """DELETE /api/v1/tours/{id}"""

    @pytest.mark.asyncio
    async def test_delete_returns_204_and_removes(self, test_client, create_tour, auth_headers):
        created = await create_tour()

        response = await test_client.delete(
            f"{TOURS_URL}/{created['id']}", headers=await auth_headers("admin")
        )

        assert response.status_code == 204
        assert response.content == b""
        assert (await test_client.get(f"{TOURS_URL}/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_requires_manager_role(self, test_client, create_tour, auth_headers):
        created = await create_tour()

        response = await test_client.delete(
            f"{TOURS_URL}/{created['id']}", headers=await auth_headers("user")
        )
        assert response.status_code == 403


class TestSecretTours:
    """Secret tours are invisible to every read, write and aggregate path."""

    @pytest.mark.asyncio
    async def test_secret_tour_is_not_listed(self, test_client, create_tour):
        await create_tour()
        await create_tour(name="The Secret Valley", secretTour=True)

        for query in ("", "?secretTour=true", "?name=The%20Secret%20Valley", "?limit=1000"):
            response = await test_client.get(f"{TOURS_URL}{query}")
            names = [t["name"] for t in response.json()["data"]["tours"]]
            assert "The Secret Valley" not in names

    @pytest.mark.asyncio
    async def test_secret_tour_cannot_be_fetched_updated_or_deleted(
        self, test_client, create_tour, auth_headers
    ):
        secret = await create_tour(name="The Secret Valley", secretTour=True)
        url = f"{TOURS_URL}/{secret['id']}"
        headers = await auth_headers("admin")

        assert (await test_client.get(url)).status_code == 404
        assert (await test_client.patch(url, json={"price": 1}, headers=headers)).status_code == 404
        assert (await test_client.delete(url, headers=headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_secret_tour_is_not_aggregated(self, test_client, create_tour):
        await create_tour(name="The Secret Valley", secretTour=True, ratingsAverage=5)

        stats = (await test_client.get(f"{TOURS_URL}/tour-stats")).json()
        plan = (await test_client.get(f"{TOURS_URL}/monthly-plan/2021")).json()

        assert stats["data"]["stats"] == []
        assert plan["results"] == 0


class TestListTours:
    """GET /api/v1/tours query language"""

    async def _seed(self, create_tour):
        await create_tour(name="The Forest Hiker", price=397, difficulty="easy", duration=5)
        await create_tour(name="The Sea Explorer", price=497, difficulty="medium", duration=7)
        await create_tour(name="The Snow Adventurer", price=997, difficulty="difficult", duration=4)

    @pytest.mark.asyncio
    async def test_list_envelope(self, test_client, create_tour):
        await self._seed(create_tour)

        body = (await test_client.get(TOURS_URL)).json()

        assert body["status"] == "success"
        assert body["results"] == 3
        assert len(body["data"]["tours"]) == 3

    @pytest.mark.asyncio
    async def test_equality_filter(self, test_client, create_tour):
        await self._seed(create_tour)

        body = (await test_client.get(f"{TOURS_URL}?difficulty=easy")).json()
        assert [t["name"] for t in body["data"]["tours"]] == ["The Forest Hiker"]

    @pytest.mark.asyncio
    async def test_comparison_filter_and_sort(self, test_client, create_tour):
        await self._seed(create_tour)

        body = (await test_client.get(f"{TOURS_URL}?price[gte]=450&sort=-price")).json()
        assert [t["name"] for t in body["data"]["tours"]] == ["The Snow Adventurer", "The Sea Explorer"]

    @pytest.mark.asyncio
    async def test_field_projection_keeps_id(self, test_client, create_tour):
        await self._seed(create_tour)

        body = (await test_client.get(f"{TOURS_URL}?fields=name,price")).json()
        for tour in body["data"]["tours"]:
            assert set(tour) == {"id", "name", "price"}

    @pytest.mark.asyncio
    async def test_field_exclusion(self, test_client, create_tour):
        await self._seed(create_tour)

        body = (await test_client.get(f"{TOURS_URL}?fields=-summary,-description")).json()
        tour = body["data"]["tours"][0]
        assert "summary" not in tour
        assert "description" not in tour
        assert "name" in tour

    @pytest.mark.asyncio
    async def test_pagination(self, test_client, create_tour):
        await self._seed(create_tour)

        body = (await test_client.get(f"{TOURS_URL}?sort=price&limit=1&page=2")).json()
        assert body["results"] == 1
        assert body["data"]["tours"][0]["name"] == "The Sea Explorer"

    @pytest.mark.asyncio
    async def test_bad_filter_value(self, test_client):
        response = await test_client.get(f"{TOURS_URL}?price[gte]=cheap")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_top_five_cheap(self, test_client, create_tour):
        names = [
            "The Forest Hiker", "The Sea Explorer", "The Snow Adventurer",
            "The City Wanderer", "The Park Camper", "The Sports Lover",
        ]
        for i, name in enumerate(names):
            await create_tour(name=name, price=100 + i * 100, ratingsAverage=4.5)

        body = (await test_client.get(f"{TOURS_URL}/top-5-cheap")).json()

        assert body["results"] == 5
        assert [t["price"] for t in body["data"]["tours"]] == [100, 200, 300, 400, 500]
        assert set(body["data"]["tours"][0]) == {
            "id", "name", "price", "ratingsAverage", "summary", "difficulty",
        }


class TestTourStats:
    """GET /api/v1/tours/tour-stats"""

    @pytest.mark.asyncio
    async def test_stats_grouped_by_difficulty(self, test_client, create_tour):
        await create_tour(name="The Forest Hiker", difficulty="easy", price=397, ratingsAverage=4.7)
        await create_tour(name="The Park Camper", difficulty="easy", price=497, ratingsAverage=4.9)
        await create_tour(name="The Snow Adventurer", difficulty="difficult", price=997, ratingsAverage=4.5)
        await create_tour(name="The Sea Explorer", difficulty="medium", price=297, ratingsAverage=4.0)

        body = (await test_client.get(f"{TOURS_URL}/tour-stats")).json()
        stats = body["data"]["stats"]

        assert body["status"] == "success"
        assert [s["difficulty"] for s in stats] == ["EASY", "DIFFICULT"]
        easy = stats[0]
        assert easy["numTours"] == 2
        assert easy["numRatings"] == 74
        assert easy["avgRating"] == pytest.approx(4.8)
        assert easy["avgPrice"] == pytest.approx(447)
        assert easy["minPrice"] == 397
        assert easy["maxPrice"] == 497


class TestMonthlyPlan:
    """GET /api/v1/tours/monthly-plan/{year}"""

    @pytest.mark.asyncio
    async def test_plan_counts_starts_per_month(self, test_client, create_tour):
        await create_tour(
            name="The Forest Hiker",
            startDates=["2021-04-25T09:00:00Z", "2021-07-20T09:00:00Z"],
        )
        await create_tour(
            name="The Sea Explorer",
            startDates=["2021-07-01T09:00:00Z", "2022-01-05T09:00:00Z"],
        )

        body = (await test_client.get(f"{TOURS_URL}/monthly-plan/2021")).json()

        assert body["results"] == 2
        july, april = body["data"]["plan"]
        assert july["month"] == 7
        assert july["numTourStarts"] == 2
        assert sorted(july["tours"]) == ["The Forest Hiker", "The Sea Explorer"]
        assert april == {"month": 4, "numTourStarts": 1, "tours": ["The Forest Hiker"]}

    @pytest.mark.asyncio
    async def test_plan_for_year_without_starts(self, test_client, create_tour):
        await create_tour()

        body = (await test_client.get(f"{TOURS_URL}/monthly-plan/1999")).json()
        assert body["results"] == 0
        assert body["data"]["plan"] == []

    @pytest.mark.asyncio
    async def test_plan_rejects_non_numeric_year(self, test_client):
        response = await test_client.get(f"{TOURS_URL}/monthly-plan/next-year")
        assert response.status_code == 400
