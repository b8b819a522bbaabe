"""
API tests for listing endpoints.
Exercises the full stack: routing, dependencies, services and error handling.
"""

import uuid
from decimal import Decimal
from httpx import AsyncClient

from rentals.models.listing import Listing, ListingStatus
from rentals.models.user import User
from tests.conftest import ListingFactory, auth_headers, assert_error_response


API = "/api/v1"


class TestCreateListing:
    async def test_create_listing(self, async_client: AsyncClient, test_user: User):
        payload = ListingFactory.create_request_data(
            images=["/foo.jpg"],
            amenities=["Gym", "Pool"],
            building_amenities="Concierge, Bike room"
        )
        response = await async_client.post(f"{API}/listings", json=payload, headers=auth_headers(test_user))

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == payload["title"]
        assert data["price"] == 2400.0
        assert data["images"] == ["https://squareonerentals.com/foo.jpg"]
        assert data["amenities"] == ["Gym", "Pool"]
        assert data["building_amenities"] == ["Concierge", "Bike room"]
        assert data["status"] == "AVAILABLE"
        assert data["featured"] is False
        assert data["user_id"] == str(test_user.id)
        assert data["user"]["name"] == "Olivia Owner"

        detail = await async_client.get(f"{API}/listings/{data['id']}")
        assert detail.json()["images"] == ["https://squareonerentals.com/foo.jpg"]

    async def test_create_requires_authentication(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/listings", json=ListingFactory.create_request_data())
        assert_error_response(response, 401, "UNAUTHENTICATED")

    async def test_create_with_invalid_token(self, async_client: AsyncClient):
        response = await async_client.post(
            f"{API}/listings",
            json=ListingFactory.create_request_data(),
            headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert_error_response(response, 401)

    async def test_create_validation_error(self, async_client: AsyncClient, test_user: User):
        payload = ListingFactory.create_request_data(price=-5)
        del payload["title"]
        response = await async_client.post(f"{API}/listings", json=payload, headers=auth_headers(test_user))

        body = assert_error_response(response, 400, "VALIDATION_ERROR")
        fields = [d["field"] for d in body["details"]]
        assert any("title" in f for f in fields)
        assert any("price" in f for f in fields)

    async def test_featured_ignored_for_non_admin(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(
            f"{API}/listings",
            json=ListingFactory.create_request_data(featured=True),
            headers=auth_headers(test_user)
        )
        assert response.status_code == 201
        assert response.json()["featured"] is False


class TestReadListings:
    async def test_get_listing_is_public(self, async_client: AsyncClient, test_listing: Listing):
        response = await async_client.get(f"{API}/listings/{test_listing.id}")
        assert response.status_code == 200
        assert response.json()["id"] == str(test_listing.id)
        assert response.json()["amenities"] == ["Parking", "Gym"]

    async def test_get_missing_listing(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/listings/{uuid.uuid4()}")
        assert_error_response(response, 404, "NOT_FOUND")

    async def test_get_malformed_id(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/listings/not-a-uuid")
        assert_error_response(response, 400, "VALIDATION_ERROR")

    async def test_list_with_filters_and_pagination(
        self, async_client: AsyncClient, listing_repository, test_user: User
    ):
        await ListingFactory.create_listing(
            listing_repository, user_id=test_user.id, title="Cheap studio",
            price=Decimal("900"), bedrooms=0, amenities=["Laundry"]
        )
        await ListingFactory.create_listing(
            listing_repository, user_id=test_user.id, title="Big house",
            price=Decimal("4000"), bedrooms=4, featured=True, amenities=["Parking"]
        )
        await ListingFactory.create_listing(
            listing_repository, user_id=test_user.id, title="Mid condo",
            price=Decimal("2000"), bedrooms=2, status=ListingStatus.ACTIVE, amenities=["Gym"]
        )

        response = await async_client.get(f"{API}/listings", params={"page_size": 2})
        data = response.json()
        assert response.status_code == 200
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert data["total_pages"] == 2
        assert data["has_next"] is True
        assert data["items"][0]["title"] == "Mid condo"

        featured = (await async_client.get(f"{API}/listings", params={"featured": "true"})).json()
        assert [i["title"] for i in featured["items"]] == ["Big house"]

        priced = (await async_client.get(f"{API}/listings", params={"min_price": 1000, "max_price": 3000})).json()
        assert [i["title"] for i in priced["items"]] == ["Mid condo"]

        amenity = (await async_client.get(f"{API}/listings", params={"amenities": "Laundry,Gym"})).json()
        assert sorted(i["title"] for i in amenity["items"]) == ["Cheap studio", "Mid condo"]

        active = (await async_client.get(f"{API}/listings", params={"status": "active"})).json()
        assert [i["title"] for i in active["items"]] == ["Mid condo"]

    async def test_amenity_filter_matches_non_ascii(self, async_client: AsyncClient, test_user: User):
        payload = ListingFactory.create_request_data(amenities=["Café", "Gym"])
        created = await async_client.post(f"{API}/listings", json=payload, headers=auth_headers(test_user))
        assert created.json()["amenities"] == ["Café", "Gym"]

        response = await async_client.get(f"{API}/listings", params={"amenities": "Café"})
        assert response.json()["total"] == 1

        response = await async_client.get(f"{API}/listings", params={"amenities": "Caf%"})
        assert response.json()["total"] == 0

    async def test_list_invalid_status(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/listings", params={"status": "ARCHIVED"})
        assert_error_response(response, 400, "VALIDATION_ERROR")

    async def test_user_listings_owner_only(
        self, async_client: AsyncClient, test_listing: Listing, test_user: User, other_user: User, test_admin: User
    ):
        own = await async_client.get(f"{API}/listings/user/{test_user.id}", headers=auth_headers(test_user))
        assert own.status_code == 200
        assert [l["id"] for l in own.json()] == [str(test_listing.id)]

        other = await async_client.get(f"{API}/listings/user/{test_user.id}", headers=auth_headers(other_user))
        assert_error_response(other, 403, "UNAUTHORIZED")

        admin = await async_client.get(f"{API}/listings/user/{test_user.id}", headers=auth_headers(test_admin))
        assert admin.status_code == 200


class TestUpdateListing:
    async def test_owner_update(self, async_client: AsyncClient, test_listing: Listing, test_user: User):
        response = await async_client.patch(
            f"{API}/listings/{test_listing.id}",
            json={"title": "Renovated", "images": ["photos/a.jpg"], "landlord_phone": "555-0100"},
            headers=auth_headers(test_user)
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["listing"]["title"] == "Renovated"
        assert body["listing"]["images"] == ["https://squareonerentals.com/photos/a.jpg"]
        assert body["listing"]["landlord_phone"] == "555-0100"
        assert body["listing"]["price"] == 1500.0

    async def test_non_owner_forbidden(self, async_client: AsyncClient, test_listing: Listing, other_user: User):
        response = await async_client.patch(
            f"{API}/listings/{test_listing.id}", json={"title": "Mine now"}, headers=auth_headers(other_user)
        )
        assert_error_response(response, 403, "UNAUTHORIZED")

        detail = await async_client.get(f"{API}/listings/{test_listing.id}")
        assert detail.json()["title"] == "Test Listing"

    async def test_owner_cannot_feature(self, async_client: AsyncClient, test_listing: Listing, test_user: User):
        response = await async_client.patch(
            f"{API}/listings/{test_listing.id}", json={"featured": True}, headers=auth_headers(test_user)
        )
        assert_error_response(response, 403)

    async def test_owner_may_send_null_featured(
        self, async_client: AsyncClient, test_listing: Listing, test_user: User
    ):
        response = await async_client.patch(
            f"{API}/listings/{test_listing.id}",
            json={"featured": None, "title": "Renamed"},
            headers=auth_headers(test_user)
        )
        assert response.status_code == 200
        assert response.json()["listing"]["title"] == "Renamed"
        assert response.json()["listing"]["featured"] is False

    async def test_admin_update(self, async_client: AsyncClient, test_listing: Listing, test_admin: User):
        response = await async_client.patch(
            f"{API}/listings/{test_listing.id}", json={"featured": True}, headers=auth_headers(test_admin)
        )
        assert response.status_code == 200
        assert response.json()["listing"]["featured"] is True

    async def test_unauthenticated_update(self, async_client: AsyncClient, test_listing: Listing):
        response = await async_client.patch(f"{API}/listings/{test_listing.id}", json={"title": "x"})
        assert_error_response(response, 401)


class TestDeleteListing:
    async def test_non_owner_forbidden(self, async_client: AsyncClient, test_listing: Listing, other_user: User):
        response = await async_client.delete(f"{API}/listings/{test_listing.id}", headers=auth_headers(other_user))
        assert_error_response(response, 403)

    async def test_owner_delete(self, async_client: AsyncClient, test_listing: Listing, test_user: User):
        response = await async_client.delete(f"{API}/listings/{test_listing.id}", headers=auth_headers(test_user))
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert (await async_client.get(f"{API}/listings/{test_listing.id}")).status_code == 404

    async def test_admin_delete(self, async_client: AsyncClient, test_listing: Listing, test_admin: User):
        response = await async_client.delete(f"{API}/listings/{test_listing.id}", headers=auth_headers(test_admin))
        assert response.status_code == 200
