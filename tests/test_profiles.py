from __future__ import annotations

import asyncio

import pytest

from biodata_service.models.profile import ProfileCreateRequest
from biodata_service.repositories.counter import CounterRepository
from biodata_service.repositories.profile import ProfileRepository
from biodata_service.services.exceptions import ForbiddenError
from biodata_service.services.profile_registry import ProfileRegistry

from conftest import auth_headers


def _registry(db) -> ProfileRegistry:
    return ProfileRegistry(ProfileRepository(db), CounterRepository(db))


@pytest.mark.asyncio
async def test_first_profiles_get_sequential_ids(api_client, create_profile) -> None:
    first = await create_profile("one@example.com")
    second = await create_profile("two@example.com", biodataType="Female")

    assert first["biodataId"] == 1
    assert second["biodataId"] == 2
    assert first["message"] == "Biodata created successfully"


@pytest.mark.asyncio
async def test_concurrent_creations_assign_distinct_contiguous_ids(db) -> None:
    registry = _registry(db)
    total = 12

    created = await asyncio.gather(
        *(
            registry.create_profile(
                ProfileCreateRequest(biodataType="Male", name=f"User {i}"),
                owner_email=f"user{i}@example.com",
            )
            for i in range(total)
        )
    )

    assert sorted(profile.biodata_id for profile in created) == list(range(1, total + 1))


@pytest.mark.asyncio
async def test_counter_continues_after_existing_data(db) -> None:
    await db["profile"].insert_one({"biodataId": 41, "contactEmail": "legacy@example.com", "biodataType": "Male"})

    created = await _registry(db).create_profile(
        ProfileCreateRequest(biodataType="Female"),
        owner_email="new@example.com",
    )
    assert created.biodata_id == 42


@pytest.mark.asyncio
async def test_create_ignores_client_controlled_fields(api_client, db, create_profile) -> None:
    body = await create_profile(
        "owner@example.com",
        biodataId=999,
        premiumRequested=True,
        premiumApproved=True,
        occupation="Engineer",
    )
    assert body["biodataId"] == 1

    stored = await db["profile"].find_one({"contactEmail": "owner@example.com"})
    assert stored["biodataId"] == 1
    assert stored["premiumRequested"] is False
    assert stored["premiumApproved"] is False
    assert stored["occupation"] == "Engineer"


@pytest.mark.asyncio
async def test_create_requires_identity_and_own_email(api_client) -> None:
    body = {"biodataType": "Male", "name": "Someone"}

    anonymous = await api_client.post("/profile", json=body)
    assert anonymous.status_code == 401

    bad_token = await api_client.post("/profile", json=body, headers={"Authorization": "Bearer nope"})
    assert bad_token.status_code == 401

    other = await api_client.post(
        "/profile",
        json={**body, "contactEmail": "victim@example.com"},
        headers=auth_headers("me@example.com"),
    )
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_create_rejects_unknown_biodata_type(api_client) -> None:
    response = await api_client.post(
        "/profile",
        json={"biodataType": "Robot"},
        headers=auth_headers("me@example.com"),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_profile_service_forbids_foreign_contact_email(db) -> None:
    with pytest.raises(ForbiddenError):
        await _registry(db).create_profile(
            ProfileCreateRequest(biodataType="Male", contactEmail="someone@else.com"),
            owner_email="me@example.com",
        )
    assert await db["profile"].count_documents({}) == 0


@pytest.mark.asyncio
async def test_point_lookups(api_client, create_profile) -> None:
    created = await create_profile("lookup@example.com", name="Lookup")

    by_email = await api_client.get("/profile/lookup@example.com")
    assert by_email.status_code == 200
    assert by_email.json()["name"] == "Lookup"

    by_internal = await api_client.get(f"/biodata/{created['insertedId']}")
    assert by_internal.status_code == 200
    assert by_internal.json()["biodataId"] == created["biodataId"]

    by_public = await api_client.get(f"/biodata-by-id/{created['biodataId']}")
    assert by_public.status_code == 200
    assert by_public.json()["_id"] == created["insertedId"]

    assert (await api_client.get("/profile/nobody@example.com")).status_code == 404
    assert (await api_client.get("/biodata-by-id/999")).status_code == 404
    assert (await api_client.get("/biodata/64b7f0c2a1b2c3d4e5f60718")).status_code == 404
    assert (await api_client.get("/biodata/not-an-id")).status_code == 400


@pytest.mark.asyncio
async def test_list_all_profiles(api_client, create_profile) -> None:
    await create_profile("a@example.com")
    await create_profile("b@example.com")

    response = await api_client.get("/profiles")
    assert response.status_code == 200
    assert sorted(row["biodataId"] for row in response.json()) == [1, 2]


@pytest.mark.asyncio
async def test_teaser_listing_filters_by_type_and_caps_at_three(api_client, create_profile) -> None:
    for i in range(4):
        await create_profile(f"m{i}@example.com", biodataType="Male")
    await create_profile("f0@example.com", biodataType="Female")

    males = await api_client.get("/biodata", params={"type": "male"})
    assert males.status_code == 200
    rows = males.json()
    assert len(rows) == 3
    assert all(row["biodataType"] == "Male" for row in rows)

    females = await api_client.get("/biodata", params={"type": "FEMALE"})
    assert [row["contactEmail"] for row in females.json()] == ["f0@example.com"]

    everything = await api_client.get("/biodata")
    assert len(everything.json()) == 3


@pytest.mark.asyncio
async def test_teaser_type_is_matched_literally(api_client, create_profile) -> None:
    await create_profile("m@example.com", biodataType="Male")

    response = await api_client.get("/biodata", params={"type": ".*"})
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_premium_showcase_sorts_by_numeric_age(api_client, db) -> None:
    await db["profile"].insert_many(
        [
            {"biodataId": 1, "contactEmail": "a@example.com", "age": "30", "premiumApproved": True},
            {"biodataId": 2, "contactEmail": "b@example.com", "age": 9, "premiumApproved": True},
            {"biodataId": 3, "contactEmail": "c@example.com", "age": "100", "premiumApproved": True},
            {"biodataId": 4, "contactEmail": "d@example.com", "age": "unknown", "premiumApproved": True},
            {"biodataId": 5, "contactEmail": "e@example.com", "age": "25", "premiumApproved": False},
        ]
    )

    ascending = await api_client.get("/premium-profiles")
    assert ascending.status_code == 200
    assert [row["biodataId"] for row in ascending.json()] == [2, 1, 3, 4]

    descending = await api_client.get("/premium-profiles", params={"order": "desc", "limit": 2})
    assert [row["biodataId"] for row in descending.json()] == [3, 1]


@pytest.mark.asyncio
async def test_owner_can_edit_descriptive_fields_only(api_client, db, create_profile) -> None:
    created = await create_profile("editor@example.com", name="Before")

    stranger = await api_client.patch(
        f"/profile/{created['insertedId']}",
        json={"name": "Hacked"},
        headers=auth_headers("stranger@example.com"),
    )
    assert stranger.status_code == 403

    response = await api_client.patch(
        f"/profile/{created['insertedId']}",
        json={"name": "After", "biodataId": 77, "premiumApproved": True, "contactEmail": "x@example.com"},
        headers=auth_headers("editor@example.com"),
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["name"] == "After"
    assert body["biodataId"] == created["biodataId"]
    assert body["premiumApproved"] is False
    assert body["contactEmail"] == "editor@example.com"
