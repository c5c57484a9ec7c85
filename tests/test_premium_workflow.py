from __future__ import annotations

import asyncio

import pytest

from biodata_service.models.profile import PremiumState, ProfileCreateRequest
from biodata_service.models.user import Role
from biodata_service.repositories.counter import CounterRepository
from biodata_service.repositories.exceptions import StoreUnavailableRepositoryError
from biodata_service.repositories.profile import ProfileRepository
from biodata_service.repositories.user import UserRepository
from biodata_service.services.exceptions import (
    ConflictError,
    InternalServiceError,
    InvalidStateError,
    NotFoundError,
)
from biodata_service.services.premium_workflow import PremiumWorkflow
from biodata_service.services.profile_registry import ProfileRegistry

from conftest import auth_headers


async def _requested_profile(db, email: str):
    registry = ProfileRegistry(ProfileRepository(db), CounterRepository(db))
    profile = await registry.create_profile(ProfileCreateRequest(biodataType="Female"), owner_email=email)
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))
    await workflow.request_premium(str(profile.id), requester_email=email)
    return profile


@pytest.mark.asyncio
async def test_request_then_approve_then_conflict(api_client, db, seed_user, create_profile) -> None:
    await seed_user("admin@example.com", Role.ADMIN)
    member = await seed_user("member@example.com")
    profile = await create_profile("member@example.com")
    admin_headers = auth_headers("admin@example.com")

    requested = await api_client.patch(
        f"/profile/premium-request/{profile['insertedId']}",
        headers=auth_headers("member@example.com"),
    )
    assert requested.status_code == 200, requested.text
    assert requested.json()["state"] == PremiumState.REQUESTED.value

    approved = await api_client.patch(f"/users/{member.id}/make-premium", headers=admin_headers)
    assert approved.status_code == 200, approved.text
    assert approved.json()["biodataId"] == profile["biodataId"]

    user = await UserRepository(db).get_by_id(member.id)
    stored_profile = await ProfileRepository(db).get_by_biodata_id(profile["biodataId"])
    assert user.role is Role.PREMIUM
    assert stored_profile.premium_approved is True
    assert stored_profile.premium_state is PremiumState.APPROVED

    again = await api_client.patch(f"/users/{member.id}/make-premium", headers=admin_headers)
    assert again.status_code == 409
    assert again.json() == {"detail": "User is already premium"}


@pytest.mark.asyncio
async def test_request_premium_is_idempotent(api_client, create_profile) -> None:
    profile = await create_profile("member@example.com")
    path = f"/profile/premium-request/{profile['insertedId']}"
    headers = auth_headers("member@example.com")

    first = await api_client.patch(path, headers=headers)
    second = await api_client.patch(path, headers=headers)

    assert first.json()["modified"] is True
    assert second.status_code == 200
    assert second.json()["modified"] is False
    assert second.json()["state"] == PremiumState.REQUESTED.value


@pytest.mark.asyncio
async def test_only_owner_can_request_premium(api_client, create_profile) -> None:
    profile = await create_profile("member@example.com")

    response = await api_client.patch(
        f"/profile/premium-request/{profile['insertedId']}",
        headers=auth_headers("intruder@example.com"),
    )
    assert response.status_code == 403

    missing = await api_client.patch(
        "/profile/premium-request/64b7f0c2a1b2c3d4e5f60718",
        headers=auth_headers("member@example.com"),
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_approval_requires_a_premium_request(api_client, db, seed_user, create_profile) -> None:
    await seed_user("admin@example.com", Role.ADMIN)
    member = await seed_user("member@example.com")
    await create_profile("member@example.com")

    response = await api_client.patch(
        f"/users/{member.id}/make-premium",
        headers=auth_headers("admin@example.com"),
    )
    assert response.status_code == 400
    assert (await UserRepository(db).get_by_id(member.id)).role is Role.BASIC


@pytest.mark.asyncio
async def test_approval_without_profile_or_user(db, seed_user) -> None:
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))
    loner = await seed_user("loner@example.com")

    with pytest.raises(InvalidStateError):
        await workflow.approve_premium(str(loner.id))
    with pytest.raises(NotFoundError):
        await workflow.approve_premium("64b7f0c2a1b2c3d4e5f60718")


@pytest.mark.asyncio
async def test_failed_profile_write_restores_role(db, seed_user, monkeypatch) -> None:
    member = await seed_user("member@example.com")
    profile = await _requested_profile(db, "member@example.com")

    async def _broken(self, profile_id):
        raise StoreUnavailableRepositoryError("profile.update_one timed out")

    monkeypatch.setattr(ProfileRepository, "approve_premium", _broken)
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))

    with pytest.raises(InternalServiceError):
        await workflow.approve_premium(str(member.id))

    user = await UserRepository(db).get_by_id(member.id)
    stored = await ProfileRepository(db).get_by_id(profile.id)
    assert user.role is Role.BASIC
    assert stored.premium_approved is False


@pytest.mark.asyncio
async def test_profile_withdrawn_mid_approval_restores_role(db, seed_user, monkeypatch) -> None:
    member = await seed_user("member@example.com")
    await _requested_profile(db, "member@example.com")

    async def _nothing_matched(self, profile_id):
        return False

    monkeypatch.setattr(ProfileRepository, "approve_premium", _nothing_matched)
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))

    with pytest.raises(InvalidStateError):
        await workflow.approve_premium(str(member.id))
    assert (await UserRepository(db).get_by_id(member.id)).role is Role.BASIC


@pytest.mark.asyncio
async def test_profile_write_applied_before_timeout_completes_approval(db, seed_user, monkeypatch) -> None:
    member = await seed_user("member@example.com")
    profile = await _requested_profile(db, "member@example.com")
    original = ProfileRepository.approve_premium

    async def _applied_then_timed_out(self, profile_id):
        await original(self, profile_id)
        raise StoreUnavailableRepositoryError("profile.update_one timed out")

    monkeypatch.setattr(ProfileRepository, "approve_premium", _applied_then_timed_out)
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))

    result = await workflow.approve_premium(str(member.id))
    assert result.biodata_id == profile.biodata_id

    user = await UserRepository(db).get_by_id(member.id)
    stored = await ProfileRepository(db).get_by_id(profile.id)
    assert user.role is Role.PREMIUM
    assert stored.premium_approved is True


@pytest.mark.asyncio
async def test_role_restore_is_retried(db, seed_user, monkeypatch) -> None:
    member = await seed_user("member@example.com")
    profile = await _requested_profile(db, "member@example.com")
    original_restore = UserRepository.restore_role
    calls = []

    async def _broken(self, profile_id):
        raise StoreUnavailableRepositoryError("profile.update_one failed")

    async def _flaky_restore(self, user_id, *, expected, previous):
        calls.append(user_id)
        if len(calls) == 1:
            raise StoreUnavailableRepositoryError("users.update_one timed out")
        return await original_restore(self, user_id, expected=expected, previous=previous)

    monkeypatch.setattr(ProfileRepository, "approve_premium", _broken)
    monkeypatch.setattr(UserRepository, "restore_role", _flaky_restore)
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))

    with pytest.raises(InternalServiceError):
        await workflow.approve_premium(str(member.id))

    assert len(calls) == 2
    user = await UserRepository(db).get_by_id(member.id)
    stored = await ProfileRepository(db).get_by_id(profile.id)
    assert user.role is Role.BASIC
    assert stored.premium_approved is False


@pytest.mark.asyncio
async def test_unreadable_profile_after_failed_write_rolls_back_both_sides(db, seed_user, monkeypatch) -> None:
    member = await seed_user("member@example.com")
    profile = await _requested_profile(db, "member@example.com")
    original = ProfileRepository.approve_premium

    async def _applied_then_timed_out(self, profile_id):
        await original(self, profile_id)
        raise StoreUnavailableRepositoryError("profile.update_one timed out")

    async def _unreadable(self, profile_id):
        raise StoreUnavailableRepositoryError("profile.find_one timed out")

    monkeypatch.setattr(ProfileRepository, "approve_premium", _applied_then_timed_out)
    monkeypatch.setattr(ProfileRepository, "get_by_id", _unreadable)
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))

    with pytest.raises(InternalServiceError):
        await workflow.approve_premium(str(member.id))

    user = await db["users"].find_one({"_id": member.id})
    stored = await db["profile"].find_one({"_id": profile.id})
    assert user["role"] == Role.BASIC.value
    assert stored["premiumApproved"] is False


@pytest.mark.asyncio
async def test_approving_an_admin_replaces_the_role(db, seed_user) -> None:
    admin = await seed_user("chief@example.com", Role.ADMIN)
    profile = await _requested_profile(db, "chief@example.com")
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))

    await workflow.approve_premium(str(admin.id))

    assert (await UserRepository(db).get_by_id(admin.id)).role is Role.PREMIUM
    assert (await ProfileRepository(db).get_by_id(profile.id)).premium_approved is True


@pytest.mark.asyncio
async def test_concurrent_approvals_succeed_once(db, seed_user) -> None:
    member = await seed_user("member@example.com")
    await _requested_profile(db, "member@example.com")
    workflow = PremiumWorkflow(UserRepository(db), ProfileRepository(db))

    results = await asyncio.gather(
        workflow.approve_premium(str(member.id)),
        workflow.approve_premium(str(member.id)),
        return_exceptions=True,
    )

    conflicts = [r for r in results if isinstance(r, ConflictError)]
    successes = [r for r in results if not isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(conflicts) == 1
    assert (await UserRepository(db).get_by_id(member.id)).role is Role.PREMIUM


@pytest.mark.asyncio
async def test_premium_request_listing(api_client, db, seed_user) -> None:
    await seed_user("viewer@example.com")
    for i in range(3):
        await seed_user(f"member{i}@example.com", name=f"Member {i}")
        await _requested_profile(db, f"member{i}@example.com")
    registry = ProfileRegistry(ProfileRepository(db), CounterRepository(db))
    await registry.create_profile(ProfileCreateRequest(biodataType="Male"), owner_email="quiet@example.com")

    anonymous = await api_client.get("/dashboard/approvedPremium")
    assert anonymous.status_code == 401

    response = await api_client.get(
        "/dashboard/approvedPremium",
        params={"page": 1, "limit": 2},
        headers=auth_headers("viewer@example.com"),
    )
    assert response.status_code == 200, response.text
    page = response.json()
    assert page["total"] == 3
    assert page["totalPages"] == 2
    assert [row["biodataId"] for row in page["data"]] == [1, 2]
    assert page["data"][0]["email"] == "member0@example.com"
    assert page["data"][0]["name"] == "Member 0"
    assert page["data"][0]["_id"] is not None
