"""Integration tests for Handles API."""

import pytest
from httpx import AsyncClient

from infrastructure.auth.provider import TokenUser


class TestCheckHandle:
    @pytest.mark.asyncio
    async def test_available(self, app_client: AsyncClient):
        response = await app_client.get("/api/v1/handles/check", params={"handle": "@NewName"})

        assert response.status_code == 200
        data = response.json()
        assert data["handle"] == "newname"
        assert data["available"] is True
        assert data["error_code"] is None

    @pytest.mark.asyncio
    async def test_reserved(self, app_client: AsyncClient):
        response = await app_client.get("/api/v1/handles/check", params={"handle": "Admin"})

        data = response.json()
        assert data["available"] is False
        assert data["error_code"] == "reserved"
        assert data["suggestions"] == ["admin1", "admin_", "admin2"]

    @pytest.mark.asyncio
    async def test_invalid_format(self, app_client: AsyncClient):
        response = await app_client.get("/api/v1/handles/check", params={"handle": "a"})

        data = response.json()
        assert data["available"] is False
        assert data["error_code"] == "invalid_format"
        assert data["suggestions"] == []

    @pytest.mark.asyncio
    async def test_taken_unless_it_is_the_callers_own(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        await app_client.put("/api/v1/handles/me", json={"handle": "tomk"}, headers=auth_headers)

        anonymous = await app_client.get("/api/v1/handles/check", params={"handle": "TomK"})
        own = await app_client.get(
            "/api/v1/handles/check", params={"handle": "TomK"}, headers=auth_headers
        )

        assert anonymous.json()["available"] is False
        assert anonymous.json()["error_code"] == "taken"
        assert len(anonymous.json()["suggestions"]) == 4
        assert own.json()["available"] is True


class TestUpdateMyHandle:
    @pytest.mark.asyncio
    async def test_requires_auth(self, app_client: AsyncClient):
        response = await app_client.put("/api/v1/handles/me", json={"handle": "tomk"})

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_first_handle_then_rate_limited_rename(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        first = await app_client.put(
            "/api/v1/handles/me", json={"handle": "@TomK"}, headers=auth_headers
        )
        second = await app_client.put(
            "/api/v1/handles/me", json={"handle": "thomas"}, headers=auth_headers
        )
        third = await app_client.put(
            "/api/v1/handles/me", json={"handle": "thomas2"}, headers=auth_headers
        )

        assert first.status_code == 200
        assert first.json()["data"] == {
            "handle": "TomK",
            "display": "@TomK",
            "message": "Handle set to @TomK",
        }
        assert second.status_code == 200
        assert second.json()["data"]["message"] == "Handle updated to @thomas"
        assert third.status_code == 429
        body = third.json()
        assert body["error_code"] == "HANDLE_RATE_LIMITED"
        assert body["details"]["next_eligible_at"] is not None

    @pytest.mark.asyncio
    async def test_case_only_change_is_not_rate_limited(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        await app_client.put("/api/v1/handles/me", json={"handle": "oldname"}, headers=auth_headers)
        await app_client.put("/api/v1/handles/me", json={"handle": "tomk"}, headers=auth_headers)

        response = await app_client.put(
            "/api/v1/handles/me", json={"handle": "TomK"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["handle"] == "TomK"

    @pytest.mark.asyncio
    async def test_reserved_is_400(self, app_client: AsyncClient, auth_headers: dict[str, str]):
        response = await app_client.put(
            "/api/v1/handles/me", json={"handle": "support"}, headers=auth_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "HANDLE_RESERVED"
        assert body["details"]["suggestions"] == ["support1", "support_", "support2"]

    @pytest.mark.asyncio
    async def test_invalid_format_is_400(self, app_client: AsyncClient, auth_headers: dict[str, str]):
        response = await app_client.put(
            "/api/v1/handles/me", json={"handle": "_bad_"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "HANDLE_INVALID_FORMAT"

    @pytest.mark.asyncio
    async def test_taken_is_409(
        self, app_client: AsyncClient, auth_headers: dict[str, str], make_profile
    ):
        await make_profile(handle="TakenOne")

        response = await app_client.put(
            "/api/v1/handles/me", json={"handle": "takenone"}, headers=auth_headers
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "HANDLE_TAKEN"

    @pytest.mark.asyncio
    async def test_unknown_profile_is_404(self, app_client: AsyncClient, auth_provider):
        from uuid import uuid4

        token = auth_provider.create_token(TokenUser(id=uuid4(), email="ghost@example.com"))

        response = await app_client.put(
            "/api/v1/handles/me",
            json={"handle": "ghost"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "PROFILE_NOT_FOUND"


class TestHistoryAndSuggestions:
    @pytest.mark.asyncio
    async def test_history_lists_counted_renames(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        await app_client.put("/api/v1/handles/me", json={"handle": "first"}, headers=auth_headers)
        await app_client.put("/api/v1/handles/me", json={"handle": "second"}, headers=auth_headers)

        response = await app_client.get("/api/v1/handles/me/history", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["old_handle"] == "first"
        assert data[0]["new_handle"] == "second"

    @pytest.mark.asyncio
    async def test_history_requires_auth(self, app_client: AsyncClient):
        response = await app_client.get("/api/v1/handles/me/history")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_suggestions_from_profile_name(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await app_client.get("/api/v1/handles/me/suggestions", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data[:3] == ["testuser", "tuser", "usertest"]
        assert len(data) <= 5


class TestSearchAndLookup:
    @pytest.mark.asyncio
    async def test_search(self, app_client: AsyncClient, make_profile):
        for handle in ["atom", "Tom", "tomkinson"]:
            await make_profile(handle=handle, first_name=handle.capitalize())

        response = await app_client.get("/api/v1/handles/search", params={"q": "tom"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert [(d["handle"], d["match_type"]) for d in data] == [
            ("Tom", "exact"),
            ("tomkinson", "prefix"),
            ("atom", "partial"),
        ]
        assert data[2]["first_name"] == "Atom"

    @pytest.mark.asyncio
    async def test_search_empty_query(self, app_client: AsyncClient):
        response = await app_client.get("/api/v1/handles/search", params={"q": ""})

        assert response.status_code == 200
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_lookup_by_handle(self, app_client: AsyncClient, make_profile):
        profile_id = await make_profile(handle="TomK", display_name="Tom K", sport="golf")

        response = await app_client.get("/api/v1/handles/@tomk")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(profile_id)
        assert data["handle"] == "TomK"
        assert data["sport"] == "golf"
        assert "email" not in data

    @pytest.mark.asyncio
    async def test_lookup_unknown_handle(self, app_client: AsyncClient):
        response = await app_client.get("/api/v1/handles/nobody")

        assert response.status_code == 404
        assert response.json()["error_code"] == "HANDLE_NOT_FOUND"
