"""
Test suite for user account and profile endpoints.

System role: Verification of /users routing and access rules
"""

import uuid
from datetime import datetime, timezone

from astar_backend.api.deps.dependencies import get_user_service
from astar_backend.core.exceptions import DuplicateError


def _profile(user_id: uuid.UUID, display_name: str | None = "Alice") -> dict:
    return {
        "user_id": user_id,
        "display_name": display_name,
        "avatar_url": None,
        "updated_at": datetime.now(timezone.utc),
    }


def _user(user_id: uuid.UUID, email: str = "alice@example.com") -> dict:
    now = datetime.now(timezone.utc)
    return {
        "id": user_id,
        "auth0_sub": "auth0|alice",
        "email": email,
        "display_name": "Alice",
        "avatar_url": None,
        "created_at": now,
        "updated_at": now,
    }


class TestCurrentUser:
    """/users/me and /users/me/profile."""

    def test_get_me(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        user_service = override_service(get_user_service)
        user_service.get_current_user.return_value = {
            **_user(viewer_principal.user_id),
            "current_tenant_id": viewer_principal.tenant_id,
            "tenant_count": 2,
        }

        response = client.get("/api/v1/users/me")

        assert response.status_code == 200
        assert response.json()["tenant_count"] == 2
        user_service.get_current_user.assert_awaited_once_with(
            viewer_principal.user_id, viewer_principal.tenant_id
        )

    def test_email_in_use_is_409(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        user_service = override_service(get_user_service)
        user_service.update_email.side_effect = DuplicateError(
            "Email 'bob@example.com' is already in use by another user", {"email": "bob@example.com"}
        )

        response = client.put("/api/v1/users/me", json={"email": "bob@example.com"})

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "DUPLICATE"

    def test_profile_update_passes_only_sent_fields(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        user_service = override_service(get_user_service)
        user_service.update_profile.return_value = _profile(viewer_principal.user_id, None)

        response = client.put("/api/v1/users/me/profile", json={"display_name": None})

        assert response.status_code == 200
        user_service.update_profile.assert_awaited_once_with(viewer_principal.user_id, {"display_name": None})


class TestOtherUsers:
    """/users/{user_id} access rules."""

    def test_viewer_cannot_read_other_user(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        user_service = override_service(get_user_service)

        response = client.get(f"/api/v1/users/{uuid.uuid4()}")

        assert response.status_code == 403
        assert response.json()["detail"]["details"]["permission"] == "user.view.all"
        user_service.get_user.assert_not_called()

    def test_viewer_can_read_own_profile_by_id(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        user_service = override_service(get_user_service)
        user_service.get_user_profile.return_value = _profile(viewer_principal.user_id)

        response = client.get(f"/api/v1/users/{viewer_principal.user_id}/profile")

        assert response.status_code == 200
        user_service.get_user_profile.assert_awaited_once_with(
            viewer_principal.tenant_id, viewer_principal.user_id
        )

    def test_admin_reads_member(self, client, login, admin_principal, override_service):
        login(admin_principal)
        member_id = uuid.uuid4()
        user_service = override_service(get_user_service)
        user_service.get_user.return_value = {**_user(member_id, "bob@example.com"), "tenant_count": 1}

        response = client.get(f"/api/v1/users/{member_id}")

        assert response.status_code == 200
        assert response.json()["email"] == "bob@example.com"
