"""
Test suite for table and record endpoints.

Covers the permission gate in front of every route and the mapping of
ValueErrors raised by the schema layer.
"""

import uuid
from datetime import datetime, timezone

import pytest

from astar_backend.api.deps.dependencies import get_record_service, get_table_service
from astar_backend.core.permissions import parse_permission


def _table(workspace_id: uuid.UUID, name: str = "Cases") -> dict:
    now = datetime.now(timezone.utc)
    return {
        "id": uuid.uuid4(),
        "workspace_id": workspace_id,
        "name": name,
        "description": None,
        "properties": {"title": {"type_id": "text", "display_name": "Title", "config": {}, "required": True}},
        "property_order": ["title"],
        "version": 1,
        "created_by": None,
        "created_at": now,
        "updated_at": now,
    }


class TestTablePermissions:
    """require_permission in front of /tables."""

    def test_viewer_can_list(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        workspace_id = uuid.uuid4()
        table_service = override_service(get_table_service)
        table_service.list_tables.return_value = [_table(workspace_id)]

        response = client.get("/api/v1/tables", params={"workspace_id": str(workspace_id)})

        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == ["Cases"]
        table_service.list_tables.assert_awaited_once_with(viewer_principal.tenant_id, workspace_id)

    def test_viewer_cannot_create(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        table_service = override_service(get_table_service)

        response = client.post("/api/v1/tables", json={"workspace_id": str(uuid.uuid4()), "name": "Cases"})

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["code"] == "FORBIDDEN"
        assert detail["details"]["permission"] == "table.create.all"
        table_service.create_table.assert_not_called()

    def test_viewer_cannot_export(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        override_service(get_table_service)

        response = client.get(f"/api/v1/tables/{uuid.uuid4()}/export")

        assert response.status_code == 403

    def test_viewer_cannot_create_records(self, client, login, viewer_principal, override_service):
        login(viewer_principal)
        record_service = override_service(get_record_service)

        response = client.post(f"/api/v1/tables/{uuid.uuid4()}/records", json={"data": {"title": "x"}})

        assert response.status_code == 403
        record_service.create_record.assert_not_called()

    @pytest.mark.parametrize("scope", ["own", "team", "resource_id:{table_id}", "resource_group:{group_id}"])
    def test_narrow_delete_rule_cannot_delete_other_table(
        self, client, login, viewer_principal, override_service, scope
    ):
        other_table_id = uuid.uuid4()
        rule = "table.delete." + scope.format(table_id=uuid.uuid4(), group_id=uuid.uuid4())
        viewer_principal.permissions.add(parse_permission(rule))
        login(viewer_principal)
        table_service = override_service(get_table_service)

        response = client.delete(f"/api/v1/tables/{other_table_id}")

        assert response.status_code == 403
        assert response.json()["detail"]["details"]["permission"] == "table.delete.all"
        table_service.delete_table.assert_not_called()

    def test_manage_all_rule_can_delete_table(self, client, login, viewer_principal, override_service):
        viewer_principal.permissions.add(parse_permission("table.manage.all"))
        login(viewer_principal)
        table_service = override_service(get_table_service)
        table_id = uuid.uuid4()

        response = client.delete(f"/api/v1/tables/{table_id}")

        assert response.status_code == 204
        table_service.delete_table.assert_awaited_once_with(viewer_principal.tenant_id, table_id)


class TestTableErrors:
    """Service errors surfaced through /tables."""

    def test_admin_creates_table(self, client, login, admin_principal, override_service):
        login(admin_principal)
        workspace_id = uuid.uuid4()
        table_service = override_service(get_table_service)
        table_service.create_table.return_value = _table(workspace_id)

        response = client.post(
            "/api/v1/tables",
            json={
                "workspace_id": str(workspace_id),
                "name": "Cases",
                "properties": {"title": {"type_id": "text", "display_name": "Title", "required": True}},
            },
        )

        assert response.status_code == 201
        kwargs = table_service.create_table.call_args.kwargs
        assert kwargs["properties"]["title"]["required"] is True
        assert kwargs["created_by"] == admin_principal.user_id

    def test_schema_value_error_is_400(self, client, login, admin_principal, override_service):
        login(admin_principal)
        table_service = override_service(get_table_service)
        table_service.create_table.side_effect = ValueError("Unknown type ID: hologram")

        response = client.post("/api/v1/tables", json={"workspace_id": str(uuid.uuid4()), "name": "Cases"})

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "error": "Unknown type ID: hologram",
            "code": "VALIDATION_ERROR",
            "details": {},
        }

    def test_missing_property_value_error_is_404(self, client, login, admin_principal, override_service):
        login(admin_principal)
        table_service = override_service(get_table_service)
        table_service.remove_property.side_effect = ValueError("Property with key 'fee' does not exist")

        response = client.delete(f"/api/v1/tables/{uuid.uuid4()}/properties/fee")

        assert response.status_code == 404

    def test_unexpected_error_is_500(self, client, login, admin_principal, override_service, caplog):
        login(admin_principal)
        table_service = override_service(get_table_service)
        table_service.get_table.side_effect = RuntimeError("boom")

        response = client.get(f"/api/v1/tables/{uuid.uuid4()}")

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "An internal error occurred"
        failure = [r for r in caplog.records if getattr(r, "error_type", None) == "RuntimeError"]
        assert failure and failure[-1].endpoint == "get_table"

    def test_export_returns_csv(self, client, login, admin_principal, override_service):
        login(admin_principal)
        table_id = uuid.uuid4()
        table_service = override_service(get_table_service)
        table_service.export_csv.return_value = "Title\r\nSmith v. Jones\r\n"

        response = client.get(f"/api/v1/tables/{table_id}/export")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == f'attachment; filename="table-{table_id}.csv"'
        assert response.text.splitlines() == ["Title", "Smith v. Jones"]
