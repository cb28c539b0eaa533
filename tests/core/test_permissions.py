"""
Test suite for permission rule parsing and evaluation.

System role: Verification of RBAC rule semantics
"""

import uuid

import pytest

from astar_backend.core.permissions import (
    Action,
    GeneralRule,
    ResourceGroupRule,
    ResourceIdRule,
    ResourceType,
    Scope,
    build_authorities,
    can_access_resource,
    has_permission,
    highest_scope,
    is_valid_permission,
    parse_permission,
)


class TestParsePermission:
    """Test suite for parse_permission."""

    def test_should_parse_general_rule(self) -> None:
        rule = parse_permission("table.view.all")

        assert rule == GeneralRule(ResourceType.TABLE, Action.VIEW, Scope.ALL)
        assert rule.to_database_string() == "table.view.all"

    def test_should_be_case_insensitive(self) -> None:
        assert parse_permission("Record.EDIT.Own") == GeneralRule(
            ResourceType.RECORD, Action.EDIT, Scope.OWN
        )

    def test_should_parse_resource_group_rule(self) -> None:
        group_id = uuid.uuid4()

        rule = parse_permission(f"document.view.resource_group:{group_id}")

        assert isinstance(rule, ResourceGroupRule)
        assert rule.group_id == group_id
        assert rule.scope is Scope.RESOURCE_GROUP

    def test_should_parse_resource_id_rule(self) -> None:
        resource_id = uuid.uuid4()

        rule = parse_permission(f"table.delete.resource_id:{resource_id}")

        assert isinstance(rule, ResourceIdRule)
        assert rule.to_database_string() == f"table.delete.resource_id:{resource_id}"

    @pytest.mark.parametrize(
        "permission",
        [
            "",
            "table.view",
            "table..all",
            "spaceship.view.all",
            "table.fly.all",
            "table.view.galaxy",
            "table.view.resource_id",
            "table.view.all:123",
            "table.view.resource_id:not-a-uuid",
        ],
    )
    def test_should_reject_malformed_strings(self, permission: str) -> None:
        with pytest.raises(ValueError):
            parse_permission(permission)
        assert is_valid_permission(permission) is False


class TestRuleMatching:
    """Test suite for has_permission."""

    def test_manage_should_imply_every_action(self) -> None:
        rules = {parse_permission("table.manage.all")}

        assert has_permission(rules, "table.delete.all")
        assert has_permission(rules, "table.export.own")

    def test_narrow_scope_should_not_cover_broader_scope(self) -> None:
        rules = {parse_permission("record.edit.own")}

        assert has_permission(rules, "record.edit.own")
        assert not has_permission(rules, "record.edit.team")
        assert not has_permission(rules, "record.edit.all")

    def test_resource_type_must_match(self) -> None:
        rules = {parse_permission("table.view.all")}

        assert not has_permission(rules, "record.view.all")

    def test_resource_id_rule_should_only_grant_its_resource(self) -> None:
        resource_id = uuid.uuid4()
        rules = {parse_permission(f"table.view.resource_id:{resource_id}")}

        assert has_permission(rules, f"table.view.resource_id:{resource_id}")
        assert not has_permission(rules, f"table.view.resource_id:{uuid.uuid4()}")

    def test_group_rule_should_not_grant_resource_id_requirement(self) -> None:
        rules = {parse_permission(f"table.view.resource_group:{uuid.uuid4()}")}

        assert not has_permission(rules, f"table.view.resource_id:{uuid.uuid4()}")

    def test_group_rule_should_require_same_group(self) -> None:
        group_id = uuid.uuid4()
        rules = {parse_permission(f"table.manage.resource_group:{group_id}")}

        assert has_permission(rules, f"table.edit.resource_group:{group_id}")
        assert not has_permission(rules, f"table.edit.resource_group:{uuid.uuid4()}")

    @pytest.mark.parametrize("permission", ["table.view.own", "table.view.team", "table.view.all"])
    def test_general_rule_should_not_grant_resource_id_requirement(self, permission: str) -> None:
        rules = {parse_permission(permission)}

        assert not has_permission(rules, f"table.view.resource_id:{uuid.uuid4()}")

    @pytest.mark.parametrize(
        "permission",
        ["table.delete.own", "table.delete.team", f"table.delete.resource_id:{uuid.uuid4()}"],
    )
    def test_narrow_rules_should_not_satisfy_all_scope(self, permission: str) -> None:
        rules = {parse_permission(permission)}

        assert not has_permission(rules, "table.delete.all")


class TestCanAccessResource:
    """Test suite for resource-level access decisions."""

    def test_all_scope_should_grant_any_resource(self) -> None:
        rules = {parse_permission("document.view.all")}

        assert can_access_resource(
            rules, ResourceType.DOCUMENT, Action.VIEW, uuid.uuid4(), uuid.uuid4()
        )

    def test_own_scope_should_require_ownership(self) -> None:
        user_id = uuid.uuid4()
        rules = {parse_permission("document.edit.own")}

        assert can_access_resource(
            rules, ResourceType.DOCUMENT, Action.EDIT, uuid.uuid4(), user_id, owner_id=user_id
        )
        assert not can_access_resource(
            rules, ResourceType.DOCUMENT, Action.EDIT, uuid.uuid4(), user_id, owner_id=uuid.uuid4()
        )

    def test_team_scope_should_require_shared_team(self) -> None:
        team_id = uuid.uuid4()
        rules = {parse_permission("table.view.team")}

        assert can_access_resource(
            rules,
            ResourceType.TABLE,
            Action.VIEW,
            uuid.uuid4(),
            uuid.uuid4(),
            resource_team_id=team_id,
            user_team_ids=[team_id],
        )
        assert not can_access_resource(
            rules,
            ResourceType.TABLE,
            Action.VIEW,
            uuid.uuid4(),
            uuid.uuid4(),
            resource_team_id=team_id,
            user_team_ids=[uuid.uuid4()],
        )

    def test_resource_id_rule_should_grant_exact_resource(self) -> None:
        resource_id = uuid.uuid4()
        rules = {parse_permission(f"table.edit.resource_id:{resource_id}")}

        assert can_access_resource(rules, ResourceType.TABLE, Action.EDIT, resource_id, uuid.uuid4())
        assert not can_access_resource(rules, ResourceType.TABLE, Action.EDIT, uuid.uuid4(), uuid.uuid4())


class TestHelpers:
    def test_highest_scope_should_prefer_all(self) -> None:
        rules = {parse_permission("table.view.own"), parse_permission("table.view.all")}

        assert highest_scope(rules, ResourceType.TABLE, Action.VIEW) is Scope.ALL
        assert highest_scope(rules, ResourceType.TABLE, Action.DELETE) is None

    def test_build_authorities_should_prefix_roles(self) -> None:
        authorities = build_authorities(["admin"], {parse_permission("table.view.all")})

        assert authorities == {"ROLE_ADMIN", "table.view.all"}

    def test_general_rule_should_reject_identifier_scopes(self) -> None:
        with pytest.raises(ValueError):
            GeneralRule(ResourceType.TABLE, Action.VIEW, Scope.RESOURCE_ID)
