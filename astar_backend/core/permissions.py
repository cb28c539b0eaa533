"""
Permission rule model and evaluation.

Permission strings follow `resource.action.scope`, e.g. `table.view.all`,
`record.edit.own`, `document.view.resource_group:<uuid>` or
`table.delete.resource_id:<uuid>`. Rules are attached to roles; a user's
effective permissions are the union of the rules of all their roles.

Dependencies: None (pure domain layer)
System role: Authorization rule parsing and matching
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Union
from uuid import UUID


class ResourceType(str, enum.Enum):
    """Resources a permission rule can target."""

    TABLE = "table"
    RECORD = "record"
    DOCUMENT = "document"
    WORKSPACE = "workspace"
    ROLE = "role"
    USER = "user"
    TENANT = "tenant"
    SETTINGS = "settings"
    DIRECTORY = "directory"
    PROPERTY_TYPE = "property_type"
    RESOURCE_GROUP = "resource_group"


class Action(str, enum.Enum):
    """Operations on a resource. MANAGE implies every other action."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    MANAGE = "manage"
    EXPORT = "export"
    IMPORT = "import"

    def includes(self, other: "Action") -> bool:
        return self is Action.MANAGE or self is other


class Scope(str, enum.Enum):
    """
    Breadth of a rule.

    ALL: every resource in the tenant
    TEAM: resources of the caller's teams
    OWN: resources the caller owns
    RESOURCE_GROUP: resources in one group
    RESOURCE_ID: one specific resource
    """

    ALL = "all"
    TEAM = "team"
    OWN = "own"
    RESOURCE_GROUP = "resource_group"
    RESOURCE_ID = "resource_id"

    def covers(self, other: "Scope") -> bool:
        return other in _SCOPE_COVERAGE[self]


_SCOPE_COVERAGE: dict[Scope, frozenset[Scope]] = {
    Scope.ALL: frozenset(Scope),
    Scope.TEAM: frozenset(
        {Scope.TEAM, Scope.OWN, Scope.RESOURCE_GROUP, Scope.RESOURCE_ID}
    ),
    Scope.OWN: frozenset({Scope.OWN, Scope.RESOURCE_GROUP, Scope.RESOURCE_ID}),
    Scope.RESOURCE_GROUP: frozenset({Scope.RESOURCE_GROUP, Scope.RESOURCE_ID}),
    Scope.RESOURCE_ID: frozenset({Scope.RESOURCE_ID}),
}

GENERAL_SCOPES = (Scope.ALL, Scope.TEAM, Scope.OWN)


@dataclass(frozen=True)
class GeneralRule:
    """Rule with an ALL, TEAM or OWN scope."""

    resource_type: ResourceType
    action: Action
    scope: Scope

    def __post_init__(self) -> None:
        if self.scope not in GENERAL_SCOPES:
            raise ValueError(
                f"GeneralRule only supports ALL, TEAM or OWN scope, got {self.scope.value}"
            )

    def to_database_string(self) -> str:
        return f"{self.resource_type.value}.{self.action.value}.{self.scope.value}"


@dataclass(frozen=True)
class ResourceGroupRule:
    """Rule granting an action on every resource in one group."""

    resource_type: ResourceType
    action: Action
    group_id: UUID

    @property
    def scope(self) -> Scope:
        return Scope.RESOURCE_GROUP

    def to_database_string(self) -> str:
        return (
            f"{self.resource_type.value}.{self.action.value}"
            f".resource_group:{self.group_id}"
        )


@dataclass(frozen=True)
class ResourceIdRule:
    """Rule granting an action on one resource."""

    resource_type: ResourceType
    action: Action
    resource_id: UUID

    @property
    def scope(self) -> Scope:
        return Scope.RESOURCE_ID

    def to_database_string(self) -> str:
        return (
            f"{self.resource_type.value}.{self.action.value}"
            f".resource_id:{self.resource_id}"
        )


PermissionRule = Union[GeneralRule, ResourceGroupRule, ResourceIdRule]


def _parse_enum(enum_cls, raw: str, label: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid {label}: '{raw}'") from None


def parse_permission(permission: str) -> PermissionRule:
    """
    Parse a permission string into a rule.

    Args:
        permission: String such as `table.view.all` (case-insensitive)

    Returns:
        PermissionRule: Parsed rule

    Raises:
        ValueError: If the string is malformed or names an unknown part
    """
    if not permission or not permission.strip():
        raise ValueError("Permission string must not be blank")

    parts = permission.strip().split(".", 2)
    if len(parts) != 3 or not all(parts):
        raise ValueError(
            f"Invalid permission format: '{permission}' (expected resource.action.scope)"
        )

    resource_type = _parse_enum(ResourceType, parts[0], "resource type")
    action = _parse_enum(Action, parts[1], "action")
    scope_part = parts[2].strip()

    if ":" in scope_part:
        scope_name, _, raw_id = scope_part.partition(":")
        scope = _parse_enum(Scope, scope_name, "scope")
        try:
            target = UUID(raw_id.strip())
        except ValueError:
            raise ValueError(f"Invalid UUID in permission: '{permission}'") from None
        if scope is Scope.RESOURCE_GROUP:
            return ResourceGroupRule(resource_type, action, target)
        if scope is Scope.RESOURCE_ID:
            return ResourceIdRule(resource_type, action, target)
        raise ValueError(f"Scope '{scope.value}' does not take an identifier")

    scope = _parse_enum(Scope, scope_part, "scope")
    if scope not in GENERAL_SCOPES:
        raise ValueError(f"Scope '{scope.value}' requires an identifier")
    return GeneralRule(resource_type, action, scope)


def is_valid_permission(permission: str) -> bool:
    try:
        parse_permission(permission)
    except ValueError:
        return False
    return True


def rule_grants(rule: PermissionRule, required: PermissionRule) -> bool:
    """
    Check whether `rule` satisfies `required`.

    Only rules of the same kind match. Resource types must be equal and the
    rule's action must include the required action. General rules also need
    a scope covering the required one; identifier rules need the same
    resource or group id.
    """
    if type(rule) is not type(required):
        return False
    if rule.resource_type is not required.resource_type:
        return False
    if not rule.action.includes(required.action):
        return False
    if isinstance(rule, ResourceIdRule):
        return rule.resource_id == required.resource_id
    if isinstance(rule, ResourceGroupRule):
        return rule.group_id == required.group_id
    return rule.scope.covers(required.scope)


def has_permission(rules: Iterable[PermissionRule], required: PermissionRule | str) -> bool:
    """True when any rule grants the required permission."""
    if isinstance(required, str):
        required = parse_permission(required)
    return any(rule_grants(rule, required) for rule in rules)


def _has_general(
    rules: Iterable[PermissionRule],
    resource_type: ResourceType,
    action: Action,
    scope: Scope,
) -> bool:
    return any(
        isinstance(rule, GeneralRule)
        and rule.resource_type is resource_type
        and rule.action.includes(action)
        and rule.scope is scope
        for rule in rules
    )


def can_access_resource(
    rules: Iterable[PermissionRule],
    resource_type: ResourceType,
    action: Action,
    resource_id: UUID,
    user_id: UUID,
    owner_id: UUID | None = None,
    resource_team_id: UUID | None = None,
    user_team_ids: Iterable[UUID] = (),
) -> bool:
    """
    Decide access to a concrete resource.

    Checked in order: a ResourceIdRule for this resource, ALL scope, TEAM
    scope with a shared team, OWN scope with ownership.

    Args:
        rules: Caller's effective rules
        resource_type: Kind of the resource
        action: Requested action
        resource_id: Resource identifier
        user_id: Caller
        owner_id: Resource owner, if any
        resource_team_id: Team the resource belongs to, if any
        user_team_ids: Teams the caller belongs to

    Returns:
        bool: Whether access is granted
    """
    rules = list(rules)

    for rule in rules:
        if (
            isinstance(rule, ResourceIdRule)
            and rule.resource_type is resource_type
            and rule.resource_id == resource_id
            and rule.action.includes(action)
        ):
            return True

    if _has_general(rules, resource_type, action, Scope.ALL):
        return True

    if resource_team_id is not None and resource_team_id in set(user_team_ids):
        if _has_general(rules, resource_type, action, Scope.TEAM):
            return True

    if owner_id is not None and owner_id == user_id:
        if _has_general(rules, resource_type, action, Scope.OWN):
            return True

    return False


def highest_scope(
    rules: Iterable[PermissionRule],
    resource_type: ResourceType,
    action: Action,
) -> Scope | None:
    """Return the broadest general scope granted (ALL, then TEAM, then OWN)."""
    rules = list(rules)
    for scope in GENERAL_SCOPES:
        if _has_general(rules, resource_type, action, scope):
            return scope
    return None


def effective_permissions(role_rules: Iterable[Iterable[PermissionRule]]) -> set[PermissionRule]:
    """Union of the rule sets of several roles."""
    merged: set[PermissionRule] = set()
    for rules in role_rules:
        merged.update(rules)
    return merged


def build_authorities(role_names: Iterable[str], rules: Iterable[PermissionRule]) -> set[str]:
    """Authorities exposed to the API layer: `ROLE_<NAME>` plus permission strings."""
    authorities = {f"ROLE_{name.upper()}" for name in role_names}
    authorities.update(rule.to_database_string() for rule in rules)
    return authorities
