"""
Role-based capability checks (RBAC).

The ledger service embeds no authorization. This module is the default
host-side authorizer used by the HTTP API: it answers "does this actor hold
capability X?" from the role the host wiki asserts for the actor.

Capabilities mirror the wiki user rights that gate each action:

    VIEW    missedpages-view   read the reports
    EDIT    edit               create a redirect for a missed page
    BLOCK   block              ignore a title (a similar responsibility to blocking)
    DELETE  delete             clear a title from the log

Role Hierarchy (lowest to highest):
    Reader → Editor → Sysop → Bureaucrat

Permission Design:
- Each role has an explicit set of capabilities
- Roles DO NOT inherit lower role capabilities (must be explicit)
- Bureaucrat has every capability
"""

from enum import Enum
from typing import Protocol

# ============================================================================
# ROLE DEFINITIONS
# ============================================================================


class Role(Enum):
    """
    Wiki roles as asserted by the host, ordered by privilege level.

    Roles:
        READER: Anonymous or logged-in reader (lowest privilege)
        EDITOR: Autoconfirmed editor
        SYSOP: Administrator
        BUREAUCRAT: Full access (highest privilege)
    """

    READER = "reader"
    EDITOR = "editor"
    SYSOP = "sysop"
    BUREAUCRAT = "bureaucrat"


# ============================================================================
# CAPABILITY DEFINITIONS
# ============================================================================


class Capability(Enum):
    """Capabilities checked before each ledger action."""

    VIEW = "missedpages-view"
    EDIT = "edit"
    BLOCK = "block"
    DELETE = "delete"


# ============================================================================
# ROLE-CAPABILITY MAPPING
# ============================================================================

ROLE_CAPABILITIES: dict[Role, set[Capability]] = {
    Role.READER: set(),
    # Editors can review the log and turn misses into redirects.
    Role.EDITOR: {
        Capability.VIEW,
        Capability.EDIT,
    },
    Role.SYSOP: {
        Capability.VIEW,
        Capability.EDIT,
        Capability.BLOCK,
        Capability.DELETE,
    },
    Role.BUREAUCRAT: set(Capability),
}


def has_capability(role: str, capability: Capability) -> bool:
    """
    Check if a role holds a capability.

    Args:
        role: Role string (case-insensitive)
        capability: Capability to check

    Returns:
        True if granted, False if not or if the role is unknown

    Example:
        >>> has_capability("sysop", Capability.BLOCK)
        True
        >>> has_capability("editor", Capability.DELETE)
        False
    """
    try:
        role_enum = Role(role.lower())
    except ValueError:
        return False
    return capability in ROLE_CAPABILITIES.get(role_enum, set())


# ============================================================================
# AUTHORIZERS
# ============================================================================


class Authorizer(Protocol):
    """Answers whether an actor holds a capability."""

    def is_allowed(self, actor: str, role: str, capability: Capability) -> bool: ...


class RoleAuthorizer:
    """Authorizer backed by :data:`ROLE_CAPABILITIES`."""

    def is_allowed(self, actor: str, role: str, capability: Capability) -> bool:
        if not actor:
            return False
        return has_capability(role, capability)
