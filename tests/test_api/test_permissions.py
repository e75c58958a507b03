"""
Unit tests for permissions module (missed_pages/api/permissions.py).

Tests cover:
- Role and capability enums
- Capability checks for each role
- The role-backed authorizer
- The FastAPI actor helpers

All tests are pure unit tests with no external dependencies.
"""

import pytest
from fastapi import HTTPException

from missed_pages.api.auth import Actor, get_actor, require_capability
from missed_pages.api.permissions import (
    ROLE_CAPABILITIES,
    Capability,
    Role,
    RoleAuthorizer,
    has_capability,
)

# ============================================================================
# ENUM TESTS
# ============================================================================


@pytest.mark.unit
def test_role_enum_values():
    """Test Role enum has expected values."""
    assert [role.value for role in Role] == ["reader", "editor", "sysop", "bureaucrat"]


@pytest.mark.unit
def test_capabilities_mirror_wiki_rights():
    assert Capability.VIEW.value == "missedpages-view"
    assert Capability.EDIT.value == "edit"
    assert Capability.BLOCK.value == "block"
    assert Capability.DELETE.value == "delete"


# ============================================================================
# HAS_CAPABILITY TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    ("role", "capability", "expected"),
    [
        ("reader", Capability.VIEW, False),
        ("editor", Capability.VIEW, True),
        ("editor", Capability.EDIT, True),
        ("editor", Capability.BLOCK, False),
        ("editor", Capability.DELETE, False),
        ("sysop", Capability.BLOCK, True),
        ("sysop", Capability.DELETE, True),
        ("SYSOP", Capability.EDIT, True),
        ("bureaucrat", Capability.DELETE, True),
        ("nonexistent", Capability.VIEW, False),
    ],
)
def test_has_capability(role, capability, expected):
    assert has_capability(role, capability) is expected


@pytest.mark.unit
def test_bureaucrat_has_every_capability():
    assert ROLE_CAPABILITIES[Role.BUREAUCRAT] == set(Capability)


# ============================================================================
# AUTHORIZER TESTS
# ============================================================================


@pytest.mark.unit
def test_role_authorizer_requires_actor():
    authorizer = RoleAuthorizer()
    assert authorizer.is_allowed("Admin", "sysop", Capability.DELETE) is True
    assert authorizer.is_allowed("", "sysop", Capability.DELETE) is False


@pytest.mark.unit
def test_get_actor_normalizes_headers():
    actor = get_actor(x_wiki_user="  Alice ", x_wiki_role=" Sysop")
    assert actor == Actor(name="Alice", role="sysop")


@pytest.mark.unit
def test_require_capability_errors():
    authorizer = RoleAuthorizer()

    with pytest.raises(HTTPException) as missing:
        require_capability(authorizer, Actor(name="", role="sysop"), Capability.VIEW)
    with pytest.raises(HTTPException) as denied:
        require_capability(authorizer, Actor(name="Bob", role="editor"), Capability.BLOCK)

    assert missing.value.status_code == 401
    assert denied.value.status_code == 403
    assert denied.value.detail == "Insufficient permissions. Required: block"


@pytest.mark.unit
def test_require_capability_returns_actor():
    actor = Actor(name="Carol", role="editor")
    assert require_capability(RoleAuthorizer(), actor, Capability.EDIT) is actor
