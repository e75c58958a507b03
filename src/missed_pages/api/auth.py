"""Actor resolution and capability checks for API routes.

Authentication belongs to the host wiki. Its front end (or reverse proxy)
asserts who is acting in the ``X-Wiki-User`` and ``X-Wiki-Role`` headers,
and routes here only check that the asserted actor holds the capability an
action needs.
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException

from missed_pages.api.permissions import Authorizer, Capability


@dataclass(slots=True)
class Actor:
    """The user performing a request, as asserted by the host."""

    name: str
    role: str


def get_actor(
    x_wiki_user: str = Header(default=""),
    x_wiki_role: str = Header(default="reader"),
) -> Actor:
    """FastAPI dependency reading the asserted actor from request headers."""
    return Actor(name=x_wiki_user.strip(), role=x_wiki_role.strip().lower())


def require_capability(authorizer: Authorizer, actor: Actor, capability: Capability) -> Actor:
    """
    Ensure the actor holds a capability.

    Raises:
        HTTPException(401): No actor was asserted
        HTTPException(403): The actor lacks the capability
    """
    if not actor.name:
        raise HTTPException(status_code=401, detail="No acting user provided")
    if not authorizer.is_allowed(actor.name, actor.role, capability):
        raise HTTPException(
            status_code=403,
            detail=f"Insufficient permissions. Required: {capability.value}",
        )
    return actor
