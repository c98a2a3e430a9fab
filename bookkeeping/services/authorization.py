"""
Authorization for journal workflow transitions.

Role lookup is delegated to a RoleResolver; this module only
answers whether a role permits an action. Authentication is
somebody else's job: an actor arrives here already identified.
"""

import logging
from typing import Protocol

from bookkeeping.config import get_settings
from bookkeeping.exceptions import AuthError

logger = logging.getLogger(__name__)


class RoleResolver(Protocol):
    def role_for(self, actor: str) -> str | None:
        """Return the actor's role, or None for an unknown actor."""
        ...


class StaticRoleResolver:
    """Resolve roles from a fixed actor -> role mapping."""

    def __init__(self, roles: dict[str, str]):
        self.roles = {actor: role.lower() for actor, role in roles.items()}

    def role_for(self, actor: str) -> str | None:
        return self.roles.get(actor)


class SettingsRoleResolver(StaticRoleResolver):
    """Resolve roles from the ACTOR_ROLES setting."""

    def __init__(self):
        super().__init__(get_settings().ACTOR_ROLES)


class Authorizer:

    def __init__(self, resolver: RoleResolver, posting_role: str | None = None):
        self.resolver = resolver
        self.posting_role = (posting_role or get_settings().POSTING_ROLE).lower()

    def role_of(self, actor: str | None) -> str | None:
        if not actor:
            return None
        return self.resolver.role_for(actor)

    def has_posting_authority(self, actor: str | None) -> bool:
        return self.role_of(actor) == self.posting_role

    def require_known_actor(self, actor: str | None, action: str) -> str:
        role = self.role_of(actor)
        if role is None:
            logger.warning("Unknown actor %r tried to %s", actor, action)
            raise AuthError(actor, action)
        return role

    def require_posting_authority(self, actor: str | None, action: str) -> None:
        if not self.has_posting_authority(actor):
            logger.warning(
                "Actor %r (role %r) tried to %s",
                actor, self.role_of(actor), action,
            )
            raise AuthError(actor, action)
