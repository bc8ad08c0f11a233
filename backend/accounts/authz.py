# accounts/authz.py
"""
Authorization utilities for ScoutDesk.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require: Check permissions and raise if not granted

Role gating happens here, in the view layer. Commands receive the
ActorContext only to record who created or settled something; they
never look at the role.

Permissions are checked:
1. SUPERADMIN: implicit allow
2. Everyone else: the role's default codes (accounts/permission_defaults.py)
"""

from dataclasses import dataclass
from typing import FrozenSet
from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import User
from accounts.permission_defaults import ROLE_DEFAULTS


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor.

    This is passed to commands to provide context about who is
    performing an action.

    Attributes:
        user: The authenticated user
        perms: Set of permission codes granted by the user's role
    """
    user: User
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        """
        Check if actor has a specific permission.

        Inactive users never have permissions, whatever their role.
        """
        if not self.user.is_active:
            return False
        if self.user.role == User.Role.SUPERADMIN:
            return True
        return code in self.perms

    @property
    def is_authenticated(self) -> bool:
        """Mirror Django's user.is_authenticated for compatibility."""
        return bool(getattr(self.user, "is_authenticated", False))

    @property
    def user_id(self):
        return self.user.pk

    @property
    def role(self) -> str:
        return self.user.role

    @classmethod
    def for_user(cls, user: User) -> "ActorContext":
        return cls(user=user, perms=frozenset(ROLE_DEFAULTS.get(user.role, set())))


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    This is called at the start of every view that needs authorization.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If the user account is deactivated
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    if not user.is_active:
        raise PermissionDenied("This account is deactivated.")

    return ActorContext.for_user(user)


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Raises PermissionDenied if the permission is not granted.

    Example:
        require(actor, "finance.write")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")
