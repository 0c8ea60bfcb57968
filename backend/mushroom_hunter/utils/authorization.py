"""
Mushroom Hunter Backend — Authorization Helpers
=================================================

What:  Ownership and role checks shared by the finding, species and
       taxonomy services.
How:   Each helper raises the matching application exception instead of
       returning a flag, so callers stay linear:

           finding = await self._get_or_404(db, finding_id)
           require_ownership_or_admin(finding, user)
           ...

Owned resources are anything with a `user_id` attribute.
"""

from typing import Any

from sqlalchemy import Select

from mushroom_hunter.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from mushroom_hunter.models.user import ROLE_ADMIN


def is_admin(user: Any) -> bool:
    return user is not None and getattr(user, "role", None) == ROLE_ADMIN


def _require_user(user: Any) -> None:
    if user is None:
        raise AuthenticationError()


def require_ownership_or_admin(resource: Any, user: Any, message: str = "Access denied") -> bool:
    """
    Allow the resource owner or any admin.

    Raises:
        NotFoundError: resource is None
        AuthenticationError: user is None
        AuthorizationError: caller is neither owner nor admin
    """
    if resource is None:
        raise NotFoundError()
    _require_user(user)

    if resource.user_id != user.id and not is_admin(user):
        raise AuthorizationError(message)
    return True


def require_admin(user: Any) -> bool:
    _require_user(user)
    if not is_admin(user):
        raise AuthorizationError("Admin access required")
    return True


def require_ownership(resource: Any, user: Any) -> bool:
    """Allow the owner only; admins get no exemption here."""
    if resource is None:
        raise NotFoundError()
    _require_user(user)

    if resource.user_id != user.id:
        raise AuthorizationError("You do not have permission to access this resource")
    return True


def scope_to_user(query: Select, model: Any, user: Any, force_user_scope: bool = False) -> Select:
    """
    Restrict a SELECT to the caller's own rows.

    Admins see every row unless `force_user_scope` is set (the
    "my findings" toggle).
    """
    _require_user(user)
    if not force_user_scope and is_admin(user):
        return query
    return query.where(model.user_id == user.id)
