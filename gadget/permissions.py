"""
Group-based permission checks for routes.
"""

import logging
from typing import Iterable

from .models import SUPER_ADMIN_GROUP, WILDCARD_PERMISSION, User

logger = logging.getLogger(__name__)


def is_allowed(group_names: Iterable[str], permissions: Iterable[str]) -> bool:
    """
    Decide whether a member of ``group_names`` may run a route requiring
    ``permissions``.

    Members of the super-admin group are always allowed. A route with no
    permissions, or with the ``*`` wildcard, is open to everyone. Otherwise
    the user must belong to at least one of the listed groups.
    """
    groups = set(group_names)
    if SUPER_ADMIN_GROUP in groups:
        return True

    required = list(permissions or ())
    if not required:
        return True
    if WILDCARD_PERMISSION in required:
        return True

    return any(name in groups for name in required)


class PermissionEvaluator:
    """Evaluates route permissions against a user's stored group memberships."""

    def __init__(self, store):
        self.store = store

    def can(self, user: User, permissions: Iterable[str]) -> bool:
        """Check if ``user`` possesses the given permissions."""
        required = list(permissions or ())
        group_names = [group.name for group in self.store.groups_of(user)]
        allowed = is_allowed(group_names, required)
        logger.debug(
            f"Permission check for {user.uuid}: groups={group_names} "
            f"required={required} allowed={allowed}"
        )
        return allowed
