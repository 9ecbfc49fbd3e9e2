"""IAM user management operations."""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

from .client import IAMClient
from .exceptions import DecodeError
from .models import Envelope, User, decode_entities, decode_entity, loads

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing users of the configured organization."""

    def __init__(self, client: IAMClient):
        """Initialize user service.

        Args:
            client: Configured IAM client
        """
        self.client = client

    @property
    def _owner(self) -> str:
        return self.client.config.organization_name

    def get_users(self) -> List[User]:
        """Return every user of the organization."""
        url = self.client.get_url("get-users", {"owner": self._owner})
        return decode_entities(User, self.client.get_json(url))

    def get_sorted_users(self, sorter: str, limit: int) -> List[User]:
        """Return up to ``limit`` users ordered by the ``sorter`` field.

        Args:
            sorter: Field name the service sorts on (e.g. created_time)
            limit: Maximum number of users
        """
        url = self.client.get_url(
            "get-sorted-users",
            {"owner": self._owner, "sorter": sorter, "limit": str(limit)},
        )
        return decode_entities(User, self.client.get_json(url))

    def get_user_count(self, is_online: Optional[bool] = None) -> int:
        """Count users, optionally only those online (or offline).

        Raises:
            DecodeError: If the service does not return an integer
        """
        query = {"owner": self._owner, "isOnline": ""}
        if is_online is not None:
            query["isOnline"] = "1" if is_online else "0"
        count = loads(self.client.get_json(self.client.get_url("get-user-count", query)))
        if not isinstance(count, int) or isinstance(count, bool):
            raise DecodeError(f"User count is not an integer: {count!r}")
        return count

    def get_user(self, name: str) -> Optional[User]:
        """Return the user with this name, or None if the service has none."""
        url = self.client.get_url("get-user", {"id": f"{self._owner}/{name}"})
        return decode_entity(User, self.client.get_json(url))

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Return the user registered with this email, or None."""
        url = self.client.get_url("get-user", {"owner": self._owner, "email": email})
        return decode_entity(User, self.client.get_json(url))

    def modify_user(self, action: str, user: User,
                    columns: Optional[Sequence[str]] = None) -> Tuple[Envelope, bool]:
        """Create, update or delete a user.

        Args:
            action: ``add-user``, ``update-user`` or ``delete-user``
            user: User value; its owner is replaced by the organization
            columns: Restrict an update to these fields

        Returns:
            (envelope, affected)
        """
        return self.modify_user_by_id(action, user.get_id(), user, columns)

    def modify_user_by_id(self, action: str, user_id: str, user: User,
                          columns: Optional[Sequence[str]] = None) -> Tuple[Envelope, bool]:
        """Like ``modify_user`` but targets an explicit resource id."""
        envelope, affected = self.client.modify_entity(action, user_id, user, columns)
        logger.info("%s %s: affected=%s", action, user_id, affected)
        return envelope, affected

    def add_user(self, user: User) -> bool:
        _, affected = self.modify_user("add-user", user)
        return affected

    def update_user(self, user: User) -> bool:
        _, affected = self.modify_user("update-user", user)
        return affected

    def update_user_for_columns(self, user: User, columns: Sequence[str]) -> bool:
        _, affected = self.modify_user("update-user", user, columns)
        return affected

    def update_user_by_id(self, user_id: str, user: User) -> bool:
        _, affected = self.modify_user_by_id("update-user", user_id, user)
        return affected

    def delete_user(self, user: User) -> bool:
        _, affected = self.modify_user("delete-user", user)
        return affected
