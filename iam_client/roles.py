"""IAM role management operations."""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

from .client import IAMClient
from .models import Envelope, Role, decode_entities, decode_entity

logger = logging.getLogger(__name__)


class RoleService:
    """Service for managing roles of the configured organization."""

    def __init__(self, client: IAMClient):
        """Initialize role service.

        Args:
            client: Configured IAM client
        """
        self.client = client

    def get_roles(self) -> List[Role]:
        url = self.client.get_url("get-roles", {"owner": self.client.config.organization_name})
        return decode_entities(Role, self.client.get_json(url))

    def get_role(self, name: str) -> Optional[Role]:
        url = self.client.get_url("get-role", {"id": f"{self.client.config.organization_name}/{name}"})
        return decode_entity(Role, self.client.get_json(url))

    def modify_role(self, action: str, role: Role,
                    columns: Optional[Sequence[str]] = None) -> Tuple[Envelope, bool]:
        """Create, update or delete a role.

        Args:
            action: ``add-role``, ``update-role`` or ``delete-role``
            role: Role value; id is ``owner/name`` as passed in
            columns: Restrict an update to these fields

        Returns:
            (envelope, affected)
        """
        role_id = role.get_id()
        envelope, affected = self.client.modify_entity(action, role_id, role, columns)
        logger.info("%s %s: affected=%s", action, role_id, affected)
        return envelope, affected

    def add_role(self, role: Role) -> bool:
        _, affected = self.modify_role("add-role", role)
        return affected

    def update_role(self, role: Role) -> bool:
        _, affected = self.modify_role("update-role", role)
        return affected

    def update_role_for_columns(self, role: Role, columns: Sequence[str]) -> bool:
        _, affected = self.modify_role("update-role", role, columns)
        return affected

    def delete_role(self, role: Role) -> bool:
        _, affected = self.modify_role("delete-role", role)
        return affected
