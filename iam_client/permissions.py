"""IAM permission management operations."""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

from .client import IAMClient
from .models import Envelope, Permission, decode_entities, decode_entity

logger = logging.getLogger(__name__)


class PermissionService:
    """Service for managing permissions of the configured organization."""

    def __init__(self, client: IAMClient):
        self.client = client

    def get_permissions(self) -> List[Permission]:
        url = self.client.get_url("get-permissions", {"owner": self.client.config.organization_name})
        return decode_entities(Permission, self.client.get_json(url))

    def get_permission(self, name: str) -> Optional[Permission]:
        """Return the named permission, or None if absent."""
        url = self.client.get_url(
            "get-permission", {"id": f"{self.client.config.organization_name}/{name}"}
        )
        return decode_entity(Permission, self.client.get_json(url))

    def modify_permission(self, action: str, permission: Permission,
                          columns: Optional[Sequence[str]] = None) -> Tuple[Envelope, bool]:
        """Create, update or delete a permission.

        The resource id is ``owner/name`` from the permission as passed in,
        before its owner is replaced by the organization.

        Args:
            action: ``add-permission``, ``update-permission`` or ``delete-permission``
            permission: Permission value
            columns: Restrict an update to these fields

        Returns:
            (envelope, affected)
        """
        permission_id = permission.get_id()
        envelope, affected = self.client.modify_entity(action, permission_id, permission, columns)
        logger.info("%s %s: affected=%s", action, permission_id, affected)
        return envelope, affected

    def add_permission(self, permission: Permission) -> bool:
        _, affected = self.modify_permission("add-permission", permission)
        return affected

    def update_permission(self, permission: Permission) -> bool:
        _, affected = self.modify_permission("update-permission", permission)
        return affected

    def update_permission_for_columns(self, permission: Permission, columns: Sequence[str]) -> bool:
        _, affected = self.modify_permission("update-permission", permission, columns)
        return affected

    def delete_permission(self, permission: Permission) -> bool:
        _, affected = self.modify_permission("delete-permission", permission)
        return affected
