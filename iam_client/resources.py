"""IAM resource (file storage) operations."""
from __future__ import annotations
import logging
from typing import Tuple

from .client import IAMClient
from .exceptions import DecodeError
from .models import dumps

logger = logging.getLogger(__name__)


class ResourceService:
    """Upload and delete files stored by the IAM service."""

    def __init__(self, client: IAMClient):
        self.client = client

    def upload_resource(
        self,
        user: str,
        tag: str,
        parent: str,
        full_file_path: str,
        file_bytes: bytes,
        created_time: str = "",
        description: str = "",
    ) -> Tuple[str, str]:
        """Upload a file as a single multipart part named ``file``.

        Args:
            user: Uploading user name
            tag: Resource tag (e.g. avatar, custom)
            parent: Parent object the file belongs to
            full_file_path: Storage path on the service side
            file_bytes: File content
            created_time: Optional creation timestamp
            description: Optional description

        Returns:
            (file_url, name) from the envelope's data and data2

        Raises:
            DecodeError: If data or data2 is not a string
        """
        config = self.client.config
        query = {
            "owner": config.organization_name,
            "user": user,
            "application": config.application_name,
            "tag": tag,
            "parent": parent,
            "fullFilePath": full_file_path,
            "createdTime": created_time,
            "description": description,
        }
        envelope = self.client.post_json("upload-resource", query, file_bytes, is_form=True, is_file=True)

        if not isinstance(envelope.data, str) or not isinstance(envelope.data2, str):
            raise DecodeError(
                f"upload-resource returned non-string data: {envelope.data!r}, {envelope.data2!r}"
            )
        logger.info("Uploaded %s (%d bytes) as %s", full_file_path, len(file_bytes), envelope.data2)
        return envelope.data, envelope.data2

    def delete_resource(self, name: str) -> bool:
        """Delete a stored resource by name. Returns True when a row was affected."""
        body = dumps({"owner": self.client.config.organization_name, "name": name})
        envelope = self.client.post_json("delete-resource", None, body)
        return envelope.affected
