"""Client library for the IAM service API.

Architecture:
- settings.py: ClientConfig and environment / Docker secrets loading
- client.py: HTTP request pipeline and envelope decoding
- users.py, permissions.py, roles.py: entity services
- resources.py: file upload and deletion
- tokens.py: JWT verification with the configured certificate
- exceptions.py: Typed exceptions for error handling

Usage:
    from iam_client import IAMClient, RoleService, Role, load_settings

    client = IAMClient(load_settings())
    RoleService(client).add_role(Role(owner="acme", name="editor"))
"""
from .client import IAMClient, HttpTransport, TEXT_CONTENT_TYPE
from .exceptions import (
    IAMError,
    ConfigError,
    TransportError,
    DecodeError,
    RemoteError,
    TokenError,
)
from .models import Envelope, User, Permission, Role, AFFECTED, STATUS_OK
from .permissions import PermissionService
from .resources import ResourceService
from .roles import RoleService
from .settings import ClientConfig, load_settings
from .tokens import parse_jwt_token, user_from_claims
from .users import UserService

__version__ = "1.0.0"

__all__ = [
    # Client
    "IAMClient",
    "HttpTransport",
    "TEXT_CONTENT_TYPE",
    "ClientConfig",
    "load_settings",

    # Exceptions
    "IAMError",
    "ConfigError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "TokenError",

    # Models
    "Envelope",
    "User",
    "Permission",
    "Role",
    "AFFECTED",
    "STATUS_OK",

    # Services
    "UserService",
    "PermissionService",
    "RoleService",
    "ResourceService",

    # Tokens
    "parse_jwt_token",
    "user_from_claims",
]
