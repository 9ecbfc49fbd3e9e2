"""
Access token verification against the configured certificate.

The IAM service signs its JWTs with RS256; the matching X.509 certificate
(PEM) is part of the client configuration. Audience must be the client id.
"""
from __future__ import annotations
import logging
from typing import Any, Dict

import jwt
from cryptography import x509
from jwt.exceptions import (
    InvalidTokenError,
    ExpiredSignatureError,
    InvalidAudienceError,
    InvalidSignatureError,
    DecodeError,
)

from .exceptions import TokenError
from .models import User
from .settings import ClientConfig

logger = logging.getLogger(__name__)


def _public_key(certificate: str):
    if not certificate:
        raise TokenError("No certificate configured")
    try:
        cert = x509.load_pem_x509_certificate(certificate.encode("utf-8"))
    except ValueError as e:
        raise TokenError(f"Invalid certificate: {e}") from e
    return cert.public_key()


def parse_jwt_token(token: str, config: ClientConfig) -> Dict[str, Any]:
    """
    Verify a JWT issued by the IAM service and return its claims.

    Args:
        token: JWT string (without "Bearer " prefix)
        config: Client settings holding certificate and client id

    Returns:
        dict: Verified token claims

    Raises:
        TokenError: If the certificate is unusable or any check fails
    """
    key = _public_key(config.certificate)
    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=config.client_id,
            options={"require": ["exp"]},
        )
    except ExpiredSignatureError:
        raise TokenError("Token expired (exp claim)")
    except InvalidAudienceError as e:
        raise TokenError(f"Invalid audience (token not for this client): {e}")
    except InvalidSignatureError:
        raise TokenError("Invalid signature (token tampered or wrong certificate)")
    except DecodeError as e:
        raise TokenError(f"Token decode error (malformed JWT): {e}")
    except InvalidTokenError as e:
        raise TokenError(f"Token validation failed: {e}")

    logger.debug("JWT verified for subject %s", claims.get("sub"))
    return claims


def user_from_claims(claims: Dict[str, Any]) -> User:
    """Build a User from token claims; JWT registered claims are ignored."""
    return User.from_dict(claims)
