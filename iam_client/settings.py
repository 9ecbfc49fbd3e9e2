"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


def _load_secret_from_file(secret_name: str, env_var: str | None = None,
                           environ: Optional[Mapping[str, str]] = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Secret value or None if not found
    """
    environ = os.environ if environ is None else environ
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.debug("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = environ.get(env_var)
        if secret_value:
            logger.debug("Loaded %s from environment", env_var)
            return secret_value

    return None


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings shared by every request of one client.

    Built once at startup and never mutated; pass it to each ``IAMClient``.
    """
    endpoint: str
    client_id: str
    client_secret: str
    certificate: str = ""
    organization_name: str = ""
    application_name: str = ""
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "endpoint", self.endpoint.rstrip("/"))

    def __repr__(self) -> str:
        return (
            f"ClientConfig(endpoint={self.endpoint!r}, client_id={self.client_id!r}, "
            f"organization_name={self.organization_name!r}, "
            f"application_name={self.application_name!r})"
        )


def _read_certificate(environ: Mapping[str, str]) -> str:
    """Resolve the PEM certificate from secrets, a file path, or inline env."""
    certificate = _load_secret_from_file("iam_certificate", "IAM_CERTIFICATE", environ)
    if certificate:
        return certificate

    cert_file = environ.get("IAM_CERTIFICATE_FILE")
    if cert_file:
        try:
            return Path(cert_file).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read IAM_CERTIFICATE_FILE {cert_file}: {e}") from e
    return ""


def load_settings(environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """Load client settings from environment and /run/secrets.

    Raises:
        ConfigError: If endpoint, client id or client secret is missing,
            or IAM_TIMEOUT is not a positive number
    """
    environ = os.environ if environ is None else environ

    endpoint = environ.get("IAM_ENDPOINT", "").strip()
    client_id = environ.get("IAM_CLIENT_ID", "").strip()
    client_secret = _load_secret_from_file("iam_client_secret", "IAM_CLIENT_SECRET", environ) or ""

    missing = [
        name
        for name, value in (
            ("IAM_ENDPOINT", endpoint),
            ("IAM_CLIENT_ID", client_id),
            ("IAM_CLIENT_SECRET", client_secret),
        )
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")

    timeout_raw = environ.get("IAM_TIMEOUT", "").strip()
    timeout: Optional[float] = None
    if timeout_raw:
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ConfigError(f"IAM_TIMEOUT must be a number, got {timeout_raw!r}") from e
        if not math.isfinite(timeout) or timeout <= 0:
            raise ConfigError(f"IAM_TIMEOUT must be a positive number of seconds, got {timeout_raw!r}")

    return ClientConfig(
        endpoint=endpoint,
        client_id=client_id,
        client_secret=client_secret,
        certificate=_read_certificate(environ),
        organization_name=environ.get("IAM_ORGANIZATION_NAME", ""),
        application_name=environ.get("IAM_APPLICATION_NAME", ""),
        timeout=timeout,
    )
