"""Pytest shared fixtures for IAM client tests."""
import datetime
import json
from typing import Any, List, Optional

import pytest
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from iam_client import ClientConfig, IAMClient


def make_response(payload: Any = None, status_code: int = 200, raw: Optional[bytes] = None) -> requests.Response:
    """Build a real requests.Response carrying a JSON (or raw) body."""
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = raw if raw is not None else json.dumps(payload).encode("utf-8")
    resp.headers["Content-Type"] = "application/json"
    return resp


def envelope(data: Any = None, status: str = "ok", msg: str = "", data2: Any = None) -> dict:
    return {"status": status, "msg": msg, "data": data, "data2": data2}


class RecordingTransport:
    """Transport double: records prepared requests, replays queued responses."""

    def __init__(self):
        self.requests: List[requests.PreparedRequest] = []
        self.kwargs: List[dict] = []
        self._responses: List[Any] = []

    def queue(self, payload: Any = None, status_code: int = 200, raw: Optional[bytes] = None) -> None:
        self._responses.append(make_response(payload, status_code, raw))

    def fail_with(self, exc: Exception) -> None:
        self._responses.append(exc)

    def send(self, request, **kwargs):
        self.requests.append(request)
        self.kwargs.append(kwargs)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        result = self._responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def last(self) -> requests.PreparedRequest:
        return self.requests[-1]


@pytest.fixture()
def config():
    return ClientConfig(
        endpoint="http://iam.test/",
        client_id="client-123",
        client_secret="secret-456",
        organization_name="built-in",
        application_name="app-built-in",
    )


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def client(config, transport):
    return IAMClient(config, transport)


@pytest.fixture(scope="session")
def rsa_certificate():
    """Generate an RSA key and a self-signed certificate for JWT tests."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "iam-test")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(private_key, hashes.SHA256())
    )
    return {
        "private_key": private_key,
        "private_pem": private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        "certificate_pem": cert.public_bytes(serialization.Encoding.PEM).decode("utf-8"),
    }
