"""Low-level HTTP client for the IAM service API.

Handles Basic authentication, request encoding, and envelope decoding.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple
from urllib.parse import urlencode

import requests

from .exceptions import DecodeError, RemoteError, TransportError
from .models import Entity, Envelope, loads
from .settings import ClientConfig

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPE = "text/plain;charset=UTF-8"


class HttpTransport(Protocol):
    """Anything that can execute a prepared request.

    ``requests.Session`` satisfies this interface.
    """

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        ...


class IAMClient:
    """HTTP client for the IAM service API.

    Every request carries Basic credentials from the config. Responses are
    decoded as the ``{status, msg, data, data2}`` envelope; HTTP status codes
    are not interpreted.

    Usage:
        client = IAMClient(load_settings())
        users = client.get_json(client.get_url("get-users", {"owner": "acme"}))
    """

    def __init__(self, config: ClientConfig, transport: Optional[HttpTransport] = None):
        """Initialize IAM client.

        Args:
            config: Connection settings
            transport: Request executor (defaults to a new requests.Session)
        """
        self.config = config
        self.transport: HttpTransport = transport if transport is not None else requests.Session()

    def get_url(self, action: str, query: Optional[Mapping[str, str]] = None) -> str:
        """Build ``<endpoint>/api/<action>?<query>``."""
        url = f"{self.config.endpoint}/api/{action}"
        if query:
            url = f"{url}?{urlencode(list(query.items()))}"
        return url

    # ─────────────────────────────────────────────────────────────────────
    # GET
    # ─────────────────────────────────────────────────────────────────────
    def get_bytes_raw(self, url: str) -> bytes:
        """Execute an authenticated GET and return the raw body.

        Raises:
            TransportError: On request construction or network failure
        """
        return self._execute(requests.Request("GET", url))

    def get_response(self, url: str) -> Envelope:
        """GET ``url`` and return the decoded, successful envelope.

        Raises:
            TransportError: On request or network failure
            DecodeError: If the body is not an envelope
            RemoteError: If the envelope status is not "ok"
        """
        return self._check(Envelope.from_bytes(self.get_bytes_raw(url)), url)

    def get_json(self, url: str) -> bytes:
        """GET ``url`` and return the envelope ``data`` as JSON bytes."""
        return self.get_response(url).data_bytes()

    # ─────────────────────────────────────────────────────────────────────
    # POST
    # ─────────────────────────────────────────────────────────────────────
    def post_bytes_raw(self, url: str, content_type: str = "", body: Any = None,
                       files: Optional[Dict[str, Tuple[str, bytes]]] = None) -> bytes:
        """Execute an authenticated POST and return the raw body.

        Args:
            url: Target URL
            content_type: Content-Type header (defaults to text/plain)
            body: Raw bytes, or a mapping to form-encode
            files: Multipart parts; requests picks the content type

        Raises:
            TransportError: On request construction or network failure
        """
        headers = {}
        if files is None:
            headers["Content-Type"] = content_type or TEXT_CONTENT_TYPE
        request = requests.Request("POST", url, headers=headers, data=body, files=files)
        return self._execute(request)

    def post_json(
        self,
        action: str,
        query: Optional[Mapping[str, str]],
        body: bytes,
        is_form: bool = False,
        is_file: bool = False,
    ) -> Envelope:
        """POST ``body`` to ``action`` and return the successful envelope.

        Encoding is picked by the flags:
        - is_form and is_file: single multipart part named ``file``
        - is_form only: ``body`` is a flat JSON object, sent url-encoded
        - neither: ``body`` verbatim as text/plain

        Raises:
            TransportError: On request construction or network failure
            DecodeError: If the response body is not an envelope
            RemoteError: If the envelope status is not "ok"
        """
        url = self.get_url(action, query)

        if is_form and is_file:
            raw = self.post_bytes_raw(url, files={"file": ("file", body)})
        elif is_form:
            raw = self.post_bytes_raw(
                url, "application/x-www-form-urlencoded", _form_params(body)
            )
        else:
            raw = self.post_bytes_raw(url, TEXT_CONTENT_TYPE, body)

        return self._check(Envelope.from_bytes(raw), url)

    def modify_entity(
        self,
        action: str,
        resource_id: str,
        entity: Entity,
        columns: Optional[Sequence[str]] = None,
    ) -> Tuple[Envelope, bool]:
        """Shared create/update/delete call for entities.

        The id is taken as given; the entity's owner is then replaced with
        the configured organization before it is serialized.

        Returns:
            (envelope, affected) where affected means data == "Affected"
        """
        query: Dict[str, str] = {"id": resource_id}
        if columns:
            query["columns"] = ",".join(columns)

        entity.owner = self.config.organization_name
        envelope = self.post_json(action, query, entity.to_json(), is_form=False, is_file=False)
        return envelope, envelope.affected

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────
    def _execute(self, request: requests.Request) -> bytes:
        request.auth = (self.config.client_id, self.config.client_secret)
        try:
            prepared = request.prepare()
            resp = self.transport.send(prepared, timeout=self.config.timeout)
            content = resp.content
        except requests.RequestException as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}", request.url) from e
        except ValueError as e:
            # bad URL or body shape rejected while preparing
            raise TransportError(f"Cannot build {request.method} {request.url}: {e}", request.url) from e

        logger.debug("%s %s -> %s", request.method, request.url, resp.status_code)
        return content

    def _check(self, envelope: Envelope, url: str) -> Envelope:
        if not envelope.ok:
            logger.warning("Remote error from %s: status=%r msg=%r", url, envelope.status, envelope.msg)
            raise RemoteError(envelope.msg, envelope.status)
        return envelope


def _form_params(body: bytes) -> List[Tuple[str, str]]:
    """Decode a flat string-keyed JSON object into form fields."""
    try:
        params = loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise TransportError(f"Form body is not valid JSON: {e}") from e

    if not isinstance(params, dict) or not all(isinstance(v, str) for v in params.values()):
        raise TransportError("Form body must be a flat JSON object of strings")
    return list(params.items())
