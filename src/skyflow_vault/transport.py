"""HTTP transport for vault requests.

Wraps a single ``httpx.Client`` and turns every way a request can go
wrong into one of the client's typed errors. The httpx client can be
injected, which is how tests swap in ``httpx.MockTransport``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import httpx

from .errors import SerializationError, TransportError, VaultError

logger = logging.getLogger(__name__)

QueryParams = Union[Mapping[str, Any], Sequence[Tuple[str, str]]]


def decode_json(data: bytes) -> Any:
    """Parse a response body, raising SerializationError on non-JSON."""
    try:
        return json.loads(data)
    except ValueError as e:
        preview = data[:200].decode("utf-8", errors="replace")
        raise SerializationError(f"Vault response was not JSON: {preview}") from e


def vault_error_from_response(resp: httpx.Response) -> VaultError:
    """Build a VaultError from a non-2xx response.

    Uses the vault's ``{"error": {"http_code", "message"}}`` body when it
    has one, otherwise falls back to the status code and raw text.
    """
    request_id = resp.headers.get("x-request-id")
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        return VaultError(
            error.get("http_code", resp.status_code),
            str(error.get("message", "")),
            request_id=request_id,
        )
    return VaultError(resp.status_code, resp.text, request_id=request_id)


class VaultTransport:
    """Sends requests to the vault and returns raw response bytes.

    Parameters
    - client: Optional pre-built ``httpx.Client``. When omitted the
      transport creates one and closes it in ``close()``.
    - timeout: Request timeout in seconds for a transport-owned client
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 30.0) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def __enter__(self) -> "VaultTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        token: str,
        json_body: Any = None,
        params: Optional[QueryParams] = None,
        headers: Optional[Dict[str, str]] = None,
        auth_header: str = "Authorization",
        bearer: bool = True,
    ) -> bytes:
        """Send one request and return the body of a 2xx response.

        Raises SerializationError when ``json_body`` cannot be encoded,
        TransportError on network failures and VaultError on non-2xx.
        """
        all_headers = {
            "Content-Type": "application/json",
            auth_header: f"Bearer {token}" if bearer else token,
        }
        if headers:
            all_headers.update(headers)

        content = None
        if json_body is not None:
            try:
                content = json.dumps(json_body, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise SerializationError(f"Could not encode request payload: {e}") from e

        try:
            resp = self._client.request(
                method, url, content=content, params=params, headers=all_headers
            )
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, url, type(e).__name__)
            raise TransportError(f"Request to {url} failed: {e}") from e

        if resp.is_success:
            return resp.content
        error = vault_error_from_response(resp)
        logger.error("%s %s returned %s", method, url, error.http_code)
        raise error
