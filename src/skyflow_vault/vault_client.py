"""Skyflow vault client.

This client talks to a Skyflow vault's REST API: batched record inserts
(optionally reading back tokens for the new records), detokenization,
record lookup by skyflow id, and invocation of vault connections.

Notes
- Do not hardcode secrets; supply a token provider (see ``skyflow_vault.auth``).
- The client is schema-agnostic: field data is forwarded as given.
- Every call validates its input before touching the network and raises
  a subclass of ``skyflow_vault.errors.SkyflowError`` on failure.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .auth import env_token_provider, fetch_token
from .config import VaultSettings
from .models import ConnectionConfig, InsertOptions, TokenProvider, VaultConfig
from .reconciler import parse_detokenize_response, parse_get_by_id_response, reconcile_insert
from .request_builder import build_insert_plan
from .transport import VaultTransport, decode_json
from .validation import (
    parse_detokenize_records,
    parse_get_by_id_records,
    parse_insert_records,
    validate_connection_config,
    validate_vault_details,
)

logger = logging.getLogger(__name__)

INSERT_TAG = "Insert"
DETOKENIZE_TAG = "Detokenize"
GET_BY_ID_TAG = "GetById"
CONNECTION_TAG = "InvokeConnection"


class VaultClient:
    """HTTP client for a Skyflow vault.

    Parameters
    - config: Vault URL, vault ID and token provider
    - transport: Optional ``VaultTransport``; one is created when omitted.
      A transport can be shared between clients and threads.
    - timeout: Request timeout in seconds for a client-created transport
    """

    def __init__(
        self,
        config: VaultConfig,
        transport: Optional[VaultTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self.config = config
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else VaultTransport(timeout=timeout)

    def __enter__(self) -> "VaultClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    def _endpoint(self, *parts: str) -> str:
        base = self.config.vault_endpoint()
        return "/".join([base, *(quote(p, safe="") for p in parts)])

    def insert(self, records: Dict[str, Any], options: Optional[InsertOptions] = None) -> Dict[str, Any]:
        """Insert records in one batched request.

        ``records`` is ``{"records": [{"table": ..., "fields": {...}}, ...]}``.
        With ``InsertOptions(tokens=True)`` each returned record carries its
        tokenized fields plus ``fields["skyflow_id"]``. Returns
        ``{"records": [...]}`` in the order the records were given.
        """
        options = options or InsertOptions()
        validate_vault_details(self.config, INSERT_TAG)
        parsed = parse_insert_records(records, INSERT_TAG)
        plan = build_insert_plan(parsed, options)
        token = fetch_token(self.config.token_provider, INSERT_TAG)

        logger.info("%s: inserting records into vault %s", INSERT_TAG, self.config.vault_id)
        try:
            data = self.transport.request(
                "POST", self._endpoint(), token=token, json_body=plan.payload()
            )
            body = decode_json(data)
            reconciled = reconcile_insert(body, parsed, options, plan.pairings)
        except Exception:
            logger.error("%s: inserting records into vault %s failed", INSERT_TAG, self.config.vault_id)
            raise
        logger.info("%s: inserted %d records into vault %s", INSERT_TAG, len(reconciled), self.config.vault_id)
        return {"records": [r.to_dict() for r in reconciled]}

    def detokenize(self, records: Dict[str, Any]) -> Dict[str, Any]:
        """Resolve tokens to their values.

        ``records`` is ``{"records": [{"token": ...}, ...]}``; returns
        ``{"records": [{"token": ..., "value": ...}, ...]}``.
        """
        validate_vault_details(self.config, DETOKENIZE_TAG)
        parsed = parse_detokenize_records(records, DETOKENIZE_TAG)
        token = fetch_token(self.config.token_provider, DETOKENIZE_TAG)
        payload = {"detokenizationParameters": [{"token": r.token} for r in parsed]}

        logger.info("%s: detokenizing %d tokens", DETOKENIZE_TAG, len(parsed))
        data = self.transport.request(
            "POST", self._endpoint("detokenize"), token=token, json_body=payload
        )
        return {"records": parse_detokenize_response(decode_json(data))}

    def get_by_id(self, records: Dict[str, Any]) -> Dict[str, Any]:
        """Fetch records by skyflow id.

        ``records`` is ``{"records": [{"ids": [...], "table": ..., "redaction": ...}]}``.
        One request is made per entry; results are concatenated in order and
        each record gets its ``table`` attached.
        """
        validate_vault_details(self.config, GET_BY_ID_TAG)
        parsed = parse_get_by_id_records(records, GET_BY_ID_TAG)
        token = fetch_token(self.config.token_provider, GET_BY_ID_TAG)

        out: List[Dict[str, Any]] = []
        for request in parsed:
            params = [("skyflow_ids", skyflow_id) for skyflow_id in request.ids]
            params.append(("redaction", request.redaction.value))
            logger.info("%s: fetching %d records from %s", GET_BY_ID_TAG, len(request.ids), request.table)
            data = self.transport.request(
                "GET", self._endpoint(request.table), token=token, params=params
            )
            out.extend(parse_get_by_id_response(decode_json(data), request))
        return {"records": out}

    def invoke_connection(self, connection: ConnectionConfig) -> Any:
        """Call a vault connection and return its decoded JSON response.

        ``{name}`` placeholders in the URL are replaced with ``path_params``.
        Query params must be str, int, float or bool.
        """
        query = validate_connection_config(connection, CONNECTION_TAG)
        token = fetch_token(self.config.token_provider, CONNECTION_TAG)

        url = connection.connection_url
        for name, value in connection.path_params.items():
            url = url.replace(f"{{{name}}}", value)

        logger.info("%s: invoking connection", CONNECTION_TAG)
        try:
            data = self.transport.request(
                connection.method_name.value,
                url,
                token=token,
                json_body=connection.request_body,
                params=query or None,
                headers=connection.request_header,
                auth_header="X-Skyflow-Authorization",
                bearer=False,
            )
            result = decode_json(data)
        except Exception:
            logger.error("%s: invoking connection failed", CONNECTION_TAG)
            raise
        logger.info("%s: connection invoked", CONNECTION_TAG)
        return result


def from_env(
    token_provider: Optional[TokenProvider] = None,
    transport: Optional[VaultTransport] = None,
) -> VaultClient:
    """Construct a VaultClient from environment variables.

    Required env vars:
    - SKYFLOW_VAULT_URL
    - SKYFLOW_VAULT_ID
    Optional:
    - SKYFLOW_TIMEOUT (seconds)
    - SKYFLOW_BEARER_TOKEN (used when no token_provider is given)
    """
    settings = VaultSettings()
    config = VaultConfig(
        vault_url=settings.vault_url,
        vault_id=settings.vault_id,
        token_provider=token_provider or env_token_provider(),
    )
    return VaultClient(config, transport, timeout=settings.timeout)
