"""CLI to invoke a Skyflow vault connection.

Example:
    python scripts/invoke_connection.py \\
        --url "https://abc.gateway.skyflowapis.com/v1/gateway/outboundRoutes/xyz/{card_number}" \\
        --path card_number=4111111111111111 \\
        --body '{"expirationDate": {"mm": "06", "yy": "22"}}' \\
        --header Authorization=<Your-Authorization-Value>

Environment:
- SKYFLOW_BEARER_TOKEN (required)
"""

import argparse
import json
import sys
from typing import Any, Tuple

from skyflow_vault.auth import env_token_provider
from skyflow_vault.errors import SkyflowError
from skyflow_vault.log_config import set_log_level
from skyflow_vault.models import ConnectionConfig, RequestMethod, VaultConfig
from skyflow_vault.vault_client import VaultClient


def key_value(pair: str) -> Tuple[str, str]:
    key, sep, value = pair.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {pair!r}")
    return key, value


def json_value(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}") from e


def main(argv=None):
    ap = argparse.ArgumentParser(description="Invoke a Skyflow vault connection")
    ap.add_argument("--url", required=True, help="Connection URL, may contain {param} placeholders")
    ap.add_argument("--method", default="POST", choices=[m.value for m in RequestMethod])
    ap.add_argument("--path", type=key_value, action="append", default=[], help="Path param key=value")
    ap.add_argument("--query", type=key_value, action="append", default=[], help="Query param key=value")
    ap.add_argument("--header", type=key_value, action="append", default=[], help="Request header key=value")
    ap.add_argument("--body", type=json_value, default={}, help="JSON request body")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR", "OFF"])
    args = ap.parse_args(argv)

    set_log_level(args.log_level)

    connection = ConnectionConfig(
        connection_url=args.url,
        method_name=RequestMethod(args.method),
        path_params=dict(args.path),
        query_params=dict(args.query),
        request_body=args.body,
        request_header=dict(args.header),
    )
    config = VaultConfig(token_provider=env_token_provider())
    try:
        with VaultClient(config) as client:
            result = client.invoke_connection(connection)
    except SkyflowError as e:
        print(f"error : {e.message}", file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
