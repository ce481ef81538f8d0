import json

import httpx

from skyflow_vault.auth import static_token_provider
from skyflow_vault.models import VaultConfig
from skyflow_vault.transport import VaultTransport
from skyflow_vault.vault_client import VaultClient

VAULT_URL = "https://vault.test"
VAULT_ID = "vault123"
TOKEN = "bearer-token"


class Recorder:
    """Mock transport handler that records requests and replays a response."""

    def __init__(self, response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self.response):
            return self.response(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


def make_client(handler, token=TOKEN, vault_url=VAULT_URL, vault_id=VAULT_ID) -> VaultClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    config = VaultConfig(
        vault_url=vault_url,
        vault_id=vault_id,
        token_provider=static_token_provider(token),
    )
    return VaultClient(config, VaultTransport(client=http))
