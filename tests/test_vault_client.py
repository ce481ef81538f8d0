import json
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from skyflow_vault import errors
from skyflow_vault.models import ConnectionConfig, InsertOptions, RequestMethod, VaultConfig
from skyflow_vault.vault_client import VaultClient, from_env

from helpers import TOKEN, VAULT_ID, VAULT_URL, Recorder, make_client


def test_insert_without_tokens(person_records):
    handler = Recorder(
        httpx.Response(
            200,
            json={
                "responses": [
                    {"records": [{"fields": {"name": "A"}}]},
                    {"records": [{"fields": {"name": "B"}}]},
                ]
            },
        )
    )
    result = make_client(handler).insert(person_records)

    assert result == {
        "records": [
            {"table": "person", "fields": {"name": "A"}},
            {"table": "person", "fields": {"name": "B"}},
        ]
    }
    request = handler.last
    assert request.method == "POST"
    assert str(request.url) == f"{VAULT_URL}/v1/vaults/{VAULT_ID}"
    assert request.headers["Authorization"] == f"Bearer {TOKEN}"
    assert handler.last_json() == {
        "records": [
            {"method": "POST", "tableName": "person", "fields": {"name": "A"}, "quorum": True},
            {"method": "POST", "tableName": "person", "fields": {"name": "B"}, "quorum": True},
        ]
    }


def test_insert_with_tokens(person_records):
    handler = Recorder(
        httpx.Response(
            200,
            json={
                "responses": [
                    {"records": [{"fields": {"name": "A"}}]},
                    {"records": [{"fields": {"name": "B"}}]},
                    {"records": [{"skyflow_id": "id-A"}]},
                    {"records": [{"skyflow_id": "id-B"}]},
                ]
            },
        )
    )
    result = make_client(handler).insert(person_records, InsertOptions(tokens=True))

    assert result["records"] == [
        {"table": "person", "fields": {"name": "A", "skyflow_id": "id-A"}},
        {"table": "person", "fields": {"name": "B", "skyflow_id": "id-B"}},
    ]
    sent = handler.last_json()["records"]
    assert [op["method"] for op in sent] == ["POST", "POST", "GET", "GET"]


def test_insert_validation_happens_before_network():
    handler = Recorder(httpx.Response(200, json={"responses": []}))
    client = make_client(handler)
    with pytest.raises(errors.EmptyRecordsError):
        client.insert({"records": []})
    with pytest.raises(errors.EmptyVaultIDError):
        make_client(handler, vault_id="").insert({"records": [{"table": "t", "fields": {"a": 1}}]})
    assert handler.requests == []


def test_insert_vault_error_reported_verbatim(person_records):
    handler = Recorder(
        httpx.Response(400, json={"error": {"http_code": 400, "message": "Invalid field present in JSON name"}})
    )
    with pytest.raises(errors.VaultError) as exc_info:
        make_client(handler).insert(person_records)
    assert exc_info.value.http_code == 400
    assert exc_info.value.vault_message == "Invalid field present in JSON name"


def test_insert_error_key_in_success_status(person_records):
    handler = Recorder(httpx.Response(200, json={"error": {"http_code": 500, "message": "boom"}}))
    with pytest.raises(errors.VaultError) as exc_info:
        make_client(handler).insert(person_records)
    assert exc_info.value.http_code == 500
    assert exc_info.value.vault_message == "boom"


def test_insert_non_json_body(person_records):
    handler = Recorder(httpx.Response(200, content=b"not json"))
    with pytest.raises(errors.SerializationError):
        make_client(handler).insert(person_records)


def test_insert_wrong_shape(person_records):
    handler = Recorder(httpx.Response(200, json={"responses": [{"records": []}]}))
    with pytest.raises(errors.MalformedResponseError):
        make_client(handler).insert(person_records)


def test_token_provider_failure(person_records):
    def provider():
        raise RuntimeError("credentials file missing")

    handler = Recorder(httpx.Response(200, json={}))
    client = make_client(handler)
    client.config = VaultConfig(vault_url=VAULT_URL, vault_id=VAULT_ID, token_provider=provider)
    with pytest.raises(errors.TokenProviderError):
        client.insert(person_records)
    assert handler.requests == []


def test_missing_token_provider(person_records):
    client = VaultClient(VaultConfig(vault_url=VAULT_URL, vault_id=VAULT_ID))
    with pytest.raises(errors.MissingTokenProviderError):
        client.insert(person_records)
    client.close()


def test_concurrent_inserts_share_transport():
    def respond(request):
        ops = json.loads(request.content)["records"]
        return httpx.Response(
            200, json={"responses": [{"records": [{"skyflow_id": op["fields"]["n"]}]} for op in ops]}
        )

    client = make_client(Recorder(respond))

    def run(i):
        out = client.insert({"records": [{"table": "t", "fields": {"n": f"id-{i}"}}]})
        return out["records"][0]["skyflow_id"]

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(run, range(32)))
    assert ids == [f"id-{i}" for i in range(32)]


def test_detokenize():
    handler = Recorder(
        httpx.Response(200, json={"records": [{"token": "t1", "value": "4111"}, {"token": "t2", "value": "x"}]})
    )
    result = make_client(handler).detokenize({"records": [{"token": "t1"}, {"token": "t2"}]})

    assert result == {"records": [{"token": "t1", "value": "4111"}, {"token": "t2", "value": "x"}]}
    assert str(handler.last.url) == f"{VAULT_URL}/v1/vaults/{VAULT_ID}/detokenize"
    assert handler.last_json() == {"detokenizationParameters": [{"token": "t1"}, {"token": "t2"}]}


def test_get_by_id():
    def respond(request):
        ids = request.url.params.get_list("skyflow_ids")
        return httpx.Response(200, json={"records": [{"fields": {"skyflow_id": i}} for i in ids]})

    handler = Recorder(respond)
    result = make_client(handler).get_by_id(
        {
            "records": [
                {"ids": ["a", "b"], "table": "cards", "redaction": "PLAIN_TEXT"},
                {"ids": ["c"], "table": "person", "redaction": "MASKED"},
            ]
        }
    )

    assert result["records"] == [
        {"fields": {"skyflow_id": "a"}, "table": "cards"},
        {"fields": {"skyflow_id": "b"}, "table": "cards"},
        {"fields": {"skyflow_id": "c"}, "table": "person"},
    ]
    first, second = handler.requests
    assert first.method == "GET"
    assert first.url.path == f"/v1/vaults/{VAULT_ID}/cards"
    assert first.url.params.get("redaction") == "PLAIN_TEXT"
    assert second.url.params.get_list("skyflow_ids") == ["c"]


def test_invoke_connection():
    handler = Recorder(httpx.Response(200, json={"receivedTimestamp": "now"}))
    connection = ConnectionConfig(
        connection_url="https://conn.test/v1/cards/{card_number}/pay",
        method_name=RequestMethod.POST,
        path_params={"card_number": "4111"},
        query_params={"cc": True, "amount": 12, "rate": 0.5, "tag": "x"},
        request_body={"expirationDate": {"mm": "06", "yy": "22"}},
        request_header={"Authorization": "custom"},
    )
    result = make_client(handler).invoke_connection(connection)

    assert result == {"receivedTimestamp": "now"}
    request = handler.last
    assert request.url.path == "/v1/cards/4111/pay"
    assert dict(request.url.params) == {"cc": "true", "amount": "12", "rate": "0.500000", "tag": "x"}
    assert request.headers["X-Skyflow-Authorization"] == TOKEN
    assert request.headers["Authorization"] == "custom"
    assert request.headers["Content-Type"] == "application/json"
    assert handler.last_json() == {"expirationDate": {"mm": "06", "yy": "22"}}


def test_invoke_connection_bad_query_param_fails_before_network():
    handler = Recorder(httpx.Response(200, json={}))
    connection = ConnectionConfig(connection_url="https://conn.test/x", query_params={"bad": [1, 2]})
    with pytest.raises(errors.InvalidQueryParamError):
        make_client(handler).invoke_connection(connection)
    assert handler.requests == []


def test_from_env(monkeypatch):
    monkeypatch.setenv("SKYFLOW_VAULT_URL", VAULT_URL)
    monkeypatch.setenv("SKYFLOW_VAULT_ID", VAULT_ID)
    monkeypatch.setenv("SKYFLOW_BEARER_TOKEN", "env-token")
    with from_env() as client:
        assert client.config.vault_endpoint() == f"{VAULT_URL}/v1/vaults/{VAULT_ID}"
        assert client.config.token_provider() == "env-token"


@pytest.mark.parametrize("value", [object(), float("nan"), float("inf")])
def test_insert_unencodable_field_is_serialization_error(value):
    handler = Recorder(httpx.Response(200, json={"responses": []}))
    with pytest.raises(errors.SerializationError):
        make_client(handler).insert({"records": [{"table": "t", "fields": {"x": value}}]})
    assert handler.requests == []
