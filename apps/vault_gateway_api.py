"""FastAPI gateway in front of a Skyflow vault.

Exposes /insert, /detokenize and /get-by-id endpoints that accept the same
JSON shapes as ``VaultClient`` and forward them to the vault.

Configure via env vars:
- SKYFLOW_VAULT_URL (required)
- SKYFLOW_VAULT_ID (required)
- SKYFLOW_BEARER_TOKEN (required)
- SKYFLOW_TIMEOUT (seconds, default 30)
- SKYFLOW_LOG_LEVEL (default ERROR)
"""

from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from skyflow_vault.config import VaultSettings
from skyflow_vault.errors import (
    ConfigurationError,
    SkyflowError,
    TokenProviderError,
    ValidationError,
    VaultError,
)
from skyflow_vault.log_config import set_log_level
from skyflow_vault.models import InsertOptions
from skyflow_vault.vault_client import VaultClient, from_env


set_log_level(VaultSettings().log_level)
app = FastAPI(title="Skyflow Vault Gateway")


class InsertRequest(BaseModel):
    records: List[Dict[str, Any]]
    tokens: bool = False


class RecordsRequest(BaseModel):
    records: List[Dict[str, Any]]


class RecordsResponse(BaseModel):
    records: List[Dict[str, Any]]


def get_client() -> VaultClient:
    return from_env()


def _to_http(e: SkyflowError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, (ConfigurationError, TokenProviderError)):
        return HTTPException(status_code=500, detail=f"Vault client init failed: {e.message}")
    if isinstance(e, VaultError):
        return HTTPException(
            status_code=502,
            detail={"http_code": e.http_code, "message": e.vault_message},
        )
    return HTTPException(status_code=502, detail=f"Vault request failed: {e.message}")


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/insert", response_model=RecordsResponse)
def insert(req: InsertRequest) -> RecordsResponse:
    try:
        with get_client() as client:
            out = client.insert({"records": req.records}, InsertOptions(tokens=req.tokens))
    except SkyflowError as e:
        raise _to_http(e) from e
    return RecordsResponse(records=out["records"])


@app.post("/detokenize", response_model=RecordsResponse)
def detokenize(req: RecordsRequest) -> RecordsResponse:
    try:
        with get_client() as client:
            out = client.detokenize({"records": req.records})
    except SkyflowError as e:
        raise _to_http(e) from e
    return RecordsResponse(records=out["records"])


@app.post("/get-by-id", response_model=RecordsResponse)
def get_by_id(req: RecordsRequest) -> RecordsResponse:
    try:
        with get_client() as client:
            out = client.get_by_id({"records": req.records})
    except SkyflowError as e:
        raise _to_http(e) from e
    return RecordsResponse(records=out["records"])


# Local dev: `uvicorn apps.vault_gateway_api:app --reload --port 8080`
