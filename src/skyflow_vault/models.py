"""Typed request and response models for the vault client."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

TokenProvider = Callable[[], str]


class RequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class RedactionType(str, Enum):
    """Redaction applied by the vault when returning field values."""

    PLAIN_TEXT = "PLAIN_TEXT"
    MASKED = "MASKED"
    REDACTED = "REDACTED"
    DEFAULT = "DEFAULT"


class VaultConfig(BaseModel):
    """Where the vault lives and how to authenticate against it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    vault_url: str = ""
    vault_id: str = ""
    token_provider: Optional[TokenProvider] = None

    def vault_endpoint(self) -> str:
        return f"{self.vault_url.rstrip('/')}/v1/vaults/{self.vault_id}"


class Record(BaseModel):
    table: str
    fields: Dict[str, Any]


class InsertOptions(BaseModel):
    tokens: bool = False


class BatchOperation(BaseModel):
    """One insert or read-back inside a batched vault request."""

    model_config = ConfigDict(populate_by_name=True)

    method: RequestMethod
    table_name: str = Field(alias="tableName")
    fields: Optional[Dict[str, Any]] = None
    record_id: Optional[str] = Field(default=None, alias="ID")
    quorum: Optional[bool] = None
    tokenization: Optional[bool] = None

    def to_wire(self) -> Dict[str, Any]:
        # field values stay as given; the transport does the JSON encoding
        data = self.model_dump(by_alias=True, exclude_none=True, exclude={"fields"})
        data["method"] = self.method.value
        if self.fields is not None:
            data["fields"] = self.fields
        return data


class ReadBackPairing(BaseModel):
    """A GET read-back at ``get_index`` depends on the POST at ``post_index``."""

    post_index: int
    get_index: int

    def id_expression(self) -> str:
        return f"$responses.{self.post_index}.records.0.skyflow_id"


class InsertPlan(BaseModel):
    operations: List[BatchOperation]
    pairings: List[ReadBackPairing] = Field(default_factory=list)

    def payload(self) -> Dict[str, Any]:
        return {"records": [op.to_wire() for op in self.operations]}


class ReconciledRecord(BaseModel):
    """An inserted record as returned to the caller.

    Keys the vault returned beside ``fields`` (``skyflow_id`` on plain
    inserts) are kept as extra attributes.
    """

    model_config = ConfigDict(extra="allow")

    table: str
    fields: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        if self.fields is None:
            # plain inserts come back as {"skyflow_id": ...} with no fields
            data.pop("fields")
        return data


class DetokenizeRecord(BaseModel):
    token: str


class GetByIdRecord(BaseModel):
    ids: List[str]
    table: str
    redaction: RedactionType


class ConnectionConfig(BaseModel):
    connection_url: str
    method_name: RequestMethod = RequestMethod.POST
    path_params: Dict[str, str] = Field(default_factory=dict)
    query_params: Dict[str, Any] = Field(default_factory=dict)
    request_body: Any = Field(default_factory=dict)
    request_header: Dict[str, str] = Field(default_factory=dict)
