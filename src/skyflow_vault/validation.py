"""Structural validation of caller input.

Caller input arrives as loosely-typed mappings (``{"records": [...]}``).
The functions here check it in a fixed order, stop at the first problem,
and return typed models once the shape is known to be right. Nothing in
this module touches the network.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping
from urllib.parse import urlparse

from .errors import (
    EmptyColumnNameError,
    EmptyConnectionURLError,
    EmptyFieldsError,
    EmptyIdError,
    EmptyIdsError,
    EmptyRecordsError,
    EmptyTableNameError,
    EmptyTokenError,
    EmptyVaultIDError,
    EmptyVaultURLError,
    InvalidConnectionURLError,
    InvalidQueryParamError,
    InvalidRecordsError,
    InvalidRedactionTypeError,
    InvalidVaultURLError,
    MissingFieldsError,
    MissingIdsError,
    MissingRecordsError,
    MissingRedactionError,
    MissingTableError,
    MissingTokenError,
    SkyflowError,
)
from .models import (
    ConnectionConfig,
    DetokenizeRecord,
    GetByIdRecord,
    Record,
    RedactionType,
    VaultConfig,
)

logger = logging.getLogger(__name__)


def _fail(error_cls, tag: str, message: str, **kwargs) -> SkyflowError:
    text = f"{tag}: {message}"
    logger.error(text)
    return error_cls(text, **kwargs)


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_vault_details(config: VaultConfig, tag: str) -> None:
    if not config.vault_url:
        raise _fail(EmptyVaultURLError, tag, "vault URL is empty")
    if not config.vault_id:
        raise _fail(EmptyVaultIDError, tag, "vault ID is empty")
    if not is_valid_url(config.vault_url):
        raise _fail(InvalidVaultURLError, tag, f"vault URL {config.vault_url!r} is invalid")


def _records_list(raw: Any, tag: str) -> List[Any]:
    if not isinstance(raw, Mapping) or "records" not in raw:
        raise _fail(MissingRecordsError, tag, "records key not found in request")
    records = raw["records"]
    if records is None:
        raise _fail(MissingRecordsError, tag, "records key not found in request")
    if not isinstance(records, (list, tuple)):
        raise _fail(InvalidRecordsError, tag, "records must be a list")
    if len(records) == 0:
        raise _fail(EmptyRecordsError, tag, "records are empty")
    for index, entry in enumerate(records):
        if not isinstance(entry, Mapping):
            raise _fail(InvalidRecordsError, tag, f"record at index {index} is not an object")
    return list(records)


def _check_table(entry: Mapping, tag: str) -> str:
    if entry.get("table") is None:
        raise _fail(MissingTableError, tag, "table key is missing in record")
    table = entry["table"]
    if not isinstance(table, str):
        raise _fail(InvalidRecordsError, tag, "table name must be a string")
    if table == "":
        raise _fail(EmptyTableNameError, tag, "table name is empty")
    return table


def parse_insert_records(raw: Any, tag: str = "Insert") -> List[Record]:
    """Validate an insert request and return its records.

    Raises one of the ``ValidationError`` subclasses on the first problem
    found, checking in order: records key, non-empty collection, then for
    each record its table and fields.
    """
    logger.info("%s: validating records", tag)
    parsed: List[Record] = []
    for entry in _records_list(raw, tag):
        table = _check_table(entry, tag)
        fields = entry.get("fields")
        if fields is None:
            raise _fail(MissingFieldsError, tag, "fields key is missing in record")
        if isinstance(fields, str) and fields == "":
            raise _fail(EmptyFieldsError, tag, "fields are empty in record")
        if not isinstance(fields, Mapping):
            raise _fail(InvalidRecordsError, tag, "fields must be an object")
        if len(fields) == 0:
            raise _fail(EmptyFieldsError, tag, "fields are empty in record")
        for column in fields:
            if not isinstance(column, str):
                raise _fail(InvalidRecordsError, tag, "column names must be strings")
            if column == "":
                raise _fail(EmptyColumnNameError, tag, "column name is empty in record")
        parsed.append(Record(table=table, fields=dict(fields)))
    return parsed


def parse_detokenize_records(raw: Any, tag: str = "Detokenize") -> List[DetokenizeRecord]:
    logger.info("%s: validating records", tag)
    parsed: List[DetokenizeRecord] = []
    for entry in _records_list(raw, tag):
        token = entry.get("token")
        if token is None:
            raise _fail(MissingTokenError, tag, "token key is missing in record")
        if not isinstance(token, str) or token == "":
            raise _fail(EmptyTokenError, tag, "token is empty in record")
        parsed.append(DetokenizeRecord(token=token))
    return parsed


def parse_get_by_id_records(raw: Any, tag: str = "GetById") -> List[GetByIdRecord]:
    logger.info("%s: validating records", tag)
    parsed: List[GetByIdRecord] = []
    for entry in _records_list(raw, tag):
        ids = entry.get("ids")
        if ids is None:
            raise _fail(MissingIdsError, tag, "ids key is missing in record")
        if not isinstance(ids, (list, tuple)):
            raise _fail(InvalidRecordsError, tag, "ids must be a list")
        if len(ids) == 0:
            raise _fail(EmptyIdsError, tag, "ids are empty in record")
        for skyflow_id in ids:
            if not isinstance(skyflow_id, str) or skyflow_id == "":
                raise _fail(EmptyIdError, tag, "id is empty in record")
        table = _check_table(entry, tag)
        redaction = entry.get("redaction")
        if redaction is None:
            raise _fail(MissingRedactionError, tag, "redaction key is missing in record")
        try:
            redaction_type = RedactionType(redaction)
        except ValueError:
            raise _fail(
                InvalidRedactionTypeError, tag, f"redaction type {redaction!r} is invalid"
            ) from None
        parsed.append(GetByIdRecord(ids=list(ids), table=table, redaction=redaction_type))
    return parsed


def query_param_value(name: str, value: Any, tag: str = "InvokeConnection") -> str:
    """Render one connection query parameter as a string.

    Only str, int, float and bool are accepted. bool is checked before int
    because it is an int subclass.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return "%f" % value
    if isinstance(value, str):
        return value
    raise _fail(
        InvalidQueryParamError, tag, f"invalid field {name!r} present in query params", param=name
    )


def validate_connection_config(config: ConnectionConfig, tag: str = "InvokeConnection") -> Dict[str, str]:
    """Check the connection URL and render query params.

    Returns the query params as strings so that a bad type is reported
    before any request is built.
    """
    logger.info("%s: validating connection config", tag)
    if not config.connection_url:
        raise _fail(EmptyConnectionURLError, tag, "connection URL is empty")
    if not is_valid_url(config.connection_url):
        raise _fail(
            InvalidConnectionURLError, tag, f"connection URL {config.connection_url!r} is invalid"
        )
    return {
        name: query_param_value(name, value, tag)
        for name, value in config.query_params.items()
    }
