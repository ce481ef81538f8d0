"""Map vault responses back onto the caller's records.

The insert endpoint answers with a flat ``responses`` array aligned with
the submitted operations. Without tokens entry ``i`` belongs to record
``i``. With tokens the array holds N insert results followed by N
read-backs, and the read-back for record ``i`` sits at ``N + i``.

Any deviation from those shapes is reported as MalformedResponseError
rather than surfacing as KeyError or IndexError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .errors import MalformedResponseError, VaultError
from .models import GetByIdRecord, InsertOptions, ReadBackPairing, Record, ReconciledRecord
from .request_builder import build_pairings


def raise_for_error_body(body: Any) -> None:
    """Raise VaultError if a decoded body carries an ``error`` object."""
    if isinstance(body, dict) and body.get("error") is not None:
        error = body["error"]
        if not isinstance(error, dict):
            raise VaultError(None, str(error))
        raise VaultError(error.get("http_code"), str(error.get("message", "")))


def _object_at(responses: Sequence[Any], position: int) -> Dict[str, Any]:
    if not 0 <= position < len(responses):
        raise MalformedResponseError(
            f"No response entry at position {position} (got {len(responses)})"
        )
    entry = responses[position]
    if not isinstance(entry, dict):
        raise MalformedResponseError(f"Response entry {position} is not an object")
    return entry


def _first_record(entry: Dict[str, Any], position: int) -> Dict[str, Any]:
    records = entry.get("records")
    if not isinstance(records, list) or not records or not isinstance(records[0], dict):
        raise MalformedResponseError(f"Response entry {position} has no records")
    return records[0]


def _skyflow_id(post: Dict[str, Any], read: Dict[str, Any]) -> Any:
    candidates = []
    for entry in (read, post):
        records = entry.get("records")
        if isinstance(records, list) and records and isinstance(records[0], dict):
            candidates.append(records[0].get("skyflow_id"))
    if isinstance(read.get("fields"), dict):
        candidates.append(read["fields"].get("skyflow_id"))
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _tokenized_fields(post: Dict[str, Any], read: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    # the read-back carries tokens; fall back to the insert echo
    if isinstance(read.get("fields"), dict):
        return dict(read["fields"])
    for entry in (read, post):
        records = entry.get("records")
        if isinstance(records, list) and records and isinstance(records[0], dict):
            fields = records[0].get("fields")
            if isinstance(fields, dict):
                return dict(fields)
    if isinstance(post.get("fields"), dict):
        return dict(post["fields"])
    return None


def _responses(body: Any) -> List[Any]:
    raise_for_error_body(body)
    if not isinstance(body, dict):
        raise MalformedResponseError("Vault response is not an object")
    responses = body.get("responses")
    if not isinstance(responses, list):
        raise MalformedResponseError("Vault response has no responses array")
    return responses


def reconcile_insert(
    body: Any,
    records: Sequence[Record],
    options: InsertOptions,
    pairings: Optional[Sequence[ReadBackPairing]] = None,
) -> List[ReconciledRecord]:
    """Rebuild per-record results from a batched insert response.

    ``pairings`` are the POST-to-GET links produced alongside the request;
    when omitted they are recomputed from the record count.
    """
    responses = _responses(body)
    count = len(records)
    expected = 2 * count if options.tokens else count
    if len(responses) != expected:
        raise MalformedResponseError(
            f"Expected {expected} response entries for {count} records, got {len(responses)}"
        )

    reconciled: List[ReconciledRecord] = []
    if not options.tokens:
        for i, record in enumerate(records):
            entry = dict(_first_record(_object_at(responses, i), i))
            if "fields" in entry and not isinstance(entry["fields"], dict):
                raise MalformedResponseError(f"Response entry {i} has non-object fields")
            entry["table"] = record.table
            reconciled.append(ReconciledRecord(**entry))
        return reconciled

    if pairings is None:
        pairings = build_pairings(count)
    if len(pairings) != count:
        raise MalformedResponseError(f"Expected {count} read-back pairings, got {len(pairings)}")
    for pairing in pairings:
        if not 0 <= pairing.post_index < count:
            raise MalformedResponseError(f"Pairing refers to unknown record {pairing.post_index}")
        post = _object_at(responses, pairing.post_index)
        read = _object_at(responses, pairing.get_index)
        skyflow_id = _skyflow_id(post, read)
        if skyflow_id is None:
            raise MalformedResponseError(
                f"No skyflow_id for record {pairing.post_index} in response entries "
                f"{pairing.post_index}/{pairing.get_index}"
            )
        fields = _tokenized_fields(post, read)
        if fields is None:
            raise MalformedResponseError(
                f"No fields for record {pairing.post_index} in response entry {pairing.get_index}"
            )
        fields["skyflow_id"] = skyflow_id
        reconciled.append(
            ReconciledRecord(table=records[pairing.post_index].table, fields=fields)
        )
    return reconciled


def parse_detokenize_response(body: Any) -> List[Dict[str, Any]]:
    raise_for_error_body(body)
    if not isinstance(body, dict) or not isinstance(body.get("records"), list):
        raise MalformedResponseError("Detokenize response has no records array")
    records = body["records"]
    for position, record in enumerate(records):
        if not isinstance(record, dict) or "token" not in record:
            raise MalformedResponseError(f"Detokenize record {position} has no token")
    return records


def parse_get_by_id_response(body: Any, request: GetByIdRecord) -> List[Dict[str, Any]]:
    raise_for_error_body(body)
    if not isinstance(body, dict) or not isinstance(body.get("records"), list):
        raise MalformedResponseError("Get by id response has no records array")
    out: List[Dict[str, Any]] = []
    for position, record in enumerate(body["records"]):
        if not isinstance(record, dict):
            raise MalformedResponseError(f"Get by id record {position} is not an object")
        out.append({**record, "table": request.table})
    return out
