"""Build the batched insert payload.

Records become POST operations in input order. When tokens are requested
a second pass appends one GET read-back per record, in the same order.
The vault cannot be asked for a record by an id it has not created yet,
so each GET points at its POST by response position. Those links are
kept as ``ReadBackPairing`` objects and the ``ID`` expression is rendered
from them.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from .models import (
    BatchOperation,
    InsertOptions,
    InsertPlan,
    ReadBackPairing,
    Record,
    RequestMethod,
)

logger = logging.getLogger(__name__)


def read_back_index(record_count: int, post_index: int) -> int:
    """Position of the GET read-back paired with the POST at ``post_index``."""
    if not 0 <= post_index < record_count:
        raise IndexError(f"post index {post_index} outside 0..{record_count - 1}")
    return record_count + post_index


def build_pairings(record_count: int) -> List[ReadBackPairing]:
    return [
        ReadBackPairing(post_index=i, get_index=read_back_index(record_count, i))
        for i in range(record_count)
    ]


def build_insert_plan(records: Sequence[Record], options: InsertOptions) -> InsertPlan:
    operations = [
        BatchOperation(
            method=RequestMethod.POST,
            table_name=record.table,
            fields=record.fields,
            quorum=True,
        )
        for record in records
    ]
    pairings: List[ReadBackPairing] = []
    if options.tokens:
        pairings = build_pairings(len(records))
        for pairing in pairings:
            operations.append(
                BatchOperation(
                    method=RequestMethod.GET,
                    table_name=records[pairing.post_index].table,
                    record_id=pairing.id_expression(),
                    tokenization=True,
                )
            )
    logger.debug(
        "built insert plan with %d operations (tokens=%s)", len(operations), options.tokens
    )
    return InsertPlan(operations=operations, pairings=pairings)
