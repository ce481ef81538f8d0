"""CLI to insert the rows of a CSV into a Skyflow vault table.

Reads a CSV, inserts rows in batches (one vault request per batch) and
writes the returned records, one row per input row, to an output CSV.
With --tokens the output holds the tokenized fields and skyflow_id.

Environment:
- SKYFLOW_VAULT_URL, SKYFLOW_VAULT_ID, SKYFLOW_BEARER_TOKEN (required)
- SKYFLOW_LOG_LEVEL (default: ERROR)
"""

import argparse
import logging
import sys
from typing import Any, Dict, List

import pandas as pd

from skyflow_vault.config import VaultSettings
from skyflow_vault.errors import SkyflowError
from skyflow_vault.log_config import set_log_level
from skyflow_vault.models import InsertOptions
from skyflow_vault.vault_client import VaultClient, from_env

logger = logging.getLogger("insert_csv")


def rows_to_records(rows: List[Dict[str, Any]], table: str) -> Dict[str, Any]:
    # pandas gives NaN for blank cells; drop them rather than sending NaN
    records = []
    for row in rows:
        fields = {k: v for k, v in row.items() if not pd.isna(v)}
        records.append({"table": table, "fields": fields})
    return {"records": records}


def insert_frame(
    client: VaultClient, df: pd.DataFrame, table: str, batch_size: int, tokens: bool
) -> List[Dict[str, Any]]:
    out_rows: List[Dict[str, Any]] = []
    options = InsertOptions(tokens=tokens)
    for i in range(0, len(df), batch_size):
        chunk = df.iloc[i:i + batch_size]
        payload = rows_to_records(chunk.to_dict(orient="records"), table)
        result = client.insert(payload, options)
        if len(result["records"]) != len(chunk):
            raise RuntimeError(f"Vault returned {len(result['records'])} records, expected {len(chunk)}")
        for record in result["records"]:
            row = {"table": record["table"]}
            row.update(record.get("fields", {}))
            if "skyflow_id" in record:
                row["skyflow_id"] = record["skyflow_id"]
            out_rows.append(row)
        logger.info("inserted rows %d-%d", i, i + len(chunk) - 1)
    return out_rows


def main(argv=None):
    ap = argparse.ArgumentParser(description="Insert CSV rows into a Skyflow vault table")
    ap.add_argument("--input", required=True, help="Input CSV")
    ap.add_argument("--output", required=True, help="Output CSV of inserted records")
    ap.add_argument("--table", required=True, help="Vault table name")
    ap.add_argument("--batch-size", type=int, default=25, help="Rows per vault request")
    ap.add_argument("--tokens", action="store_true", help="Return tokens for inserted fields")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    set_log_level(VaultSettings().log_level)

    df = pd.read_csv(args.input)
    try:
        with from_env() as client:
            out_rows = insert_frame(client, df, args.table, args.batch_size, args.tokens)
    except SkyflowError as e:
        logger.error("insert failed (code=%s): %s", e.code, e.message)
        return 1

    pd.DataFrame(out_rows).to_csv(args.output, index=False)
    print(f"Inserted {len(out_rows)} rows -> {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
