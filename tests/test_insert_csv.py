import json

import httpx
import pandas as pd

from helpers import Recorder, make_client
from scripts.insert_csv import insert_frame, rows_to_records


def test_rows_to_records_drops_blank_cells():
    rows = [{"name": "A", "email": float("nan")}, {"name": "B", "email": "b@x.io"}]
    assert rows_to_records(rows, "person") == {
        "records": [
            {"table": "person", "fields": {"name": "A"}},
            {"table": "person", "fields": {"name": "B", "email": "b@x.io"}},
        ]
    }


def test_insert_frame_batches_and_flattens():
    def respond(request):
        ops = json.loads(request.content)["records"]
        posts = [op for op in ops if op["method"] == "POST"]
        return httpx.Response(
            200,
            json={
                "responses": [{"records": [{"skyflow_id": f"id-{op['fields']['name']}"}]} for op in posts]
                + [{"fields": {"name": f"tok-{op['fields']['name']}"}} for op in posts]
            },
        )

    handler = Recorder(respond)
    df = pd.DataFrame({"name": ["A", "B", "C"]})
    rows = insert_frame(make_client(handler), df, "person", batch_size=2, tokens=True)

    assert len(handler.requests) == 2
    assert rows == [
        {"table": "person", "name": "tok-A", "skyflow_id": "id-A"},
        {"table": "person", "name": "tok-B", "skyflow_id": "id-B"},
        {"table": "person", "name": "tok-C", "skyflow_id": "id-C"},
    ]
