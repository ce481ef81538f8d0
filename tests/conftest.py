import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))


@pytest.fixture
def person_records():
    return {
        "records": [
            {"table": "person", "fields": {"name": "A"}},
            {"table": "person", "fields": {"name": "B"}},
        ]
    }
