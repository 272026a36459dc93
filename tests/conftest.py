"""
QLTL dashboard - test configuration and fixtures
"""
from typing import Any, Dict

import pytest

from qltl_app.models import SubmissionRecord
from qltl_app.repository import ClientStore

_counter = {"n": 0}


def make_record(**overrides: Any) -> SubmissionRecord:
    """Build a submission record from camelCase backend fields."""
    _counter["n"] += 1
    payload: Dict[str, Any] = {
        "_id": f"f{_counter['n']}",
        "originalName": f"file-{_counter['n']}.pdf",
        "submissionStatus": "draft",
        "tags": [],
    }
    payload.update(overrides)
    return SubmissionRecord.model_validate(payload)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def store(tmp_path) -> ClientStore:
    """A fresh persisted store per test"""
    return ClientStore(str(tmp_path / "state" / "client.db")).init()
