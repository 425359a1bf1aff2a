import json
import os
import tempfile
from unittest.mock import MagicMock

import pytest

# Keep test logs out of the project's logs/ directory
os.environ.setdefault("MINI_MENTOR_LOG_DIR", tempfile.mkdtemp(prefix="mini-mentor-logs-"))

from competency.taxonomy import UK_SPEC_COMPETENCY_CODES  # noqa: E402


def wrap_json(payload, prose: str = "") -> str:
    """Render a response the way the assistant does: prose, then a ```json block."""
    body = payload if isinstance(payload, str) else json.dumps(payload, indent=2)
    return f"{prose}\n\n**STRUCTURED DATA (JSON):**\n```json\n{body}\n```\n"


def analysis_payload(demonstrated=None, development=None) -> dict:
    return {
        "analysis": {
            "demonstrated_competencies": demonstrated or [],
            "development_opportunities": development or [],
        }
    }


@pytest.fixture
def c1_response():
    return wrap_json(
        analysis_payload(
            demonstrated=[
                {
                    "code": "C1",
                    "confidence_percentage": 90,
                    "explanation": "Led project planning and budget control",
                }
            ]
        )
    )


@pytest.fixture
def prose_analysis_response():
    return "**Analysis:**\n- **B2**: Conducted investigation and testing **(Confidence: 85%)**"


@pytest.fixture
def clarifying_response():
    return "**Clarifying Questions:** What was your specific role?"


@pytest.fixture
def stored_code_rows():
    return [dict(code) for code in UK_SPEC_COMPETENCY_CODES]


@pytest.fixture
def fake_supabase_client(stored_code_rows):
    """MagicMock standing in for supabase.Client; table queries return stored_code_rows."""
    client = MagicMock()
    table = client.table.return_value
    table.select.return_value.order.return_value.execute.return_value = MagicMock(data=stored_code_rows)
    table.upsert.return_value.execute.return_value = MagicMock(data=stored_code_rows)
    return client


@pytest.fixture
def make_response():
    return wrap_json


@pytest.fixture
def make_payload():
    return analysis_payload
