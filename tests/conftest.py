"""Shared fixtures: settings, scripted chat provider, sample note."""
import json
from unittest.mock import AsyncMock, Mock

import pytest

from encounter_etl.agent.models import Message, ToolCallRequest
from encounter_etl.config import Settings


SAMPLE_ENCOUNTER_NOTE = """
Encounter Note - Date: 2024-03-15 09:30 (Office Visit)
Patient: Jane Doe, DOB 1980-04-12, female
Reason for visit: follow-up on hypertension.
Seen by Dr. Mark Reynolds, Internal Medicine.
Visit ended 10:05. Patient discharged home.
"""

SAMPLE_ENCOUNTER = {
    "resourceType": "Encounter",
    "contained": [
        {
            "resourceType": "Patient",
            "id": "patient",
            "name": [{"family": "Doe", "given": ["Jane"]}],
            "gender": "female",
            "birthDate": "1980-04-12"
        }
    ],
    "status": "finished",
    "class": {
        "system": "http://terminology.hl7.org/CodeSystem/v3-ActCode",
        "code": "AMB",
        "display": "ambulatory"
    },
    "type": [{"text": "Office Visit"}],
    "subject": {"reference": "#patient"},
    "period": {"start": "2024-03-15T09:30:00Z", "end": "2024-03-15T10:05:00Z"}
}


def tool_call(call_id: str, name: str, arguments) -> ToolCallRequest:
    """Build a ToolCallRequest; dict arguments are JSON encoded."""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return ToolCallRequest(id=call_id, tool_name=name, arguments=arguments)


def make_provider(replies) -> AsyncMock:
    """Chat provider mock returning `replies` in order (list or callable side effect)."""
    provider = AsyncMock()
    provider.complete = AsyncMock(side_effect=replies)
    provider.get_provider_name = Mock(return_value="openai")
    provider.get_model_name = Mock(return_value="gpt-4o")
    return provider


@pytest.fixture
def settings():
    return Settings(
        llm_provider="openai",
        llm_model="gpt-4o",
        llm_api_key="test-key",
        max_rounds=5,
        request_timeout=5.0
    )


@pytest.fixture
def final_answer():
    return Message.assistant(content=json.dumps(SAMPLE_ENCOUNTER))
