"""
Prompt construction for the encounter transform agent.

The system prompt fixes the agent's role in the ETL; the user prompt
carries the target StructureDefinition and the clinical note, plus the
output policy (JSON only, contained references, no inferred codes, no
unnecessary identifiers).
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional

from encounter_etl.agent.conversation import Conversation
from encounter_etl.agent.models import Message


BUNDLED_PROFILE = Path(__file__).resolve().parent.parent / "profiles" / "StructureDefinition-us-core-encounter.json"


SYSTEM_PROMPT = """You are the transform layer of an ETL.
You take raw healthcare resources and format them into FHIR Resources.
You have access to a FHIR Server with a $validate operation to help you in this task - which can validate resources.
You also have access to a UUID generator tool.
Your goal is to produce a working, validated Resource."""


USER_PROMPT = """The next request in your pipeline involves transforming a raw clinical encounter note into a US Core Encounter FHIR Resource.

The Encounter resource MUST conform to the US Core profile, provided by the following structure definition:

{structure_definition}

Here is the clinical encounter note:

{note}

Please make sure that:

* Always return as JSON
* Use contained references for other relationships like to the Patient
* NEVER infer codeable concepts from free text. Only use explicitly provided systems.
* Do not create unnecessary identifiers"""


def load_structure_definition(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the target profile's StructureDefinition.

    Args:
        path: Override file; defaults to the bundled US Core Encounter profile

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a StructureDefinition
    """
    profile_path = Path(path) if path else BUNDLED_PROFILE
    with open(profile_path, "r", encoding="utf-8") as f:
        definition = json.load(f)

    if not isinstance(definition, dict) or definition.get("resourceType") != "StructureDefinition":
        raise ValueError(f"{profile_path} is not a StructureDefinition")
    return definition


def build_user_prompt(note: str, structure_definition: Dict[str, Any]) -> str:
    return USER_PROMPT.format(
        structure_definition=json.dumps(structure_definition),
        note=note.strip()
    )


def build_initial_conversation(note: str, structure_definition: Dict[str, Any]) -> Conversation:
    """System instructions followed by the transform request."""
    return Conversation([
        Message.system(SYSTEM_PROMPT),
        Message.user(build_user_prompt(note, structure_definition)),
    ])
