"""
FHIR Transform Agent

A tool-calling agent that turns a free-text clinical encounter note into
a US Core Encounter resource.

Components:
- TransformAgent: Iterative model/tool loop with a round budget
- Conversation: Append-only message log sent to the model each round
- Tools: FHIR $validate and UUIDv4 generator, behind a ToolRegistry
- Trajectory: Execution audit trail logging

Usage:
    from encounter_etl.agent import TransformAgent
    from encounter_etl.config import get_settings

    agent = TransformAgent(get_settings())
    result = await agent.transform(note_text)

    if result.success:
        print(result.resource["resourceType"])
"""
from encounter_etl.agent.orchestrator import TransformAgent, TransformResult
from encounter_etl.agent.conversation import Conversation
from encounter_etl.agent.models import (
    AgentState,
    Message,
    Role,
    ToolCallRequest,
    ToolDescriptor,
    ToolName,
)
from encounter_etl.agent.exceptions import (
    TransformError,
    ToolArgumentsError,
    UnknownToolError,
    FinalAnswerError,
    RoundLimitExceeded,
    ConversationError,
)
from encounter_etl.agent.trajectory import Trajectory, TrajectoryStep, TrajectoryLogger

__all__ = [
    # Agent
    "TransformAgent",
    "TransformResult",
    "Conversation",

    # Models
    "AgentState",
    "Message",
    "Role",
    "ToolCallRequest",
    "ToolDescriptor",
    "ToolName",

    # Errors
    "TransformError",
    "ToolArgumentsError",
    "UnknownToolError",
    "FinalAnswerError",
    "RoundLimitExceeded",
    "ConversationError",

    # Trajectory
    "Trajectory",
    "TrajectoryStep",
    "TrajectoryLogger",
]
