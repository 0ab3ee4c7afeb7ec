"""
Conversation data models for the tool-calling transform agent.

These models are provider-neutral; each LLM provider translates them
to and from its own chat wire format:
- Message → one chat turn (system, user, assistant or tool)
- ToolCallRequest → an assistant-issued function call
- ToolDescriptor → a function declaration exposed to the model
"""
from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional
from enum import Enum


class Role(str, Enum):
    """Chat message role"""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolName(str, Enum):
    """Tools the agent may call. Dispatch is keyed on these members."""
    FHIR_VALIDATE = "fhir-validate"
    UUIDV4 = "uuidv4"

    @classmethod
    def parse(cls, name: str) -> Optional["ToolName"]:
        """Return the matching member, or None for a name outside the registry."""
        try:
            return cls(name)
        except ValueError:
            return None


class AgentState(str, Enum):
    """States of the transform agent loop."""
    AWAITING_MODEL = "awaiting_model"
    HANDLING_TOOL_CALLS = "handling_tool_calls"
    DONE = "done"
    FAILED = "failed"


class ToolCallRequest(BaseModel):
    """
    A request from the model to invoke a tool.

    `arguments` is kept as the raw text the model produced; it is parsed
    by the agent at dispatch time so malformed JSON surfaces as an error.
    """
    id: str = Field(..., min_length=1)
    tool_name: str
    arguments: str = ""


class Message(BaseModel):
    """One turn of the conversation."""
    role: Role
    content: Optional[str] = None
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)
    tool_call_id: Optional[str] = None

    @model_validator(mode="after")
    def check_role_fields(self) -> "Message":
        if self.tool_calls and self.role != Role.ASSISTANT:
            raise ValueError("Only assistant messages may carry tool calls")
        if self.role == Role.TOOL and not self.tool_call_id:
            raise ValueError("Tool messages require a tool_call_id")
        if self.role != Role.TOOL and self.tool_call_id:
            raise ValueError("Only tool messages may carry a tool_call_id")
        return self

    @property
    def requests_tools(self) -> bool:
        return bool(self.tool_calls)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(
        cls,
        content: Optional[str] = None,
        tool_calls: Optional[List[ToolCallRequest]] = None
    ) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, tool_calls=tool_calls or [])

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> "Message":
        return cls(role=Role.TOOL, content=content, tool_call_id=tool_call_id)


class ToolDescriptor(BaseModel):
    """Static declaration of a callable tool"""
    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)  # JSON schema; empty for zero-arg tools
