"""Fatal error kinds raised by the transform agent."""
from typing import Optional


class TransformError(Exception):
    """Base class for errors that abort a transform run."""


class ToolArgumentsError(TransformError):
    """A tool call's argument payload is not a JSON object."""

    def __init__(self, tool_name: str, tool_call_id: str, detail: str):
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id
        self.detail = detail
        super().__init__(
            f"Malformed arguments for tool '{tool_name}' (call {tool_call_id}): {detail}"
        )


class UnknownToolError(TransformError):
    """The model requested a tool outside the registry."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class FinalAnswerError(TransformError):
    """The model's final answer is not a JSON object."""

    def __init__(self, detail: str, content: Optional[str] = None):
        self.detail = detail
        self.content = content
        super().__init__(f"Final answer is not a valid JSON resource: {detail}")


class RoundLimitExceeded(TransformError):
    """The model kept requesting tools past the configured round budget."""

    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds
        super().__init__(f"Model still requesting tools after {max_rounds} round(s)")


class ConversationError(TransformError):
    """An append would break tool-call correlation in the conversation."""
