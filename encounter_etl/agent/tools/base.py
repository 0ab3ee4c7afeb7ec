"""
Abstract base class for agent tools.

All tools follow a standardized contract:
1. name: Identifier the model uses to call the tool
2. description: LLM-readable description of tool purpose
3. parameters: JSON schema for the argument object
4. execute(): Async method that performs the tool's action
5. Returns ToolResult with success status and data/error
"""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Dict
from datetime import datetime, timezone

from encounter_etl.agent.models import ToolDescriptor


@dataclass
class ToolResult:
    """
    Standardized result from tool execution.

    Attributes:
        success: Whether the tool executed successfully
        data: Output data if successful (type depends on tool)
        error: Error message if failed
        metadata: Additional execution metadata (timing, status codes, etc.)
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Add timestamp to metadata."""
        if "timestamp" not in self.metadata:
            self.metadata["timestamp"] = datetime.now(timezone.utc).isoformat()

    @classmethod
    def ok(cls, data: Any, **metadata) -> "ToolResult":
        """Create successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, **metadata) -> "ToolResult":
        """Create failed result."""
        return cls(success=False, error=error, metadata=metadata)

    def to_content(self) -> str:
        """
        Render the result as tool-message content for the model.

        String data is passed through as-is; structured data is JSON
        encoded verbatim. Failures become an {"error": ...} object.
        """
        if not self.success:
            return json.dumps({"error": self.error})
        if isinstance(self.data, str):
            return self.data
        return json.dumps(self.data)


class Tool(ABC):
    """
    Abstract base class for all agent tools.

    Each tool must:
    1. Define a unique name and description
    2. Declare its argument schema
    3. Implement async execute() returning a ToolResult

    Tools report remote failures through ToolResult.fail rather than
    raising, so the model sees the failure as a tool reply.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for the tool."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human/LLM-readable description of what this tool does."""
        pass

    @property
    def parameters(self) -> Dict[str, Any]:
        """JSON schema for the tool arguments. Empty for zero-argument tools."""
        return {}

    @property
    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            parameters=self.parameters
        )

    @abstractmethod
    async def execute(self, arguments: Dict[str, Any]) -> ToolResult:
        """
        Execute the tool with parsed arguments.

        Args:
            arguments: Argument object decoded from the model's tool call

        Returns:
            ToolResult with success status and output data or error
        """
        pass

    async def close(self):
        """Release any held resources. No-op by default."""
        pass

    def __repr__(self) -> str:
        return f"<Tool: {self.name}>"
