"""UUID Tool - fresh random identifiers for resource ids and fullUrls."""
import uuid
from typing import Any, Dict
from .base import Tool, ToolResult
from encounter_etl.agent.models import ToolName


class UUIDTool(Tool):
    """Generates a version 4 UUID. Takes no arguments."""

    @property
    def name(self) -> str:
        return ToolName.UUIDV4.value

    @property
    def description(self) -> str:
        return "Generates a UUIDv4"

    async def execute(self, arguments: Dict[str, Any]) -> ToolResult:
        return ToolResult.ok(data=str(uuid.uuid4()))
