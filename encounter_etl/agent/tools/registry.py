"""
Tool Registry - the fixed tool set exposed to the model.

Tools are keyed by ToolName so the registry can be checked for
completeness against the enum; string names from the model are mapped
onto the enum before lookup.
"""
from typing import Dict, List

from encounter_etl.agent.exceptions import UnknownToolError
from encounter_etl.agent.models import ToolDescriptor, ToolName
from encounter_etl.config import Settings
from .base import Tool, ToolResult
from .fhir_validate import FHIRValidateTool
from .uuid_generator import UUIDTool


class ToolRegistry:
    """Maps each ToolName to its executor."""

    def __init__(self, tools: Dict[ToolName, Tool]):
        missing = [name.value for name in ToolName if name not in tools]
        if missing:
            raise ValueError(f"No executor registered for: {', '.join(missing)}")
        self._tools = dict(tools)

    @classmethod
    def default(cls, settings: Settings) -> "ToolRegistry":
        """Build the standard registry (validator + UUID generator) from settings."""
        return cls({
            ToolName.FHIR_VALIDATE: FHIRValidateTool(
                validator_url=settings.validator_url,
                profile=settings.target_profile,
                timeout=settings.request_timeout
            ),
            ToolName.UUIDV4: UUIDTool(),
        })

    def descriptors(self) -> List[ToolDescriptor]:
        """Tool declarations in ToolName order."""
        return [self._tools[name].descriptor for name in ToolName]

    def get(self, name: str) -> Tool:
        """
        Look up a tool by the name the model used.

        Raises:
            UnknownToolError: If the name is not a registered tool
        """
        tool_name = ToolName.parse(name)
        if tool_name is None:
            raise UnknownToolError(name)
        return self._tools[tool_name]

    async def dispatch(self, name: str, arguments: dict) -> ToolResult:
        """Execute the named tool with already-parsed arguments."""
        return await self.get(name).execute(arguments)

    async def aclose(self):
        """Close every tool's resources."""
        for tool in self._tools.values():
            await tool.close()

    def __contains__(self, name: str) -> bool:
        return ToolName.parse(name) is not None

    def __repr__(self) -> str:
        return f"<ToolRegistry: {', '.join(n.value for n in self._tools)}>"
