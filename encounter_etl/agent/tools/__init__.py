"""
Agent tools for FHIR resource transformation.

Each tool follows a standardized interface:
- Defined by abstract Tool base class
- Declares a JSON-schema argument object for the model
- Returns ToolResult with success/failure status
"""
from .base import Tool, ToolResult
from .fhir_validate import FHIRValidateTool
from .uuid_generator import UUIDTool
from .registry import ToolRegistry

__all__ = [
    "Tool",
    "ToolResult",
    "FHIRValidateTool",
    "UUIDTool",
    "ToolRegistry",
]
