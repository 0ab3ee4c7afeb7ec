"""
Result emitter - turns the model's final answer into the output artifact.

The final answer is untrusted model text: it always goes through
parse_resource(), which reports failure as a value instead of raising,
before anything is serialized or written.
"""
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

CODE_FENCE = re.compile(r"\A```[\w-]*\s*(.*?)\s*```\Z", re.DOTALL)


@dataclass
class ParsedResource:
    """Outcome of parsing a final answer."""
    success: bool
    resource: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def resource_type(self) -> Optional[str]:
        if self.resource:
            return self.resource.get("resourceType")
        return None


def parse_resource(text: Optional[str]) -> ParsedResource:
    """
    Parse final-answer text as a JSON object.

    Returns:
        ParsedResource with the decoded object, or the reason it failed
    """
    if text is None or not text.strip():
        return ParsedResource(success=False, error="Final answer is empty")

    try:
        value = json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as e:
        return ParsedResource(success=False, error=f"Invalid JSON: {e.msg} at line {e.lineno} column {e.colno}")

    if not isinstance(value, dict):
        return ParsedResource(
            success=False,
            error=f"Expected a JSON object, got {type(value).__name__}"
        )
    return ParsedResource(success=True, resource=value)


def _strip_code_fence(text: str) -> str:
    """Unwrap a ```json ... ``` block; other text is returned unchanged."""
    cleaned = text.strip()
    match = CODE_FENCE.match(cleaned)
    return match.group(1) if match else cleaned


def serialize_resource(resource: Dict[str, Any]) -> str:
    """Compact canonical JSON; key order is preserved."""
    return json.dumps(resource, ensure_ascii=False, separators=(",", ":"))


class ArtifactWriter:
    """Writes the run's single output document."""

    def __init__(self, path: Union[str, Path] = "out.json"):
        self.path = Path(path)

    def write(self, resource: Dict[str, Any]) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(serialize_resource(resource), encoding="utf-8")
        logger.info("Wrote %s to %s", resource.get("resourceType", "resource"), self.path)
        return self.path
