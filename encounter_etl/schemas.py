from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

# Health check schema
class HealthResponse(BaseModel):
    """Health check response"""
    status: str

# Transform schemas
class TransformRequest(BaseModel):
    """Request schema for note → FHIR Encounter transformation"""
    text: str = Field(..., min_length=1, description="Free-text clinical encounter note")
    include_trajectory: bool = Field(True, description="Return the run trajectory")

class TransformResponse(BaseModel):
    """Response schema for a successful transformation"""
    resource: Dict[str, Any]
    rounds: int
    provider: str
    model: str
    trajectory: Optional[Dict[str, Any]] = None
