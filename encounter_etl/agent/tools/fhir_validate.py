"""
FHIR Validate Tool - remote $validate against a target profile.

Submits a candidate resource to a FHIR validator service (Inferno's
validator API by default) scoped to the run's target profile, and hands
the OperationOutcome back to the model unchanged. The agent does not
interpret the verdict.

API Documentation: https://inferno.healthit.gov/validator/
"""
from typing import Any, Dict, Optional
from urllib.parse import quote
import httpx
from .base import Tool, ToolResult
from encounter_etl.agent.models import ToolName


FHIR_JSON_CONTENT_TYPE = "application/fhir+json"


class FHIRValidateTool(Tool):
    """
    Validates a FHIR resource against a fixed profile.

    Features:
    - Profile is fixed per run, not chosen by the model
    - Success and failure diagnostics are returned verbatim
    - Network and service errors become failed results, never exceptions
    """

    def __init__(self, validator_url: str, profile: str, timeout: float = 60.0):
        """
        Initialize the validate tool.

        Args:
            validator_url: Validator endpoint accepting a POSTed resource
            profile: Canonical URL of the target StructureDefinition
            timeout: HTTP request timeout in seconds
        """
        self.validator_url = validator_url
        self.profile = profile
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return ToolName.FHIR_VALIDATE.value

    @property
    def description(self) -> str:
        return "Validates a FHIR Encounter Resource against US Core"

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "resource": {
                    "type": "object",
                    "description": "The FHIR Encounter resource to validate",
                },
            },
            "required": ["resource"],
        }

    @property
    def request_url(self) -> str:
        """Validator URL with the profile canonical URL-escaped into the query."""
        return f"{self.validator_url}?profile={quote(self.profile, safe='')}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def execute(self, arguments: Dict[str, Any]) -> ToolResult:
        """
        Validate a resource.

        Args:
            arguments: {"resource": {...}}. A bare resource object is
                submitted as-is.

        Returns:
            ToolResult whose data is the validator's JSON response
        """
        resource = arguments.get("resource", arguments)
        if not isinstance(resource, dict) or not resource:
            return ToolResult.fail("No resource provided for validation")

        try:
            client = await self._get_client()
            response = await client.post(
                self.request_url,
                json=resource,
                headers={"content-type": FHIR_JSON_CONTENT_TYPE},
            )
            response.raise_for_status()
            outcome = response.json()

            issues = outcome.get("issue") if isinstance(outcome, dict) else None
            return ToolResult.ok(
                data=outcome,
                profile=self.profile,
                status_code=response.status_code,
                issue_count=len(issues) if isinstance(issues, list) else None
            )

        except httpx.TimeoutException:
            return ToolResult.fail(
                f"Validator timeout after {self.timeout}s",
                profile=self.profile
            )
        except httpx.HTTPStatusError as e:
            return ToolResult.fail(
                f"Validator error ({e.response.status_code}): {e.response.text[:500]}",
                profile=self.profile,
                status_code=e.response.status_code
            )
        except httpx.HTTPError as e:
            return ToolResult.fail(
                f"Validator request failed: {str(e)}",
                profile=self.profile
            )
        except ValueError as e:
            # response.json() on a non-JSON body
            return ToolResult.fail(
                f"Validator returned a non-JSON response: {str(e)}",
                profile=self.profile
            )
