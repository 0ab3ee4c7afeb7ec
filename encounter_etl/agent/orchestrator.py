"""
Transform Agent Orchestrator - tool-calling loop for note → FHIR transforms.

The agent drives a chat model through repeated rounds:
1. AWAITING_MODEL - send the full conversation plus tool declarations
2. HANDLING_TOOL_CALLS - execute requested tools in order, append results
3. DONE - the model answered without tool calls; parse the answer as JSON

The model alone decides when the resource is finished. Validator output
is fed back as context, never enforced by the loop. A round budget
guarantees termination.
"""
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from encounter_etl.agent.conversation import Conversation
from encounter_etl.agent.exceptions import (
    FinalAnswerError,
    RoundLimitExceeded,
    ToolArgumentsError,
    TransformError,
    UnknownToolError,
)
from encounter_etl.agent.models import AgentState, Message, ToolCallRequest
from encounter_etl.agent.prompts import build_initial_conversation, load_structure_definition
from encounter_etl.agent.tools.base import ToolResult
from encounter_etl.agent.tools.registry import ToolRegistry
from encounter_etl.agent.trajectory import Trajectory, TrajectoryLogger
from encounter_etl.config import Settings
from encounter_etl.emitter import parse_resource

if TYPE_CHECKING:
    from encounter_etl.providers.llm.base import ChatProvider

logger = logging.getLogger(__name__)


@dataclass
class TransformResult:
    """Result of one transform run."""
    resource: Optional[Dict[str, Any]]
    trajectory: Trajectory
    success: bool
    rounds: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None
    exception: Optional[Exception] = None
    conversation: Optional[Conversation] = None


class TransformAgent:
    """
    Clinical note → FHIR resource agent with validator and UUID tools.

    Features:
    - Explicit iterative state machine with a bounded round count
    - Sequential tool execution in request order
    - Tool failures returned to the model as error results
    - Full trajectory logging for debugging

    The provider and registry are built from the Settings passed in,
    unless supplied directly. No client state is shared between agents.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional["ChatProvider"] = None,
        registry: Optional[ToolRegistry] = None
    ):
        if provider is None:
            from encounter_etl.providers.llm.factory import LLMFactory
            provider = LLMFactory.create(settings)

        self.settings = settings
        self.provider = provider
        self.registry = registry or ToolRegistry.default(settings)
        self.max_rounds = settings.max_rounds

        if self.max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")

    async def transform(self, note: str) -> TransformResult:
        """
        Transform a clinical encounter note into a FHIR resource.

        This is the main entry point. Fatal errors are reported on the
        result rather than raised.

        Args:
            note: Free-text clinical note

        Returns:
            TransformResult with the parsed resource and trajectory
        """
        note_preview = note[:100] + "..." if len(note) > 100 else note
        tracker = TrajectoryLogger(
            agent_name="TransformAgent",
            input_summary=f"Clinical note ({len(note)} chars): {note_preview}"
        )
        conversation: Optional[Conversation] = None

        try:
            if not note.strip():
                raise TransformError("Empty clinical note")

            structure_definition = load_structure_definition(self.settings.structure_definition_path)
            conversation = build_initial_conversation(note, structure_definition)

            final_answer = await self.run(conversation, tracker)
            resource = self._parse_final_answer(final_answer, tracker)

            trajectory = tracker.get_trajectory()
            tracker.complete(
                success=True,
                output_summary=f"{resource.get('resourceType', 'Resource')} after {trajectory.round_count} round(s)"
            )
            return TransformResult(
                resource=resource,
                trajectory=trajectory,
                success=True,
                rounds=trajectory.round_count,
                conversation=conversation
            )

        except Exception as e:
            # Fatal: TransformError kinds, provider failures after retries, bad profile file
            logger.error("Transform failed: %s", e)
            tracker.set_state(AgentState.FAILED)
            tracker.complete(success=False, error=str(e))
            trajectory = tracker.get_trajectory()
            return TransformResult(
                resource=None,
                trajectory=trajectory,
                success=False,
                rounds=trajectory.round_count,
                error=str(e),
                error_type=type(e).__name__,
                exception=e,
                conversation=conversation
            )
        finally:
            await self.registry.aclose()

    async def run(self, conversation: Conversation, tracker: Optional[TrajectoryLogger] = None) -> Optional[str]:
        """
        Drive the conversation until the model answers without tool calls.

        Args:
            conversation: Conversation seeded with the system and user turns;
                every model reply and tool result is appended to it
            tracker: Trajectory to record into

        Returns:
            Content of the final assistant message

        Raises:
            ToolArgumentsError: A tool call carried malformed arguments
            RoundLimitExceeded: The model was still calling tools after max_rounds
        """
        tracker = tracker or TrajectoryLogger("TransformAgent")
        state = AgentState.AWAITING_MODEL
        round_number = 0
        reply: Optional[Message] = None

        try:
            while state != AgentState.DONE:
                if state == AgentState.AWAITING_MODEL:
                    if round_number >= self.max_rounds:
                        raise RoundLimitExceeded(self.max_rounds)
                    round_number += 1
                    reply = await self._request_completion(conversation, round_number, tracker)
                    conversation.append(reply)
                    state = AgentState.HANDLING_TOOL_CALLS if reply.requests_tools else AgentState.DONE

                elif state == AgentState.HANDLING_TOOL_CALLS:
                    for call in reply.tool_calls:
                        result = await self._execute_tool_call(call, round_number, tracker)
                        conversation.append(Message.tool(call.id, result.to_content()))
                    state = AgentState.AWAITING_MODEL
        except Exception:
            logger.error("Agent loop failed in %s after %d round(s)", state.value, round_number)
            tracker.set_state(AgentState.FAILED)
            raise

        tracker.set_state(AgentState.DONE)
        return reply.content

    async def _request_completion(
        self,
        conversation: Conversation,
        round_number: int,
        tracker: TrajectoryLogger
    ) -> Message:
        """AWAITING_MODEL: one inference call over the whole conversation."""
        logger.info(
            "Requesting completion from %s (round %d, %d messages)",
            self.provider.get_provider_name(), round_number, len(conversation)
        )
        step = tracker.start_model_round(round_number, len(conversation))

        try:
            reply = await self.provider.complete(
                conversation.messages,
                self.registry.descriptors(),
                json_output=True
            )
        except Exception as e:
            tracker.fail_step(step, str(e), type(e).__name__)
            raise

        if reply.requests_tools:
            names = ", ".join(c.tool_name for c in reply.tool_calls)
            summary = f"{len(reply.tool_calls)} tool call(s) requested: {names}"
        else:
            summary = f"Final answer ({len(reply.content or '')} chars)"
        tracker.complete_step(step, output_summary=summary, model=self.provider.get_model_name())
        return reply

    async def _execute_tool_call(
        self,
        call: ToolCallRequest,
        round_number: int,
        tracker: TrajectoryLogger
    ) -> ToolResult:
        """
        HANDLING_TOOL_CALLS: run one requested tool.

        Malformed arguments are fatal. Unknown tools and tool failures
        come back as failed results so the model can react to them.
        """
        step = tracker.start_tool_call(
            round_number,
            call.tool_name,
            call.id,
            input_summary=f"{len(call.arguments)} chars of arguments"
        )

        try:
            arguments = self._parse_arguments(call)
        except ToolArgumentsError as e:
            tracker.fail_step(step, str(e), type(e).__name__)
            raise

        try:
            tool = self.registry.get(call.tool_name)
        except UnknownToolError as e:
            logger.warning("Model requested unknown tool '%s' (call %s)", call.tool_name, call.id)
            tracker.fail_step(step, str(e), type(e).__name__)
            return ToolResult.fail(str(e))

        logger.info("%s tool use (call %s)", tool.name, call.id)
        try:
            result = await tool.execute(arguments)
        except Exception as e:
            logger.warning("Tool %s raised: %s", tool.name, e, exc_info=True)
            result = ToolResult.fail(f"Tool execution failed: {str(e)}")

        if result.success:
            tracker.complete_step(step, output_summary=self._summarize(result))
        else:
            logger.warning("Tool %s failed: %s", tool.name, result.error)
            tracker.fail_step(step, result.error or "Unknown tool error", "ToolExecutionError")
        return result

    @staticmethod
    def _parse_arguments(call: ToolCallRequest) -> Dict[str, Any]:
        try:
            arguments = json.loads(call.arguments)
        except json.JSONDecodeError as e:
            raise ToolArgumentsError(call.tool_name, call.id, e.msg) from e

        if not isinstance(arguments, dict):
            raise ToolArgumentsError(
                call.tool_name, call.id, f"expected a JSON object, got {type(arguments).__name__}"
            )
        return arguments

    def _parse_final_answer(self, content: Optional[str], tracker: TrajectoryLogger) -> Dict[str, Any]:
        """DONE: the final answer must be a JSON object."""
        trajectory = tracker.get_trajectory()
        step = tracker.start_emit(trajectory.round_count, f"{len(content or '')} chars")

        parsed = parse_resource(content)
        if not parsed.success:
            error = FinalAnswerError(parsed.error, content)
            tracker.fail_step(step, str(error), type(error).__name__)
            raise error

        tracker.complete_step(step, output_summary=f"resourceType={parsed.resource_type}")
        return parsed.resource

    @staticmethod
    def _summarize(result: ToolResult) -> str:
        # Tool output is opaque; summarize from metadata only
        if isinstance(result.data, str):
            return result.data
        status_code = result.metadata.get("status_code")
        if status_code is not None:
            issue_count = result.metadata.get("issue_count")
            issues = "unknown" if issue_count is None else issue_count
            return f"HTTP {status_code}, {issues} issue(s)"
        return "ok"
