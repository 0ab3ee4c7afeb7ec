"""
Trajectory Logger - execution audit trail for the transform agent.

Records every model round and every tool call of a run, with timing,
status and short input/output summaries. The trajectory is attached to
the run result and returned by the API so a run can be inspected after
the fact without replaying the conversation.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from enum import Enum
import json

from encounter_etl.agent.models import AgentState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepStatus(str, Enum):
    """Status of an execution step."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class StepKind(str, Enum):
    """What a step records."""
    MODEL = "model"
    TOOL = "tool"
    EMIT = "emit"


@dataclass
class TrajectoryStep:
    """
    A single step in the execution trajectory.

    Model steps record one inference round; tool steps record one tool
    call, correlated to the model's request by `tool_call_id`.
    """
    step_number: int
    step_name: str
    kind: StepKind
    round_number: int
    status: StepStatus = StepStatus.PENDING
    tool_name: Optional[str] = None
    tool_call_id: Optional[str] = None

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_ms: Optional[float] = None

    input_summary: Optional[str] = None
    output_summary: Optional[str] = None

    error: Optional[str] = None
    error_type: Optional[str] = None

    metadata: Dict[str, Any] = field(default_factory=dict)

    def start(self):
        """Mark step as started."""
        self.status = StepStatus.RUNNING
        self.started_at = utcnow()

    def complete(self, output_summary: str = None, **metadata):
        """Mark step as successfully completed."""
        self.status = StepStatus.SUCCESS
        self.completed_at = utcnow()
        self.output_summary = output_summary
        self.metadata.update(metadata)
        self._calculate_duration()

    def fail(self, error: str, error_type: str = None):
        """Mark step as failed."""
        self.status = StepStatus.FAILED
        self.completed_at = utcnow()
        self.error = error
        self.error_type = error_type
        self._calculate_duration()

    def _calculate_duration(self):
        if self.started_at and self.completed_at:
            delta = self.completed_at - self.started_at
            self.duration_ms = delta.total_seconds() * 1000

    def to_dict(self) -> dict:
        """Convert step to dictionary for serialization."""
        result = {
            "step_number": self.step_number,
            "step_name": self.step_name,
            "kind": self.kind.value,
            "round": self.round_number,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "input_summary": self.input_summary,
            "output_summary": self.output_summary,
        }

        if self.tool_name:
            result["tool_name"] = self.tool_name
            result["tool_call_id"] = self.tool_call_id

        if self.error:
            result["error"] = self.error
            result["error_type"] = self.error_type

        if self.metadata:
            result["metadata"] = self.metadata

        return result


@dataclass
class Trajectory:
    """
    Complete execution trajectory for one transform run.

    Tracks:
    - All model rounds and tool calls with timing and status
    - Overall run success/failure
    - Aggregate statistics
    """
    agent_name: str
    started_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    steps: List[TrajectoryStep] = field(default_factory=list)

    success: bool = False
    final_error: Optional[str] = None
    final_state: Optional[AgentState] = None

    input_summary: Optional[str] = None
    output_summary: Optional[str] = None

    def add_step(
        self,
        step_name: str,
        kind: StepKind,
        round_number: int,
        input_summary: str = None,
        tool_name: str = None,
        tool_call_id: str = None
    ) -> TrajectoryStep:
        step = TrajectoryStep(
            step_number=len(self.steps) + 1,
            step_name=step_name,
            kind=kind,
            round_number=round_number,
            input_summary=input_summary,
            tool_name=tool_name,
            tool_call_id=tool_call_id
        )
        self.steps.append(step)
        return step

    def complete(self, success: bool = True, error: str = None, output_summary: str = None):
        self.completed_at = utcnow()
        self.success = success
        self.final_error = error
        self.output_summary = output_summary

    @property
    def total_duration_ms(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            delta = self.completed_at - self.started_at
            return delta.total_seconds() * 1000
        return None

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def round_count(self) -> int:
        """Number of model rounds started."""
        return sum(1 for s in self.steps if s.kind == StepKind.MODEL)

    @property
    def tool_call_count(self) -> int:
        return sum(1 for s in self.steps if s.kind == StepKind.TOOL)

    @property
    def failed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.FAILED)

    def get_statistics(self) -> dict:
        """Get aggregate statistics about the trajectory."""
        tool_usage: Dict[str, int] = {}
        for step in self.steps:
            if step.kind == StepKind.TOOL and step.tool_name:
                tool_usage[step.tool_name] = tool_usage.get(step.tool_name, 0) + 1

        model_durations = [
            s.duration_ms for s in self.steps
            if s.kind == StepKind.MODEL and s.duration_ms is not None
        ]

        return {
            "total_steps": self.step_count,
            "rounds": self.round_count,
            "tool_calls": self.tool_call_count,
            "failed_steps": self.failed_count,
            "tool_usage": tool_usage,
            "total_duration_ms": self.total_duration_ms,
            "avg_model_round_ms": sum(model_durations) / len(model_durations) if model_durations else None,
        }

    def to_dict(self) -> dict:
        return {
            "agent_name": self.agent_name,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "success": self.success,
            "final_error": self.final_error,
            "final_state": self.final_state.value if self.final_state else None,
            "input_summary": self.input_summary,
            "output_summary": self.output_summary,
            "statistics": self.get_statistics(),
            "steps": [step.to_dict() for step in self.steps]
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert trajectory to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def __repr__(self) -> str:
        status = "SUCCESS" if self.success else "FAILED"
        return f"<Trajectory: {self.agent_name} [{status}] {self.round_count} rounds, {self.tool_call_count} tool calls>"


class TrajectoryLogger:
    """
    Helper for recording a trajectory while the agent loop runs.

    Usage:
        logger = TrajectoryLogger("TransformAgent")

        step = logger.start_model_round(1, message_count=2)
        reply = await provider.complete(...)
        logger.complete_step(step, "2 tool call(s) requested")

        trajectory = logger.get_trajectory()
    """

    def __init__(self, agent_name: str, input_summary: str = None):
        self.trajectory = Trajectory(agent_name=agent_name, input_summary=input_summary)

    def start_model_round(self, round_number: int, message_count: int) -> TrajectoryStep:
        step = self.trajectory.add_step(
            step_name=f"Model Round {round_number}",
            kind=StepKind.MODEL,
            round_number=round_number,
            input_summary=f"{message_count} message(s) in context"
        )
        step.start()
        return step

    def start_tool_call(
        self,
        round_number: int,
        tool_name: str,
        tool_call_id: str,
        input_summary: str = None
    ) -> TrajectoryStep:
        step = self.trajectory.add_step(
            step_name=f"Tool Call ({tool_name})",
            kind=StepKind.TOOL,
            round_number=round_number,
            input_summary=input_summary,
            tool_name=tool_name,
            tool_call_id=tool_call_id
        )
        step.start()
        return step

    def start_emit(self, round_number: int, input_summary: str = None) -> TrajectoryStep:
        step = self.trajectory.add_step(
            step_name="Parse Final Answer",
            kind=StepKind.EMIT,
            round_number=round_number,
            input_summary=input_summary
        )
        step.start()
        return step

    def complete_step(self, step: TrajectoryStep, output_summary: str = None, **metadata):
        step.complete(output_summary, **metadata)

    def fail_step(self, step: TrajectoryStep, error: str, error_type: str = None):
        step.fail(error, error_type)

    def set_state(self, state: AgentState):
        self.trajectory.final_state = state

    def complete(self, success: bool = True, error: str = None, output_summary: str = None):
        self.trajectory.complete(success, error, output_summary)

    def get_trajectory(self) -> Trajectory:
        return self.trajectory
