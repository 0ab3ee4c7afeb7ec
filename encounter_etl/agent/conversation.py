"""
Conversation - append-only message log for a single transform run.

The full log is sent to the model on every round, so it is never
rewound or edited. Appends are checked so that every tool message
answers exactly one outstanding call of the assistant turn before it.
"""
from typing import Iterable, Iterator, List, Optional, Tuple

from encounter_etl.agent.exceptions import ConversationError
from encounter_etl.agent.models import Message, Role


class Conversation:
    """Ordered, append-only sequence of Messages."""

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: List[Message] = []
        for message in messages:
            self.append(message)

    def append(self, message: Message) -> None:
        """
        Append a message.

        Raises:
            ConversationError: If a tool message does not correlate to an
                unanswered call of the preceding assistant message
        """
        if message.role == Role.TOOL:
            outstanding = self.outstanding_tool_call_ids()
            if message.tool_call_id not in outstanding:
                raise ConversationError(
                    f"Tool result '{message.tool_call_id}' does not match an outstanding "
                    f"tool call (outstanding: {list(outstanding) or 'none'})"
                )
        self._messages.append(message)

    def outstanding_tool_call_ids(self) -> Tuple[str, ...]:
        """IDs requested by the latest assistant turn that have no tool result yet."""
        answered = set()
        for message in reversed(self._messages):
            if message.role == Role.TOOL:
                answered.add(message.tool_call_id)
                continue
            if message.role == Role.ASSISTANT:
                return tuple(c.id for c in message.tool_calls if c.id not in answered)
            break
        return ()

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Snapshot of the log; callers cannot mutate the conversation through it."""
        return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:
        return f"<Conversation: {len(self._messages)} messages>"
