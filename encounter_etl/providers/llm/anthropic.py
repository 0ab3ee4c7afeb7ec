import json
from typing import Any, Dict, List, Sequence, Tuple

from anthropic import AsyncAnthropic
from .base import ChatProvider
from tenacity import retry, stop_after_attempt, wait_exponential
from encounter_etl.agent.models import Message, Role, ToolCallRequest, ToolDescriptor

JSON_ONLY_INSTRUCTION = "Respond with a single JSON object and no other text."

class AnthropicProvider(ChatProvider):
    """Anthropic messages provider with tool use and automatic retries"""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5",
        timeout: float = 60.0,
        max_tokens: int = 4096
    ):
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout)
        self.model = model
        self.max_tokens = max_tokens

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(min=1, max=10), reraise=True)
    async def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDescriptor],
        json_output: bool = True
    ) -> Message:
        """Request one assistant turn via the Messages API"""
        system, chat = self._split_messages(messages)
        if json_output:
            # No response_format equivalent; the constraint goes in the system prompt
            system = f"{system}\n\n{JSON_ONLY_INSTRUCTION}" if system else JSON_ONLY_INSTRUCTION

        kwargs: Dict[str, Any] = {}
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = [self._to_tool_param(t) for t in tools]

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=chat,
            **kwargs
        )
        return self._from_response(response)

    def get_provider_name(self) -> str:
        return "anthropic"

    def get_model_name(self) -> str:
        return self.model

    @staticmethod
    def _split_messages(messages: Sequence[Message]) -> Tuple[str, List[Dict[str, Any]]]:
        """
        Translate Messages into (system prompt, Anthropic message list).

        Consecutive tool results are folded into a single user turn of
        tool_result blocks, which is how the Messages API expects them.
        """
        system_parts: List[str] = []
        chat: List[Dict[str, Any]] = []

        for message in messages:
            if message.role == Role.SYSTEM:
                system_parts.append(message.content or "")
            elif message.role == Role.TOOL:
                block = {
                    "type": "tool_result",
                    "tool_use_id": message.tool_call_id,
                    "content": message.content or "",
                }
                previous = chat[-1] if chat else None
                if (
                    previous is not None
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                    and all(b.get("type") == "tool_result" for b in previous["content"])
                ):
                    previous["content"].append(block)
                else:
                    chat.append({"role": "user", "content": [block]})
            elif message.role == Role.ASSISTANT:
                blocks: List[Dict[str, Any]] = []
                if message.content:
                    blocks.append({"type": "text", "text": message.content})
                for call in message.tool_calls:
                    blocks.append({
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.tool_name,
                        "input": json.loads(call.arguments) if call.arguments else {},
                    })
                chat.append({"role": "assistant", "content": blocks})
            else:
                chat.append({"role": "user", "content": message.content or ""})

        return "\n\n".join(p for p in system_parts if p), chat

    @staticmethod
    def _to_tool_param(tool: ToolDescriptor) -> Dict[str, Any]:
        return {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.parameters or {"type": "object", "properties": {}},
        }

    @staticmethod
    def _from_response(response: Any) -> Message:
        texts: List[str] = []
        tool_calls: List[ToolCallRequest] = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCallRequest(
                    id=block.id,
                    tool_name=block.name,
                    arguments=json.dumps(block.input)
                ))
        content = "".join(texts) if texts else None
        return Message.assistant(content=content, tool_calls=tool_calls)
