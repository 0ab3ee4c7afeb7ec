from typing import Any, Dict, Optional, Sequence

from openai import AsyncOpenAI
from .base import ChatProvider
from tenacity import retry, stop_after_attempt, wait_exponential
from encounter_etl.agent.models import Message, Role, ToolCallRequest, ToolDescriptor

class OpenAIProvider(ChatProvider):
    """OpenAI chat completions provider with tool calling and automatic retries"""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        organization: Optional[str] = None,
        timeout: float = 60.0
    ):
        self.client = AsyncOpenAI(api_key=api_key, organization=organization, timeout=timeout)
        self.model = model

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(min=1, max=10), reraise=True)
    async def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDescriptor],
        json_output: bool = True
    ) -> Message:
        """Request one assistant turn with automatic retries"""
        kwargs: Dict[str, Any] = {}
        if tools:
            kwargs["tools"] = [self._to_tool_param(t) for t in tools]
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[self._to_message_param(m) for m in messages],
            **kwargs
        )
        return self._from_response_message(completion.choices[0].message)

    def get_provider_name(self) -> str:
        return "openai"

    def get_model_name(self) -> str:
        return self.model

    @staticmethod
    def _to_message_param(message: Message) -> Dict[str, Any]:
        """Translate a Message into an OpenAI chat message dict"""
        if message.role == Role.TOOL:
            return {
                "role": "tool",
                "tool_call_id": message.tool_call_id,
                "content": message.content or "",
            }
        param: Dict[str, Any] = {"role": message.role.value, "content": message.content}
        if message.tool_calls:
            param["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.tool_name, "arguments": call.arguments},
                }
                for call in message.tool_calls
            ]
        return param

    @staticmethod
    def _to_tool_param(tool: ToolDescriptor) -> Dict[str, Any]:
        function: Dict[str, Any] = {"name": tool.name, "description": tool.description}
        if tool.parameters:
            function["parameters"] = tool.parameters
        return {"type": "function", "function": function}

    @staticmethod
    def _from_response_message(message: Any) -> Message:
        tool_calls = [
            ToolCallRequest(
                id=call.id,
                tool_name=call.function.name,
                arguments=call.function.arguments or ""
            )
            for call in (message.tool_calls or [])
        ]
        return Message.assistant(content=message.content, tool_calls=tool_calls)
