from abc import ABC, abstractmethod
from typing import Sequence

from encounter_etl.agent.models import Message, ToolDescriptor

class ChatProvider(ABC):
    """Abstract base class for tool-calling chat providers"""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDescriptor],
        json_output: bool = True
    ) -> Message:
        """Send the whole conversation and return the assistant's reply"""
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return provider identifier"""
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Return model name"""
        pass
