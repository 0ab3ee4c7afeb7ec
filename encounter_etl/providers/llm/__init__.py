"""Chat completion providers module"""
from .base import ChatProvider
from .factory import LLMFactory
from .openai import OpenAIProvider
from .anthropic import AnthropicProvider

__all__ = [
    "ChatProvider",
    "LLMFactory",
    "OpenAIProvider",
    "AnthropicProvider",
]
