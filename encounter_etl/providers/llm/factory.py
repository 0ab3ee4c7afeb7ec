from .base import ChatProvider
from .openai import OpenAIProvider
from .anthropic import AnthropicProvider
from encounter_etl.config import Settings

class LLMFactory:
    """Factory for creating chat providers from configuration"""

    @staticmethod
    def create(settings: Settings, model: str = None) -> ChatProvider:
        """
        Create chat provider based on settings.

        Args:
            settings: Run configuration
            model: Optional model override. If None, uses settings.llm_model

        Raises:
            ValueError: If provider not supported or model not configured
        """
        provider = settings.llm_provider.lower()
        model_name = model or settings.llm_model

        if not model_name:
            raise ValueError("LLM_MODEL not configured. Set it in .env (e.g., 'gpt-4o' for OpenAI)")

        if not settings.llm_api_key:
            raise ValueError("LLM_API_KEY not configured. Set it in .env")

        if provider == "openai":
            return OpenAIProvider(
                api_key=settings.llm_api_key,
                model=model_name,
                organization=settings.llm_organization,
                timeout=settings.request_timeout
            )
        elif provider == "anthropic":
            return AnthropicProvider(
                api_key=settings.llm_api_key,
                model=model_name,
                timeout=settings.request_timeout
            )
        else:
            raise ValueError(f"Unsupported LLM provider: {provider}")
