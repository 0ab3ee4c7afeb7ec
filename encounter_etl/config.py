from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration with environment variable support"""

    # App
    app_name: str = "Encounter ETL"
    debug: bool = False
    log_level: str = "INFO"

    # LLM Configuration (REQUIRED - set in .env)
    llm_provider: str = "openai"  # 'openai' or 'anthropic'
    llm_model: str = "gpt-4o"
    llm_api_key: str = ""  # Required: OpenAI or Anthropic API key
    llm_organization: Optional[str] = None  # OpenAI organization, optional

    # FHIR $validate service
    validator_url: str = "https://inferno.healthit.gov/validatorapi/validate"
    target_profile: str = "http://hl7.org/fhir/us/core/StructureDefinition/us-core-encounter"
    structure_definition_path: Optional[str] = None  # Defaults to the bundled US Core profile

    # Agent loop
    max_rounds: int = 10
    request_timeout: float = 60.0  # Seconds, per network call

    # Output artifact
    output_path: str = "out.json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Settings for entry points (CLI, API). Library code takes a Settings argument."""
    return Settings()
