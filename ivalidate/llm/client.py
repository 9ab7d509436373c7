"""Generative-text provider backed by Ollama."""

from functools import lru_cache
from typing import Protocol, runtime_checkable

import structlog
from langchain_ollama import OllamaLLM
from pydantic_settings import BaseSettings, SettingsConfigDict

from ivalidate.errors import ProviderOverloadError

logger = structlog.get_logger(__name__)

# Substrings of upstream error messages that mean "try again later"
OVERLOAD_MARKERS = (
    "overloaded",
    "503",
    "429",
    "rate limit",
    "too many requests",
    "resource exhausted",
    "server busy",
)


class LLMSettings(BaseSettings):
    """LLM configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
    )

    ollama_base_url: str = "http://localhost:11434"
    model_name: str = "gpt-oss:20b"
    temperature: float = 0.0
    request_timeout: int = 120
    num_ctx: int = 8192
    num_predict: int = 4096  # Max tokens to generate


@lru_cache
def get_llm_settings() -> LLMSettings:
    """Get cached LLM settings."""
    return LLMSettings()


def create_llm_client(settings: LLMSettings | None = None) -> OllamaLLM:
    """Create configured Ollama LLM client.

    Args:
        settings: Optional custom settings. Uses defaults if not provided.

    Returns:
        Configured OllamaLLM instance.
    """
    settings = settings or get_llm_settings()

    return OllamaLLM(
        model=settings.model_name,
        base_url=settings.ollama_base_url,
        temperature=settings.temperature,
        timeout=settings.request_timeout,
        num_ctx=settings.num_ctx,
        num_predict=settings.num_predict,
    )


@runtime_checkable
class GenerativeTextProvider(Protocol):
    """Anything that turns a prompt into text."""

    async def generate(self, prompt: str) -> str:
        ...


def is_overload_error(error: BaseException) -> bool:
    """Whether an upstream error signals transient capacity problems."""
    if isinstance(error, ProviderOverloadError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in OVERLOAD_MARKERS)


class OllamaTextProvider:
    """GenerativeTextProvider over a LangChain Ollama client."""

    def __init__(self, llm: OllamaLLM | None = None, settings: LLMSettings | None = None):
        self.settings = settings or get_llm_settings()
        self.llm = llm or create_llm_client(self.settings)

    @property
    def name(self) -> str:
        return f"ollama:{self.settings.model_name}"

    async def generate(self, prompt: str) -> str:
        """Generate text for a prompt.

        Raises:
            ProviderOverloadError: The upstream reported overload or rate limiting.
        """
        try:
            response = await self.llm.ainvoke(prompt)
        except Exception as e:
            if is_overload_error(e):
                raise ProviderOverloadError(str(e)) from e
            raise

        text = response if isinstance(response, str) else str(response)
        logger.debug("llm_generate_complete", model=self.settings.model_name, length=len(text))
        return text
