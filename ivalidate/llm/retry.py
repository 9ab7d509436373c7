"""Bounded retries for provider overload."""

import structlog
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ivalidate.config.settings import Settings, get_settings
from ivalidate.errors import ProviderOverloadError, ServiceUnavailableError
from ivalidate.llm.client import GenerativeTextProvider

logger = structlog.get_logger(__name__)


async def generate_with_retry(
    provider: GenerativeTextProvider,
    prompt: str,
    context: str = "generate",
    settings: Settings | None = None,
) -> str:
    """Call the provider, retrying only on overload.

    Args:
        provider: Generative-text provider.
        prompt: Fully rendered prompt.
        context: Name used in log events.
        settings: Retry configuration. Uses cached settings if not provided.

    Returns:
        Provider text.

    Raises:
        ServiceUnavailableError: Provider stayed overloaded for every attempt.
    """
    settings = settings or get_settings()
    max_attempts = max(1, settings.provider_max_attempts)

    retrying = AsyncRetrying(
        retry=retry_if_exception_type(ProviderOverloadError),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=settings.provider_backoff_seconds,
            min=0,
            max=settings.provider_backoff_max_seconds,
        ),
        before_sleep=lambda state: logger.warning(
            f"{context}_provider_overloaded_retrying",
            attempt=state.attempt_number,
            max_attempts=max_attempts,
        ),
    )

    try:
        async for attempt in retrying:
            with attempt:
                return await provider.generate(prompt)
    except RetryError as e:
        last = e.last_attempt.exception()
        logger.error(f"{context}_provider_unavailable", attempts=max_attempts, error=str(last))
        raise ServiceUnavailableError(
            f"Generative-text provider overloaded after {max_attempts} attempts",
            attempts=max_attempts,
        ) from last

    raise ServiceUnavailableError("Generative-text provider produced no attempt")
