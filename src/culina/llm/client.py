"""
Culina - Completion Client.

Sends the recipe prompt to the completion gateway (an OpenAI-compatible
chat completions endpoint) and returns the raw completion text.

The SDK is configured with an explicit timeout and a bounded number of
retries; it backs off exponentially on connection errors, 408/409/429
and 5xx responses before an error reaches us.
"""

import logging

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from culina.config import Settings
from culina.errors import CompletionTimeoutError, CompletionTransportError, UpstreamError
from culina.llm.prompt_logger import enable_prompt_logging, log_prompt
from culina.prompts.recipe import build_messages

logger = logging.getLogger(__name__)


class CompletionClient:
    """Single request/response exchange with the completion gateway."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        self._model = settings.ai_model
        self._client = client or AsyncOpenAI(
            api_key=settings.ai_gateway_api_key,
            base_url=settings.ai_gateway_url,
            timeout=settings.completion_timeout_seconds,
            max_retries=settings.completion_max_retries,
        )
        if settings.culina_log_prompts:
            enable_prompt_logging(True)

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Get the raw completion text for a system + user prompt pair.

        Raises:
            CompletionTimeoutError: no answer within the configured timeout
            CompletionTransportError: the gateway could not be reached
            UpstreamError: the gateway answered with a non-success status
        """
        messages = build_messages(system_prompt, user_prompt)

        logger.info(f"Calling completion gateway ({self._model})...")
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
            )
        except APITimeoutError as e:
            self._log(system_prompt, user_prompt, error=f"timeout: {e}")
            logger.error(f"Completion gateway timed out: {e}")
            raise CompletionTimeoutError("Completion gateway timed out") from e
        except APIConnectionError as e:
            self._log(system_prompt, user_prompt, error=f"connection: {e}")
            logger.error(f"Completion gateway unreachable: {e}")
            raise CompletionTransportError("Completion gateway unreachable") from e
        except APIStatusError as e:
            body = e.response.text if e.response is not None else None
            self._log(system_prompt, user_prompt, error=f"HTTP {e.status_code}: {body}")
            logger.error(f"AI API error: {e.status_code} {body}")
            raise UpstreamError(
                f"AI API error: {e.status_code}", status_code=e.status_code, body=body
            ) from e

        if not response.choices:
            self._log(system_prompt, user_prompt, error="no choices in response")
            logger.error("AI API returned no choices")
            raise UpstreamError("AI API returned no choices")

        content = response.choices[0].message.content or ""
        self._log(system_prompt, user_prompt, response_text=content)
        logger.debug(f"AI response: {content}")
        return content

    def _log(self, system_prompt: str, user_prompt: str, **result) -> None:
        log_prompt(
            name="generate_recipe",
            model=self._model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            **result,
        )
