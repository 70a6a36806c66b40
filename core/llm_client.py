"""
LLM completion client with retry logic.

OpenAI is the primary provider; Anthropic Claude is used when only an
Anthropic key is configured or when the OpenAI call fails.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
import anthropic
from anthropic import (
    APIError as AnthropicAPIError,
    RateLimitError as AnthropicRateLimitError,
    APITimeoutError as AnthropicAPITimeoutError,
    APIConnectionError as AnthropicAPIConnectionError,
)
from openai import OpenAI, APIError, RateLimitError, APITimeoutError, APIConnectionError, BadRequestError

logger = logging.getLogger(__name__)


class LLMServiceError(Exception):
    """Raised when no configured provider produced a completion."""
    pass


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((RateLimitError, APITimeoutError, APIConnectionError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True
)
def _call_openai_with_retry(client: OpenAI, **request_kwargs):
    return client.chat.completions.create(**request_kwargs)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((AnthropicRateLimitError, AnthropicAPITimeoutError, AnthropicAPIConnectionError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True
)
def _call_anthropic_with_retry(client: "anthropic.Anthropic", **request_kwargs):
    return client.messages.create(**request_kwargs)


def _split_system(messages: List[Dict[str, str]]) -> Tuple[str, List[Dict[str, str]]]:
    """Anthropic takes the system prompt as a separate argument."""
    system_parts = [m["content"] for m in messages if m.get("role") == "system"]
    rest = [
        {"role": m["role"], "content": m["content"]}
        for m in messages
        if m.get("role") in ("user", "assistant")
    ]
    return "\n\n".join(system_parts), rest


class LLMClient:
    """
    Chat completion wrapper over OpenAI and Anthropic.

    Built once at startup and shared through ``app.state``.
    """

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        openai_model: str = "o3-mini",
        claude_model: str = "claude-3-5-sonnet-20241022",
    ):
        self.openai_model = openai_model
        self.claude_model = claude_model
        self.openai_client = OpenAI(api_key=openai_api_key) if openai_api_key else None
        self.anthropic_client = anthropic.Anthropic(api_key=anthropic_api_key) if anthropic_api_key else None

    @classmethod
    def from_settings(cls, settings) -> "LLMClient":
        return cls(
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            openai_model=settings.openai_model,
            claude_model=settings.claude_model,
        )

    @property
    def is_configured(self) -> bool:
        return self.openai_client is not None or self.anthropic_client is not None

    @property
    def provider_names(self) -> List[str]:
        names = []
        if self.openai_client is not None:
            names.append("openai")
        if self.anthropic_client is not None:
            names.append("anthropic")
        return names

    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
        timeout: float = 60.0
    ) -> str:
        """
        Create a chat completion.

        Args:
            messages: List of message dictionaries with 'role' and 'content'
            model: OpenAI model override (defaults to the configured model)
            temperature: Sampling temperature
            max_tokens: Maximum completion tokens in response
            timeout: Request timeout in seconds

        Returns:
            Response content as string

        Raises:
            LLMServiceError: If every configured provider failed
        """
        if not self.is_configured:
            raise LLMServiceError("No LLM provider configured")

        errors = []

        if self.openai_client is not None:
            try:
                return self._openai_completion(messages, model or self.openai_model, temperature, max_tokens, timeout)
            except LLMServiceError as e:
                errors.append(str(e))
                if self.anthropic_client is not None:
                    logger.warning(f"⚠ OpenAI completion failed, trying Claude: {e}")

        if self.anthropic_client is not None:
            try:
                return self._anthropic_completion(messages, temperature, max_tokens, timeout)
            except LLMServiceError as e:
                errors.append(str(e))

        raise LLMServiceError("; ".join(errors))

    def _openai_completion(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> str:
        request_kwargs: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_completion_tokens": max_tokens,
            "timeout": timeout,
        }

        try:
            try:
                response = _call_openai_with_retry(self.openai_client, **request_kwargs)
            except BadRequestError as e:
                # Reasoning models reject a custom temperature
                if "temperature" not in str(e).lower():
                    raise
                logger.warning(f"Model {model} rejected temperature {temperature}; retrying with default temperature.")
                request_kwargs.pop("temperature", None)
                response = _call_openai_with_retry(self.openai_client, **request_kwargs)

            content = response.choices[0].message.content
            if not content:
                raise LLMServiceError("Empty response from OpenAI")
            return content.strip()

        except RateLimitError as e:
            logger.error(f"OpenAI rate limit exceeded: {e}")
            raise LLMServiceError(f"Rate limit exceeded: {e}")

        except APITimeoutError as e:
            logger.error(f"OpenAI API timeout: {e}")
            raise LLMServiceError(f"API timeout: {e}")

        except APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMServiceError(f"API error: {e}")

        except LLMServiceError:
            raise

        except Exception as e:
            logger.error(f"Unexpected error in OpenAI completion: {e}")
            raise LLMServiceError(f"Unexpected error: {e}")

    def _anthropic_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> str:
        system_prompt, conversation = _split_system(messages)
        try:
            response = _call_anthropic_with_retry(
                self.anthropic_client,
                model=self.claude_model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=conversation,
                timeout=timeout,
            )
        except (AnthropicRateLimitError, AnthropicAPITimeoutError, AnthropicAPIConnectionError) as e:
            logger.error(f"Claude API call failed after retries: {e}")
            raise LLMServiceError(f"Claude unavailable: {e}")
        except AnthropicAPIError as e:
            logger.error(f"Claude API error: {e}")
            raise LLMServiceError(f"Claude API error: {e}")
        except Exception as e:
            logger.error(f"Unexpected error in Claude completion: {e}")
            raise LLMServiceError(f"Unexpected error: {e}")

        text = "".join(
            block.text for block in (response.content or []) if getattr(block, "type", "") == "text"
        ).strip()
        if not text:
            raise LLMServiceError("Empty response from Claude")
        return text
