"""
Perplexity LLM client for making AI calls.
"""
from dataclasses import dataclass
from typing import Any, Optional
import logging

import httpx
import openai
from openai import AsyncOpenAI

from stockwatch.core.config import (
    DEFAULT_LLM_MODEL,
    HTTP_TIMEOUT_SECONDS,
    PERPLEXITY_BASE_URL,
)
from stockwatch.core.exceptions import ParseFailure, RateLimitExceededError, UpstreamHttpError

logger = logging.getLogger(__name__)


@dataclass
class LLMResult:
    """Completion text plus the usage metadata needed for metering."""
    content: str
    model: str
    input_tokens: int
    output_tokens: int
    cost_usd: Optional[float]  # total request cost reported by the provider, if any


def _extract_cost(usage: Any) -> Optional[float]:
    """Pull usage.cost.total_cost out of a Perplexity usage block.

    The OpenAI SDK keeps unknown fields, so the provider specific "cost"
    object comes back in model_dump().
    """
    if usage is None:
        return None
    try:
        cost = usage.model_dump().get("cost")
    except AttributeError:
        return None
    if isinstance(cost, dict) and cost.get("total_cost") is not None:
        try:
            return float(cost["total_cost"])
        except (TypeError, ValueError):
            return None
    return None


class LLMClient:
    """Client for making LLM calls via Perplexity's OpenAI compatible API."""

    provider = "Perplexity"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = PERPLEXITY_BASE_URL,
        model: str = DEFAULT_LLM_MODEL,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        """Initialize Perplexity client.

        Args:
            api_key: Perplexity API key
            base_url: API base URL
            model: Model used when complete() is not given one
            http_client: Optional client (tests pass one with a mock transport)
            timeout: Request timeout in seconds when the client creates its own transport
        """
        if not api_key:
            raise ValueError(
                "Perplexity API key is required. Please set PERPLEXITY_API_KEY environment variable."
            )

        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

        # No automatic retries: a failure is surfaced immediately
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            http_client=self._http_client,
            max_retries=0,
        )
        self.default_model = model

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()

    async def complete(
        self,
        prompt: str,
        max_tokens: int = 3000,
        temperature: float = 0.2,
        model: Optional[str] = None,
    ) -> LLMResult:
        """Send a single user prompt and return the completion.

        Args:
            prompt: User message
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            model: Model to use (defaults to DEFAULT_LLM_MODEL)

        Raises:
            RateLimitExceededError: provider answered 429
            UpstreamHttpError: any other status or connection failure
            ParseFailure: completion without choices or content
        """
        model = model or self.default_model

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=temperature,
                stream=False,
            )
        except openai.RateLimitError as e:
            logger.error(f"llm_call_rate_limited: model={model}")
            raise RateLimitExceededError(self.provider) from e
        except openai.APIStatusError as e:
            logger.error(f"llm_call_failed: model={model}, status={e.status_code}, error={e}")
            raise UpstreamHttpError(self.provider, e.status_code, str(e)) from e
        except openai.APIConnectionError as e:
            logger.error(f"llm_call_failed: model={model}, error_type={type(e).__name__}, error={e}")
            raise UpstreamHttpError(self.provider, None, str(e)) from e

        if not response.choices:
            raise ParseFailure(f"No response from {self.provider} API")

        content = response.choices[0].message.content
        if not content:
            raise ParseFailure(f"Empty response from {self.provider} API")

        usage = response.usage
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        cost_usd = _extract_cost(usage)

        logger.info(
            f"llm_call_completed: model={model}, input_tokens={input_tokens}, output_tokens={output_tokens}, cost_usd={cost_usd}"
        )

        return LLMResult(
            content=content,
            model=getattr(response, "model", None) or model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=cost_usd,
        )
