"""OpenAI-compatible model provider routed through a LiteLLM proxy.

Estimates spend before each call and refuses calls whose estimate exceeds the
caller's ceiling; actual spend is computed from the usage the proxy reports.
A caller-supplied ``timeout`` bounds the whole call, retries and backoff included.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import openai

from skumapper.core.config import LLMConfig
from skumapper.core.exceptions import CostBudgetExceeded, ExternalServiceError
from skumapper.model_providers.pricing import calculate_cost, estimate_tokens
from skumapper.models.llm import Completion

logger = logging.getLogger(__name__)


class LiteLLMModelProvider:
    """Production IModelProvider backed by the OpenAI SDK."""

    def __init__(self, config: LLMConfig, client: Any = None) -> None:
        self._config = config
        self._client = client
        if self._client is None and config.api_key:
            self._client = openai.OpenAI(
                api_key=config.api_key,
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=0,
            )

    def is_available(self) -> bool:
        return self._client is not None

    def _cost(self, prompt_tokens: int, completion_tokens: int) -> float:
        return calculate_cost(
            prompt_tokens,
            completion_tokens,
            self._config.input_price_per_1m,
            self._config.output_price_per_1m,
        )

    def complete(
        self, messages: list[dict[str, str]], *, cost_limit: float, **kwargs: Any
    ) -> Completion:
        if not self.is_available():
            raise ExternalServiceError("Reasoning service API key not configured")

        max_tokens = kwargs.pop("max_tokens", self._config.max_tokens)
        temperature = kwargs.pop("temperature", self._config.temperature)
        timeout = kwargs.pop("timeout", None)
        prompt_text = " ".join(m.get("content", "") for m in messages)
        estimated = self._cost(estimate_tokens(prompt_text), max_tokens)
        if estimated > cost_limit:
            raise CostBudgetExceeded(estimated, cost_limit)

        deadline = time.monotonic() + timeout if timeout is not None else None
        last_error = "deadline reached before the first attempt"
        for attempt in range(self._config.retries + 1):
            attempt_timeout = float(self._config.timeout)
            if deadline is not None:
                attempt_timeout = min(attempt_timeout, deadline - time.monotonic())
                if attempt_timeout <= 0:
                    break
            try:
                response = self._client.chat.completions.create(
                    model=self._config.model,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    timeout=attempt_timeout,
                    **kwargs,
                )
            except openai.APIStatusError as exc:
                last_error = f"HTTP {exc.status_code}: {exc.message}"
                if 400 <= exc.status_code < 500:
                    break
            except openai.APIError as exc:
                last_error = str(exc)
            else:
                usage = response.usage
                prompt_tokens = usage.prompt_tokens if usage else 0
                completion_tokens = usage.completion_tokens if usage else 0
                return Completion(
                    content=response.choices[0].message.content or "",
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens,
                    cost=self._cost(prompt_tokens, completion_tokens),
                )

            if attempt < self._config.retries:
                backoff = 2 ** attempt
                if deadline is not None and time.monotonic() + backoff >= deadline:
                    break
                logger.info("Reasoning service call failed (%s); retrying in %ss", last_error, backoff)
                time.sleep(backoff)

        raise ExternalServiceError(f"Reasoning service request failed: {last_error}")
