"""Mock model provider for local development and testing.

Returns canned responses. No real LLM calls.
"""

from __future__ import annotations

from typing import Any

from skumapper.core.exceptions import CostBudgetExceeded
from skumapper.models.llm import Completion


class MockModelProvider:
    """IModelProvider implementation that returns deterministic mock responses."""

    def __init__(self, default_response: str = "Mock LLM response", *,
                 available: bool = True, cost_per_call: float = 0.0) -> None:
        self._default_response = default_response
        self._canned_responses: dict[str, str] = {}
        self._available = available
        self._cost_per_call = cost_per_call
        self.calls: list[list[dict[str, str]]] = []
        self.call_options: list[dict[str, Any]] = []

    def set_response(self, prompt_contains: str, response: str) -> None:
        """Register a canned response for prompts containing a keyword."""
        self._canned_responses[prompt_contains] = response

    def is_available(self) -> bool:
        return self._available

    def complete(
        self, messages: list[dict[str, str]], *, cost_limit: float, **kwargs: Any
    ) -> Completion:
        if self._cost_per_call > cost_limit:
            raise CostBudgetExceeded(self._cost_per_call, cost_limit)
        self.calls.append(messages)
        self.call_options.append(kwargs)
        last_content = messages[-1].get("content", "") if messages else ""
        content = self._default_response
        for keyword, response in self._canned_responses.items():
            if keyword in last_content:
                content = response
                break
        return Completion(content=content, cost=self._cost_per_call)
