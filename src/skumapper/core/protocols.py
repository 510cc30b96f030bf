"""Protocol interfaces for the SKU mapper's collaborators.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from skumapper.models.learning import LearningCacheEntry
    from skumapper.models.llm import Completion


# ---------------------------------------------------------------------------
# Model Provider (external reasoning service)
# ---------------------------------------------------------------------------

@runtime_checkable
class IModelProvider(Protocol):
    """Abstraction over reasoning-service clients (mock, LiteLLM proxy)."""

    def is_available(self) -> bool: ...

    def complete(
        self, messages: list[dict[str, str]], *, cost_limit: float, **kwargs: Any
    ) -> Completion: ...


# ---------------------------------------------------------------------------
# Persistence: Learning Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ILearningStore(Protocol):
    """Persisted source-pattern -> target-field associations."""

    def read_top_entries(self, limit: int) -> list[LearningCacheEntry]: ...

    def read_recent_entries(self, limit: int) -> list[LearningCacheEntry]: ...

    def get_entry(self, pattern: str) -> LearningCacheEntry | None: ...

    def upsert_entry(
        self,
        pattern: str,
        target_field: str,
        confidence: int,
        strategy: str,
        metadata: dict[str, Any] | None = None,
    ) -> LearningCacheEntry: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...
