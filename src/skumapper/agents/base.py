"""Base agent with common dependency wiring and lifecycle patterns."""

from __future__ import annotations

from typing import Any

from skumapper.core.config import AppSettings
from skumapper.core.protocols import ILearningStore, IModelProvider


class BaseAgent:
    """Common base for SKU mapper agents.

    Provides the shared dependency injection pattern: settings, the optional
    reasoning-service provider and the learning store are injected at
    construction time. Agents are built once at process start and passed
    by reference to whatever invokes them.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        model: IModelProvider | None,
        learning_store: ILearningStore,
    ) -> None:
        self._settings = settings
        self._model = model
        self._learning_store = learning_store

    async def health_check(self) -> dict[str, Any]:
        """Return agent health status."""
        return {
            "agent": self.__class__.__name__,
            "status": "healthy",
            "environment": self._settings.environment,
            "external_service": self._model is not None and self._model.is_available(),
        }
