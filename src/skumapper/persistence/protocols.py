"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from skumapper.core.protocols import ICacheBackend, ILearningStore

__all__ = ["ICacheBackend", "ILearningStore"]
