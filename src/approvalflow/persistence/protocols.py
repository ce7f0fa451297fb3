"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from approvalflow.core.protocols import ICacheBackend, IStore

__all__ = ["ICacheBackend", "IStore"]
