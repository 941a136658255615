"""Provider registry."""

from __future__ import annotations

from ..config import AppConfig
from .base import ProviderRegistry
from .claude import ClaudeProvider
from .dryrun import DryRunProvider


def default_registry(config: AppConfig | None = None) -> ProviderRegistry:
    return ProviderRegistry(
        [
            ClaudeProvider(config),
            DryRunProvider(),
        ]
    )
