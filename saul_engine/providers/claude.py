"""Anthropic Claude text/vision provider."""

from __future__ import annotations

from typing import Any, AsyncIterator, Callable

import anthropic

from ..config import MODEL, AppConfig, resolve_config
from ..pricing.estimator import PricingEstimator, format_cost_usd
from .base import Message, StreamEvent


class ClaudeProvider:
    name = "claude"

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        config_resolver: Callable[[], AppConfig] = resolve_config,
        client_factory: Callable[..., Any] | None = None,
        pricing: PricingEstimator | None = None,
    ) -> None:
        self._config = config
        self._config_resolver = config_resolver
        self._client_factory = client_factory or anthropic.AsyncAnthropic
        self._client: Any | None = None
        self._pricing = pricing

    @property
    def model(self) -> str:
        return self._config.model if self._config else MODEL

    def _ensure_config(self) -> AppConfig:
        if self._config is None:
            self._config = self._config_resolver()
        return self._config

    def _ensure_client(self) -> Any:
        if self._client is None:
            config = self._ensure_config()
            self._client = self._client_factory(api_key=config.api_key)
        return self._client

    async def stream_completion(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
    ) -> AsyncIterator[StreamEvent]:
        client = self._ensure_client()
        config = self._ensure_config()
        stream = await client.messages.create(
            model=config.model,
            max_tokens=max_tokens or config.max_tokens,
            stream=True,
            messages=[message.to_wire() for message in messages],
        )

        input_tokens = 0
        output_tokens = 0
        async for event in stream:
            event_type = getattr(event, "type", None)
            if event_type == "content_block_delta":
                delta = event.delta
                if getattr(delta, "type", None) == "text_delta":
                    yield StreamEvent.text_chunk(delta.text)
            elif event_type == "message_start":
                input_tokens = event.message.usage.input_tokens
            elif event_type == "message_delta":
                output_tokens = event.usage.output_tokens
                yield StreamEvent.usage(input_tokens, output_tokens)

        # Always close with the totals, even if message_delta just reported them.
        yield StreamEvent.usage(input_tokens, output_tokens)

    async def aclose(self) -> None:
        """Close the pooled HTTP client on the loop that opened it."""
        if self._client is None:
            return
        client, self._client = self._client, None
        await client.close()

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> str:
        if self._pricing is None:
            self._pricing = PricingEstimator()
        return format_cost_usd(self._pricing.estimate_text_cost(self.model, input_tokens, output_tokens))
