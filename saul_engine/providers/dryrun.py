"""Dry-run text provider (offline)."""

from __future__ import annotations

import asyncio
import hashlib
from typing import AsyncIterator

from ..pricing.estimator import PricingEstimator, format_cost_usd
from .base import Message, StreamEvent


class DryRunProvider:
    name = "dryrun"
    model = "dryrun"

    def __init__(self, chunk_size: int = 24, delay_s: float = 0.0) -> None:
        self.chunk_size = max(1, chunk_size)
        self.delay_s = delay_s
        self._pricing = PricingEstimator(
            {"dryrun": {"input_per_million_usd": 0.0, "output_per_million_usd": 0.0}}
        )

    async def stream_completion(
        self,
        messages: list[Message],
        max_tokens: int | None = None,
    ) -> AsyncIterator[StreamEvent]:
        prompt = _prompt_text(messages)
        # Only the filename exchange sets its own token ceiling.
        reply = _filename_reply(prompt) if max_tokens is not None else _svg_reply(prompt)
        input_tokens = max(1, len(prompt) // 4)
        output_tokens = 0
        for start in range(0, len(reply), self.chunk_size):
            chunk = reply[start : start + self.chunk_size]
            if self.delay_s:
                await asyncio.sleep(self.delay_s)
            yield StreamEvent.text_chunk(chunk)
            output_tokens += max(1, len(chunk) // 4)
            yield StreamEvent.usage(input_tokens, output_tokens)
        yield StreamEvent.usage(input_tokens, output_tokens)

    async def aclose(self) -> None:
        return None

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> str:
        return format_cost_usd(self._pricing.estimate_text_cost("dryrun", input_tokens, output_tokens))


def _prompt_text(messages: list[Message]) -> str:
    texts: list[str] = []
    for message in messages:
        if isinstance(message.content, str):
            texts.append(message.content)
            continue
        texts.extend(getattr(part, "text", "") for part in message.content)
    return "\n".join(texts)


def _color_from_prompt(prompt: str) -> str:
    digest = hashlib.sha256(prompt.encode("utf-8")).digest()
    return f"#{digest[0]:02x}{digest[1]:02x}{digest[2]:02x}"


def _svg_reply(prompt: str) -> str:
    color = _color_from_prompt(prompt)
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 256 256" width="256" height="256">'
        f'<rect width="256" height="256" fill="{color}"/>'
        '<circle cx="128" cy="128" r="64" fill="#ffffff" opacity="0.8"/>'
        "</svg>"
    )


def _filename_reply(prompt: str) -> str:
    return f"dryrun-{_color_from_prompt(prompt)[1:]}"
