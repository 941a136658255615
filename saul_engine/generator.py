"""SVG generation, modification and auto-improvement over a streaming provider."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TextIO

from .cli_progress import elapsed_label
from .config import FILENAME_MAX_TOKENS
from .files import svg_to_png
from .preview import render_preview
from .providers.base import ImagePart, LLMProvider, Message, TextPart
from .runs.events import NullEventWriter
from .utils import ansi_dim, clean_svg_markup, sanitize_filename

DEFAULT_FILENAME = "svg"


class ProgressSink(Protocol):
    def start(self, text: str) -> None:
        ...

    def message(self, text: str) -> None:
        ...


@dataclass(frozen=True)
class GenerationResult:
    svg: str
    filename: str


@dataclass(frozen=True)
class StreamOutcome:
    text: str
    input_tokens: int
    output_tokens: int
    elapsed_s: float


def generation_prompt(description: str) -> str:
    return f"""Generate a complete, valid SVG image based on this description: "{description}".

Requirements:
1. Return ONLY the SVG markup, starting with <svg> and ending with </svg>
2. Include proper viewBox, width, and height attributes
3. Make the SVG visually appealing and accurate to the description
4. Use appropriate colors, shapes, and styling
5. Do not include any explanation or markdown code blocks, just the raw SVG

SVG:"""


def modification_prompt(current_svg: str, instruction: str) -> str:
    return f"""Here is the current SVG code for the image shown above:

{current_svg}

Please modify it according to this instruction: "{instruction}"

Return ONLY the modified SVG markup, starting with <svg> and ending with </svg>. Do not include any explanation or markdown code blocks.

Modified SVG:"""


def improvement_prompt(current_svg: str) -> str:
    return f"""Here is the current SVG code for the image shown above:

{current_svg}

Please analyze this SVG and automatically improve it. Consider:
- Visual appeal and aesthetics
- Color harmony and contrast
- Proper proportions and spacing
- Clean and efficient SVG code
- Overall quality and polish

Return ONLY the improved SVG markup, starting with <svg> and ending with </svg>. Do not include any explanation or markdown code blocks.

Improved SVG:"""


def filename_prompt(description: str) -> str:
    return (
        f'Given this image description: "{description}", provide a short, descriptive filename '
        "(2-4 words, lowercase, hyphens instead of spaces, no file extension). "
        "Just return the filename, nothing else."
    )


def _vision_message(png_bytes: bytes, text: str) -> Message:
    return Message(role="user", content=[ImagePart.from_bytes(png_bytes, "image/png"), TextPart(text)])


class SvgGenerator:
    def __init__(
        self,
        provider: LLMProvider,
        *,
        out: TextIO | None = None,
        rasterize: Callable[[str], bytes] = svg_to_png,
        show_preview: Callable[[bytes, TextIO], Any] | None = render_preview,
        events: Any | None = None,
        filename_max_tokens: int = FILENAME_MAX_TOKENS,
    ) -> None:
        self.provider = provider
        self.out = out or sys.stdout
        self.rasterize = rasterize
        self.show_preview = show_preview
        self.events = events or NullEventWriter()
        self.filename_max_tokens = filename_max_tokens

    async def generate(self, description: str, spinner: ProgressSink | None = None) -> GenerationResult:
        if spinner is not None:
            spinner.start("Generating SVG...")
        messages = [Message(role="user", content=generation_prompt(description))]
        svg = await self._run_exchange("generate", messages, "Generating SVG", spinner)
        filename = await self.suggest_filename(description)
        return GenerationResult(svg=svg, filename=filename)

    async def modify(
        self,
        current_svg: str,
        png_bytes: bytes,
        instruction: str,
        spinner: ProgressSink | None = None,
    ) -> str:
        messages = [_vision_message(png_bytes, modification_prompt(current_svg, instruction))]
        return await self._run_exchange("modify", messages, "Modifying SVG", spinner)

    async def auto_improve(
        self,
        current_svg: str,
        png_bytes: bytes,
        spinner: ProgressSink | None = None,
    ) -> str:
        messages = [_vision_message(png_bytes, improvement_prompt(current_svg))]
        return await self._run_exchange("auto_improve", messages, "Auto-improving SVG", spinner)

    async def suggest_filename(self, description: str) -> str:
        messages = [Message(role="user", content=filename_prompt(description))]
        outcome = await self._drain(messages, max_tokens=self.filename_max_tokens)
        self._print_usage(outcome, prefix=" ")
        filename = sanitize_filename(outcome.text)
        if filename.strip("-") == "":
            return DEFAULT_FILENAME
        return filename

    async def _run_exchange(
        self,
        action: str,
        messages: list[Message],
        label: str,
        spinner: ProgressSink | None,
    ) -> str:
        self.events.emit("generation_started", action=action)
        try:
            outcome = await self._drain(messages, label=label, spinner=spinner)
        except Exception as exc:
            self.events.emit("generation_failed", action=action, error=str(exc))
            raise
        svg = clean_svg_markup(outcome.text)
        self._preview(svg)
        cost = self._print_usage(outcome)
        self.events.emit(
            "generation_completed",
            action=action,
            input_tokens=outcome.input_tokens,
            output_tokens=outcome.output_tokens,
            cost=cost,
            elapsed_s=round(outcome.elapsed_s, 3),
        )
        return svg

    async def _drain(
        self,
        messages: list[Message],
        *,
        label: str | None = None,
        spinner: ProgressSink | None = None,
        max_tokens: int | None = None,
    ) -> StreamOutcome:
        start = time.monotonic()
        chunks: list[str] = []
        input_tokens = 0
        output_tokens = 0
        async for event in self.provider.stream_completion(messages, max_tokens=max_tokens):
            if event.kind == "text" and event.text:
                chunks.append(event.text)
            elif event.kind == "usage":
                # Usage events carry running totals; the last one wins.
                input_tokens = event.input_tokens or 0
                output_tokens = event.output_tokens or 0
                if spinner is not None and label:
                    spinner.message(elapsed_label(label, start, output_tokens))
        return StreamOutcome(
            text="".join(chunks),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            elapsed_s=time.monotonic() - start,
        )

    def _preview(self, svg: str) -> None:
        if self.show_preview is None:
            return
        try:
            png_bytes = self.rasterize(svg)
            self.show_preview(png_bytes, self.out)
        except Exception:
            pass

    def _print_usage(self, outcome: StreamOutcome, prefix: str = "") -> str:
        cost = self.provider.calculate_cost(outcome.input_tokens, outcome.output_tokens)
        print(f"{prefix}{ansi_dim(f'{outcome.output_tokens} tokens · {cost}')}", file=self.out)
        return cost
