"""Provider base classes."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Iterable, Literal, Protocol, Union

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    media_type: str
    data: str

    @classmethod
    def from_bytes(cls, raw: bytes, media_type: str = "image/png") -> "ImagePart":
        return cls(media_type=media_type, data=base64.b64encode(raw).decode("ascii"))


ContentPart = Union[TextPart, ImagePart]


@dataclass
class Message:
    role: Role
    content: str | list[ContentPart] = field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """Anthropic-style message dict (also used for event logs)."""
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        parts: list[dict[str, Any]] = []
        for part in self.content:
            if isinstance(part, ImagePart):
                parts.append(
                    {
                        "type": "image",
                        "source": {"type": "base64", "media_type": part.media_type, "data": part.data},
                    }
                )
            else:
                parts.append({"type": "text", "text": part.text})
        return {"role": self.role, "content": parts}


@dataclass(frozen=True)
class StreamEvent:
    kind: Literal["text", "usage"]
    text: str = ""
    input_tokens: int = 0
    output_tokens: int = 0

    @classmethod
    def text_chunk(cls, text: str) -> "StreamEvent":
        return cls(kind="text", text=text)

    @classmethod
    def usage(cls, input_tokens: int, output_tokens: int) -> "StreamEvent":
        return cls(kind="usage", input_tokens=input_tokens, output_tokens=output_tokens)


class LLMProvider(Protocol):
    name: str

    def stream_completion(
        self, messages: list[Message], max_tokens: int | None = None
    ) -> AsyncIterator[StreamEvent]:
        ...

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> str:
        ...


class ProviderRegistry:
    def __init__(self, providers: Iterable[LLMProvider]) -> None:
        self._providers = {provider.name: provider for provider in providers}

    def get(self, name: str) -> LLMProvider | None:
        return self._providers.get(name)

    def list(self) -> list[str]:
        return sorted(self._providers.keys())
