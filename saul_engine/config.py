"""Application configuration and API key resolution."""

from __future__ import annotations

import getpass
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TextIO

from .utils import read_json, write_json

MODEL = "claude-sonnet-4-5-20250929"
MAX_TOKENS = 64 * 1000
FILENAME_MAX_TOKENS = 100

API_KEY_ENV = "ANTHROPIC_API_KEY"
API_KEY_PREFIX = "sk-ant-"
API_KEYS_URL = "https://console.anthropic.com/settings/keys"

CONFIG_PATH = Path.home() / ".config" / "svg-saul" / "config.json"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class AppConfig:
    api_key: str
    model: str = MODEL
    max_tokens: int = MAX_TOKENS
    filename_max_tokens: int = FILENAME_MAX_TOKENS


def load_api_key_from_config(path: Path | None = None) -> str | None:
    payload = read_json(path or CONFIG_PATH, {})
    if not isinstance(payload, dict):
        return None
    api_key = payload.get("apiKey")
    if isinstance(api_key, str) and api_key.strip():
        return api_key.strip()
    return None


def save_api_key_to_config(api_key: str, path: Path | None = None) -> Path:
    target = path or CONFIG_PATH
    write_json(target, {"apiKey": api_key})
    return target


def validate_api_key(value: str) -> str | None:
    """Return an error message for an unusable key, or None."""
    if not value:
        return "API key is required"
    if not value.startswith(API_KEY_PREFIX):
        return f"Invalid API key format (should start with {API_KEY_PREFIX})"
    return None


def prompt_for_api_key(
    prompt_secret: Callable[[str], str] = getpass.getpass,
    out: TextIO | None = None,
) -> str:
    stream = out or sys.stdout
    while True:
        try:
            value = prompt_secret("Enter your Anthropic API key: ").strip()
        except (EOFError, KeyboardInterrupt) as exc:
            raise ConfigError("API key entry cancelled.") from exc
        error = validate_api_key(value)
        if error is None:
            return value
        print(error, file=stream)


def resolve_config(
    prompt_secret: Callable[[str], str] | None = None,
    out: TextIO | None = None,
    config_path: Path | None = None,
    interactive: bool | None = None,
) -> AppConfig:
    """Resolve the API key: environment, then config file, then a masked prompt.

    A prompted key is written back to the config file for later runs.
    """
    stream = out or sys.stdout
    api_key = os.getenv(API_KEY_ENV, "").strip() or None
    if not api_key:
        api_key = load_api_key_from_config(config_path)
    if api_key:
        return AppConfig(api_key=api_key)

    if interactive is None:
        interactive = bool(getattr(sys.stdin, "isatty", lambda: False)())
    path = config_path or CONFIG_PATH
    if not interactive:
        raise ConfigError(f"No API key found. Set {API_KEY_ENV} or add it to {path}.")

    print("No API key found.", file=stream)
    print("You can either:", file=stream)
    print(f"  1. Set {API_KEY_ENV} environment variable", file=stream)
    print(f"  2. Enter it below (will be saved to {path})", file=stream)
    print(f"  Get your API key from: {API_KEYS_URL}", file=stream)
    api_key = prompt_for_api_key(prompt_secret or getpass.getpass, stream)
    save_api_key_to_config(api_key, path)
    print(f"API key saved to {path}", file=stream)
    return AppConfig(api_key=api_key)
