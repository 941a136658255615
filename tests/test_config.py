from __future__ import annotations

import io
import json
import os
from pathlib import Path

import pytest

from saul_engine.config import (
    API_KEY_ENV,
    AppConfig,
    ConfigError,
    load_api_key_from_config,
    resolve_config,
    validate_api_key,
)
from saul_engine.utils import load_dotenv


def _secret_prompt(answers: list[str]):
    replies = iter(answers)
    asked: list[str] = []

    def prompt(text: str) -> str:
        asked.append(text)
        return next(replies)

    prompt.asked = asked  # type: ignore[attr-defined]
    return prompt


def test_env_var_wins_over_config_file(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"apiKey": "sk-ant-file"}), encoding="utf-8")
    monkeypatch.setenv(API_KEY_ENV, "sk-ant-env")

    config = resolve_config(config_path=path, out=io.StringIO(), interactive=False)
    assert config == AppConfig(api_key="sk-ant-env")
    assert config.max_tokens == 64000
    assert config.filename_max_tokens == 100


def test_config_file_used_when_env_missing(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"apiKey": "sk-ant-file"}), encoding="utf-8")

    config = resolve_config(config_path=path, out=io.StringIO(), interactive=False)
    assert config.api_key == "sk-ant-file"


def test_malformed_config_file_counts_as_missing(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_api_key_from_config(path) is None
    path.write_text(json.dumps(["sk-ant-x"]), encoding="utf-8")
    assert load_api_key_from_config(path) is None


def test_non_interactive_without_key_is_fatal(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    with pytest.raises(ConfigError, match="No API key found"):
        resolve_config(config_path=tmp_path / "missing.json", out=io.StringIO(), interactive=False)


def test_prompted_key_is_validated_and_persisted(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    path = tmp_path / "nested" / "config.json"
    prompt = _secret_prompt(["", "wrong-key", "sk-ant-good"])
    out = io.StringIO()

    config = resolve_config(prompt_secret=prompt, config_path=path, out=out, interactive=True)

    assert config.api_key == "sk-ant-good"
    assert len(prompt.asked) == 3
    assert json.loads(path.read_text(encoding="utf-8")) == {"apiKey": "sk-ant-good"}
    text = out.getvalue()
    assert "API key is required" in text
    assert "should start with sk-ant-" in text
    assert f"API key saved to {path}" in text


def test_cancelled_prompt_raises_config_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(API_KEY_ENV, raising=False)

    def cancelled(text: str) -> str:
        raise KeyboardInterrupt

    with pytest.raises(ConfigError, match="cancelled"):
        resolve_config(prompt_secret=cancelled, config_path=tmp_path / "c.json", out=io.StringIO(), interactive=True)
    assert not (tmp_path / "c.json").exists()


def test_validate_api_key() -> None:
    assert validate_api_key("sk-ant-abc") is None
    assert validate_api_key("") == "API key is required"
    assert validate_api_key("sk-abc") is not None


def test_load_dotenv_does_not_override_existing(tmp_path: Path, monkeypatch) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "# local secrets\nexport ANTHROPIC_API_KEY='sk-ant-dotenv'\nSAUL_TEST_EXISTING=from-file\n",
        encoding="utf-8",
    )
    # setenv first so teardown restores the original value after load_dotenv writes it.
    monkeypatch.setenv(API_KEY_ENV, "placeholder")
    monkeypatch.delenv(API_KEY_ENV)
    monkeypatch.setenv("SAUL_TEST_EXISTING", "from-env")

    assert load_dotenv(env_path) is True
    assert os.environ[API_KEY_ENV] == "sk-ant-dotenv"
    assert os.environ["SAUL_TEST_EXISTING"] == "from-env"
