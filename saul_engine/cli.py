"""Saul CLI entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import sys
import uuid
from pathlib import Path
from typing import Any, Awaitable, Callable, TextIO

from .cli_progress import Spinner
from .config import AppConfig, ConfigError, resolve_config
from .files import save_svg
from .generator import SvgGenerator
from .menu import MenuLoop, SvgVersion
from .providers import default_registry
from .providers.base import LLMProvider
from .runs.events import EventWriter, NullEventWriter
from .utils import load_dotenv

_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="saul", description="Saul - SVG Generator Agent")
    parser.add_argument(
        "--provider",
        default="claude",
        help="LLM provider to use (claude, dryrun)",
    )
    parser.add_argument("--events", help="Append session events to this JSONL file")
    parser.add_argument("--out", help="Directory for saved SVG files (default: current directory)")
    return parser


def _is_tty(stream: Any) -> bool:
    return bool(getattr(stream, "isatty", lambda: False)())


def prompt_description(prompt: Callable[[str], str] = input, out: TextIO | None = None) -> str | None:
    """Ask until a non-empty description is given; None when cancelled."""
    stream = out or sys.stdout
    while True:
        try:
            raw = prompt("Describe the image you want to create (e.g., a red house with a blue roof): ")
        except (EOFError, KeyboardInterrupt):
            return None
        description = raw.strip()
        if description:
            return description
        print("Please provide a description", file=stream)


def read_piped_description(stdin: TextIO) -> str:
    return stdin.read().strip()


def _resolve_provider(name: str, config: AppConfig | None) -> LLMProvider:
    registry = default_registry(config)
    provider = registry.get(name)
    if provider is None:
        raise ValueError(f"Unknown provider '{name}'. Available: {', '.join(registry.list())}")
    return provider


def _generate_and_save(
    generator: SvgGenerator,
    description: str,
    spinner: Spinner,
    out_dir: Path | None,
    events: Any,
    run_async: Callable[[Awaitable[Any]], Any],
) -> SvgVersion:
    spinner.start("Generating SVG...")
    result = run_async(generator.generate(description, spinner))
    spinner.message("Saving file...")
    saved = save_svg(result.svg, result.filename, out_dir)
    events.emit("version_saved", action="generate", path=str(saved.svg_path))
    spinner.stop(f"Generated and saved: {saved.svg_path}")
    return SvgVersion.from_save(result.svg, saved)


def _open_events(args: argparse.Namespace, provider: LLMProvider) -> Any:
    if not getattr(args, "events", None):
        return NullEventWriter()
    return EventWriter(
        Path(args.events),
        str(uuid.uuid4()),
        provider=provider.name,
        model=getattr(provider, "model", None),
    )


def run(
    args: argparse.Namespace,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    prompt: Callable[[str], str] = input,
    provider: LLMProvider | None = None,
) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    interactive = _is_tty(stdin)
    status = stdout if interactive else stderr

    print(f"{_BOLD}Saul - SVG Generator Agent{_RESET}", file=status)

    if interactive:
        description = prompt_description(prompt, stdout)
        if description is None:
            print("Operation cancelled", file=stdout)
            return 0
    else:
        description = read_piped_description(stdin)
        if not description:
            print("No description provided", file=stderr)
            return 1

    if provider is None:
        try:
            config = resolve_config(out=status, interactive=interactive) if args.provider == "claude" else None
            provider = _resolve_provider(args.provider, config)
        except (ConfigError, ValueError) as exc:
            print(f"Error: {exc}", file=stderr)
            return 1

    events = _open_events(args, provider)
    events.emit("session_started", interactive=interactive)

    # One loop for the whole session: the provider's pooled connections are bound to it.
    with asyncio.Runner() as runner:
        try:
            return _run_session(
                args,
                provider,
                description,
                interactive=interactive,
                stdout=stdout,
                stderr=stderr,
                status=status,
                prompt=prompt,
                events=events,
                run_async=runner.run,
            )
        finally:
            aclose = getattr(provider, "aclose", None)
            if aclose is not None:
                runner.run(aclose())


def _run_session(
    args: argparse.Namespace,
    provider: LLMProvider,
    description: str,
    *,
    interactive: bool,
    stdout: TextIO,
    stderr: TextIO,
    status: TextIO,
    prompt: Callable[[str], str],
    events: Any,
    run_async: Callable[[Awaitable[Any]], Any],
) -> int:
    out_dir = Path(args.out) if getattr(args, "out", None) else None
    generator = SvgGenerator(provider, out=status, events=events)

    while True:
        spinner = Spinner(stream=status)
        try:
            version = _generate_and_save(generator, description, spinner, out_dir, events, run_async)
        except Exception as exc:
            spinner.stop("Failed to generate SVG")
            print(f"Error: {exc}", file=stderr)
            events.emit("session_finished", status="failed")
            return 1

        if not interactive:
            stdout.write(f"{version.svg_path}\n")
            stdout.flush()
            events.emit("session_finished", status="ok")
            return 0

        menu = MenuLoop(
            generator,
            spinner_factory=lambda: Spinner(stream=stdout),
            prompt=prompt,
            saver=lambda svg, name: save_svg(svg, name, out_dir),
            events=events,
            out=stdout,
            run_async=run_async,
        )
        outcome = menu.run(version)
        if outcome == "exit":
            print("Goodbye!", file=stdout)
            events.emit("session_finished", status="ok")
            return 0
        description = prompt_description(prompt, stdout)
        if description is None:
            print("Operation cancelled", file=stdout)
            events.emit("session_finished", status="cancelled")
            return 0


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    raise SystemExit(run(args))


if __name__ == "__main__":
    main()
