"""Interactive edit loop over the current SVG version."""

from __future__ import annotations

import asyncio
import sys
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Literal, TextIO

from .cli_progress import Spinner
from .files import SaveResult, save_svg, svg_to_png
from .generator import SvgGenerator
from .runs.events import NullEventWriter
from .utils import remove_timestamp_prefix

MenuOutcome = Literal["new", "exit"]

MENU_OPTIONS: tuple[tuple[str, str], ...] = (
    ("view", "View SVG - Open in browser"),
    ("modify", "Modify SVG - Adjust the image"),
    ("auto", "Auto adjust - Let AI improve the image"),
    ("new", "Create new - Generate a new image"),
    ("exit", "Exit"),
)
_ALIASES = {"auto-improve": "auto", "improve": "auto", "q": "exit", "quit": "exit"}


@dataclass
class SvgVersion:
    svg: str
    svg_path: Path
    filename: str

    @classmethod
    def from_save(cls, svg: str, saved: SaveResult) -> "SvgVersion":
        return cls(svg=svg, svg_path=saved.svg_path, filename=saved.filename_with_timestamp)


def open_in_browser(path: Path) -> bool:
    return webbrowser.open(path.resolve().as_uri())


def parse_menu_choice(raw: str) -> str | None:
    value = raw.strip().lower()
    if not value:
        return None
    if value.isdigit():
        idx = int(value) - 1
        if 0 <= idx < len(MENU_OPTIONS):
            return MENU_OPTIONS[idx][0]
        return None
    for action, _ in MENU_OPTIONS:
        if value == action:
            return action
    return _ALIASES.get(value)


class MenuLoop:
    def __init__(
        self,
        generator: SvgGenerator,
        *,
        spinner_factory: Callable[[], Any] = Spinner,
        prompt: Callable[[str], str] = input,
        opener: Callable[[Path], Any] = open_in_browser,
        saver: Callable[[str, str], SaveResult] = save_svg,
        rasterize: Callable[[str], bytes] = svg_to_png,
        events: Any | None = None,
        out: TextIO | None = None,
        run_async: Callable[[Awaitable[Any]], Any] = asyncio.run,
    ) -> None:
        self.generator = generator
        self.spinner_factory = spinner_factory
        self.prompt = prompt
        self.opener = opener
        self.saver = saver
        self.rasterize = rasterize
        self.events = events or NullEventWriter()
        self.out = out or sys.stdout
        self.run_async = run_async
        self.current: SvgVersion | None = None

    def run(self, version: SvgVersion) -> MenuOutcome:
        self.current = version
        while True:
            action = self._ask_action()
            if action == "exit":
                return "exit"
            if action == "new":
                return "new"
            if action == "view":
                self._view()
            elif action == "modify":
                self._modify()
            elif action == "auto":
                self._auto_improve()

    def _ask_action(self) -> str:
        print("What would you like to do?", file=self.out)
        for idx, (_, label) in enumerate(MENU_OPTIONS, start=1):
            print(f"  {idx}. {label}", file=self.out)
        while True:
            try:
                raw = self.prompt("> ")
            except (EOFError, KeyboardInterrupt):
                return "exit"
            action = parse_menu_choice(raw)
            if action:
                return action
            print("Please choose 1-5 (view, modify, auto, new, exit).", file=self.out)

    def _view(self) -> None:
        assert self.current is not None
        spinner = self.spinner_factory()
        spinner.start("Opening SVG in browser...")
        try:
            self.opener(self.current.svg_path)
        except Exception as exc:
            spinner.stop("Failed to open SVG")
            print(f"Error: {exc}", file=self.out)
            return
        spinner.stop("Opened in browser")

    def _ask_instruction(self) -> str | None:
        while True:
            try:
                raw = self.prompt("How would you like to modify the image? ")
            except (EOFError, KeyboardInterrupt):
                return None
            instruction = raw.strip()
            if instruction:
                return instruction
            print("Please provide modification instructions", file=self.out)

    def _modify(self) -> None:
        instruction = self._ask_instruction()
        if instruction is None:
            print("Modification cancelled", file=self.out)
            return
        self._apply_edit(
            "modify",
            "Modifying SVG...",
            "Modified and saved",
            "Failed to modify SVG",
            lambda svg, png, spinner: self.generator.modify(svg, png, instruction, spinner),
        )

    def _auto_improve(self) -> None:
        self._apply_edit(
            "auto_improve",
            "Auto-improving SVG...",
            "Auto-improved and saved",
            "Failed to auto-improve SVG",
            lambda svg, png, spinner: self.generator.auto_improve(svg, png, spinner),
        )

    def _apply_edit(
        self,
        action: str,
        start_text: str,
        done_text: str,
        failed_text: str,
        run_edit: Callable[[str, bytes, Any], Any],
    ) -> None:
        assert self.current is not None
        current = self.current
        spinner = self.spinner_factory()
        spinner.start(start_text)
        try:
            png_bytes = self.rasterize(current.svg)
            edited = self.run_async(run_edit(current.svg, png_bytes, spinner))
            saved = self.saver(edited, remove_timestamp_prefix(current.filename))
        except Exception as exc:
            spinner.stop(failed_text)
            print(f"Error: {exc}", file=self.out)
            return
        self.current = SvgVersion.from_save(edited, saved)
        self.events.emit("version_saved", action=action, path=str(saved.svg_path))
        spinner.stop(f"{done_text}: {saved.svg_path}")
