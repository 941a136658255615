"""CLI progress helpers."""

from __future__ import annotations

import sys
import threading
import time
from typing import TextIO

_BOLD = "\x1b[1m"
_GREY = "\x1b[38;2;150;157;165m"
_GREEN = "\x1b[32m"
_RESET = "\x1b[0m"
_FRAMES = ("◒", "◐", "◓", "◑")


def progress_line(label: str, frame: int = 0) -> str:
    return f"{_FRAMES[frame % len(_FRAMES)]} {label}"


class Spinner:
    """Status sink with ``start``/``message``/``stop``.

    On a TTY the current line is redrawn in place by a background thread; on
    other streams every label change is written as its own line.
    """

    def __init__(self, stream: TextIO | None = None, interval_s: float = 0.12) -> None:
        self.stream = stream or sys.stdout
        self.interval_s = max(0.05, interval_s)
        self.label = ""
        self.started_at: float | None = None
        self._frame = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._enabled = bool(getattr(self.stream, "isatty", lambda: False)())

    @property
    def running(self) -> bool:
        return self._thread is not None or (self.started_at is not None and not self._enabled)

    def start(self, text: str) -> None:
        if self.running:
            self.message(text)
            return
        self.label = text
        self.started_at = time.monotonic()
        self._stop.clear()
        if not self._enabled:
            self._write_line(progress_line(text), newline=True)
            return
        self._write_line(f"{_BOLD}{progress_line(text)}{_RESET}", newline=False)
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def message(self, text: str) -> None:
        self.label = text
        if not self._enabled:
            self._write_line(progress_line(text), newline=True)
            return
        if self._thread is None:
            return
        self._write_line(f"{_BOLD}{progress_line(text, self._frame)}{_RESET}", newline=False)

    def stop(self, text: str = "") -> None:
        thread = self._thread
        if thread is not None:
            self._stop.set()
            thread.join()
            self._thread = None
        self.started_at = None
        final = text or self.label
        self._write_line(f"{_GREEN}◇{_RESET} {final}", newline=True)

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            if self._stop.is_set():
                break
            self._frame += 1
            self._write_line(f"{_BOLD}{progress_line(self.label, self._frame)}{_RESET}", newline=False)

    def _write_line(self, line: str, newline: bool) -> None:
        with self._lock:
            if not self._enabled:
                self.stream.write(f"{line}\n")
                self.stream.flush()
                return
            self.stream.write("\r")
            self.stream.write(line)
            self.stream.write("\033[K")
            if newline:
                self.stream.write("\n")
            self.stream.flush()


def elapsed_label(label: str, start: float, tokens: int) -> str:
    elapsed = max(0.0, time.monotonic() - start)
    return f"{label}... {_GREY}{elapsed:.1f}s · {tokens} tokens{_RESET}"
