"""Standard output surfaces for running the engine without a desktop tray."""

import sys
from datetime import datetime
from typing import Optional, TextIO

import structlog

from .base import Clipboard, TraySurface, WindowSurface

logger = structlog.get_logger(__name__)


class ConsoleTray(TraySurface):
    """Prints each new title on its own line."""

    def __init__(self, stream: Optional[TextIO] = None, with_clock: bool = False):
        self.stream = stream or sys.stdout
        self.with_clock = with_clock
        self.title: Optional[str] = None
        self.tooltip: Optional[str] = None

    def set_title(self, title: str) -> None:
        self.title = title
        line = f"[{datetime.now():%H:%M:%S}] {title}" if self.with_clock else title
        print(line, file=self.stream, flush=True)

    def set_tooltip(self, tooltip: str) -> None:
        self.tooltip = tooltip
        logger.debug("Tray tooltip updated", tooltip=tooltip)


class HeadlessWindow(WindowSurface):
    """Tracks visibility for a settings window that has no real UI."""

    def __init__(self, visible: bool = True):
        self.visible = visible
        self.focused = False

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False
        self.focused = False

    def is_visible(self) -> bool:
        return self.visible

    def set_focus(self) -> None:
        self.focused = self.visible


class ConsoleClipboard(Clipboard):
    """Echoes copied text to the stream and keeps the last value."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.text: Optional[str] = None

    def write_text(self, text: str) -> None:
        self.text = text
        print(f"Copied: {text}", file=self.stream, flush=True)
