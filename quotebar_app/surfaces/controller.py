"""
Tray controller.

Routes tray menu actions, activation events and window close requests to
the engine supervisor and the settings repository.
"""

from dataclasses import replace
from enum import Enum
from typing import Callable, Optional

import structlog

from ..config.loader import SettingsRepository, SettingsStatus
from ..config.settings import Configuration
from ..engine.supervisor import EngineSupervisor
from .base import Clipboard, WindowSurface

logger = structlog.get_logger(__name__)


class MenuAction(str, Enum):
    """Tray menu items."""
    REFRESH = "refresh"
    COPY = "copy"
    TOGGLE = "toggle"
    QUIT = "quit"


MENU_LABELS = {
    MenuAction.REFRESH: "Refresh",
    MenuAction.COPY: "Copy Price",
    MenuAction.TOGGLE: "Show / Hide Window",
    MenuAction.QUIT: "Quit",
}

DOUBLE_CLICK = "double_click"


class TrayController:
    """Glue between OS surfaces, persisted settings and the engine."""

    def __init__(
        self,
        supervisor: EngineSupervisor,
        window: WindowSurface,
        clipboard: Clipboard,
        settings: SettingsRepository,
        on_quit: Optional[Callable[[], None]] = None,
        token_fallback: Optional[Callable[[], str]] = None
    ):
        self.supervisor = supervisor
        self.window = window
        self.clipboard = clipboard
        self.settings = settings
        self.on_quit = on_quit
        self.token_fallback = token_fallback
        self.last_status: Optional[SettingsStatus] = None

    def start(self) -> SettingsStatus:
        """Hide the window, load settings and start the engine."""
        self.window.hide()
        config, status = self._load()
        self.supervisor.start(config or Configuration())
        return status

    def _load(self) -> tuple[Optional[Configuration], SettingsStatus]:
        config, status = self.settings.load_with_status()
        self.last_status = status
        return self._with_token_fallback(config), status

    def _with_token_fallback(self, config: Optional[Configuration]) -> Optional[Configuration]:
        if config is None or config.token or self.token_fallback is None:
            return config
        token = self.token_fallback()
        return replace(config, token=token) if token else config

    def reload_settings(self) -> SettingsStatus:
        """Re-read persisted settings and apply them to the running engine."""
        config, status = self._load()
        if config is not None:
            self.supervisor.apply_configuration(config)
        return status

    def save_settings(self, config: Configuration) -> SettingsStatus:
        """Persist settings from the settings surface and apply what was saved."""
        saved, status = self.settings.save_with_status(config)
        self.last_status = status
        if saved is not None:
            self.supervisor.apply_configuration(self._with_token_fallback(saved))
        return status

    def handle_menu(self, action_id: str) -> None:
        """Dispatch a tray menu item by id."""
        try:
            action = MenuAction(action_id)
        except ValueError:
            logger.warning("Unknown menu action", action=action_id)
            return

        logger.debug("Menu action", action=action.value)
        if action is MenuAction.REFRESH:
            self.supervisor.manual_refresh()
        elif action is MenuAction.COPY:
            self.clipboard.write_text(self.supervisor.current_display_text())
        elif action is MenuAction.TOGGLE:
            self.toggle_window()
        elif action is MenuAction.QUIT:
            self.quit()

    def handle_activation(self, event_type: str) -> None:
        """Tray icon activation; a double click toggles the window."""
        if event_type == DOUBLE_CLICK:
            self.toggle_window()

    def toggle_window(self) -> None:
        if self.window.is_visible():
            self.window.hide()
        else:
            self.window.show()
            self.window.set_focus()

    def on_window_close_requested(self) -> SettingsStatus:
        """Closing the settings window hides it and applies whatever was saved."""
        self.window.hide()
        return self.reload_settings()

    def quit(self) -> None:
        self.supervisor.shutdown()
        if self.on_quit is not None:
            self.on_quit()
