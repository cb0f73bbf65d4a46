"""Base classes for the OS surfaces the engine drives."""

from abc import ABC, abstractmethod


class TraySurface(ABC):
    """Status-bar icon whose title shows the current quote."""

    @abstractmethod
    def set_title(self, title: str) -> None:
        """Replace the status-bar title."""
        pass

    @abstractmethod
    def set_tooltip(self, tooltip: str) -> None:
        """Replace the hover tooltip."""
        pass


class WindowSurface(ABC):
    """Settings window that can be shown, hidden and focused."""

    @abstractmethod
    def show(self) -> None:
        pass

    @abstractmethod
    def hide(self) -> None:
        pass

    @abstractmethod
    def is_visible(self) -> bool:
        pass

    @abstractmethod
    def set_focus(self) -> None:
        pass


class Clipboard(ABC):
    """System clipboard."""

    @abstractmethod
    def write_text(self, text: str) -> None:
        pass
