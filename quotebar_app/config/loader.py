"""Settings and token persistence backed by files in the settings directory."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog
import yaml

from ..errors import ConfigError, PersistenceError
from .settings import Configuration
from .validation import normalize_settings

logger = structlog.get_logger(__name__)

CONFIG_DIR_ENV = "QUOTEBAR_CONFIG_DIR"
SETTINGS_FILE = "settings.yaml"
TOKEN_FILE = "token.txt"


def resolve_config_dir(config_dir: Optional[Path] = None) -> Path:
    """Settings directory: explicit argument, then environment, then ~/.quotebar."""
    if config_dir is not None:
        return Path(config_dir)
    env_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".quotebar"


@dataclass(frozen=True)
class SettingsStatus:
    """Outcome of a load/save, shown as a status line by the settings surface."""
    ok: bool
    message: str


@dataclass(frozen=True)
class SettingsRepository:
    """Loads and saves the Configuration as YAML."""

    config_dir: Path

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "SettingsRepository":
        """Create a SettingsRepository instance."""
        return cls(config_dir=resolve_config_dir(config_dir))

    @property
    def settings_file(self) -> Path:
        return self.config_dir / SETTINGS_FILE

    def get_settings(self) -> Configuration:
        """
        Load the persisted configuration.

        A missing file yields defaults. A file with the wrong shape degrades
        to defaults with a warning.

        Raises:
            PersistenceError: If the file cannot be read or parsed
        """
        if not self.settings_file.exists():
            return Configuration()

        try:
            with open(self.settings_file, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(
                f"Failed to read settings: {e}",
                operation="load",
                target=str(self.settings_file)
            ) from e

        try:
            return normalize_settings(raw)
        except ConfigError as e:
            logger.warning(
                "Persisted settings unusable, falling back to defaults",
                field=e.field,
                error=str(e),
                fallback=e.fallback_strategy
            )
            return Configuration()

    def save_settings(self, config: Configuration) -> Configuration:
        """
        Persist a configuration and return the normalized value written.

        Raises:
            PersistenceError: If the file cannot be written
        """
        normalized = normalize_settings(config.to_dict())
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self.settings_file.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(normalized.to_dict(), f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, self.settings_file)
        except OSError as e:
            raise PersistenceError(
                f"Failed to write settings: {e}",
                operation="save",
                target=str(self.settings_file)
            ) from e

        logger.info("Settings saved", path=str(self.settings_file),
                    instruments=normalized.codes)
        return normalized

    def load_with_status(self) -> tuple[Optional[Configuration], SettingsStatus]:
        """Load settings, reporting persistence failures as a status message."""
        try:
            config = self.get_settings()
        except PersistenceError as e:
            logger.error("Settings load failed", error=str(e), target=e.target)
            return None, SettingsStatus(ok=False, message=str(e))
        return config, SettingsStatus(ok=True, message="Settings loaded")

    def save_with_status(self, config: Configuration) -> tuple[Optional[Configuration], SettingsStatus]:
        """Save settings, reporting persistence failures as a status message."""
        try:
            saved = self.save_settings(config)
        except PersistenceError as e:
            logger.error("Settings save failed", error=str(e), target=e.target)
            return None, SettingsStatus(ok=False, message=str(e))
        return saved, SettingsStatus(ok=True, message="Settings saved")


@dataclass(frozen=True)
class TokenStore:
    """Plain-text token file, the single-token variant of settings."""

    config_dir: Path

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "TokenStore":
        """Create a TokenStore instance."""
        return cls(config_dir=resolve_config_dir(config_dir))

    @property
    def token_file(self) -> Path:
        return self.config_dir / TOKEN_FILE

    def get_token(self) -> str:
        """Stored token, or an empty string if none is stored or readable."""
        try:
            return self.token_file.read_text(encoding="utf-8").strip()
        except OSError:
            return ""

    def set_token(self, token: str) -> None:
        """
        Store a token; an empty token deletes the file.

        Raises:
            PersistenceError: If the file cannot be written or removed
        """
        value = token.strip()
        try:
            if not value:
                self.token_file.unlink(missing_ok=True)
                return
            self.config_dir.mkdir(parents=True, exist_ok=True)
            self.token_file.write_text(value, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                f"Failed to store token: {e}",
                operation="set_token",
                target=str(self.token_file)
            ) from e
